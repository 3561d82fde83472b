"""
i8085 Emulator — Machine Snapshots + Trace Reporters

After every cycle the emulator builds a MachineSnapshot (immutable) and
hands it to each registered reporter. A reporter is any callable taking
one snapshot; it must not touch the emulator.

  TraceRecorder  — keeps every snapshot in a list (tests, short runs)
  TextReporter   — writes format_snapshot() text to a stream
  RichReporter   — prints a rich table per cycle
"""

from __future__ import annotations
import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .cpu.regs import Registers
from .mem.memory import hexdump

REG_ORDER = ('A', 'B', 'C', 'D', 'E', 'H', 'L', 'F')


@dataclass(frozen=True)
class MachineSnapshot:
    """Register bank + memory window after one executed instruction."""
    count: int
    address: int          # where the opcode was fetched
    opcode: int
    mnemonic: str
    unimplemented: bool
    halted: bool
    A: int
    B: int
    C: int
    D: int
    E: int
    H: int
    L: int
    F: int
    PC: int
    SP: int
    IR: int
    address_bus: int
    data_bus: int
    control_bus: int
    window_start: int
    window: bytes

    @property
    def BC(self) -> int:
        return self.B * 256 + self.C

    @property
    def DE(self) -> int:
        return self.D * 256 + self.E

    @property
    def HL(self) -> int:
        return self.H * 256 + self.L

    @property
    def label(self) -> str:
        if self.unimplemented:
            return f"UNIMPLEMENTED {self.opcode:02X}"
        return self.mnemonic

    def memory_at(self, addr: int) -> int:
        """Byte at addr, which must fall inside the captured window."""
        offset = (addr - self.window_start) & 0xFFFF
        if offset >= len(self.window):
            raise IndexError(f"${addr:04X} is outside the trace window")
        return self.window[offset]

    @classmethod
    def capture(cls, regs: Registers, memory, *, count: int, address: int,
                opcode: int, mnemonic: str, unimplemented: bool, halted: bool,
                window_start: int, window_length: int) -> MachineSnapshot:
        return cls(
            count=count, address=address, opcode=opcode, mnemonic=mnemonic,
            unimplemented=unimplemented, halted=halted,
            A=regs.A, B=regs.B, C=regs.C, D=regs.D, E=regs.E,
            H=regs.H, L=regs.L, F=regs.F, PC=regs.PC, SP=regs.SP,
            IR=regs.IR, address_bus=regs.address_bus,
            data_bus=regs.data_bus, control_bus=regs.control_bus,
            window_start=window_start,
            window=memory.window(window_start, window_length),
        )


def format_snapshot(snap: MachineSnapshot) -> str:
    """Plain-text rendering of one trace entry."""
    regs = ' '.join(f"{r}={getattr(snap, r):02X}" for r in REG_ORDER)
    lines = [
        f"#{snap.count:<5d} ${snap.address:04X}: {snap.label}",
        f"  {regs}",
        f"  PC={snap.PC:04X} SP={snap.SP:04X} "
        f"BC={snap.BC:04X} DE={snap.DE:04X} HL={snap.HL:04X} IR={snap.IR:02X}",
        f"  BUS addr={snap.address_bus:04X} data={snap.data_bus:02X} "
        f"ctrl={snap.control_bus:02X}",
    ]
    if snap.window:
        lines.extend('  ' + row for row in hexdump(snap.window, snap.window_start).split('\n'))
    if snap.halted:
        lines.append("  HALTED")
    return '\n'.join(lines)


class TraceRecorder:
    """Collects every snapshot it is handed."""

    def __init__(self):
        self.snapshots: List[MachineSnapshot] = []

    def __call__(self, snap: MachineSnapshot):
        self.snapshots.append(snap)

    def __len__(self) -> int:
        return len(self.snapshots)

    @property
    def last(self) -> Optional[MachineSnapshot]:
        return self.snapshots[-1] if self.snapshots else None

    def mnemonics(self) -> List[str]:
        return [s.label for s in self.snapshots]

    def text(self) -> str:
        return '\n'.join(format_snapshot(s) for s in self.snapshots)

    def clear(self):
        self.snapshots.clear()


class TextReporter:
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def __call__(self, snap: MachineSnapshot):
        self.stream.write(format_snapshot(snap) + '\n')


class RichReporter:
    """Prints each snapshot as a rich table."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def __call__(self, snap: MachineSnapshot):
        style = "bold red" if snap.unimplemented else "bold cyan"
        title = Text(f"#{snap.count}  ${snap.address:04X}  {snap.label}", style=style)

        regs = Table(title=title, show_edge=False, pad_edge=False)
        for name in REG_ORDER + ('PC', 'SP', 'BC', 'DE', 'HL', 'IR'):
            regs.add_column(name, justify="right")
        regs.add_row(
            *[f"{getattr(snap, r):02X}" for r in REG_ORDER],
            f"{snap.PC:04X}", f"{snap.SP:04X}",
            f"{snap.BC:04X}", f"{snap.DE:04X}", f"{snap.HL:04X}",
            f"{snap.IR:02X}",
        )
        self.console.print(regs)

        if snap.window:
            mem = Table(show_header=False, show_edge=False, box=None)
            mem.add_column("addr", style="dim")
            mem.add_column("bytes")
            for row in hexdump(snap.window, snap.window_start).split('\n'):
                addr, data = row.split('  ', 1)
                mem.add_row(addr, data)
            self.console.print(mem)
        if snap.halted:
            self.console.print(Text("HALTED", style="bold green"))
