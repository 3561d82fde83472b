"""
i8085 Emulator — Main Emulator Class

Integrates:
  - CPU registers (cpu/regs.py)
  - 64K memory (mem/memory.py)
  - Opcode table (cpu/decoder.py)
  - Flag computation (cpu/alu.py)
  - Snapshot reporters (trace.py)

Execution model, one step() per instruction:
  1. Fetch opcode at PC, PC += 1, IR := opcode
  2. Decode → family with a fixed operand byte count
  3. Fetch operand bytes (multi-byte operands low byte first)
  4. Execute the family handler → registers, memory, flags
  5. Count the instruction and hand a snapshot to every reporter

Termination reasons:
  - HALT:     HLT executed (the only normal stop)
  - ILLEGAL:  unknown opcode with strict_decode enabled

Unknown opcodes are otherwise zero-operand no-ops: logged, reported as
unimplemented, execution continues. run() has no cycle cap; a program
that never reaches HLT runs forever.
"""

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .config import EmulatorConfig
from .cpu.regs import Registers, CTRL_MEMR, CTRL_MEMW, CTRL_FETCH
from .cpu.decoder import (
    decode_opcode, format_instruction, Decoded,
    MOV, MVI, LXI, ADD, ADI, STA, NOP, HLT, MEM,
)
from .cpu import alu
from .mem.memory import Memory
from .trace import MachineSnapshot

log = logging.getLogger("i8085.emu")

Reporter = Callable[[MachineSnapshot], None]


class StopReason(Enum):
    HALT = 'HALT'
    ILLEGAL = 'ILLEGAL'


class I8085Emulator:
    """8085 subset emulator.

    Usage:
        from i8085_asm import load_program

        emu = I8085Emulator()
        emu.load_program(load_program("MVI A,05\\nMVI B,03\\nADD B\\nHLT\\n"))
        reason = emu.run()
        print(emu.regs.display())
    """

    def __init__(self, config: Optional[EmulatorConfig] = None,
                 reporters: Optional[Iterable[Reporter]] = None):
        self.config = config or EmulatorConfig()
        self.regs = Registers(pc=self.config.origin, sp=self.config.initial_sp)
        self.mem = Memory()

        self.instruction_count = 0
        self.halted = False
        self.last_snapshot: Optional[MachineSnapshot] = None

        self._reporters: List[Reporter] = list(reporters or [])

        # Family → handler dispatch table
        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_binary(self, data: bytes, base_addr: Optional[int] = None):
        """Copy raw opcode bytes into memory (default: at the origin)."""
        if base_addr is None:
            base_addr = self.config.origin
        self.mem.load_binary(bytes(data), base_addr)

    def load_program(self, program):
        """Place a loaded program (a LoadResult) into memory at its origin.

        Returns the program so callers can chain on it.
        """
        program.load_into(self.mem)
        return program

    # ══════════════════════════════════════════════
    # Reporters
    # ══════════════════════════════════════════════

    def add_reporter(self, reporter: Reporter):
        self._reporters.append(reporter)

    def remove_reporter(self, reporter: Reporter):
        self._reporters.remove(reporter)

    def _report(self, snap: MachineSnapshot):
        self.last_snapshot = snap
        for reporter in self._reporters:
            reporter(snap)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns StopReason if stopped, else None."""
        if self.halted:
            return StopReason.HALT

        address = self.regs.PC

        # Fetch + decode opcode
        opcode = self._fetch8(CTRL_FETCH)
        self.regs.IR = opcode
        decoded = decode_opcode(opcode)

        # Operand bytes are consumed for the family, whatever the member
        operand = None
        if decoded.operand_bytes == 1:
            operand = self._fetch8()
        elif decoded.operand_bytes == 2:
            operand = self._fetch16()

        mnemonic = format_instruction(decoded, operand)

        if decoded.implemented:
            try:
                self._execute(decoded, operand)
            except _HaltException:
                self.halted = True
        else:
            log.warning("Unimplemented opcode $%02X at $%04X (treated as NOP)",
                        opcode, address)

        self.instruction_count += 1
        log.debug("#%d $%04X: %-12s %s", self.instruction_count, address,
                  mnemonic, self.regs.display())

        self._report(MachineSnapshot.capture(
            self.regs, self.mem,
            count=self.instruction_count,
            address=address,
            opcode=opcode,
            mnemonic=mnemonic,
            unimplemented=not decoded.implemented,
            halted=self.halted,
            window_start=self.config.window_start,
            window_length=self.config.window_length,
        ))

        if self.halted:
            log.info("HLT at $%04X after %d instructions",
                     address, self.instruction_count)
            return StopReason.HALT
        if not decoded.implemented and self.config.strict_decode:
            log.error("Stopping on unimplemented opcode $%02X at $%04X",
                      opcode, address)
            return StopReason.ILLEGAL
        return None

    def run(self) -> StopReason:
        """Run until HLT (or an unknown opcode in strict mode)."""
        while True:
            reason = self.step()
            if reason is not None:
                return reason

    # ══════════════════════════════════════════════
    # Memory access (drives the bus latches)
    # ══════════════════════════════════════════════

    def _read8(self, addr: int, control: int = CTRL_MEMR) -> int:
        val = self.mem.read8(addr)
        self.regs.latch_bus(addr, val, control)
        return val

    def _write8(self, addr: int, value: int):
        self.mem.write8(addr, value)
        self.regs.latch_bus(addr, value, CTRL_MEMW)

    def _fetch8(self, control: int = CTRL_MEMR) -> int:
        """Fetch 8-bit value at PC, advance PC."""
        val = self._read8(self.regs.PC, control)
        self.regs.PC = self.regs.PC + 1
        return val

    def _fetch16(self) -> int:
        """Fetch 16-bit value at PC (low byte first), advance PC by 2."""
        lo = self._fetch8()
        hi = self._fetch8()
        return (hi << 8) | lo

    # ══════════════════════════════════════════════
    # Instruction execution
    # ══════════════════════════════════════════════

    def _execute(self, decoded: Decoded, operand: Optional[int]):
        handler = self._dispatch[decoded.family]
        handler(decoded.target, operand)

    def _build_dispatch(self) -> dict:
        return {
            MOV: self._op_mov,
            MVI: self._op_mvi,
            LXI: self._op_lxi,
            ADD: self._op_add,
            ADI: self._op_adi,
            STA: self._op_sta,
            NOP: self._op_nop,
            HLT: self._op_hlt,
        }

    def _read_source(self, target: str) -> int:
        """Register value, or memory at the current HL for M."""
        if target == MEM:
            return self._read8(self.regs.HL)
        return self.regs.get8(target)

    def _accumulate(self, value: int):
        result, flags = alu.add8(self.regs.A, value)
        self.regs.A = result
        alu.update_flags(self.regs, result)
        if self.config.compute_carry:
            self.regs.set_AC_CY(flags)

    # ── Handlers: handler(target, operand) ──

    def _op_mov(self, target, operand):
        self.regs.A = self._read_source(target)

    def _op_mvi(self, target, operand):
        if target == MEM:
            self._write8(self.regs.HL, operand)
        else:
            self.regs.set8(target, operand)

    def _op_lxi(self, target, operand):
        self.regs.set16(target, operand)

    def _op_add(self, target, operand):
        self._accumulate(self._read_source(target))

    def _op_adi(self, target, operand):
        self._accumulate(operand)

    def _op_sta(self, target, operand):
        self._write8(operand, self.regs.A)

    def _op_nop(self, target, operand):
        pass

    def _op_hlt(self, target, operand):
        raise _HaltException("HLT")

    # ══════════════════════════════════════════════
    # Reset
    # ══════════════════════════════════════════════

    def reset(self, clear_memory: bool = False):
        """Registers back to power-on state; memory kept unless asked."""
        self.regs.reset(self.config.origin, self.config.initial_sp)
        if clear_memory:
            self.mem.clear()
        self.instruction_count = 0
        self.halted = False
        self.last_snapshot = None


# Internal exception for flow control
class _HaltException(Exception):
    pass
