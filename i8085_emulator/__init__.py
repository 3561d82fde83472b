"""
i8085 Emulator — instructional 8085 subset CPU simulator
=========================================================

    ┌────────────┐    ┌──────────┐    ┌─────────────┐    ┌───────────┐
    │ Program    │───>│  Memory  │───>│  Dispatcher │───>│ Reporter  │
    │ text       │    │  (64K)   │    │ fetch/decode│    │ snapshots │
    └────────────┘    └──────────┘    │  /execute   │    └───────────┘
      i8085_asm                       └─────────────┘
                                        regs + alu

    - cpu/regs.py:    register bank, pairs derived from their halves
    - cpu/alu.py:     Z/S/P flag computation (+ optional CY/AC)
    - cpu/decoder.py: opcode table, fixed operand count per family
    - mem/memory.py:  flat 64K little-endian memory
    - emu.py:         fetch-decode-execute loop
    - trace.py:       snapshots and trace renderers
"""

__version__ = "0.2.0"

from .config import EmulatorConfig, ConfigError, PROFILES, get_profile, load_config
from .cpu.regs import Registers
from .mem.memory import Memory
from .emu import I8085Emulator, StopReason
from .trace import MachineSnapshot, TraceRecorder, TextReporter, RichReporter, format_snapshot

__all__ = [
    'EmulatorConfig', 'ConfigError', 'PROFILES', 'get_profile', 'load_config',
    'Registers', 'Memory', 'I8085Emulator', 'StopReason',
    'MachineSnapshot', 'TraceRecorder', 'TextReporter', 'RichReporter',
    'format_snapshot',
]
