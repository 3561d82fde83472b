"""
i8085 Emulator — Core Integration Tests

Each test uses hand-assembled bytes (checked against the 8085 opcode map)
or a short program run through the line loader.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from i8085_emulator import I8085Emulator, StopReason, EmulatorConfig, TraceRecorder
from i8085_emulator.cpu.regs import FLAG_S, FLAG_Z, FLAG_AC, FLAG_P, FLAG_CY
from i8085_asm import ProgramLoader


def _emu(program: bytes, **config) -> I8085Emulator:
    emu = I8085Emulator(EmulatorConfig(**config))
    emu.load_binary(program)
    return emu


def _load(emu: I8085Emulator, source: str):
    return emu.load_program(ProgramLoader(origin=emu.config.origin).load(source))


# ═══════════════════════════════════════════════
# Test Group 1: Individual Instructions
# ═══════════════════════════════════════════════

class TestLoads:

    def test_mvi_register(self):
        """MVI B,42 → B=$42, PC+2"""
        emu = _emu(bytes([0x06, 0x42]))
        emu.step()
        assert emu.regs.B == 0x42
        assert emu.regs.PC == 0x0002

    def test_mvi_every_register(self):
        program = bytes([
            0x3E, 0x01,  # MVI A,01
            0x06, 0x02,  # MVI B,02
            0x0E, 0x03,  # MVI C,03
            0x16, 0x04,  # MVI D,04
            0x1E, 0x05,  # MVI E,05
            0x26, 0x06,  # MVI H,06
            0x2E, 0x07,  # MVI L,07
        ])
        emu = _emu(program)
        for _ in range(7):
            emu.step()
        r = emu.regs
        assert (r.A, r.B, r.C, r.D, r.E, r.H, r.L) == (1, 2, 3, 4, 5, 6, 7)
        assert r.PC == 14

    def test_mvi_does_not_touch_flags(self):
        emu = _emu(bytes([0x3E, 0x00]))
        emu.step()
        assert emu.regs.F == 0

    def test_mvi_memory_uses_hl(self):
        """LXI H,0040; MVI M,5A → mem[$40]=$5A"""
        emu = _emu(bytes([0x21, 0x40, 0x00, 0x36, 0x5A]))
        emu.step()
        emu.step()
        assert emu.mem.read8(0x0040) == 0x5A

    def test_lxi_little_endian(self):
        """LXI H,1234 is encoded 21 34 12"""
        emu = _emu(bytes([0x21, 0x34, 0x12]))
        emu.step()
        assert emu.regs.HL == 0x1234
        assert emu.regs.H == 0x12
        assert emu.regs.L == 0x34
        assert emu.regs.PC == 0x0003

    def test_lxi_pairs_and_sp(self):
        emu = _emu(bytes([
            0x01, 0xCD, 0xAB,  # LXI B,ABCD
            0x11, 0x02, 0x01,  # LXI D,0102
            0x31, 0x00, 0x20,  # LXI SP,2000
        ]))
        emu.step()
        emu.step()
        emu.step()
        assert emu.regs.BC == 0xABCD
        assert emu.regs.DE == 0x0102
        assert emu.regs.SP == 0x2000


class TestMoves:

    def test_mov_a_register(self):
        emu = _emu(bytes([0x0E, 0x99, 0x79]))  # MVI C,99; MOV A,C
        emu.step()
        emu.step()
        assert emu.regs.A == 0x99
        assert emu.regs.C == 0x99

    def test_mov_a_m_reads_current_hl(self):
        """H=00 L=05 mem[5]=7A → A=7A; then L=06 → re-read at the new address"""
        emu = _emu(bytes([
            0x7E,        # MOV A,M
            0x2E, 0x06,  # MVI L,06
            0x7E,        # MOV A,M
        ]))
        emu.mem.write8(0x0005, 0x7A)
        emu.mem.write8(0x0006, 0x3C)
        emu.regs.H = 0x00
        emu.regs.L = 0x05
        emu.step()
        assert emu.regs.A == 0x7A
        emu.step()
        emu.step()
        assert emu.regs.A == 0x3C

    def test_mov_a_m_sees_memory_written_after_setup(self):
        emu = _emu(bytes([0x21, 0x00, 0x01, 0x7E, 0x7E]))
        emu.step()  # LXI H,0100
        emu.mem.write8(0x0100, 0x11)
        emu.step()
        assert emu.regs.A == 0x11
        emu.mem.write8(0x0100, 0x22)
        emu.step()
        assert emu.regs.A == 0x22


class TestAdd:
    """Accumulator add: wraps mod 256, Z/S/P from the new A."""

    def test_add_register(self):
        """MVI A,05; MVI B,03; ADD B → A=08, Z=0 S=0 P=0"""
        emu = _emu(bytes([0x3E, 0x05, 0x06, 0x03, 0x80]))
        for _ in range(3):
            emu.step()
        assert emu.regs.A == 0x08
        assert not emu.regs.zero
        assert not emu.regs.sign
        assert not emu.regs.parity

    def test_add_wraps_to_zero(self):
        emu = _emu(bytes([0x3E, 0xFF, 0xC6, 0x01]))  # MVI A,FF; ADI 01
        emu.step()
        emu.step()
        assert emu.regs.A == 0x00
        assert emu.regs.zero
        assert emu.regs.parity
        assert not emu.regs.sign

    def test_add_sets_sign(self):
        emu = _emu(bytes([0x3E, 0x7F, 0xC6, 0x01]))  # 7F + 01 = 80
        emu.step()
        emu.step()
        assert emu.regs.A == 0x80
        assert emu.regs.sign
        assert not emu.regs.parity

    def test_add_memory(self):
        emu = _emu(bytes([0x21, 0x80, 0x00, 0x3E, 0x10, 0x86]))
        emu.mem.write8(0x0080, 0x23)
        for _ in range(3):
            emu.step()
        assert emu.regs.A == 0x33
        assert emu.regs.parity  # 0011 0011 → four bits

    def test_add_a_doubles(self):
        emu = _emu(bytes([0x3E, 0x21, 0x87]))  # MVI A,21; ADD A
        emu.step()
        emu.step()
        assert emu.regs.A == 0x42

    def test_adi_consumes_one_operand(self):
        emu = _emu(bytes([0xC6, 0x05, 0x00]))
        emu.step()
        assert emu.regs.PC == 0x0002
        assert emu.regs.A == 0x05

    def test_carry_not_computed_by_default(self):
        emu = _emu(bytes([0x3E, 0xFF, 0xC6, 0xFF]))
        emu.step()
        emu.step()
        assert emu.regs.A == 0xFE
        assert not emu.regs.carry
        assert not emu.regs.aux_carry

    def test_carry_bits_preserved_by_default(self):
        emu = _emu(bytes([0xC6, 0x01]))
        emu.regs.F = FLAG_CY | FLAG_AC
        emu.step()
        assert emu.regs.F & FLAG_CY
        assert emu.regs.F & FLAG_AC

    def test_carry_computed_when_enabled(self):
        emu = _emu(bytes([0x3E, 0xFF, 0xC6, 0x01]), compute_carry=True)
        emu.step()
        emu.step()
        assert emu.regs.A == 0x00
        assert emu.regs.carry
        assert emu.regs.aux_carry
        assert emu.regs.zero

    def test_carry_cleared_when_enabled(self):
        emu = _emu(bytes([0xC6, 0x01]), compute_carry=True)
        emu.regs.F = FLAG_CY | FLAG_AC
        emu.step()
        assert not emu.regs.carry
        assert not emu.regs.aux_carry


class TestStore:

    def test_sta_direct(self):
        """LXI H,1234; MVI A,AA; STA 0050 → mem[$50]=AA, HL not used"""
        emu = _emu(bytes([
            0x21, 0x34, 0x12,  # LXI H,1234
            0x3E, 0xAA,        # MVI A,AA
            0x32, 0x50, 0x00,  # STA 0050
            0x76,              # HLT
        ]))
        assert emu.run() is StopReason.HALT
        assert emu.mem.read8(0x0050) == 0xAA
        assert emu.mem.read8(0x1234) == 0x00

    def test_sta_high_address(self):
        emu = _emu(bytes([0x3E, 0x5C, 0x32, 0xFE, 0xFF]))
        emu.step()
        emu.step()
        assert emu.mem.read8(0xFFFE) == 0x5C
        assert emu.regs.PC == 0x0005


# ═══════════════════════════════════════════════
# Test Group 2: Control + unimplemented opcodes
# ═══════════════════════════════════════════════

class TestControl:

    def test_nop(self):
        emu = _emu(bytes([0x00]))
        before = emu.regs.display()
        emu.step()
        assert emu.regs.PC == 0x0001
        assert emu.regs.display().replace("PC=0001", "PC=0000") == before

    def test_hlt_stops_run(self):
        emu = _emu(bytes([0x00, 0x00, 0x76, 0x3E, 0x99]))
        assert emu.run() is StopReason.HALT
        assert emu.halted
        assert emu.instruction_count == 3
        assert emu.regs.A == 0x00
        assert emu.regs.PC == 0x0003

    def test_step_after_halt_does_nothing(self):
        emu = _emu(bytes([0x76, 0x3E, 0x12]))
        emu.run()
        assert emu.step() is StopReason.HALT
        assert emu.instruction_count == 1
        assert emu.regs.PC == 0x0001

    def test_halt_flushes_final_snapshot(self):
        trace = TraceRecorder()
        emu = _emu(bytes([0x76]))
        emu.add_reporter(trace)
        emu.run()
        assert len(trace) == 1
        assert trace.last.halted
        assert trace.last.mnemonic == "HLT"


class TestUnimplemented:

    def test_ff_is_soft_noop(self):
        """$FF: nothing changes but PC (+1); execution continues"""
        emu = _emu(bytes([0xFF, 0x3E, 0x01, 0x76]))
        emu.regs.B = 0x12
        emu.regs.F = FLAG_S | FLAG_P
        mem_before = emu.mem.window(0, 0x100)
        trace = TraceRecorder()
        emu.add_reporter(trace)

        assert emu.step() is None
        r = emu.regs
        assert r.PC == 0x0001
        assert (r.A, r.B, r.C, r.D, r.E, r.H, r.L) == (0, 0x12, 0, 0, 0, 0, 0)
        assert r.F == FLAG_S | FLAG_P
        assert r.SP == 0xFFFF
        assert emu.mem.window(0, 0x100) == mem_before
        assert trace.last.unimplemented
        assert trace.last.label == "UNIMPLEMENTED FF"

        assert emu.run() is StopReason.HALT
        assert emu.regs.A == 0x01
        assert emu.instruction_count == 3

    def test_unknown_opcode_never_consumes_operands(self):
        # $C3 is JMP on real hardware (3 bytes); here it is one byte
        emu = _emu(bytes([0xC3, 0x06, 0x07, 0x76]))
        emu.run()
        assert emu.regs.B == 0x07
        assert emu.instruction_count == 3

    def test_unknown_opcode_is_logged(self, caplog):
        emu = _emu(bytes([0xFF, 0x76]))
        with caplog.at_level("WARNING", logger="i8085.emu"):
            emu.run()
        assert "Unimplemented opcode $FF" in caplog.text

    def test_strict_decode_stops(self):
        emu = _emu(bytes([0xFF, 0x76]), strict_decode=True)
        trace = TraceRecorder()
        emu.add_reporter(trace)
        assert emu.run() is StopReason.ILLEGAL
        assert emu.regs.PC == 0x0001
        assert len(trace) == 1
        assert trace.last.unimplemented


# ═══════════════════════════════════════════════
# Test Group 3: Whole programs
# ═══════════════════════════════════════════════

class TestPrograms:

    def test_add_program_halts_after_four(self):
        emu = I8085Emulator()
        _load(emu, "MVI A,05\nMVI B,03\nADD B\nHLT\n")
        trace = TraceRecorder()
        emu.add_reporter(trace)
        assert emu.run() is StopReason.HALT
        assert emu.regs.A == 0x08
        assert emu.regs.F & (FLAG_Z | FLAG_S | FLAG_P) == 0
        assert emu.instruction_count == 4
        assert trace.mnemonics() == ["MVI A,05", "MVI B,03", "ADD B", "HLT"]
        assert [s.count for s in trace.snapshots] == [1, 2, 3, 4]

    def test_store_program(self):
        emu = I8085Emulator()
        _load(emu, "LXI H,1234\nMVI A,AA\nSTA 0050\nHLT\n")
        emu.run()
        assert emu.mem.read8(0x0050) == 0xAA
        assert emu.regs.HL == 0x1234

    def test_sum_through_memory(self):
        program = """
            LXI H,0040
            MVI A,10
            ADD M
            ADI 22
            STA 0041
            MOV A,M
            HLT
        """
        emu = I8085Emulator()
        emu.mem.write8(0x0040, 0x05)
        _load(emu, program)
        emu.run()
        assert emu.mem.read8(0x0041) == 0x37
        assert emu.regs.A == 0x05

    def test_origin_sets_pc_and_load_address(self):
        emu = I8085Emulator(EmulatorConfig(origin=0x0100))
        _load(emu, "MVI A,01\nHLT")
        assert emu.regs.PC == 0x0100
        assert emu.mem.read8(0x0100) == 0x3E
        emu.run()
        assert emu.regs.PC == 0x0103

    def test_load_program_uses_result_origin(self):
        emu = I8085Emulator()
        result = ProgramLoader(origin=0x0200).load("MVI A,01\nHLT")
        assert emu.load_program(result) is result
        assert emu.mem.read8(0x0200) == 0x3E
        assert emu.mem.read8(0x0000) == 0x00

    def test_independent_instances(self):
        a = I8085Emulator()
        b = I8085Emulator()
        _load(a, "MVI A,11\nHLT")
        _load(b, "MVI A,22\nHLT")
        a.run()
        b.run()
        assert a.regs.A == 0x11
        assert b.regs.A == 0x22

    def test_reset(self):
        emu = I8085Emulator()
        _load(emu, "MVI A,11\nHLT")
        emu.run()
        emu.reset()
        assert emu.regs.A == 0
        assert emu.regs.PC == 0
        assert emu.regs.SP == 0xFFFF
        assert not emu.halted
        assert emu.instruction_count == 0
        assert emu.run() is StopReason.HALT  # program still in memory
        assert emu.regs.A == 0x11


class TestBus:
    """IR and bus latches track the last memory cycle."""

    def test_ir_holds_last_opcode(self):
        emu = _emu(bytes([0x3E, 0x05]))
        emu.step()
        assert emu.regs.IR == 0x3E

    def test_store_latches_write(self):
        from i8085_emulator.cpu.regs import CTRL_MEMW
        emu = _emu(bytes([0x3E, 0x77, 0x32, 0x34, 0x12]))
        emu.step()
        emu.step()
        assert emu.regs.address_bus == 0x1234
        assert emu.regs.data_bus == 0x77
        assert emu.regs.control_bus == CTRL_MEMW

    def test_nop_latches_fetch(self):
        from i8085_emulator.cpu.regs import CTRL_FETCH
        emu = _emu(bytes([0x00]))
        emu.step()
        assert emu.regs.address_bus == 0x0000
        assert emu.regs.control_bus == CTRL_FETCH
