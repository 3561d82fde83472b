"""
Register bank tests: width masking and derived pairs.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from i8085_emulator.cpu.regs import Registers, REG8_NAMES, FLAG_S, FLAG_Z, FLAG_P, FLAG_CY, FLAG_AC


class TestWidth:

    @pytest.mark.parametrize("name", REG8_NAMES)
    def test_8bit_writes_wrap(self, name):
        r = Registers()
        for value in (0, 0x7F, 0xFF, 0x100, 0x1AB, 0xFFFF, -1):
            setattr(r, name, value)
            assert getattr(r, name) == value % 256

    @pytest.mark.parametrize("name", ["PC", "SP"])
    def test_pointer_writes_wrap(self, name):
        r = Registers()
        for value in (0, 0x1234, 0xFFFF, 0x10000, 0x12345, -1):
            setattr(r, name, value)
            assert getattr(r, name) == value % 65536

    def test_pc_increment_wraps(self):
        r = Registers(pc=0xFFFF)
        r.PC = r.PC + 1
        assert r.PC == 0

    def test_power_on_state(self):
        r = Registers()
        assert r.PC == 0x0000
        assert r.SP == 0xFFFF
        assert all(getattr(r, n) == 0 for n in REG8_NAMES)

    def test_unknown_attribute_rejected(self):
        r = Registers()
        with pytest.raises(AttributeError):
            r.X = 1


class TestPairs:

    @pytest.mark.parametrize("pair,high,low", [
        ("BC", "B", "C"), ("DE", "D", "E"), ("HL", "H", "L"),
    ])
    def test_pair_is_high_times_256_plus_low(self, pair, high, low):
        r = Registers()
        setattr(r, high, 0x12)
        setattr(r, low, 0x34)
        assert getattr(r, pair) == 0x1234
        # order of writes does not matter
        setattr(r, low, 0x78)
        setattr(r, high, 0x56)
        assert getattr(r, pair) == 0x5678

    def test_pair_write_splits_into_halves(self):
        r = Registers()
        r.HL = 0xBEEF
        assert r.H == 0xBE
        assert r.L == 0xEF
        r.L = 0x00
        assert r.HL == 0xBE00

    def test_pair_write_wraps(self):
        r = Registers()
        r.DE = 0x1FFFF
        assert r.DE == 0xFFFF

    def test_pairs_do_not_overlap(self):
        r = Registers()
        r.BC = 0x1111
        r.DE = 0x2222
        r.HL = 0x3333
        r.C = 0x99
        assert (r.BC, r.DE, r.HL) == (0x1199, 0x2222, 0x3333)
        assert r.A == 0 and r.F == 0


class TestByName:

    def test_get_set_8(self):
        r = Registers()
        r.set8("E", 0x1FE)
        assert r.get8("E") == 0xFE

    def test_get_set_16(self):
        r = Registers()
        r.set16("SP", 0x2000)
        r.set16("BC", 0x0102)
        assert r.get16("SP") == 0x2000
        assert (r.B, r.C) == (1, 2)

    def test_bad_names(self):
        r = Registers()
        with pytest.raises(KeyError):
            r.get8("M")
        with pytest.raises(KeyError):
            r.set16("AF", 0)


class TestFlags:

    def test_set_szp_preserves_carry_bits(self):
        r = Registers()
        r.F = FLAG_CY | FLAG_AC
        r.set_SZP(FLAG_Z | FLAG_P)
        assert r.F == FLAG_CY | FLAG_AC | FLAG_Z | FLAG_P
        r.set_SZP(FLAG_S)
        assert r.F == FLAG_CY | FLAG_AC | FLAG_S

    def test_set_ac_cy_preserves_szp(self):
        r = Registers()
        r.F = FLAG_S | FLAG_Z
        r.set_AC_CY(FLAG_CY)
        assert r.F == FLAG_S | FLAG_Z | FLAG_CY

    def test_display(self):
        r = Registers()
        r.A = 0x08
        r.F = FLAG_Z | FLAG_CY
        text = r.display()
        assert "A=08" in text
        assert "F=41" in text
        assert "[.Z..C]" in text
        assert "SP=FFFF" in text
