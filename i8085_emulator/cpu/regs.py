"""
i8085 Emulator — CPU Register Set + Flag Byte

Register model for the 8085:
  A   — 8-bit accumulator
  B C — 8-bit general registers, paired as BC (B=high, C=low)
  D E — 8-bit general registers, paired as DE (D=high, E=low)
  H L — 8-bit general registers, paired as HL (H=high, L=low)
  F   — 8-bit flag byte:  S Z 0 AC 0 P 1 CY
        bit 7: S  (Sign — bit 7 of result)
        bit 6: Z  (Zero)
        bit 4: AC (Auxiliary carry out of bit 3)
        bit 2: P  (Parity — even number of set bits)
        bit 0: CY (Carry out of bit 7)
  SP  — 16-bit stack pointer
  PC  — 16-bit program counter

Pairs are never stored. BC/DE/HL are computed from the two halves on
every read, and a pair write is split into the halves.

Also carried: the instruction register (IR) and the bus latches the
dispatcher drives on every memory access. They are reporting state only.
"""

# Flag bit masks
FLAG_S = 0x80
FLAG_Z = 0x40
FLAG_AC = 0x10
FLAG_P = 0x04
FLAG_CY = 0x01

# Control bus bits
CTRL_MEMR = 0x01
CTRL_MEMW = 0x02
CTRL_FETCH = 0x04

REG8_NAMES = ('A', 'B', 'C', 'D', 'E', 'H', 'L', 'F')
PAIR_NAMES = ('BC', 'DE', 'HL')

# high, low
_PAIRS = {
    'BC': ('B', 'C'),
    'DE': ('D', 'E'),
    'HL': ('H', 'L'),
}


def _reg8(slot: str) -> property:
    def fget(self) -> int:
        return getattr(self, slot)

    def fset(self, value: int):
        setattr(self, slot, value & 0xFF)

    return property(fget, fset)


def _reg16(slot: str) -> property:
    def fget(self) -> int:
        return getattr(self, slot)

    def fset(self, value: int):
        setattr(self, slot, value & 0xFFFF)

    return property(fget, fset)


def _pair(high: str, low: str) -> property:
    def fget(self) -> int:
        return getattr(self, high) * 256 + getattr(self, low)

    def fset(self, value: int):
        value &= 0xFFFF
        setattr(self, high, value >> 8)
        setattr(self, low, value & 0xFF)

    return property(fget, fset, doc=f"{high}{low} pair = {high}*256 + {low}")


class Registers:
    """8085 CPU register set.

    Every write is masked to the register width, so a store of 0x1FF
    into A leaves 0xFF and a store of 0x10000 into PC leaves 0.
    """

    __slots__ = ('_A', '_B', '_C', '_D', '_E', '_H', '_L', '_F',
                 '_PC', '_SP', '_IR',
                 '_address_bus', '_data_bus', '_control_bus')

    A = _reg8('_A')
    B = _reg8('_B')
    C = _reg8('_C')
    D = _reg8('_D')
    E = _reg8('_E')
    H = _reg8('_H')
    L = _reg8('_L')
    F = _reg8('_F')
    IR = _reg8('_IR')

    PC = _reg16('_PC')
    SP = _reg16('_SP')

    address_bus = _reg16('_address_bus')
    data_bus = _reg8('_data_bus')
    control_bus = _reg8('_control_bus')

    BC = _pair('B', 'C')
    DE = _pair('D', 'E')
    HL = _pair('H', 'L')

    def __init__(self, pc: int = 0x0000, sp: int = 0xFFFF):
        self.reset(pc, sp)

    # --- Access by name (decoder operands) ---

    def get8(self, name: str) -> int:
        if name not in REG8_NAMES:
            raise KeyError(f"Not an 8-bit register: {name}")
        return getattr(self, name)

    def set8(self, name: str, value: int):
        if name not in REG8_NAMES:
            raise KeyError(f"Not an 8-bit register: {name}")
        setattr(self, name, value)

    def get16(self, name: str) -> int:
        if name not in PAIR_NAMES + ('SP', 'PC'):
            raise KeyError(f"Not a 16-bit register: {name}")
        return getattr(self, name)

    def set16(self, name: str, value: int):
        if name not in PAIR_NAMES + ('SP', 'PC'):
            raise KeyError(f"Not a 16-bit register: {name}")
        setattr(self, name, value)

    # --- Flag access ---

    def set_SZP(self, flags: int):
        """Set S, Z, P. Preserves AC, CY and the fixed bits."""
        mask = FLAG_S | FLAG_Z | FLAG_P
        self.F = (self.F & ~mask) | (flags & mask)

    def set_AC_CY(self, flags: int):
        """Set AC and CY only."""
        mask = FLAG_AC | FLAG_CY
        self.F = (self.F & ~mask) | (flags & mask)

    @property
    def sign(self) -> bool:
        return bool(self.F & FLAG_S)

    @property
    def zero(self) -> bool:
        return bool(self.F & FLAG_Z)

    @property
    def aux_carry(self) -> bool:
        return bool(self.F & FLAG_AC)

    @property
    def parity(self) -> bool:
        return bool(self.F & FLAG_P)

    @property
    def carry(self) -> bool:
        return bool(self.F & FLAG_CY)

    # --- Bus latches ---

    def latch_bus(self, addr: int, data: int, control: int):
        """Record the last memory cycle on the address/data/control bus."""
        self.address_bus = addr
        self.data_bus = data
        self.control_bus = control

    # --- Display ---

    def flag_string(self) -> str:
        chars = []
        for bit, c in ((FLAG_S, 'S'), (FLAG_Z, 'Z'), (FLAG_AC, 'A'),
                       (FLAG_P, 'P'), (FLAG_CY, 'C')):
            chars.append(c if self.F & bit else '.')
        return ''.join(chars)

    def display(self) -> str:
        """Format register state on one line."""
        return (f"A={self.A:02X} B={self.B:02X} C={self.C:02X} "
                f"D={self.D:02X} E={self.E:02X} H={self.H:02X} "
                f"L={self.L:02X} F={self.F:02X} [{self.flag_string()}] "
                f"PC={self.PC:04X} SP={self.SP:04X}")

    def reset(self, pc: int = 0x0000, sp: int = 0xFFFF):
        """Reset CPU to power-on state."""
        for name in REG8_NAMES:
            setattr(self, name, 0)
        self.IR = 0
        self.PC = pc
        self.SP = sp
        self.latch_bus(0, 0, 0)
