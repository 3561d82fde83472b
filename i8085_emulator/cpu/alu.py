"""
i8085 Emulator — Flag Computation

The add family is the only flag-affecting group implemented. After every
ADD r / ADD M / ADI the dispatcher calls update_flags() on the new
accumulator value:

  Z  = result == 0
  S  = result bit 7
  P  = even number of set bits in result

CY and AC are left alone by update_flags(). add8() additionally reports
them (CY = carry out of bit 7, AC = carry out of bit 3) for callers that
enable carry completion.
"""

from .regs import FLAG_S, FLAG_Z, FLAG_AC, FLAG_P, FLAG_CY


def parity8(val: int) -> bool:
    """True when val has an even number of set bits."""
    return bin(val & 0xFF).count('1') % 2 == 0


def szp8(val: int) -> int:
    """Return the S, Z and P bits for an 8-bit result."""
    val &= 0xFF
    flags = 0
    if val & 0x80:
        flags |= FLAG_S
    if val == 0:
        flags |= FLAG_Z
    if parity8(val):
        flags |= FLAG_P
    return flags


def update_flags(regs, result: int):
    """Recompute Z, S, P from result. CY and AC are untouched."""
    regs.set_SZP(szp8(result))


def add8(a: int, b: int) -> tuple:
    """Add two 8-bit values. Returns (result, flags) with S, Z, P, AC, CY."""
    total = (a & 0xFF) + (b & 0xFF)
    result = total & 0xFF
    flags = szp8(result)
    if total > 0xFF:
        flags |= FLAG_CY
    if ((a & 0x0F) + (b & 0x0F)) > 0x0F:
        flags |= FLAG_AC
    return (result, flags)
