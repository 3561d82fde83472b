"""
8085 Program Loader — line-oriented mnemonic encoder.

Translates program text into opcode bytes for the emulator's memory.
One instruction per line, no labels, no directives. Recognized forms:

  MVI r,XX       r = A B C D E H L M       2 bytes  (06/0E/16/1E/26/2E/36/3E)
  LXI rp,XXXX    rp = B D H SP             3 bytes  (01/11/21/31, low, high)
  MOV A,r        r = A B C D E H L M       1 byte   (78..7F)
  ADD r          r = A B C D E H L M       1 byte   (80..87)
  ADI XX                                    2 bytes  (C6)
  STA XXXX                                  3 bytes  (32, low, high)
  NOP                                       1 byte   (00)
  HLT                                       1 byte   (76), ends loading

Hex literals have no radix prefix ("3C", "0050") and are truncated to the
operand width. Mnemonics and registers are case-insensitive, spaces around
the comma are allowed, and ';' starts a comment.

Lines that do not match are reported (warning log + LoadResult.rejected)
and skipped; loading carries on with the next line. With strict=True the
first bad line raises LoaderError instead.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

__all__ = ['LoaderError', 'ListingEntry', 'RejectedLine', 'LoadResult',
           'ProgramLoader', 'load_program']

log = logging.getLogger("i8085.asm")


class LoaderError(Exception):
    """Raised on an unrecognized line when loading strictly."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


class _Reject(Exception):
    pass


# ──────────────────────────────────────────────
# Encoding tables
# ──────────────────────────────────────────────

# 3-bit register field: B C D E H L M A
REG_CODES = {'B': 0, 'C': 1, 'D': 2, 'E': 3, 'H': 4, 'L': 5, 'M': 6, 'A': 7}

PAIR_OPCODES = {'B': 0x01, 'D': 0x11, 'H': 0x21, 'SP': 0x31}

MVI_BASE = 0x06   # 00 rrr 110
MOV_A_BASE = 0x78  # 01 111 rrr
ADD_BASE = 0x80   # 10 000 rrr
OP_ADI = 0xC6
OP_STA = 0x32
OP_NOP = 0x00
OP_HLT = 0x76

_HEX_RE = re.compile(r'^[0-9A-F]+$')


# ──────────────────────────────────────────────
# Results
# ──────────────────────────────────────────────

@dataclass
class ListingEntry:
    address: int
    data: bytes
    source: str
    line_num: int


@dataclass
class RejectedLine:
    line_num: int
    text: str
    reason: str


@dataclass
class LoadResult:
    origin: int = 0
    image: bytearray = field(default_factory=bytearray)
    entries: List[ListingEntry] = field(default_factory=list)
    rejected: List[RejectedLine] = field(default_factory=list)
    halted: bool = False

    @property
    def size(self) -> int:
        return len(self.image)

    def load_into(self, memory):
        """Write the image into memory at the origin."""
        memory.load_binary(bytes(self.image), self.origin)

    def listing(self) -> str:
        """Return a human-readable listing showing address, bytes, and source."""
        lines = [f"{'ADDR':>5}  {'BYTES':<9}  SOURCE", "-" * 40]
        for entry in self.entries:
            hex_str = ' '.join(f'{b:02X}' for b in entry.data)
            lines.append(f"{entry.address:04X}   {hex_str:<9}  {entry.source}")
        for bad in self.rejected:
            lines.append(f"{'':5}  {'??':<9}  {bad.text}    ; line {bad.line_num}: {bad.reason}")
        return '\n'.join(lines)


# ──────────────────────────────────────────────
# Line parsing
# ──────────────────────────────────────────────

def _strip_comment(line: str) -> str:
    pos = line.find(';')
    if pos >= 0:
        line = line[:pos]
    return line.strip()


def _parse_hex(text: str, bits: int) -> int:
    if not _HEX_RE.match(text):
        raise _Reject(f"bad hex literal '{text}'")
    return int(text, 16) & ((1 << bits) - 1)


def _split_operands(operand: str, count: int, mnem: str) -> List[str]:
    parts = operand.split(',') if operand else []
    if len(parts) != count or not all(parts):
        raise _Reject(f"{mnem} takes {count} operand{'s' if count > 1 else ''}")
    return parts


def _reg_code(name: str, mnem: str) -> int:
    if name not in REG_CODES:
        raise _Reject(f"{mnem}: unknown register '{name}'")
    return REG_CODES[name]


def encode_line(text: str) -> bytes:
    """Encode one comment-free, non-blank line. Raises _Reject if unrecognized."""
    parts = text.split(None, 1)
    mnem = parts[0].upper()
    # Operand text with all whitespace removed: "A , 05" -> "A,05"
    operand = ''.join(parts[1].split()).upper() if len(parts) > 1 else ''

    if mnem in ('NOP', 'HLT'):
        if operand:
            raise _Reject(f"{mnem} takes no operand")
        return bytes([OP_NOP if mnem == 'NOP' else OP_HLT])

    if mnem == 'MVI':
        reg, value = _split_operands(operand, 2, mnem)
        code = _reg_code(reg, mnem)
        return bytes([MVI_BASE | (code << 3), _parse_hex(value, 8)])

    if mnem == 'LXI':
        pair, value = _split_operands(operand, 2, mnem)
        if pair not in PAIR_OPCODES:
            raise _Reject(f"LXI: unknown register pair '{pair}'")
        word = _parse_hex(value, 16)
        return bytes([PAIR_OPCODES[pair], word & 0xFF, word >> 8])

    if mnem == 'MOV':
        dst, src = _split_operands(operand, 2, mnem)
        if dst != 'A':
            raise _Reject("MOV: only A is supported as destination")
        return bytes([MOV_A_BASE | _reg_code(src, mnem)])

    if mnem == 'ADD':
        (src,) = _split_operands(operand, 1, mnem)
        return bytes([ADD_BASE | _reg_code(src, mnem)])

    if mnem == 'ADI':
        (value,) = _split_operands(operand, 1, mnem)
        return bytes([OP_ADI, _parse_hex(value, 8)])

    if mnem == 'STA':
        (value,) = _split_operands(operand, 1, mnem)
        addr = _parse_hex(value, 16)
        return bytes([OP_STA, addr & 0xFF, addr >> 8])

    raise _Reject(f"unknown mnemonic '{mnem}'")


# ──────────────────────────────────────────────
# Loader
# ──────────────────────────────────────────────

class ProgramLoader:
    """Line-by-line encoder.

    Usage:
        result = ProgramLoader().load(source_text)
        result.load_into(emu.mem)
    """

    def __init__(self, origin: int = 0x0000, strict: bool = False):
        self.origin = origin & 0xFFFF
        self.strict = strict

    def load(self, source: str) -> LoadResult:
        result = LoadResult(origin=self.origin)
        pc = self.origin
        raw_lines = source.splitlines()

        for line_num, raw in enumerate(raw_lines, 1):
            text = _strip_comment(raw)
            if not text:
                continue
            try:
                data = encode_line(text)
            except _Reject as e:
                if self.strict:
                    raise LoaderError(str(e), line_num, raw) from None
                log.warning("Line %d rejected (%s): %s", line_num, e, raw.strip())
                result.rejected.append(RejectedLine(line_num, raw.strip(), str(e)))
                continue

            result.entries.append(ListingEntry(pc, data, text, line_num))
            result.image += data
            pc = (pc + len(data)) & 0xFFFF

            if data[0] == OP_HLT:
                result.halted = True
                remaining = len(raw_lines) - line_num
                if remaining:
                    log.debug("HLT on line %d, %d trailing line(s) not loaded",
                              line_num, remaining)
                break

        if not result.halted:
            log.warning("Program has no HLT; execution will not terminate")
        log.info("Loaded %d byte(s) at $%04X, %d line(s) rejected",
                 result.size, result.origin, len(result.rejected))
        return result


def load_program(source: str, origin: int = 0x0000,
                 strict: bool = False) -> LoadResult:
    """Encode program text, return a LoadResult."""
    return ProgramLoader(origin=origin, strict=strict).load(source)
