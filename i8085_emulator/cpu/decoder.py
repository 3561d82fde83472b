"""
i8085 Emulator — Opcode Table / Decoder

Maps opcode bytes to (mnemonic, family, operand_bytes, target).
The operand byte count is fixed per family, so PC always advances by the
same amount the loader encoded.

Families:
  MOV   MOV A,src     0 operand bytes   src register or M (memory at HL)
  MVI   MVI r,byte    1                 r register or M
  LXI   LXI rp,word   2 (low, high)     BC, DE, HL or SP
  ADD   ADD src       0                 src register or M
  ADI   ADI byte      1
  STA   STA addr      2 (low, high)
  NOP   NOP           0
  HLT   HLT           0
  UNIMPL              0                 any byte not in the table

Target 'M' means register-indirect via HL.
"""

from typing import NamedTuple, Optional

MOV = 'MOV'
MVI = 'MVI'
LXI = 'LXI'
ADD = 'ADD'
ADI = 'ADI'
STA = 'STA'
NOP = 'NOP'
HLT = 'HLT'
UNIMPL = 'UNIMPL'

MEM = 'M'

OPERAND_BYTES = {
    MOV: 0,
    MVI: 1,
    LXI: 2,
    ADD: 0,
    ADI: 1,
    STA: 2,
    NOP: 0,
    HLT: 0,
    UNIMPL: 0,
}


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, family, target)
# operand_bytes comes from OPERAND_BYTES[family]

OPCODES = {
    # ── Control ──
    0x00: ('NOP',   NOP, None),
    0x76: ('HLT',   HLT, None),

    # ── 16-bit immediate loads ──
    0x01: ('LXI B',  LXI, 'BC'),
    0x11: ('LXI D',  LXI, 'DE'),
    0x21: ('LXI H',  LXI, 'HL'),
    0x31: ('LXI SP', LXI, 'SP'),

    # ── 8-bit immediate loads ──
    0x06: ('MVI B', MVI, 'B'),
    0x0E: ('MVI C', MVI, 'C'),
    0x16: ('MVI D', MVI, 'D'),
    0x1E: ('MVI E', MVI, 'E'),
    0x26: ('MVI H', MVI, 'H'),
    0x2E: ('MVI L', MVI, 'L'),
    0x36: ('MVI M', MVI, MEM),
    0x3E: ('MVI A', MVI, 'A'),

    # ── Store accumulator direct ──
    0x32: ('STA',   STA, None),

    # ── Moves into the accumulator ──
    0x78: ('MOV A,B', MOV, 'B'),
    0x79: ('MOV A,C', MOV, 'C'),
    0x7A: ('MOV A,D', MOV, 'D'),
    0x7B: ('MOV A,E', MOV, 'E'),
    0x7C: ('MOV A,H', MOV, 'H'),
    0x7D: ('MOV A,L', MOV, 'L'),
    0x7E: ('MOV A,M', MOV, MEM),
    0x7F: ('MOV A,A', MOV, 'A'),

    # ── Accumulator add ──
    0x80: ('ADD B', ADD, 'B'),
    0x81: ('ADD C', ADD, 'C'),
    0x82: ('ADD D', ADD, 'D'),
    0x83: ('ADD E', ADD, 'E'),
    0x84: ('ADD H', ADD, 'H'),
    0x85: ('ADD L', ADD, 'L'),
    0x86: ('ADD M', ADD, MEM),
    0x87: ('ADD A', ADD, 'A'),
    0xC6: ('ADI',   ADI, None),
}


class Decoded(NamedTuple):
    opcode: int
    mnemonic: str
    family: str
    operand_bytes: int
    target: Optional[str]

    @property
    def implemented(self) -> bool:
        return self.family != UNIMPL


def decode_opcode(opcode: int) -> Decoded:
    """Classify an opcode byte.

    Unknown bytes decode to the UNIMPL family with zero operand bytes,
    so a malformed program never desynchronizes the fetch loop.
    """
    opcode &= 0xFF
    entry = OPCODES.get(opcode)
    if entry is None:
        return Decoded(opcode, f"??? {opcode:02X}", UNIMPL, 0, None)
    mnem, family, target = entry
    return Decoded(opcode, mnem, family, OPERAND_BYTES[family], target)


def format_instruction(decoded: Decoded, operand: Optional[int] = None) -> str:
    """Render the executed instruction in loader syntax, e.g. 'MVI A,05'."""
    if operand is None:
        return decoded.mnemonic
    width = 2 * decoded.operand_bytes
    text = f"{operand:0{width}X}"
    if decoded.family in (MVI, LXI):
        return f"{decoded.mnemonic},{text}"
    return f"{decoded.mnemonic} {text}"
