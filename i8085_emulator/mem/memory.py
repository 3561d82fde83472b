"""
i8085 Emulator — 64K Flat Memory

One bytearray of 65536 cells, zero-initialized. Addresses are masked to
16 bits, so there is no region routing and no bounds check. Multi-byte
values are little-endian (low byte at the lower address), matching the
order operands appear in the instruction stream.
"""

MEMORY_SIZE = 0x10000


class Memory:
    """64K byte-addressable memory."""

    def __init__(self):
        self._mem = bytearray(MEMORY_SIZE)

    def __len__(self) -> int:
        return MEMORY_SIZE

    # --- Core read/write ---

    def read8(self, addr: int) -> int:
        return self._mem[addr & 0xFFFF]

    def write8(self, addr: int, value: int):
        self._mem[addr & 0xFFFF] = value & 0xFF

    def read16(self, addr: int) -> int:
        """Read 16-bit value (little-endian)."""
        lo = self.read8(addr)
        hi = self.read8(addr + 1)
        return (hi << 8) | lo

    def write16(self, addr: int, value: int):
        """Write 16-bit value (little-endian)."""
        self.write8(addr, value & 0xFF)
        self.write8(addr + 1, (value >> 8) & 0xFF)

    # --- Bulk load ---

    def load_binary(self, data: bytes, base_addr: int = 0x0000):
        """Copy data into memory at base_addr, wrapping past $FFFF."""
        for i, byte in enumerate(data):
            self._mem[(base_addr + i) & 0xFFFF] = byte

    def clear(self):
        self._mem[:] = bytes(MEMORY_SIZE)

    # --- Inspection ---

    def window(self, start: int, length: int) -> bytes:
        """Copy of length bytes starting at start (wraps at $FFFF)."""
        start &= 0xFFFF
        end = start + length
        if end <= MEMORY_SIZE:
            return bytes(self._mem[start:end])
        return bytes(self._mem[start:]) + bytes(self._mem[:end - MEMORY_SIZE])

    def hexdump(self, start: int, length: int = 256) -> str:
        """Produce a hex dump of memory, 16 bytes per row."""
        return hexdump(self.window(start, length), start)


def hexdump(data: bytes, base_addr: int = 0x0000) -> str:
    """Render bytes as 'AAAA  XX XX ...' rows of 16."""
    lines = []
    for offset in range(0, len(data), 16):
        addr = (base_addr + offset) & 0xFFFF
        row = data[offset:offset + 16]
        hex_bytes = ' '.join(f'{b:02X}' for b in row)
        lines.append(f'{addr:04X}  {hex_bytes}')
    return '\n'.join(lines)
