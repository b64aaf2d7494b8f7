"""
CHIP-8 Emulator — 4K Memory Map with Region Routing

Memory map:
  $000–$04F  Font glyphs (16 digits × 5 bytes) — seeded once, read-only
  $050–$1FF  Interpreter area (unused by this emulator, zero-filled)
  $200–$FFF  Program space — ROM image is copied here by load_program()

Addresses wrap at 4096 on every access, so a fetch at $FFF reads its
second byte from $000 and I-relative copies never index past the end.
"""

import logging
from typing import Iterable

from ..config import (
    ADDRESS_MASK, FONT_START, MAX_PROGRAM_SIZE, MEMORY_SIZE, PROGRAM_START,
)
from ..errors import ProgramLoadError

log = logging.getLogger(__name__)


# Hex digit glyphs 0-F, 4 pixels wide (high nibble), 5 rows tall.
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


class MemoryRegion:
    """A named region in the 4K address space."""
    def __init__(self, name: str, start: int, end: int, writable: bool = True):
        self.name = name
        self.start = start
        self.end = end  # inclusive
        self.writable = writable

    def contains(self, addr: int) -> bool:
        return self.start <= addr <= self.end


class Memory:
    """4096-byte address space.

    Flat bytearray; the font region rejects writes so a stray FX33/FX55
    with I pointing low cannot corrupt the glyphs.
    """

    REGIONS = [
        MemoryRegion('FONT',    FONT_START, FONT_START + len(FONTSET) - 1, writable=False),
        MemoryRegion('INTERP',  FONT_START + len(FONTSET), PROGRAM_START - 1),
        MemoryRegion('PROGRAM', PROGRAM_START, MEMORY_SIZE - 1),
    ]

    def __init__(self):
        self._mem = bytearray(MEMORY_SIZE)
        self._mem[FONT_START:FONT_START + len(FONTSET)] = FONTSET
        self.program_size = 0

    def region_of(self, addr: int) -> MemoryRegion:
        addr &= ADDRESS_MASK
        for region in self.REGIONS:
            if region.contains(addr):
                return region
        raise AssertionError(f"address ${addr:03X} not covered by the memory map")

    # --- Core read/write ---

    def read8(self, addr: int) -> int:
        return self._mem[addr & ADDRESS_MASK]

    def write8(self, addr: int, value: int):
        """Write one byte. Writes into the font region are dropped."""
        addr &= ADDRESS_MASK
        if not self.region_of(addr).writable:
            log.debug("dropped write of $%02X to font region at $%03X", value & 0xFF, addr)
            return
        self._mem[addr] = value & 0xFF

    def read16(self, addr: int) -> int:
        """Read a big-endian word (CHIP-8 instruction byte order)."""
        hi = self.read8(addr)
        lo = self.read8(addr + 1)
        return (hi << 8) | lo

    def read_block(self, addr: int, length: int) -> bytes:
        """Read ``length`` bytes starting at addr, wrapping at 4096."""
        return bytes(self.read8(addr + i) for i in range(length))

    def write_block(self, addr: int, data: Iterable[int]):
        for i, byte in enumerate(data):
            self.write8(addr + i, byte)

    # --- Program load ---

    def load_program(self, data: bytes):
        """Copy a ROM image to $200.

        Raises ProgramLoadError (memory untouched) if the image is larger
        than the 3584 bytes between $200 and the top of memory.
        """
        data = bytes(data)
        if len(data) > MAX_PROGRAM_SIZE:
            raise ProgramLoadError(len(data), MAX_PROGRAM_SIZE)
        self._mem[PROGRAM_START:PROGRAM_START + len(data)] = data
        self.program_size = len(data)
        log.info("loaded %d-byte program at $%03X", len(data), PROGRAM_START)

    def program_bytes(self) -> bytes:
        return bytes(self._mem[PROGRAM_START:PROGRAM_START + self.program_size])

    # --- Hex dump ---

    def hexdump(self, start: int, length: int = 256) -> str:
        """Produce a hex dump of memory for debugging."""
        lines = []
        for offset in range(0, length, 16):
            addr = (start + offset) & ADDRESS_MASK
            chunk = [self._mem[(addr + i) & ADDRESS_MASK] for i in range(16)]
            hex_bytes = ' '.join(f'{b:02X}' for b in chunk)
            ascii_bytes = ''.join(chr(b) if 0x20 <= b < 0x7F else '.' for b in chunk)
            lines.append(f'{addr:03X}  {hex_bytes}  {ascii_bytes}')
        return '\n'.join(lines)
