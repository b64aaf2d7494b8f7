"""
CHIP-8 Disassembler
===================
Linear-sweep disassembler over the same pattern table the interpreter
dispatches on, so a listing can never disagree with execution.

API Usage:
    from chip8_emulator.tools.disassembler import Chip8Disassembler

    dis = Chip8Disassembler()
    for r in dis.disassemble(rom_bytes):          # base_addr defaults to $200
        print(r.format())   # "$0200: 00 E0  CLS"

    dis.disassemble_hex("6A 05 7A 01 12 00")

CHIP-8 mixes sprite data in with code, so data regions decode as
whatever instruction their bytes happen to spell; words that match no
pattern are listed as DW.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..config import PROGRAM_START
from ..cpu.decoder import OPCODES, decode_opcode
from ..errors import UnimplementedOpcode


@dataclass
class DisassembledInstruction:
    """One decoded instruction with all formatting data."""
    address: int
    raw_bytes: bytes
    mnemonic: str
    operand_str: str
    description: str = ""

    @property
    def hex_str(self) -> str:
        """Hex bytes formatted like '00 E0'."""
        return " ".join(f"{b:02X}" for b in self.raw_bytes)

    @property
    def is_data(self) -> bool:
        return self.mnemonic in ("DW", "DB")

    def format(self, show_description: bool = False, hex_width: int = 6) -> str:
        """Format as a single disassembly line."""
        addr_s = f"${self.address:04X}"
        hex_s = self.hex_str.ljust(hex_width)
        asm_s = f"{self.mnemonic} {self.operand_str}".strip()
        line = f"{addr_s}: {hex_s} {asm_s}"
        if show_description and self.description:
            line = f"{line.ljust(34)} ; {self.description}"
        return line


class Chip8Disassembler:
    """
    CHIP-8 disassembler.

    Usage:
        dis = Chip8Disassembler()
        results = dis.disassemble(raw_bytes, base_addr=0x200)
        single  = dis.decode_one(raw_bytes, offset=0, base_addr=0x200)
    """

    # ── public API ──

    def disassemble(self, data: bytes, base_addr: int = PROGRAM_START,
                    max_instructions: int = 0) -> List[DisassembledInstruction]:
        """Disassemble a block of bytes, two at a time."""
        data = bytes(data)
        results: List[DisassembledInstruction] = []
        offset = 0
        while offset < len(data):
            inst = self.decode_one(data, offset, base_addr + offset)
            results.append(inst)
            offset += len(inst.raw_bytes)
            if max_instructions and len(results) >= max_instructions:
                break
        return results

    def disassemble_hex(self, hex_string: str, base_addr: int = PROGRAM_START,
                        max_instructions: int = 0) -> List[DisassembledInstruction]:
        """Disassemble a hex string like '00 E0 12 00' or '00E01200'."""
        return self.disassemble(self._parse_hex(hex_string), base_addr, max_instructions)

    def decode_one(self, data: bytes, offset: int = 0,
                   base_addr: int = PROGRAM_START) -> Optional[DisassembledInstruction]:
        """Decode the word at ``offset``. None past the end of data."""
        if offset >= len(data):
            return None

        if offset + 1 >= len(data):
            # Odd trailing byte
            return DisassembledInstruction(
                address=base_addr,
                raw_bytes=bytes(data[offset:offset + 1]),
                mnemonic="DB",
                operand_str=f"${data[offset]:02X}",
                description="Data byte",
            )

        raw = bytes(data[offset:offset + 2])
        word = (raw[0] << 8) | raw[1]
        try:
            inst = decode_opcode(word, base_addr)
        except UnimplementedOpcode:
            return DisassembledInstruction(
                address=base_addr,
                raw_bytes=raw,
                mnemonic="DW",
                operand_str=f"${word:04X}",
                description="Data word",
            )

        return DisassembledInstruction(
            address=base_addr,
            raw_bytes=raw,
            mnemonic=inst.mnemonic,
            operand_str=inst.operand_str(),
            description=inst.spec.description,
        )

    @staticmethod
    def get_stats(results: List[DisassembledInstruction]) -> Dict[str, int]:
        """Mnemonic histogram over a listing, plus table size."""
        stats: Dict[str, int] = {"table": len(OPCODES), "total": len(results)}
        for r in results:
            stats[r.mnemonic] = stats.get(r.mnemonic, 0) + 1
        return stats

    # ── helpers ──

    @staticmethod
    def _parse_hex(hex_string: str) -> bytes:
        """Parse flexible hex input: '00 E0', '00,E0', '0x00 0xE0', '00E0'."""
        s = hex_string.strip()
        s = s.replace("0x", "").replace("0X", "")
        s = s.replace(",", " ").replace(";", " ").replace("\n", " ").replace("\t", " ")
        tokens = s.split()
        if not tokens:
            return b""
        return bytes.fromhex("".join(tokens))


def disassemble_bytes(data: bytes, base_addr: int = PROGRAM_START) -> List[DisassembledInstruction]:
    """Module-level convenience function."""
    return Chip8Disassembler().disassemble(data, base_addr)
