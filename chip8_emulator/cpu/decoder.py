"""
CHIP-8 Emulator — Opcode Decoder / Pattern Table

Every CHIP-8 instruction is one big-endian 16-bit word split into four
nibbles:

    a x y n      a   = family (high nibble)
                 x   = register selector (bits 11-8)
                 y   = register selector (bits 7-4)
                 n   = 4-bit immediate  (bits 3-0)
                 nn  = 8-bit immediate  (low byte)
                 nnn = 12-bit address   (low 12 bits)

The table below maps (mask, match) pairs to instruction names. A word
selects the FIRST entry where ``word & mask == match``, so entries with
wider masks (00E0, 8XY4, EX9E, FX0A ...) are listed ahead of the
family-only ones. Anything that matches nothing (0NNN machine-code
calls, 5XY1, 8XY8, EXxx with an unknown low byte) raises
UnimplementedOpcode.

The same table drives the interpreter's dispatch (by ``name``) and the
disassembler's listing (by ``mnemonic`` + ``operands``).
"""

from dataclasses import dataclass
from typing import List

from ..errors import UnimplementedOpcode


@dataclass(frozen=True)
class OpcodeSpec:
    """One row of the instruction table."""
    name: str          # dispatch key, unique
    mnemonic: str      # assembler mnemonic, shared across forms (LD, SE ...)
    mask: int
    match: int
    operands: str      # str.format template over the decoded fields
    description: str

    def matches(self, word: int) -> bool:
        return (word & self.mask) == self.match


@dataclass(frozen=True)
class Instruction:
    """A decoded opcode word."""
    opcode: int
    spec: OpcodeSpec

    @property
    def a(self) -> int:
        return (self.opcode >> 12) & 0xF

    @property
    def x(self) -> int:
        return (self.opcode >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.opcode >> 4) & 0xF

    @property
    def n(self) -> int:
        return self.opcode & 0xF

    @property
    def nn(self) -> int:
        return self.opcode & 0xFF

    @property
    def nnn(self) -> int:
        return self.opcode & 0xFFF

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def mnemonic(self) -> str:
        return self.spec.mnemonic

    def operand_str(self) -> str:
        return self.spec.operands.format(
            x=self.x, y=self.y, n=self.n, nn=self.nn, nnn=self.nnn,
        )

    def __str__(self) -> str:
        return f"{self.mnemonic} {self.operand_str()}".strip()


# ──────────────────────────────────────────────
# Instruction table: 34 entries
# ──────────────────────────────────────────────
# Format: OpcodeSpec(name, mnemonic, mask, match, operands, description)

_S = OpcodeSpec

OPCODES: List[OpcodeSpec] = [
    # ── 0 family: exact words only ──
    _S('cls',     'CLS',  0xFFFF, 0x00E0, '',                    'Clear display'),
    _S('ret',     'RET',  0xFFFF, 0x00EE, '',                    'Return from subroutine'),

    # ── Control flow ──
    _S('jp',      'JP',   0xF000, 0x1000, '${nnn:03X}',          'Jump to nnn'),
    _S('call',    'CALL', 0xF000, 0x2000, '${nnn:03X}',          'Call subroutine at nnn'),
    _S('se_nn',   'SE',   0xF000, 0x3000, 'V{x:X}, #${nn:02X}',  'Skip if Vx == nn'),
    _S('sne_nn',  'SNE',  0xF000, 0x4000, 'V{x:X}, #${nn:02X}',  'Skip if Vx != nn'),
    _S('se_vy',   'SE',   0xF00F, 0x5000, 'V{x:X}, V{y:X}',      'Skip if Vx == Vy'),

    # ── Immediate load / add ──
    _S('ld_nn',   'LD',   0xF000, 0x6000, 'V{x:X}, #${nn:02X}',  'Vx = nn'),
    _S('add_nn',  'ADD',  0xF000, 0x7000, 'V{x:X}, #${nn:02X}',  'Vx += nn (no carry)'),

    # ── 8 family: register ALU, selected by n ──
    _S('ld_vy',   'LD',   0xF00F, 0x8000, 'V{x:X}, V{y:X}',      'Vx = Vy'),
    _S('or',      'OR',   0xF00F, 0x8001, 'V{x:X}, V{y:X}',      'Vx |= Vy'),
    _S('and',     'AND',  0xF00F, 0x8002, 'V{x:X}, V{y:X}',      'Vx &= Vy'),
    _S('xor',     'XOR',  0xF00F, 0x8003, 'V{x:X}, V{y:X}',      'Vx ^= Vy'),
    _S('add_vy',  'ADD',  0xF00F, 0x8004, 'V{x:X}, V{y:X}',      'Vx += Vy, VF = carry'),
    _S('sub',     'SUB',  0xF00F, 0x8005, 'V{x:X}, V{y:X}',      'Vx -= Vy, VF = Vx > Vy'),
    _S('shr',     'SHR',  0xF00F, 0x8006, 'V{x:X}',              'Vx >>= 1, VF = bit 0'),
    _S('subn',    'SUBN', 0xF00F, 0x8007, 'V{x:X}, V{y:X}',      'Vx = Vy - Vx, VF = Vy > Vx'),
    _S('shl',     'SHL',  0xF00F, 0x800E, 'V{x:X}',              'Vx <<= 1, VF = bit 7'),

    _S('sne_vy',  'SNE',  0xF00F, 0x9000, 'V{x:X}, V{y:X}',      'Skip if Vx != Vy'),

    # ── Index / jump / random / draw ──
    _S('ld_i',    'LD',   0xF000, 0xA000, 'I, ${nnn:03X}',       'I = nnn'),
    _S('jp_v0',   'JP',   0xF000, 0xB000, 'V0, ${nnn:03X}',      'Jump to nnn + V0'),
    _S('rnd',     'RND',  0xF000, 0xC000, 'V{x:X}, #${nn:02X}',  'Vx = random & nn'),
    _S('drw',     'DRW',  0xF000, 0xD000, 'V{x:X}, V{y:X}, {n}', 'Draw n-row sprite at (Vx, Vy), VF = collision'),

    # ── E family: keypad ──
    _S('skp',     'SKP',  0xF0FF, 0xE09E, 'V{x:X}',              'Skip if key Vx down'),
    _S('sknp',    'SKNP', 0xF0FF, 0xE0A1, 'V{x:X}',              'Skip if key Vx up'),

    # ── F family: timers, index, memory ──
    _S('ld_vx_dt', 'LD',  0xF0FF, 0xF007, 'V{x:X}, DT',          'Vx = delay timer'),
    _S('ld_vx_k',  'LD',  0xF0FF, 0xF00A, 'V{x:X}, K',           'Wait for key, Vx = key'),
    _S('ld_dt',    'LD',  0xF0FF, 0xF015, 'DT, V{x:X}',          'Delay timer = Vx'),
    _S('ld_st',    'LD',  0xF0FF, 0xF018, 'ST, V{x:X}',          'Sound timer = Vx'),
    _S('add_i',    'ADD', 0xF0FF, 0xF01E, 'I, V{x:X}',           'I += Vx'),
    _S('ld_f',     'LD',  0xF0FF, 0xF029, 'F, V{x:X}',           'I = glyph address for digit Vx'),
    _S('ld_b',     'LD',  0xF0FF, 0xF033, 'B, V{x:X}',           'Store BCD of Vx at I..I+2'),
    _S('ld_mem_v', 'LD',  0xF0FF, 0xF055, '[I], V{x:X}',         'Store V0..Vx at I'),
    _S('ld_v_mem', 'LD',  0xF0FF, 0xF065, 'V{x:X}, [I]',         'Load V0..Vx from I'),
]

del _S

# Stable order: most specific masks first within each family
OPCODES.sort(key=lambda s: (s.match & 0xF000, -bin(s.mask).count('1')))

OPCODES_BY_NAME = {spec.name: spec for spec in OPCODES}


def decode_opcode(word: int, address: int = None) -> Instruction:
    """Decode a 16-bit word. Raises UnimplementedOpcode if no entry matches."""
    word &= 0xFFFF
    for spec in OPCODES:
        if spec.matches(word):
            return Instruction(word, spec)
    raise UnimplementedOpcode(word, address)


def fetch_and_decode(memory, pc: int) -> Instruction:
    """Fetch the big-endian word at PC and decode it."""
    return decode_opcode(memory.read16(pc), pc)
