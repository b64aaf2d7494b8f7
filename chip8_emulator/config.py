"""
CHIP-8 Emulator — Machine Constants + Run Configuration
=======================================================

Fixed machine layout (these are the CHIP-8 conventions every ROM
assumes) and the knobs the headless driver exposes on the command line.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


# =============================================================================
#  MEMORY MAP
# =============================================================================
MEMORY_SIZE = 4096        # 4 KiB flat address space
ADDRESS_MASK = 0x0FFF     # every memory/PC address wraps at 4096
FONT_START = 0x000        # built-in hex glyphs live at the bottom of RAM
FONT_GLYPH_BYTES = 5      # each glyph is 8x5 pixels
PROGRAM_START = 0x200     # conventional entry point, ROMs load here
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START   # 3584 bytes


# =============================================================================
#  CPU
# =============================================================================
NUM_REGISTERS = 16        # V0-VF, VF doubles as carry/borrow/collision
FLAG_REGISTER = 0xF
STACK_DEPTH = 16


# =============================================================================
#  DISPLAY / INPUT
# =============================================================================
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
NUM_KEYS = 16


# =============================================================================
#  TIMING
# =============================================================================
CLOCK_HZ = 500            # instructions per second
TIMER_HZ = 60             # delay/sound decrement rate


# =============================================================================
#  HOST KEYBOARD LAYOUT
#  Left-hand block of a QWERTY keyboard mapped onto the 4x4 hex keypad:
#      1 2 3 C        1 2 3 4
#      4 5 6 D   <=   Q W E R
#      7 8 9 E        A S D F
#      A 0 B F        Z X C V
# =============================================================================
KEYBOARD_LAYOUT = {
    '1': 0x1, '2': 0x2, '3': 0x3, '4': 0xC,
    'q': 0x4, 'w': 0x5, 'e': 0x6, 'r': 0xD,
    'a': 0x7, 's': 0x8, 'd': 0x9, 'f': 0xE,
    'z': 0xA, 'x': 0x0, 'c': 0xB, 'v': 0xF,
}


@dataclass
class RunConfig:
    """Settings for one headless run (built by chip8run from argv)."""
    ips: int = CLOCK_HZ
    timer_hz: int = TIMER_HZ
    max_cycles: int = 10_000
    seed: int = None
    trace: bool = False
    breakpoints: List[int] = field(default_factory=list)
    key_presses: List[int] = field(default_factory=list)

    @property
    def steps_per_tick(self) -> int:
        """Instructions executed between two timer ticks (at least 1)."""
        return max(1, self.ips // self.timer_hz)


def resolve_key(token: str) -> int:
    """Map a CLI key token to a keypad index.

    Accepts a keyboard character from KEYBOARD_LAYOUT ('q', 'V') or a
    hex keypad digit prefixed with 0x or $ ('0xA', '$f').
    """
    t = token.strip()
    low = t.lower()
    if low in KEYBOARD_LAYOUT:
        return KEYBOARD_LAYOUT[low]
    if low.startswith('0x'):
        value = int(low[2:], 16)
    elif low.startswith('$'):
        value = int(low[1:], 16)
    else:
        raise ValueError(f"unknown key {token!r}")
    if not 0 <= value < NUM_KEYS:
        raise ValueError(f"key {token!r} out of range 0x0-0xF")
    return value


def layout_rows() -> List[Tuple[str, ...]]:
    """Keyboard characters arranged in keypad order, for help text."""
    inverse = {v: k for k, v in KEYBOARD_LAYOUT.items()}
    rows = []
    for row in ((0x1, 0x2, 0x3, 0xC), (0x4, 0x5, 0x6, 0xD),
                (0x7, 0x8, 0x9, 0xE), (0xA, 0x0, 0xB, 0xF)):
        rows.append(tuple(inverse[k].upper() for k in row))
    return rows
