"""
CHIP-8 Emulator — 16-Key Hex Keypad

Holds the up/down state of keys 0x0-0xF. Mapping physical keyboard keys
onto these indices is the host's job (see config.KEYBOARD_LAYOUT).
"""

from ..config import NUM_KEYS
from ..errors import KeyIndexError


class Keypad:
    """Key state matrix."""

    def __init__(self):
        self._down = [False] * NUM_KEYS

    @staticmethod
    def _check(key: int) -> int:
        if not 0 <= key < NUM_KEYS:
            raise KeyIndexError(f"key index {key} outside 0x0-0xF")
        return key

    def set(self, key: int, pressed: bool):
        self._down[self._check(key)] = bool(pressed)

    def press(self, key: int):
        self.set(key, True)

    def release(self, key: int):
        self.set(key, False)

    def is_pressed(self, key: int) -> bool:
        """State of a key as named by a register value (EX9E / EXA1).

        Register values above 0xF select key ``value & 0xF``; the keypad
        only decodes the low nibble.
        """
        return self._down[key & 0xF]

    def reset(self):
        self._down = [False] * NUM_KEYS
