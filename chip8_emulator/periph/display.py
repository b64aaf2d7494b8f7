"""
CHIP-8 Emulator — 64x32 Monochrome Framebuffer

Pixels are booleans stored row-major as ``_grid[y][x]``. The only
writers are draw() and clear(); hosts read through pixel(), rows,
bitrows() or render().

Sprite draw semantics (DXYN):
  - origin wraps first: x mod 64, y mod 32
  - sprite row i, bit j (MSB = leftmost) lands on
    ((y + i) mod 32, (x + j) mod 64), so sprites wrap around both edges
  - a set bit XORs its pixel; a clear bit leaves the pixel alone
  - collision = at least one pixel went from on to off
"""

from typing import Iterable, List, Tuple

from ..config import DISPLAY_WIDTH, DISPLAY_HEIGHT


class Display:
    """Monochrome pixel grid with XOR sprite drawing."""

    WIDTH = DISPLAY_WIDTH
    HEIGHT = DISPLAY_HEIGHT

    def __init__(self):
        self._grid: List[List[bool]] = [
            [False] * self.WIDTH for _ in range(self.HEIGHT)
        ]

    # --- Mutation ---

    def draw(self, x: int, y: int, sprite: Iterable[int]) -> bool:
        """XOR a sprite onto the grid. Returns True if any pixel was erased."""
        x %= self.WIDTH
        y %= self.HEIGHT
        erased = False

        for i, row_bits in enumerate(sprite):
            row = self._grid[(y + i) % self.HEIGHT]
            for j in range(8):
                if not (row_bits >> (7 - j)) & 1:
                    continue
                col = (x + j) % self.WIDTH
                if row[col]:
                    erased = True
                row[col] = not row[col]

        return erased

    def clear(self):
        """Turn every pixel off."""
        for row in self._grid:
            for col in range(self.WIDTH):
                row[col] = False

    # --- Read-only access for hosts ---

    def pixel(self, x: int, y: int) -> bool:
        return self._grid[y % self.HEIGHT][x % self.WIDTH]

    @property
    def rows(self) -> Tuple[Tuple[bool, ...], ...]:
        """Immutable snapshot of the grid, rows top to bottom."""
        return tuple(tuple(row) for row in self._grid)

    def bitrows(self) -> List[int]:
        """Pack each row into a 64-bit int, column 0 in the MSB.

        This is the layout a GPU storage buffer or a bit-blitter wants:
        32 words, one per scanline.
        """
        packed = []
        for row in self._grid:
            word = 0
            for on in row:
                word = (word << 1) | (1 if on else 0)
            packed.append(word)
        return packed

    def lit_count(self) -> int:
        return sum(sum(row) for row in self._grid)

    def render(self, on: str = '#', off: str = '.') -> str:
        """Text rendering, one line per row (used by --dump)."""
        return '\n'.join(
            ''.join(on if p else off for p in row) for row in self._grid
        )
