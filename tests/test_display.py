"""
CHIP-8 Emulator — Framebuffer Tests

XOR draw, wraparound on both axes, collision flag, clear, and the
read-only views hosts use for presentation.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chip8_emulator.periph.display import Display


def _lit(display: Display) -> set:
    """Set of (x, y) pixels that are on."""
    return {
        (x, y)
        for y, row in enumerate(display.rows)
        for x, on in enumerate(row)
        if on
    }


class TestDraw:
    def test_single_row_msb_is_leftmost(self):
        d = Display()
        assert d.draw(10, 5, [0b10000001]) is False
        assert _lit(d) == {(10, 5), (17, 5)}

    def test_zero_bits_leave_pixels_alone(self):
        d = Display()
        d.draw(0, 0, [0xFF])
        # Sprite with only bit 7 set touches column 0 only
        collided = d.draw(0, 0, [0x80])
        assert collided is True
        assert _lit(d) == {(x, 0) for x in range(1, 8)}

    def test_xor_involution(self):
        """Drawing the same sprite twice restores the original grid."""
        d = Display()
        d.draw(3, 3, [0x3C])            # unrelated background
        before = d.rows
        sprite = [0xF0, 0x90, 0x90, 0x90, 0xF0]
        d.draw(20, 10, sprite)
        d.draw(20, 10, sprite)
        assert d.rows == before

    def test_four_draws_is_identity(self):
        d = Display()
        sprite = [0xAA, 0x55]
        for _ in range(4):
            d.draw(62, 31, sprite)
        assert d.lit_count() == 0

    def test_no_collision_on_empty_grid(self):
        d = Display()
        assert d.draw(0, 0, [0xFF] * 15) is False

    def test_collision_only_when_pixel_turns_off(self):
        d = Display()
        d.draw(0, 0, [0x80])                 # (0,0) on
        assert d.draw(1, 0, [0x80]) is False  # (1,0) off->on, no erase
        assert d.draw(0, 0, [0x40]) is True   # (1,0) on->off
        assert _lit(d) == {(0, 0)}

    def test_collision_with_mixed_bits(self):
        d = Display()
        d.draw(0, 0, [0x80])
        assert d.draw(0, 0, [0xC0]) is True
        assert _lit(d) == {(1, 0)}

    def test_empty_sprite(self):
        d = Display()
        assert d.draw(5, 5, []) is False
        assert d.lit_count() == 0


class TestWraparound:
    def test_wrap_both_axes(self):
        """8x2 sprite at (60, 30) wraps columns 60-63 -> 0-3, rows 30-31 stay."""
        d = Display()
        d.draw(60, 30, [0xFF, 0xFF])
        expected = {
            (x, y)
            for y in (30, 31)
            for x in (60, 61, 62, 63, 0, 1, 2, 3)
        }
        assert _lit(d) == expected

    def test_rows_wrap_to_top(self):
        d = Display()
        d.draw(0, 31, [0x80, 0x80, 0x80])
        assert _lit(d) == {(0, 31), (0, 0), (0, 1)}

    def test_origin_taken_modulo(self):
        a = Display()
        b = Display()
        a.draw(60, 30, [0xFF, 0x81])
        b.draw(60 + 64, 30 + 32, [0xFF, 0x81])
        assert a.rows == b.rows

    def test_register_range_origin(self):
        """Coordinates straight from an 8-bit register never index out of range."""
        d = Display()
        d.draw(0xFF, 0xFF, [0xFF])
        # 255 % 64 = 63, 255 % 32 = 31
        assert _lit(d) == {(63, 31)} | {(x, 31) for x in range(7)}


class TestClearAndViews:
    def test_clear_resets_all_pixels(self):
        d = Display()
        for y in range(0, 32, 2):
            for x in range(0, 64, 8):
                d.draw(x, y, [0xFF, 0xFF])
        assert d.lit_count() == 2048
        d.clear()
        assert d.lit_count() == 0
        assert all(not p for row in d.rows for p in row)

    def test_dimensions(self):
        d = Display()
        assert len(d.rows) == 32
        assert all(len(row) == 64 for row in d.rows)

    def test_rows_is_a_snapshot(self):
        d = Display()
        snap = d.rows
        d.draw(0, 0, [0x80])
        assert snap[0][0] is False
        assert d.pixel(0, 0) is True

    def test_bitrows_packs_column_zero_in_msb(self):
        d = Display()
        d.draw(0, 0, [0x80])
        d.draw(56, 1, [0x01])
        packed = d.bitrows()
        assert len(packed) == 32
        assert packed[0] == 1 << 63
        assert packed[1] == 1
        assert all(word == 0 for word in packed[2:])

    def test_render(self):
        d = Display()
        d.draw(0, 0, [0xC0])
        lines = d.render().split('\n')
        assert len(lines) == 32
        assert lines[0] == '##' + '.' * 62
        assert d.render(on='X', off=' ').split('\n')[0].rstrip() == 'XX'
