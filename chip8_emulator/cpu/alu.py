"""
CHIP-8 Emulator — 8-bit ALU Operations

Pure functions for the 8XYN arithmetic group. Each returns a tuple:
(result_byte, flag) where flag is the 0/1 value destined for VF.
The caller writes the result register first and VF last, so that
``8FY4`` and friends leave the flag, not the sum, in VF.

Flag conventions:
  add8   VF = 1 on carry out of bit 7
  sub8   VF = 1 if a > b   (8XY5, Vx - Vy)
  subn8  VF = 1 if b > a   (8XY7, Vy - Vx)
  shr8   VF = bit 0 before the shift
  shl8   VF = bit 7 before the shift

Note sub8/subn8 use strict greater-than, so equal operands give
VF = 0 even though no borrow occurred. Kept as-is for ROM compatibility.
"""


def add8(a: int, b: int) -> tuple:
    """Vx + Vy. Flag = carry."""
    result = a + b
    return (result & 0xFF, 1 if result > 0xFF else 0)


def sub8(a: int, b: int) -> tuple:
    """Vx - Vy, wrapping. Flag = Vx > Vy."""
    return ((a - b) & 0xFF, 1 if a > b else 0)


def subn8(a: int, b: int) -> tuple:
    """Vy - Vx, wrapping (a = Vx, b = Vy). Flag = Vy > Vx."""
    return ((b - a) & 0xFF, 1 if b > a else 0)


def shr8(a: int) -> tuple:
    """Logical shift right. Flag = dropped low bit."""
    return (a >> 1, a & 0x01)


def shl8(a: int) -> tuple:
    """Shift left. Flag = dropped high bit."""
    return ((a << 1) & 0xFF, (a >> 7) & 0x01)


def add_wrap8(a: int, b: int) -> int:
    """7XNN add. Wraps, no flag."""
    return (a + b) & 0xFF


def bcd(value: int) -> tuple:
    """Split a byte into (hundreds, tens, units) for FX33."""
    return (value // 100, (value // 10) % 10, value % 10)
