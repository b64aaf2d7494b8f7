"""
CHIP-8 Emulator — Exception Hierarchy

Every fault the core can raise derives from Chip8Error so a host can
catch one type. The interpreter raises; Chip8Emulator.run() converts
faults to a StopReason and keeps the exception on ``emu.fault``.
"""


class Chip8Error(Exception):
    """Base class for all emulator faults."""


class ProgramLoadError(Chip8Error):
    """Program does not fit between $200 and the end of memory."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"program is {size} bytes, only {capacity} bytes available at $200"
        )


class UnimplementedOpcode(Chip8Error):
    """Fetched word matches no instruction pattern."""

    def __init__(self, opcode: int, address: int = None):
        self.opcode = opcode
        self.address = address
        where = f" at ${address:03X}" if address is not None else ""
        super().__init__(f"unimplemented opcode {opcode:04X}{where}")


class StackOverflowError(Chip8Error):
    """CALL with all 16 stack slots in use."""


class StackUnderflowError(Chip8Error):
    """RET with an empty call stack."""


class KeyIndexError(Chip8Error, ValueError):
    """Key index outside the hex keypad range 0x0-0xF."""
