"""
CHIP-8 Emulator — CPU Register Set + Call Stack

Register model:
  V0–VF  — sixteen 8-bit general registers
           VF is written by ADD/SUB/SUBN/SHR/SHL/DRW as the
           carry / not-borrow / shifted-out bit / collision flag
  I      — 16-bit index register (memory pointer for DRW, FX33, FX55, FX65)
  PC     — program counter, always the address of the next 2-byte opcode
  stack  — 16 return addresses, SP = number of entries in use (0–16)

The stack never wraps: a 17th CALL or a RET on an empty stack raises,
since silently wrapping SP would send the program to a garbage address.
"""

from ..config import FLAG_REGISTER, NUM_REGISTERS, PROGRAM_START, STACK_DEPTH
from ..errors import StackOverflowError, StackUnderflowError


class Registers:
    """CHIP-8 CPU register set."""

    __slots__ = ('V', 'I', 'PC', 'stack', 'SP', 'cycles')

    def __init__(self):
        self.V = bytearray(NUM_REGISTERS)   # V0-VF (bytearray keeps every value 8-bit)
        self.I: int = 0                     # Index register (16-bit)
        self.PC: int = PROGRAM_START        # Program counter
        self.stack = [0] * STACK_DEPTH      # Return addresses
        self.SP: int = 0                    # Entries in use
        self.cycles: int = 0                # Instructions executed

    # --- Flag register ---

    @property
    def VF(self) -> int:
        return self.V[FLAG_REGISTER]

    @VF.setter
    def VF(self, value: int):
        self.V[FLAG_REGISTER] = 1 if value else 0

    # --- Stack operations ---

    def push(self, addr: int):
        """Push a return address (CALL)."""
        if self.SP >= STACK_DEPTH:
            raise StackOverflowError(
                f"call stack full ({STACK_DEPTH} entries) pushing ${addr:03X}"
            )
        self.stack[self.SP] = addr
        self.SP += 1

    def pop(self) -> int:
        """Pop a return address (RET)."""
        if self.SP == 0:
            raise StackUnderflowError("RET with empty call stack")
        self.SP -= 1
        return self.stack[self.SP]

    # --- Display ---

    def display(self) -> str:
        """One-line register dump for traces and fault reports."""
        v = ' '.join(f"{b:02X}" for b in self.V)
        return f"PC={self.PC:03X} I={self.I:04X} SP={self.SP:X} V=[{v}]"

    def reset(self):
        """Reset CPU to power-on state."""
        self.V = bytearray(NUM_REGISTERS)
        self.I = 0
        self.PC = PROGRAM_START
        self.stack = [0] * STACK_DEPTH
        self.SP = 0
        self.cycles = 0
