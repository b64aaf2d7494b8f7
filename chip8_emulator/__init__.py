"""
CHIP-8 Virtual Machine Emulator
===============================
An interpreter for the CHIP-8 bytecode machine: 4 KiB of memory,
sixteen 8-bit registers, a 64x32 XOR-drawn monochrome display and a
16-key hex keypad.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌────────────────┐
    │ ROM      │───>│  Memory  │───>│ Decoder  │───>│ Chip8Emulator  │
    │ (.ch8)   │    │ ($200+)  │    │ (table)  │    │ step()/handlers│
    └──────────┘    └──────────┘    └──────────┘    └───────┬────────┘
                                                            │
                               ┌──────────┬─────────────────┼──────────┐
                               │ Display  │  Keypad         │  Timers  │
                               └──────────┴─────────────────┴──────────┘

    - mem/memory.py:     4K map, font glyphs, program loading
    - cpu/decoder.py:    (mask, match) pattern table shared with the disassembler
    - cpu/alu.py:        8-bit arithmetic returning (result, VF)
    - cpu/regs.py:       V0-VF, I, PC, 16-deep call stack
    - periph/*.py:       display buffer, keypad, delay/sound timers
    - emu.py:            fetch/decode/execute, key-wait state machine
    - host.py:           deterministic headless driver
"""

__version__ = "0.1.0"

from .errors import (
    Chip8Error, ProgramLoadError, UnimplementedOpcode,
    StackOverflowError, StackUnderflowError, KeyIndexError,
)
from .emu import Chip8Emulator, StopReason, MachineState, Flow
from .periph import Display, Keypad, TimerPeripheral
from .mem import Memory, FONTSET
from .cpu import Registers, decode_opcode, OPCODES
from .host import HeadlessHost, RunResult
from .config import RunConfig
