"""Register file, ALU helpers and the opcode decoder."""

from .regs import Registers
from .decoder import OPCODES, OPCODES_BY_NAME, OpcodeSpec, Instruction, decode_opcode
from . import alu
