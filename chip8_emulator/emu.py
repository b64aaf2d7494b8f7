"""
CHIP-8 Emulator — Main Emulator Class

Integrates:
  - CPU registers + call stack (cpu/regs.py)
  - 4K memory map with font (mem/memory.py)
  - Opcode decoder (cpu/decoder.py)
  - ALU helpers (cpu/alu.py)
  - Peripherals: display, keypad, delay/sound timers

Execution model (one step() = one instruction):
  1. If AWAITING_KEY, do nothing
  2. Fetch the big-endian word at PC, decode via the pattern table
  3. Run the handler; it reports how PC moves:
       NEXT    PC += 2
       SKIP    PC += 4
       JUMP    handler already set PC
       SUSPEND PC unchanged, machine enters AWAITING_KEY
  4. Bump the instruction counter

Timers are NOT ticked by step(). The host calls tick_timers() at 60 Hz
and step() at its own instruction rate; the two are composed
sequentially on one thread (see host.HeadlessHost).

Termination reasons (run()):
  - TIMEOUT:   max_cycles instructions executed
  - BREAK:     breakpoint address hit
  - WAIT_KEY:  FX0A is waiting for a key press
  - ILLEGAL:   undefined opcode
  - ERROR:     call stack overflow / underflow
"""

import logging
import random
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from .config import ADDRESS_MASK, FONT_GLYPH_BYTES, FONT_START
from .cpu import alu
from .cpu.decoder import Instruction, fetch_and_decode
from .cpu.regs import Registers
from .errors import Chip8Error, UnimplementedOpcode
from .mem.memory import Memory
from .periph.display import Display
from .periph.keypad import Keypad
from .periph.timer import TimerPeripheral

log = logging.getLogger(__name__)


class StopReason(Enum):
    TIMEOUT = 'TIMEOUT'
    BREAK = 'BREAK'
    WAIT_KEY = 'WAIT_KEY'
    ILLEGAL = 'ILLEGAL'
    ERROR = 'ERROR'


class MachineState(Enum):
    RUNNING = 'RUNNING'
    AWAITING_KEY = 'AWAITING_KEY'


class Flow(Enum):
    """How an instruction moves the program counter."""
    NEXT = 'NEXT'
    SKIP = 'SKIP'
    JUMP = 'JUMP'
    SUSPEND = 'SUSPEND'


class Chip8Emulator:
    """CHIP-8 virtual machine.

    Usage:
        emu = Chip8Emulator()
        emu.load_program(Path('pong.ch8').read_bytes())
        while True:
            for _ in range(8):
                emu.step()
            if emu.tick_timers():
                beep()
            present(emu.display.rows)
    """

    DEFAULT_MAX_CYCLES = 10_000_000

    def __init__(self, rng: Optional[random.Random] = None):
        # Core components
        self.regs = Registers()
        self.mem = Memory()

        # Peripherals
        self.display = Display()
        self.keypad = Keypad()
        self.timers = TimerPeripheral()

        self.state = MachineState.RUNNING
        self.rng = rng if rng is not None else random.Random()

        # Last fault caught by run(); step() raises instead of storing
        self.fault: Optional[Chip8Error] = None

        self._breakpoints: Set[int] = set()

        self._trace = False
        self._trace_output: List[str] = []

        # Instruction dispatch table: spec name -> handler
        self._dispatch: Dict[str, Callable[[Instruction], Flow]] = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Host API
    # ══════════════════════════════════════════════

    def load_program(self, data: bytes):
        """Copy a ROM image to $200. Raises ProgramLoadError if it won't fit."""
        self.mem.load_program(data)

    @property
    def waiting_for_key(self) -> bool:
        return self.state is MachineState.AWAITING_KEY

    def step(self) -> Optional[StopReason]:
        """Execute one instruction.

        Returns None after a normal instruction, StopReason.WAIT_KEY while
        suspended on FX0A, StopReason.BREAK when PC sits on a breakpoint.
        Raises UnimplementedOpcode / StackOverflowError / StackUnderflowError.
        """
        if self.state is MachineState.AWAITING_KEY:
            return StopReason.WAIT_KEY

        pc = self.regs.PC
        if pc in self._breakpoints:
            return StopReason.BREAK

        inst = fetch_and_decode(self.mem, pc)

        if self._trace:
            self._trace_output.append(
                f"${pc:03X}: {inst.opcode:04X}  {str(inst):18s} {self.regs.display()}"
            )

        flow = self._dispatch[inst.name](inst)

        if flow is Flow.NEXT:
            self.regs.PC = (pc + 2) & ADDRESS_MASK
        elif flow is Flow.SKIP:
            self.regs.PC = (pc + 4) & ADDRESS_MASK
        elif flow is Flow.SUSPEND:
            self.state = MachineState.AWAITING_KEY
            log.debug("FX0A at $%03X: waiting for key into V%X", pc, inst.x)
        # Flow.JUMP: handler already loaded PC

        self.regs.cycles += 1

        if flow is Flow.SUSPEND:
            return StopReason.WAIT_KEY
        return None

    def handle_key_event(self, key: int, pressed: bool) -> bool:
        """Record a key transition. Returns True if it resolved an FX0A wait.

        The waiting instruction is still at PC (step() never moved past
        it), so its target register is re-read from memory here.
        """
        self.keypad.set(key, pressed)

        if not (pressed and self.state is MachineState.AWAITING_KEY):
            return False

        inst = fetch_and_decode(self.mem, self.regs.PC)
        self.regs.V[inst.x] = key
        self.state = MachineState.RUNNING
        self.regs.PC = (self.regs.PC + 2) & ADDRESS_MASK
        log.debug("key %X resolved wait, V%X = %X", key, inst.x, key)
        return True

    def tick_timers(self) -> bool:
        """60 Hz tick. Returns True on the tick where the sound timer expires."""
        return self.timers.tick()

    def run(self, max_cycles: int = None) -> StopReason:
        """Run until termination condition.

        Faults are logged, kept on ``self.fault`` and reported as
        ILLEGAL (bad opcode) or ERROR (stack) rather than raised.
        """
        if max_cycles is None:
            max_cycles = self.DEFAULT_MAX_CYCLES

        executed = 0
        while executed < max_cycles:
            try:
                reason = self.step()
            except UnimplementedOpcode as e:
                self.fault = e
                log.error("%s | %s", e, self.regs.display())
                return StopReason.ILLEGAL
            except Chip8Error as e:
                self.fault = e
                log.error("%s | %s", e, self.regs.display())
                return StopReason.ERROR
            if reason is not None:
                return reason
            executed += 1

        return StopReason.TIMEOUT

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(inst) -> Flow

    def _build_dispatch(self) -> dict:
        """Build spec name → handler dispatch table."""
        return {
            # ── Display / subroutines ──
            'cls':      self._op_cls,
            'ret':      self._op_ret,
            'jp':       self._op_jp,
            'call':     self._op_call,

            # ── Conditional skips ──
            'se_nn':    self._op_se_nn,
            'sne_nn':   self._op_sne_nn,
            'se_vy':    self._op_se_vy,
            'sne_vy':   self._op_sne_vy,

            # ── Loads / immediate add ──
            'ld_nn':    self._op_ld_nn,
            'add_nn':   self._op_add_nn,

            # ── Register ALU ──
            'ld_vy':    self._op_ld_vy,
            'or':       self._op_or,
            'and':      self._op_and,
            'xor':      self._op_xor,
            'add_vy':   self._op_add_vy,
            'sub':      self._op_sub,
            'shr':      self._op_shr,
            'subn':     self._op_subn,
            'shl':      self._op_shl,

            # ── Index / jump / random / draw ──
            'ld_i':     self._op_ld_i,
            'jp_v0':    self._op_jp_v0,
            'rnd':      self._op_rnd,
            'drw':      self._op_drw,

            # ── Keypad ──
            'skp':      self._op_skp,
            'sknp':     self._op_sknp,

            # ── Timers / index / memory ──
            'ld_vx_dt': self._op_ld_vx_dt,
            'ld_vx_k':  self._op_ld_vx_k,
            'ld_dt':    self._op_ld_dt,
            'ld_st':    self._op_ld_st,
            'add_i':    self._op_add_i,
            'ld_f':     self._op_ld_f,
            'ld_b':     self._op_ld_b,
            'ld_mem_v': self._op_ld_mem_v,
            'ld_v_mem': self._op_ld_v_mem,
        }

    def _skip_if(self, cond: bool) -> Flow:
        return Flow.SKIP if cond else Flow.NEXT

    def _jump(self, addr: int) -> Flow:
        self.regs.PC = addr & ADDRESS_MASK
        return Flow.JUMP

    # ── Display / subroutines ──

    def _op_cls(self, inst):
        self.display.clear()
        return Flow.NEXT

    def _op_ret(self, inst):
        return self._jump(self.regs.pop())

    def _op_jp(self, inst):
        return self._jump(inst.nnn)

    def _op_call(self, inst):
        self.regs.push((self.regs.PC + 2) & ADDRESS_MASK)
        return self._jump(inst.nnn)

    # ── Conditional skips ──

    def _op_se_nn(self, inst):
        return self._skip_if(self.regs.V[inst.x] == inst.nn)

    def _op_sne_nn(self, inst):
        return self._skip_if(self.regs.V[inst.x] != inst.nn)

    def _op_se_vy(self, inst):
        return self._skip_if(self.regs.V[inst.x] == self.regs.V[inst.y])

    def _op_sne_vy(self, inst):
        return self._skip_if(self.regs.V[inst.x] != self.regs.V[inst.y])

    # ── Loads / immediate add ──

    def _op_ld_nn(self, inst):
        self.regs.V[inst.x] = inst.nn
        return Flow.NEXT

    def _op_add_nn(self, inst):
        # VF untouched, unlike 8XY4
        self.regs.V[inst.x] = alu.add_wrap8(self.regs.V[inst.x], inst.nn)
        return Flow.NEXT

    # ── Register ALU ──

    def _op_ld_vy(self, inst):
        self.regs.V[inst.x] = self.regs.V[inst.y]
        return Flow.NEXT

    def _op_or(self, inst):
        self.regs.V[inst.x] |= self.regs.V[inst.y]
        return Flow.NEXT

    def _op_and(self, inst):
        self.regs.V[inst.x] &= self.regs.V[inst.y]
        return Flow.NEXT

    def _op_xor(self, inst):
        self.regs.V[inst.x] ^= self.regs.V[inst.y]
        return Flow.NEXT

    def _set_with_flag(self, x: int, result: tuple) -> Flow:
        value, flag = result
        self.regs.V[x] = value
        self.regs.VF = flag     # flag written last: VF as destination keeps the flag
        return Flow.NEXT

    def _op_add_vy(self, inst):
        return self._set_with_flag(inst.x, alu.add8(self.regs.V[inst.x], self.regs.V[inst.y]))

    def _op_sub(self, inst):
        return self._set_with_flag(inst.x, alu.sub8(self.regs.V[inst.x], self.regs.V[inst.y]))

    def _op_subn(self, inst):
        return self._set_with_flag(inst.x, alu.subn8(self.regs.V[inst.x], self.regs.V[inst.y]))

    def _op_shr(self, inst):
        return self._set_with_flag(inst.x, alu.shr8(self.regs.V[inst.x]))

    def _op_shl(self, inst):
        return self._set_with_flag(inst.x, alu.shl8(self.regs.V[inst.x]))

    # ── Index / jump / random / draw ──

    def _op_ld_i(self, inst):
        self.regs.I = inst.nnn
        return Flow.NEXT

    def _op_jp_v0(self, inst):
        return self._jump(inst.nnn + self.regs.V[0])

    def _op_rnd(self, inst):
        self.regs.V[inst.x] = self.rng.randrange(256) & inst.nn
        return Flow.NEXT

    def _op_drw(self, inst):
        sprite = self.mem.read_block(self.regs.I, inst.n)
        collided = self.display.draw(self.regs.V[inst.x], self.regs.V[inst.y], sprite)
        self.regs.VF = collided
        return Flow.NEXT

    # ── Keypad ──

    def _op_skp(self, inst):
        return self._skip_if(self.keypad.is_pressed(self.regs.V[inst.x]))

    def _op_sknp(self, inst):
        return self._skip_if(not self.keypad.is_pressed(self.regs.V[inst.x]))

    # ── Timers / index / memory ──

    def _op_ld_vx_dt(self, inst):
        self.regs.V[inst.x] = self.timers.delay
        return Flow.NEXT

    def _op_ld_vx_k(self, inst):
        # Resolved by handle_key_event(), never inside step()
        return Flow.SUSPEND

    def _op_ld_dt(self, inst):
        self.timers.set_delay(self.regs.V[inst.x])
        return Flow.NEXT

    def _op_ld_st(self, inst):
        self.timers.set_sound(self.regs.V[inst.x])
        return Flow.NEXT

    def _op_add_i(self, inst):
        self.regs.I = (self.regs.I + self.regs.V[inst.x]) & 0xFFFF
        return Flow.NEXT

    def _op_ld_f(self, inst):
        self.regs.I = FONT_START + self.regs.V[inst.x] * FONT_GLYPH_BYTES
        return Flow.NEXT

    def _op_ld_b(self, inst):
        self.mem.write_block(self.regs.I, alu.bcd(self.regs.V[inst.x]))
        return Flow.NEXT

    def _op_ld_mem_v(self, inst):
        self.mem.write_block(self.regs.I, self.regs.V[:inst.x + 1])
        return Flow.NEXT

    def _op_ld_v_mem(self, inst):
        self.regs.V[:inst.x + 1] = self.mem.read_block(self.regs.I, inst.x + 1)
        return Flow.NEXT

    # ══════════════════════════════════════════════
    # Breakpoint API
    # ══════════════════════════════════════════════

    def add_breakpoint(self, addr: int):
        """Add a breakpoint at PC address. step() stops before executing it."""
        self._breakpoints.add(addr & ADDRESS_MASK)

    def remove_breakpoint(self, addr: int):
        self._breakpoints.discard(addr & ADDRESS_MASK)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace logging."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def reset(self):
        """Power-cycle the machine. The loaded program stays in memory."""
        self.regs.reset()
        self.display.clear()
        self.keypad.reset()
        self.timers.reset()
        self.state = MachineState.RUNNING
        self.fault = None
        self._breakpoints.clear()
        self._trace_output.clear()
