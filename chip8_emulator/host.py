"""
CHIP-8 Emulator — Headless Host Driver

A deterministic stand-in for a windowed front end. Real hosts run
step() at ~500 Hz and tick_timers() at 60 Hz off the wall clock; this
driver keeps the same ratio but counts instructions instead of time,
so a run is reproducible and finishes as fast as the CPU allows.

Keyboard input comes from a scripted queue. When the ROM blocks on
FX0A the next queued key is pressed and released; with the queue empty
the run stops with WAIT_KEY.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

from .config import RunConfig
from .emu import Chip8Emulator, StopReason

log = logging.getLogger(__name__)


@dataclass
class RunResult:
    reason: StopReason
    cycles: int
    ticks: int
    tones: int
    keys_used: int

    def summary(self) -> str:
        return (f"{self.reason.value}: {self.cycles} instructions, "
                f"{self.ticks} timer ticks, {self.tones} tones, "
                f"{self.keys_used} scripted keys")


class HeadlessHost:
    """Drives a Chip8Emulator without a window."""

    def __init__(self, emu: Chip8Emulator, config: Optional[RunConfig] = None):
        self.emu = emu
        self.config = config or RunConfig()
        self._keys = deque(self.config.key_presses)
        self.ticks = 0
        self.tones = 0
        self.keys_used = 0

        for addr in self.config.breakpoints:
            emu.add_breakpoint(addr)
        emu.enable_trace(self.config.trace)

    def _feed_key(self) -> bool:
        """Press + release the next scripted key. False if none left."""
        if not self._keys:
            return False
        key = self._keys.popleft()
        self.emu.handle_key_event(key, True)
        self.emu.handle_key_event(key, False)
        self.keys_used += 1
        log.debug("scripted key %X", key)
        return True

    def _tick(self):
        self.ticks += 1
        if self.emu.tick_timers():
            self.tones += 1
            log.info("BEEP (tick %d)", self.ticks)

    def run(self) -> RunResult:
        """Run until max_cycles, a fault, a breakpoint or an unanswered key wait."""
        emu = self.emu
        per_tick = self.config.steps_per_tick
        start = emu.regs.cycles
        since_tick = 0
        reason = StopReason.TIMEOUT

        while emu.regs.cycles - start < self.config.max_cycles:
            if emu.waiting_for_key and not self._feed_key():
                reason = StopReason.WAIT_KEY
                break

            remaining = self.config.max_cycles - (emu.regs.cycles - start)
            before = emu.regs.cycles
            reason = emu.run(max_cycles=min(per_tick - since_tick, remaining))

            # Batches cut short by FX0A still count toward the next tick
            since_tick += emu.regs.cycles - before
            if since_tick >= per_tick:
                self._tick()
                since_tick = 0

            if reason in (StopReason.ILLEGAL, StopReason.ERROR, StopReason.BREAK):
                break
            reason = StopReason.TIMEOUT

        return RunResult(
            reason=reason,
            cycles=emu.regs.cycles - start,
            ticks=self.ticks,
            tones=self.tones,
            keys_used=self.keys_used,
        )
