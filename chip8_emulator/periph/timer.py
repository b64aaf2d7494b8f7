"""
CHIP-8 Emulator — Delay + Sound Timers

Two 8-bit down-counters ticked by the host at 60 Hz, independent of the
instruction clock.

  DT (delay)  — readable by FX07, writable by FX15
  ST (sound)  — writable by FX18; the buzzer sounds while ST > 0

tick() reports a tone on exactly one tick: the one that takes ST from
1 to 0. Hosts use that edge to fire a short beep.
"""

import logging

log = logging.getLogger(__name__)


class TimerPeripheral:
    """Delay and sound countdown timers."""

    __slots__ = ('delay', 'sound', 'tones')

    def __init__(self):
        self.delay = 0
        self.sound = 0
        self.tones = 0      # tone edges emitted since reset

    def set_delay(self, value: int):
        self.delay = value & 0xFF

    def set_sound(self, value: int):
        self.sound = value & 0xFF

    def tick(self) -> bool:
        """Decrement both timers toward zero. Returns True on the tone edge."""
        if self.delay > 0:
            self.delay -= 1

        tone = False
        if self.sound > 0:
            tone = self.sound == 1
            self.sound -= 1
            if tone:
                self.tones += 1
                log.debug("sound timer expired -> tone")

        return tone

    def reset(self):
        self.delay = 0
        self.sound = 0
        self.tones = 0
