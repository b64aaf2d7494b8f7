"""Display, keypad and timer peripherals."""

from .display import Display
from .keypad import Keypad
from .timer import TimerPeripheral
