"""
Chip-8 timers.

The delay timer is not decremented by a background thread. It remembers
the value and the moment it was set, and works out the remaining ticks
whenever a program reads it.
"""

import math
import time
from typing import Callable, Optional

from chip8_io import Chip8IO


class DelayTimer:
    """Delay timer computed from elapsed wall-clock time"""

    def __init__(self, frequency: int = 60, clock: Optional[Callable[[], float]] = None):
        self.frequency = frequency
        self.clock = clock or time.monotonic
        self.value = 0
        self.set_time = self.clock()

    def set(self, value: int):
        """FX15: Load the timer and restart its reference time"""
        self.value = value & 0xFF
        self.set_time = self.clock()

    def read(self) -> int:
        """FX07: Current value, never below zero"""
        elapsed = self.clock() - self.set_time
        ticks = math.floor(elapsed * self.frequency)
        return max(0, self.value - ticks)

    def reset(self):
        self.value = 0
        self.set_time = self.clock()


def trigger_sound(io: Chip8IO):
    """FX18: One-shot beep, no countdown is kept"""
    io.play_beep()
