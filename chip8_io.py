"""
Capability ports the interpreter calls out to.

The host application owns the keyboard and the speaker; the CPU only
asks whether a key is down and requests a beep.
"""

from typing import Protocol


class Chip8IO(Protocol):
    """Key test and beep hooks supplied by the host"""

    def test_key(self, key: int) -> bool:
        """Return True while hex key 0x0-0xF is held down"""
        ...

    def play_beep(self) -> None:
        """Sound a single beep"""
        ...
