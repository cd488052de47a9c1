import random

import pytest

from chip8_cpu import Chip8CPU


class FakeIO:
    """Records beeps, keys are whatever the test puts in `pressed`"""

    def __init__(self):
        self.pressed = set()
        self.beeps = 0
        self.polled = []

    def test_key(self, key: int) -> bool:
        self.polled.append(key)
        return key in self.pressed

    def play_beep(self) -> None:
        self.beeps += 1


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def io():
    return FakeIO()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cpu(io, clock):
    return Chip8CPU(io, clock=clock, rng=random.Random(1234))


@pytest.fixture
def run(cpu):
    """Load a program given as hex words and execute `steps` instructions"""

    def _run(program: str, steps: int = None):
        data = bytes.fromhex(program)
        cpu.load_program(data)
        for _ in range(steps if steps is not None else len(data) // 2):
            cpu.step()
        return cpu

    return _run
