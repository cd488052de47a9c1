#!/usr/bin/env python3
"""
Headless Chip-8 runner.

Loads a program, runs it for a number of steps without a window and
reports the machine state. Useful for smoke testing ROMs and for
tracing what a program does.

Usage:
    python -m chip8_headless game.ch8 --steps 5000 --screen
    python -m chip8_headless game.ch8 --list
"""

import argparse
import logging
import sys
import time
from typing import Iterable, List, Optional

from chip8_config import EmulatorConfig
from chip8_cpu import Chip8CPU, IllegalInstruction
from chip8_disasm import disassemble_program

log = logging.getLogger("chip8_headless")


class HeadlessIO:
    """Chip8IO with a fixed set of held keys and a beep counter"""

    def __init__(self, pressed: Iterable[int] = ()):
        self.pressed = set(pressed)
        self.beeps = 0

    def test_key(self, key: int) -> bool:
        return key in self.pressed

    def play_beep(self) -> None:
        self.beeps += 1
        log.info("Beep")


def run(cpu: Chip8CPU, steps: int, sleep: float = 0.0) -> int:
    """
    Step the CPU up to `steps` times.
    Returns the number of steps that retired an instruction.
    Stops early if FX0A is waiting for a key that will never come.
    """
    retired = 0
    for _ in range(steps):
        if cpu.step():
            retired += 1
        elif cpu.waiting_for_key:
            log.info("Waiting for key at 0x%03x, stopping", cpu.pc)
            break
        if sleep:
            time.sleep(sleep)
    return retired


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a Chip-8 program without a display")
    parser.add_argument('program',
        help="A compiled Chip-8 program to load")
    parser.add_argument('--steps',
        help="Number of instructions to execute",
        type=int,
        default=1000)
    parser.add_argument('--press',
        help="Hex keys held down for the whole run",
        metavar="K",
        nargs="+",
        default=[],
        type=lambda k: int(k, 16) & 0x0F)
    parser.add_argument('--sleep',
        help="Seconds to sleep between instructions",
        type=float,
        default=0.0)
    parser.add_argument('--trace',
        help="Log every executed instruction",
        action="store_true")
    parser.add_argument('--list',
        help="Print a disassembly of the program and exit",
        action="store_true")
    parser.add_argument('--screen',
        help="Print the screen after the run",
        action="store_true")
    parser.add_argument('--debug',
        help="Enable verbose debug logging",
        action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug or args.trace else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    with open(args.program, 'rb') as f:
        data = f.read()

    if args.list:
        for address, word, text in disassemble_program(data):
            print(f"{address:04x}: {word:04x}  {text}")
        return 0

    config = EmulatorConfig(trace=args.trace)
    io = HeadlessIO(args.press)
    cpu = Chip8CPU(io, config)
    cpu.load_program(data)
    log.info("Loaded %s (%d bytes), running %d steps", args.program, len(data), args.steps)

    status = 0
    try:
        retired = run(cpu, args.steps, args.sleep)
        log.info("Executed %d instructions", retired)
    except IllegalInstruction as e:
        log.error("Emulation halted: %s", e)
        status = 1

    log.info("Machine state:\n%s", cpu.debug_dump())
    if args.screen:
        print(cpu.display.render_text())
    return status


if __name__ == "__main__":
    sys.exit(main())
