"""
Chip-8 CPU core.

Implements the CHIP-8 instruction set (0NNN machine calls excepted) plus
the SUPER-CHIP display opcodes (00CN scroll down, 00FE/00FF resolution
switch). The CPU owns
memory, registers, stack, delay timer and frame buffer; keys and sound
go through the Chip8IO port passed in by the host.
"""

import logging
import os
import random
from typing import Callable, List, Optional

from chip8_config import (
    ADDRESS_MASK,
    BYTE_MASK,
    FLAG_REGISTER,
    FONT_4X5,
    FONT_GLYPH_HEIGHT,
    EmulatorConfig,
)
from chip8_disasm import disassemble
from chip8_display import FrameBuffer
from chip8_io import Chip8IO
from chip8_timer import DelayTimer, trigger_sound

log = logging.getLogger(__name__)


# ============================================================================
# ERRORS
# ============================================================================

class Chip8Error(Exception):
    """Base class for interpreter errors"""


class IllegalInstruction(Chip8Error):
    """Fetched byte pair cannot be executed; the run is over"""

    reason = "Illegal opcode"

    def __init__(self, address: int, opcode: int, argument: int):
        self.address = address
        self.opcode = opcode
        self.argument = argument
        super().__init__(f"{self.reason} {opcode:02x}{argument:02x} at {address:04x}")


class StackOverflow(IllegalInstruction):
    reason = "Stack overflow on"


class StackUnderflow(IllegalInstruction):
    reason = "Stack underflow on"


# ============================================================================
# CHIP-8 CPU
# ============================================================================

class Chip8CPU:
    """
    CHIP-8 / SUPER-CHIP interpreter.

    Drive it by calling step() repeatedly; each call runs one
    fetch-decode-execute cycle. Not thread safe.
    """

    def __init__(self, io: Chip8IO, config: EmulatorConfig = None,
                 clock: Optional[Callable[[], float]] = None,
                 rng: Optional[random.Random] = None):
        self.io = io
        self.config = config or EmulatorConfig()
        self.rng = rng or random.Random()

        cfg = self.config

        # Main memory (4KB), survives reset()
        self.memory = bytearray(cfg.memory_size)

        self.display = FrameBuffer(cfg)
        self.delay_timer = DelayTimer(cfg.timer_frequency, clock)

        self.reset()

    def reset(self):
        """Reset registers, stack and display. Memory is left alone."""
        cfg = self.config

        # 16 general-purpose 8-bit registers V0-VF
        self.v: List[int] = [0] * cfg.num_registers

        # Index register (12 significant bits)
        self.i = 0

        # Program counter
        self.pc = cfg.program_start

        # Stack (16 levels of return addresses)
        self.stack: List[int] = [0] * cfg.stack_size
        self.sp = 0

        self.delay_timer.reset()
        self.display.reset()

        # CPU state flags
        self.waiting_for_key = False     # FX0A saw no key on last poll
        self.halted = False              # Fatal error, stays set until reset

        self.cycles = 0

    # ==================== PROGRAM LOADING ====================

    def load_program(self, data: bytes):
        """Write the font table and a program image into memory"""
        cfg = self.config
        max_size = cfg.memory_size - cfg.program_start
        if len(data) > max_size:
            raise ValueError(f"Program too large: {len(data)} bytes (max {max_size})")

        self.memory[cfg.font_start:cfg.font_start + len(FONT_4X5)] = FONT_4X5
        self.memory[cfg.program_start:cfg.program_start + len(data)] = data
        log.debug("Loaded %d bytes at 0x%03x", len(data), cfg.program_start)

    def load_program_file(self, path: str):
        """Read a ROM file from disk and load it"""
        with open(path, 'rb') as f:
            data = f.read()
        log.info("Loading %s (%d bytes)", os.path.basename(path), len(data))
        self.load_program(data)

    # ==================== READABLE OUTPUTS ====================

    @property
    def pixels(self) -> List[int]:
        """Backing 128x64 color grid, row-major"""
        return self.display.pixels

    @property
    def extended(self) -> bool:
        """True in 128x64 mode"""
        return self.display.extended

    # ==================== EXECUTION ====================

    def step(self) -> bool:
        """
        Execute one instruction.
        Returns True if an instruction was retired, False if halted or
        still waiting for a key on FX0A.
        """
        if self.halted:
            return False

        mem_size = self.config.memory_size
        address = self.pc
        opcode = self.memory[address % mem_size]
        argument = self.memory[(address + 1) % mem_size]
        self.pc = (address + 2) & ADDRESS_MASK

        if self.config.trace:
            log.debug("PC 0x%03x: %02x%02x  %s", address, opcode, argument,
                      disassemble(opcode, argument))

        try:
            retired = self._execute(opcode, argument)
        except IllegalInstruction as e:
            self.halted = True
            log.error("%s", e)
            raise

        if retired:
            self.cycles += 1
        return retired

    def _illegal(self, opcode: int, argument: int, error=IllegalInstruction):
        return error((self.pc - 2) & ADDRESS_MASK, opcode, argument)

    def _execute(self, opcode: int, argument: int) -> bool:
        """Decode and execute one instruction"""
        # Extract common fields
        nnn = ((opcode & 0x0F) << 8) | argument  # 12-bit address
        nn = argument                            # 8-bit constant
        n = argument & 0x0F                      # 4-bit constant
        x = opcode & 0x0F                        # Register X index
        y = argument >> 4                        # Register Y index
        v = self.v

        # First nibble determines instruction class
        op = opcode >> 4

        # ==================== 0x0___ ====================
        if op == 0x0:
            if opcode != 0x00:
                # 0NNN: SYS addr - no machine code to call into
                raise self._illegal(opcode, argument)
            if argument == 0xE0:
                # 00E0: CLS - Clear the display
                self.display.clear()
            elif argument == 0xEE:
                # 00EE: RET - Return from subroutine
                if self.sp == 0:
                    raise self._illegal(opcode, argument, StackUnderflow)
                self.sp -= 1
                self.pc = self.stack[self.sp]
            elif argument == 0xFE:
                # 00FE: LOW - Disable high-res mode (SUPER-CHIP)
                self.display.set_extended(False)
            elif argument == 0xFF:
                # 00FF: HIGH - Enable high-res mode (SUPER-CHIP)
                self.display.set_extended(True)
            elif argument & 0xF0 == 0xC0:
                # 00CN: SCD N - Scroll down N rows (SUPER-CHIP)
                self.display.scroll_down(n)
            else:
                raise self._illegal(opcode, argument)

        # ==================== 0x1___ ====================
        elif op == 0x1:
            # 1NNN: JP addr
            self.pc = nnn

        # ==================== 0x2___ ====================
        elif op == 0x2:
            # 2NNN: CALL addr
            if self.sp >= self.config.stack_size:
                raise self._illegal(opcode, argument, StackOverflow)
            self.stack[self.sp] = self.pc
            self.sp += 1
            self.pc = nnn

        # ==================== 0x3___ / 0x4___ ====================
        elif op == 0x3:
            # 3XNN: SE Vx, byte
            if v[x] == nn:
                self._skip()
        elif op == 0x4:
            # 4XNN: SNE Vx, byte
            if v[x] != nn:
                self._skip()

        # ==================== 0x5___ ====================
        elif op == 0x5:
            # 5XY0: SE Vx, Vy
            if n != 0x0:
                raise self._illegal(opcode, argument)
            if v[x] == v[y]:
                self._skip()

        # ==================== 0x6___ / 0x7___ ====================
        elif op == 0x6:
            # 6XNN: LD Vx, byte
            v[x] = nn
        elif op == 0x7:
            # 7XNN: ADD Vx, byte - no carry flag
            v[x] = (v[x] + nn) & BYTE_MASK

        # ==================== 0x8___ ====================
        elif op == 0x8:
            self._execute_8xxx(opcode, argument, x, y, n)

        # ==================== 0x9___ ====================
        elif op == 0x9:
            # 9XY0: SNE Vx, Vy
            if n != 0x0:
                raise self._illegal(opcode, argument)
            if v[x] != v[y]:
                self._skip()

        # ==================== 0xA___ / 0xB___ ====================
        elif op == 0xA:
            # ANNN: LD I, addr
            self.i = nnn & ADDRESS_MASK
        elif op == 0xB:
            # BNNN: JP V0, addr
            self.pc = (nnn + v[0]) & ADDRESS_MASK

        # ==================== 0xC___ ====================
        elif op == 0xC:
            # CXNN: RND Vx, byte
            v[x] = self.rng.randint(0, BYTE_MASK) & nn

        # ==================== 0xD___ ====================
        elif op == 0xD:
            # DXYN: DRW Vx, Vy, nibble
            collision = self.display.draw_sprite(self.memory, self.i, v[x], v[y], n)
            v[FLAG_REGISTER] = 1 if collision else 0

        # ==================== 0xE___ ====================
        elif op == 0xE:
            if nn == 0x9E:
                # EX9E: SKP Vx
                if self.io.test_key(v[x] & 0x0F):
                    self._skip()
            elif nn == 0xA1:
                # EXA1: SKNP Vx
                if not self.io.test_key(v[x] & 0x0F):
                    self._skip()
            else:
                raise self._illegal(opcode, argument)

        # ==================== 0xF___ ====================
        else:
            return self._execute_fxxx(opcode, argument, x, nn)

        return True

    def _skip(self):
        self.pc = (self.pc + 2) & ADDRESS_MASK

    def _execute_8xxx(self, opcode: int, argument: int, x: int, y: int, n: int):
        """Execute 8XYN arithmetic/logic opcodes"""
        # Flag is written before the result so that VF as Vx keeps the result
        v = self.v

        if n == 0x0:
            # 8XY0: LD Vx, Vy
            v[x] = v[y]

        elif n == 0x1:
            # 8XY1: OR Vx, Vy
            v[x] |= v[y]

        elif n == 0x2:
            # 8XY2: AND Vx, Vy
            v[x] &= v[y]

        elif n == 0x3:
            # 8XY3: XOR Vx, Vy
            v[x] ^= v[y]

        elif n == 0x4:
            # 8XY4: ADD Vx, Vy - VF = carry
            result = v[x] + v[y]
            v[FLAG_REGISTER] = 1 if result > BYTE_MASK else 0
            v[x] = result & BYTE_MASK

        elif n == 0x5:
            # 8XY5: SUB Vx, Vy - VF = 1 when it borrows
            result = v[x] - v[y]
            v[FLAG_REGISTER] = 1 if result < 0 else 0
            v[x] = result & BYTE_MASK

        elif n == 0x6:
            # 8XY6: SHR Vx - VF = LSB
            result = v[x]
            v[FLAG_REGISTER] = result & 0x01
            v[x] = result >> 1

        elif n == 0x7:
            # 8XY7: SUBN Vx, Vy - Vx = Vy - Vx, VF = 1 when it borrows
            result = v[y] - v[x]
            v[FLAG_REGISTER] = 1 if result < 0 else 0
            v[x] = result & BYTE_MASK

        elif n == 0xE:
            # 8XYE: SHL Vx - VF = MSB
            result = v[x]
            v[FLAG_REGISTER] = (result >> 7) & 0x01
            v[x] = (result << 1) & BYTE_MASK

        else:
            raise self._illegal(opcode, argument)

    def _execute_fxxx(self, opcode: int, argument: int, x: int, nn: int) -> bool:
        """Execute FXNN opcodes. Returns False while FX0A is waiting."""
        v = self.v
        mem_size = self.config.memory_size

        if nn == 0x07:
            # FX07: LD Vx, DT
            v[x] = self.delay_timer.read()

        elif nn == 0x0A:
            # FX0A: LD Vx, K - poll keys in order, retry until one is down
            for key in range(self.config.num_keys):
                if self.io.test_key(key):
                    v[x] = key
                    self.waiting_for_key = False
                    return True
            self.waiting_for_key = True
            self.pc = (self.pc - 2) & ADDRESS_MASK
            return False

        elif nn == 0x15:
            # FX15: LD DT, Vx
            self.delay_timer.set(v[x])

        elif nn == 0x18:
            # FX18: LD ST, Vx - beep once
            trigger_sound(self.io)

        elif nn == 0x1E:
            # FX1E: ADD I, Vx
            self.i = (self.i + v[x]) & ADDRESS_MASK

        elif nn == 0x29:
            # FX29: LD F, Vx - I = hex glyph for Vx
            self.i = (self.config.font_start + v[x] * FONT_GLYPH_HEIGHT) & ADDRESS_MASK

        elif nn == 0x33:
            # FX33: LD B, Vx - BCD at I, I+1, I+2
            value = v[x]
            self.memory[self.i % mem_size] = value // 100
            self.memory[(self.i + 1) % mem_size] = (value // 10) % 10
            self.memory[(self.i + 2) % mem_size] = value % 10

        elif nn == 0x55:
            # FX55: LD [I], Vx - store V0..Vx, I ends past the last byte
            for idx in range(x + 1):
                self.memory[self.i % mem_size] = v[idx]
                self.i = (self.i + 1) & ADDRESS_MASK

        elif nn == 0x65:
            # FX65: LD Vx, [I] - load V0..Vx, I ends past the last byte
            for idx in range(x + 1):
                v[idx] = self.memory[self.i % mem_size]
                self.i = (self.i + 1) & ADDRESS_MASK

        else:
            raise self._illegal(opcode, argument)

        return True

    # ==================== DEBUG ====================

    def debug_dump(self) -> str:
        """Register dump for logs"""
        lines = [
            f"PC: ${self.pc:04X}  I: ${self.i:04X}  SP: {self.sp}",
            f"DT: {self.delay_timer.read():3d}",
            "Registers:",
        ]
        for i in range(0, 16, 4):
            lines.append("  " + " ".join(f"V{j:X}=${self.v[j]:02X}" for j in range(i, i + 4)))
        lines.append(f"Hi-res: {self.extended}")
        lines.append(f"Halted: {self.halted}")
        lines.append(f"Waiting: {self.waiting_for_key}")
        return "\n".join(lines)
