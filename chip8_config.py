"""
Chip-8 interpreter configuration and constants.

Memory layout, display geometry, colors and the built-in hex font.
"""

from dataclasses import dataclass

# ============================================================================
# CONFIGURATION & CONSTANTS
# ============================================================================

ADDRESS_MASK = 0x0FFF
BYTE_MASK = 0xFF
FLAG_REGISTER = 0xF

# ARGB colors
FOREGROUND = 0xFFFFFFFF
BACKGROUND = 0xFF000000


@dataclass
class EmulatorConfig:
    """Emulator configuration settings"""
    # Memory
    memory_size: int = 4096
    program_start: int = 0x200
    font_start: int = 0x000

    # Display (backing grid is always hires-sized)
    lores_width: int = 64
    lores_height: int = 32
    hires_width: int = 128
    hires_height: int = 64
    foreground: int = FOREGROUND
    background: int = BACKGROUND

    # Timing
    timer_frequency: int = 60     # Delay timer ticks per second

    # Stack
    stack_size: int = 16

    # Registers
    num_registers: int = 16
    num_keys: int = 16

    # Log every executed instruction at DEBUG level
    trace: bool = False

    @property
    def lores_scale(self) -> int:
        """Backing cells per logical pixel edge in low-res mode"""
        return self.hires_width // self.lores_width


# ============================================================================
# CHIP-8 FONT
# ============================================================================

# 4x5 hex font (0-F), glyph nibble stored in the high nibble of each row
FONT_4X5 = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

FONT_GLYPH_HEIGHT = 5
