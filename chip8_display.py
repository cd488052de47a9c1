"""
Chip-8 frame buffer.

The backing store is always the SUPER-CHIP 128x64 grid, one color per cell.
In low-res mode (64x32) every logical pixel covers a 2x2 block of cells so a
picture keeps its size when a program flips between modes.
"""

from typing import List, Sequence

from chip8_config import EmulatorConfig


class FrameBuffer:
    """Monochrome pixel grid with XOR sprite drawing"""

    def __init__(self, config: EmulatorConfig = None):
        self.config = config or EmulatorConfig()
        cfg = self.config
        self.stride = cfg.hires_width
        self.rows = cfg.hires_height
        self.pixels: List[int] = [cfg.background] * (self.stride * self.rows)
        self.extended = False

    def reset(self):
        """Clear the screen and drop back to low-res mode"""
        self.extended = False
        self.clear()

    # ==================== GEOMETRY ====================

    @property
    def width(self) -> int:
        return self.config.hires_width if self.extended else self.config.lores_width

    @property
    def height(self) -> int:
        return self.config.hires_height if self.extended else self.config.lores_height

    @property
    def scale(self) -> int:
        """Backing cells per logical pixel edge in the active mode"""
        return 1 if self.extended else self.config.lores_scale

    def set_extended(self, enabled: bool):
        """00FE/00FF: Switch mode, the buffer is left as is"""
        self.extended = enabled

    def pixel(self, x: int, y: int) -> bool:
        """True if logical pixel (x, y) of the active mode is lit"""
        s = self.scale
        return self.pixels[y * s * self.stride + x * s] != self.config.background

    # ==================== DRAWING ====================

    def clear(self):
        """00E0: Fill with background"""
        background = self.config.background
        for i in range(len(self.pixels)):
            self.pixels[i] = background

    def draw_sprite(self, memory: Sequence[int], index: int, x: int, y: int, height: int) -> bool:
        """
        DXYN: XOR an 8-pixel wide sprite of `height` rows onto the screen.

        Sprite rows are read from memory at `index`, most significant bit
        leftmost. Coordinates wrap around the active mode's edges.
        Returns True if any lit pixel was turned off.
        """
        fore = self.config.foreground
        back = self.config.background
        pixels = self.pixels
        stride = self.stride
        s = self.scale
        width = self.width
        rows = self.height
        mem_size = len(memory)
        collision = False

        for row in range(height):
            sprite_byte = memory[(index + row) % mem_size]
            base = ((y + row) % rows) * s * stride
            for col in range(8):
                if not sprite_byte & (0x80 >> col):
                    continue
                t = base + ((x + col) % width) * s
                if pixels[t] != back:
                    color = back
                    collision = True
                else:
                    color = fore
                for dy in range(s):
                    for dx in range(s):
                        pixels[t + dy * stride + dx] = color

        return collision

    def scroll_down(self, n: int):
        """00CN: Scroll down N rows of the active mode"""
        shift = min(n * self.scale, self.rows) * self.stride
        if shift == 0:
            return
        total = len(self.pixels)
        self.pixels[shift:] = self.pixels[:total - shift]
        self.pixels[:shift] = [self.config.background] * shift

    # ==================== DEBUG OUTPUT ====================

    def render_text(self, on: str = "#", off: str = ".") -> str:
        """Active-mode screen as lines of text"""
        lines = []
        for y in range(self.height):
            lines.append("".join(on if self.pixel(x, y) else off for x in range(self.width)))
        return "\n".join(lines)
