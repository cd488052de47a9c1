import pytest

from chip8_config import BACKGROUND, FOREGROUND, EmulatorConfig
from chip8_display import FrameBuffer

SQUARE = bytes([0xF0, 0x90, 0x90, 0xF0])


@pytest.fixture
def fb():
    return FrameBuffer()


def lit_cells(fb):
    return [i for i, c in enumerate(fb.pixels) if c != BACKGROUND]


def test_starts_clear_in_lores(fb):
    assert not fb.extended
    assert (fb.width, fb.height) == (64, 32)
    assert len(fb.pixels) == 128 * 64
    assert lit_cells(fb) == []


def test_lores_pixel_fills_2x2_block(fb):
    assert not fb.draw_sprite(bytes([0x80]), 0, 1, 1, 1)
    assert lit_cells(fb) == [2 * 128 + 2, 2 * 128 + 3, 3 * 128 + 2, 3 * 128 + 3]
    assert fb.pixel(1, 1)


def test_hires_pixel_is_one_cell(fb):
    fb.set_extended(True)
    fb.draw_sprite(bytes([0x80]), 0, 5, 7, 1)
    assert lit_cells(fb) == [7 * 128 + 5]


def test_cells_are_only_fore_or_background(fb):
    fb.draw_sprite(SQUARE, 0, 10, 10, 4)
    fb.draw_sprite(SQUARE, 0, 12, 11, 4)
    assert set(fb.pixels) <= {FOREGROUND, BACKGROUND}


def test_draw_twice_restores_and_collides(fb):
    fb.draw_sprite(bytes([0x3C]), 0, 0, 0, 1)
    before = list(fb.pixels)
    assert not fb.draw_sprite(SQUARE, 0, 20, 5, 4)
    assert fb.draw_sprite(SQUARE, 0, 20, 5, 4)
    assert fb.pixels == before


def test_draw_wraps_horizontally_and_vertically(fb):
    fb.draw_sprite(bytes([0xC0, 0xC0]), 0, 63, 31, 2)
    assert fb.pixel(63, 31)
    assert fb.pixel(0, 31)
    assert fb.pixel(63, 0)
    assert fb.pixel(0, 0)


def test_draw_wraps_in_hires(fb):
    fb.set_extended(True)
    fb.draw_sprite(bytes([0xC0]), 0, 127, 63, 1)
    assert fb.pixel(127, 63)
    assert fb.pixel(0, 63)


def test_coordinates_wrap_modulo_active_mode(fb):
    fb.draw_sprite(bytes([0x80]), 0, 64 + 3, 32 + 2, 1)
    assert fb.pixel(3, 2)


def test_sprite_reads_wrap_around_memory(fb):
    memory = bytearray(16)
    memory[15] = 0x80
    memory[0] = 0x80
    fb.draw_sprite(memory, 15, 0, 0, 2)
    assert fb.pixel(0, 0)
    assert fb.pixel(0, 1)


def test_mode_switch_keeps_buffer(fb):
    fb.draw_sprite(bytes([0x80]), 0, 1, 1, 1)
    fb.set_extended(True)
    assert fb.pixel(2, 2) and fb.pixel(3, 3)
    assert not fb.pixel(1, 1)


def test_clear(fb):
    fb.draw_sprite(SQUARE, 0, 0, 0, 4)
    fb.clear()
    assert lit_cells(fb) == []


def test_scroll_down_hires(fb):
    fb.set_extended(True)
    fb.draw_sprite(bytes([0x80]), 0, 0, 0, 1)
    fb.scroll_down(3)
    assert lit_cells(fb) == [3 * 128]


def test_scroll_down_lores_uses_logical_rows(fb):
    fb.draw_sprite(bytes([0x80]), 0, 0, 0, 1)
    fb.scroll_down(1)
    assert not fb.pixel(0, 0)
    assert fb.pixel(0, 1)
    assert lit_cells(fb) == [2 * 128, 2 * 128 + 1, 3 * 128, 3 * 128 + 1]


def test_scroll_discards_rows_past_bottom(fb):
    fb.draw_sprite(bytes([0x80]), 0, 0, 31, 1)
    fb.scroll_down(1)
    assert lit_cells(fb) == []


def test_scroll_zero_is_noop(fb):
    fb.draw_sprite(SQUARE, 0, 4, 4, 4)
    before = list(fb.pixels)
    fb.scroll_down(0)
    assert fb.pixels == before


def test_reset_clears_and_leaves_hires(fb):
    fb.set_extended(True)
    fb.draw_sprite(SQUARE, 0, 0, 0, 4)
    fb.reset()
    assert not fb.extended
    assert lit_cells(fb) == []


def test_custom_colors():
    config = EmulatorConfig(foreground=1, background=0)
    fb = FrameBuffer(config)
    fb.draw_sprite(bytes([0x80]), 0, 0, 0, 1)
    assert set(fb.pixels) == {0, 1}


def test_render_text(fb):
    fb.draw_sprite(bytes([0xA0]), 0, 0, 0, 1)
    lines = fb.render_text().splitlines()
    assert len(lines) == 32
    assert lines[0].startswith("#.#.")
    assert set(lines[1]) == {"."}
