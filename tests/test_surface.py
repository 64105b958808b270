"""Tests for surfaces, text helpers, render helpers and snapshots."""

import pytest
from PIL import Image

from shelfdisplay.surface import BufferSurface, Colors, render_image, save_snapshot
from shelfdisplay.surface.colors import Color
from shelfdisplay.surface.image import CELL_HEIGHT, CELL_WIDTH
from shelfdisplay.surface.text import (
    format_duration,
    format_number,
    prettify_name,
    truncate_end,
    truncate_middle,
    write_centered,
)
from shelfdisplay.views.renderers import (
    Footer,
    Header,
    draw_bar,
    draw_timer_bar,
    render_footer,
    render_header,
    render_needs_config,
    sparkline,
)


class TestBufferSurface:
    """In-memory grid behaviour."""

    def test_write_clips_at_edges(self):
        surface = BufferSurface(5, 2)
        surface.write(3, 0, "abcdef")
        surface.write(-2, 1, "xyz")
        surface.write(0, 5, "gone")

        assert surface.line(0) == "   ab"
        assert surface.line(1) == "z    "

    def test_colors_recorded_per_cell(self):
        surface = BufferSurface(4, 1)
        surface.set_foreground(Colors.RED)
        surface.write(0, 0, "ab")
        surface.set_foreground(Colors.LIME)
        surface.write(2, 0, "c")

        assert surface.foreground_at(1, 0) == Colors.RED
        assert surface.foreground_at(2, 0) == Colors.LIME

    def test_resize_clears(self):
        surface = BufferSurface(4, 2)
        surface.write(0, 0, "test")
        surface.resize(6, 3)

        assert surface.get_size() == (6, 3)
        assert surface.text() == "\n\n"

    def test_rejects_empty_size(self):
        with pytest.raises(ValueError):
            BufferSurface(0, 3)


class TestTextHelpers:
    """Formatting for fixed-width cells."""

    def test_truncate_middle(self):
        assert truncate_middle("minecraft:iron_ingot", 11) == "mine...ngot"
        assert truncate_middle("short", 10) == "short"
        assert truncate_middle("abcdef", 2) == "ab"
        assert truncate_middle("abc", 0) == ""

    def test_truncate_end(self):
        assert truncate_end("Cobblestone", 8) == "Cobbl..."
        assert truncate_end("Cobblestone", 20) == "Cobblestone"

    def test_format_number(self):
        assert format_number(999) == "999"
        assert format_number(1234) == "1.2K"
        assert format_number(2_500_000) == "2.5M"
        assert format_number(-1500) == "-1.5K"

    def test_prettify_name(self):
        assert prettify_name("minecraft:iron_ingot") == "Iron Ingot"
        assert prettify_name("plain-name") == "Plain Name"

    def test_format_duration(self):
        assert format_duration(45) == "45s"
        assert format_duration(185) == "3m5s"
        assert format_duration(7800) == "2h10m"
        assert format_duration(-3) == "0s"

    def test_write_centered(self):
        surface = BufferSurface(10, 1)
        write_centered(surface, 0, "abcd", Colors.WHITE)
        assert surface.find("abcd") == (3, 0)


class TestRenderHelpers:
    """Header, footer, bars and sparklines."""

    def test_header_with_indicator(self):
        surface = BufferSurface(20, 3)
        start = render_header(surface, Header("Items", secondary=" (3)"))

        assert start == 1
        assert surface.line(0).startswith("Items (3)")
        assert surface.line(0).endswith("[*]")
        assert surface.foreground_at(5, 0) == Colors.GRAY

    def test_no_header(self):
        assert render_header(BufferSurface(10, 2), None) == 0

    def test_footer_on_last_row(self):
        surface = BufferSurface(10, 4)
        render_footer(surface, Footer("done", Colors.CYAN))

        assert surface.line(3).startswith("done")
        assert surface.foreground_at(0, 3) == Colors.CYAN

    def test_needs_config(self):
        surface = BufferSurface(30, 9)
        render_needs_config(surface, ["resource_id"])

        assert "Needs configuration" in surface.line(3)
        assert "Set: resource_id" in surface.line(5)

    def test_bar_fill(self):
        surface = BufferSurface(10, 1)
        draw_bar(surface, 0, 0, 10, 0.3, Colors.GREEN)

        assert surface.cell(2, 0).bg == Colors.GREEN
        assert surface.cell(3, 0).bg == Colors.GRAY

    def test_timer_bar_label(self):
        surface = BufferSurface(20, 1)
        draw_timer_bar(surface, 0, 15, 60)
        assert surface.line(0).rstrip().endswith("45s")

    def test_sparkline(self):
        assert sparkline([0, 7], 10) == " #"
        assert sparkline([5, 5, 5], 10) == "---"
        assert len(sparkline(list(range(100)), 8)) == 8
        assert sparkline([], 5) == ""


class TestSnapshots:
    """PIL rasterization."""

    def test_render_image_size_and_colors(self):
        surface = BufferSurface(4, 2)
        surface.set_background(Colors.RED)
        surface.write(1, 1, " ")
        image = render_image(surface)

        assert image.size == (4 * CELL_WIDTH, 2 * CELL_HEIGHT)
        assert image.getpixel((1 * CELL_WIDTH + 1, 1 * CELL_HEIGHT + 1)) == Colors.RED.to_tuple()
        assert image.getpixel((1, 1)) == Colors.BLACK.to_tuple()

    def test_save_snapshot_creates_parents(self, tmp_path):
        surface = BufferSurface(6, 2)
        surface.write(0, 0, "hi")
        path = save_snapshot(surface, tmp_path / "nested" / "shot.png")

        assert path.exists()
        with Image.open(path) as image:
            assert image.size == (6 * CELL_WIDTH, 2 * CELL_HEIGHT)


class TestColor:
    """Palette color helpers."""

    def test_hex_round_trip(self):
        color = Color.from_hex("test", "#1a2")
        assert color.to_tuple() == (0x11, 0xAA, 0x22)
        assert color.to_hex() == "#11aa22"

    def test_rejects_out_of_range_channel(self):
        with pytest.raises(ValueError):
            Color("bad", 0, 256, 0)
