"""Tests for the grid, list and paginated layout strategies."""

import pytest

from shelfdisplay.layout import (
    COMPACT_LIST_THRESHOLD,
    CompactListLayout,
    GridLayout,
    ListLayout,
    PaginatedList,
    RenderItem,
    TouchZoneMap,
    ZoneKind,
)
from shelfdisplay.surface.buffer import BufferSurface
from shelfdisplay.surface.colors import Colors


def fmt(item):
    name, amount = item
    return RenderItem.of(name, amount, colors=(Colors.WHITE, Colors.LIME))


def make_items(count):
    return [(f"Item {i}", str(i * 10)) for i in range(count)]


class TestRenderItem:
    """Formatted item helpers."""

    def test_missing_lines_and_colors(self):
        item = RenderItem.of("Only", colors=(None,))
        assert item.line(0) == "Only"
        assert item.line(3) == ""
        assert item.color(0) == Colors.WHITE
        assert item.color(1, Colors.GRAY) == Colors.GRAY


class TestGridThreshold:
    """Narrow surfaces fall back to the compact list."""

    def test_width_below_threshold_uses_compact_list(self):
        surface = BufferSurface(COMPACT_LIST_THRESHOLD - 1, 10)
        result = GridLayout().render(surface, make_items(3), fmt)

        assert result.strategy == "compact"
        assert surface.line(0).startswith("Item 0")
        assert surface.line(0).rstrip().endswith("0")

    def test_width_at_threshold_uses_grid(self):
        surface = BufferSurface(COMPACT_LIST_THRESHOLD, 10)
        result = GridLayout().render(surface, make_items(3), fmt)

        assert result.strategy == "grid"
        assert surface.line(0).startswith("Item 0")
        assert surface.line(1).startswith("0")


class TestGridLayout:
    """Cell placement and overflow."""

    def test_columns_fill_row_major(self):
        surface = BufferSurface(39, 13)
        zones = TouchZoneMap()
        result = GridLayout().render(surface, make_items(3), fmt, zones=zones)

        assert result.columns == 2
        assert surface.find("Item 1") == (20, 0)
        assert surface.find("Item 2") == (0, 2)
        assert [zone.index for zone in zones.items()] == [0, 1, 2]
        assert zones.items()[1].contains(20, 1)

    def test_columns_capped_by_item_count(self):
        assert GridLayout().column_count(80, 1) == 1
        assert GridLayout().column_count(80, 10) == 4

    def test_overflow_indicator(self):
        surface = BufferSurface(39, 5)
        result = GridLayout().render(surface, make_items(10), fmt)

        assert result.shown == 4
        assert result.overflow == 6
        assert surface.line(4).startswith("+6 more")
        assert surface.foreground_at(0, 4) == Colors.GRAY

    def test_max_items_limits_cells(self):
        surface = BufferSurface(39, 13)
        result = GridLayout(max_items=3).render(surface, make_items(5), fmt)

        assert result.shown == 3
        assert surface.contains("+2 more")

    def test_line_colors_applied(self):
        surface = BufferSurface(39, 4)
        GridLayout().render(surface, make_items(1), fmt)
        assert surface.foreground_at(0, 1) == Colors.LIME

    def test_rejects_empty_cells(self):
        with pytest.raises(ValueError):
            GridLayout(min_cell_width=0)


class TestListLayouts:
    """Single-line list strategies."""

    def test_list_overflow_on_last_row(self):
        surface = BufferSurface(20, 13)
        result = ListLayout().render(surface, make_items(20), fmt)

        assert result.shown == 12
        assert surface.line(12).startswith("+8 more")

    def test_list_respects_region(self):
        surface = BufferSurface(20, 10)
        zones = TouchZoneMap()
        ListLayout().render(surface, make_items(2), fmt, start_y=3, end_y=6, zones=zones)

        assert surface.line(3).startswith("Item 0")
        assert [zone.y1 for zone in zones.items()] == [3, 4]

    def test_compact_right_aligns_amount(self):
        surface = BufferSurface(15, 3)
        CompactListLayout().render(surface, [("Cobblestone", "1234")], fmt)

        line = surface.line(0)
        assert line.endswith("1234")
        assert line.startswith("Cobbles")

    def test_all_items_fit_exactly(self):
        surface = BufferSurface(20, 3)
        result = CompactListLayout().render(surface, make_items(3), fmt)

        assert result.shown == 3
        assert result.overflow == 0


class TestPaginatedList:
    """Scroll offset clamping and navigation."""

    def test_clamp_sequence(self):
        pages = PaginatedList()
        pages.set_geometry(page_size=5, total=12)

        assert pages.next_page() == 5
        assert pages.next_page() == 7
        assert pages.scroll(10) == 7
        assert pages.prev_page() == 2
        assert pages.prev_page() == 0
        assert pages.scroll(-1) == 0

    def test_data_shrink_clamps(self):
        pages = PaginatedList()
        pages.set_geometry(page_size=5, total=30)
        pages.scroll(20)
        pages.set_geometry(total=8)

        assert pages.scroll_offset == 3

    def test_set_state_clamps(self):
        pages = PaginatedList()
        pages.set_geometry(page_size=4, total=6)
        pages.set_state({"scroll_offset": 99, "page_size": 4})

        assert pages.get_state() == {"scroll_offset": 2, "page_size": 4}

    def test_render_first_page(self):
        surface = BufferSurface(20, 6)
        zones = TouchZoneMap()
        pages = PaginatedList()
        result = pages.render(surface, make_items(12), fmt, zones=zones)

        assert result.shown == 5
        assert pages.page_count == 3
        assert surface.contains("Page 1/3")
        assert surface.cell(19, 4).char == "v"
        assert not zones.of_kind(ZoneKind.SCROLL_UP)
        assert len(zones.of_kind(ZoneKind.SCROLL_DOWN)) == 1
        assert len(zones.of_kind(ZoneKind.PAGE_INDICATOR)) == 1

    def test_render_middle_shows_both_arrows(self):
        surface = BufferSurface(20, 6)
        zones = TouchZoneMap()
        pages = PaginatedList()
        pages.set_geometry(page_size=5, total=12)
        pages.scroll(3)
        pages.render(surface, make_items(12), fmt, zones=zones)

        assert surface.cell(19, 0).char == "^"
        assert surface.line(0).startswith("Item 3")
        assert zones.items()[0].index == 3

    def test_page_indicator_halves(self):
        surface = BufferSurface(20, 6)
        zones = TouchZoneMap()
        pages = PaginatedList()
        pages.render(surface, make_items(12), fmt, zones=zones)
        indicator = zones.of_kind(ZoneKind.PAGE_INDICATOR)[0]

        assert pages.handle_zone(indicator, 15, 20)
        assert pages.scroll_offset == 5
        assert pages.handle_zone(indicator, 2, 20)
        assert pages.scroll_offset == 0

    def test_item_zone_is_not_navigation(self):
        surface = BufferSurface(20, 6)
        zones = TouchZoneMap()
        pages = PaginatedList()
        pages.render(surface, make_items(2), fmt, zones=zones)

        assert not pages.handle_zone(zones.items()[0], 0, 20)
