"""Vertical list strategies.

ListLayout draws one line per item. CompactListLayout puts the first two
lines of each item on a single row (name left, amount right), which is
what narrow monitors fall back to instead of a grid.
"""

import logging
from typing import Callable, Sequence, TypeVar

from ..surface.base import RenderSurface
from ..surface.colors import Colors
from ..surface.text import truncate_end, truncate_middle
from .items import LayoutResult, RenderItem
from .touch import TouchZoneMap, ZoneKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ITEMS = 50


def _fit(total: int, max_items: int, rows: int) -> tuple[int, bool]:
    """Return (rows to fill, overflow) for a region of rows.

    When the data does not fit, one row is given up to the "+K more"
    indicator.
    """
    if rows <= 0:
        return 0, total > 0
    limit = min(max_items, rows)
    if total <= limit:
        return total, False
    return min(max_items, rows - 1), True


def write_overflow(surface: RenderSurface, y: int, hidden: int) -> None:
    """Draw the "+K more" indicator on row y."""
    surface.set_foreground(Colors.GRAY)
    surface.write(0, y, f"+{hidden} more")


class ListLayout:
    """One item per row, first line only.

    Attributes:
        max_items: Upper bound on rows drawn regardless of space
    """

    strategy = "list"

    def __init__(self, max_items: int | None = None) -> None:
        self.max_items = max_items

    def render(
        self,
        surface: RenderSurface,
        items: Sequence[T],
        format_item: Callable[[T], RenderItem],
        start_y: int = 0,
        end_y: int | None = None,
        zones: TouchZoneMap | None = None,
    ) -> LayoutResult:
        """Draw items into rows start_y..end_y-1.

        Args:
            surface: Target surface
            items: Data to draw, already sorted
            format_item: Turns one data item into a RenderItem
            start_y: First row of the region
            end_y: Row after the last row of the region (default: height)
            zones: Zone map to record item rows into

        Returns:
            LayoutResult describing what was drawn
        """
        width, height = surface.get_size()
        end_y = height if end_y is None else min(end_y, height)
        rows = end_y - start_y
        max_items = self.max_items if self.max_items is not None else rows

        count, overflow = _fit(len(items), max_items, rows)
        for i in range(count):
            item = items[i]
            formatted = format_item(item)
            y = start_y + i
            surface.set_foreground(formatted.color(0))
            surface.write(0, y, truncate_middle(formatted.line(0), width))
            if zones is not None:
                zones.add_row(
                    ZoneKind.ITEM,
                    y,
                    width,
                    item=item,
                    index=i,
                    action=formatted.touch_action or "select",
                    payload=formatted.touch_payload if formatted.touch_payload is not None else item,
                )

        hidden = len(items) - count
        if overflow and rows > 0:
            write_overflow(surface, end_y - 1, hidden)
        return LayoutResult(self.strategy, shown=count, overflow=hidden)


class CompactListLayout(ListLayout):
    """Single-line rows: line 0 left-aligned, line 1 right-aligned."""

    strategy = "compact"

    def __init__(self, max_items: int = DEFAULT_MAX_ITEMS) -> None:
        super().__init__(max_items)

    def render(
        self,
        surface: RenderSurface,
        items: Sequence[T],
        format_item: Callable[[T], RenderItem],
        start_y: int = 0,
        end_y: int | None = None,
        zones: TouchZoneMap | None = None,
    ) -> LayoutResult:
        width, height = surface.get_size()
        end_y = height if end_y is None else min(end_y, height)
        rows = end_y - start_y

        count, overflow = _fit(len(items), self.max_items or DEFAULT_MAX_ITEMS, rows)
        for i in range(count):
            item = items[i]
            formatted = format_item(item)
            y = start_y + i
            name = formatted.line(0)
            amount = formatted.line(1)

            # Reserve space for the amount plus one gap column
            name_width = width - len(amount) - 1
            if name_width < 1:
                name_width = width

            surface.set_foreground(formatted.color(0))
            surface.write(0, y, truncate_end(name, name_width))

            if amount and width > len(amount):
                surface.set_foreground(formatted.color(1, Colors.GRAY))
                surface.write(width - len(amount), y, amount)

            if zones is not None:
                zones.add_row(
                    ZoneKind.ITEM,
                    y,
                    width,
                    item=item,
                    index=i,
                    action=formatted.touch_action or "select",
                    payload=formatted.touch_payload if formatted.touch_payload is not None else item,
                )

        hidden = len(items) - count
        if overflow and rows > 0:
            write_overflow(surface, end_y - 1, hidden)
        return LayoutResult(self.strategy, shown=count, overflow=hidden)
