"""Grid layout strategy.

Items are laid out row-major in cells of a minimum width. Surfaces
narrower than COMPACT_LIST_THRESHOLD cannot show multi-line cells
legibly, so the grid hands them to CompactListLayout instead.
"""

import logging
from typing import Callable, Sequence, TypeVar

from ..surface.base import RenderSurface
from ..surface.text import truncate_middle
from .items import LayoutResult, RenderItem
from .lists import DEFAULT_MAX_ITEMS, CompactListLayout, write_overflow
from .touch import TouchZone, TouchZoneMap, ZoneKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Surfaces narrower than this use the compact single-line list
COMPACT_LIST_THRESHOLD = 20


class GridLayout:
    """Row-major grid of multi-line cells.

    Attributes:
        min_cell_width: Narrowest allowed cell
        cell_height: Rows per cell (lines beyond this are not drawn)
        gap_x: Columns between cells
        gap_y: Rows between cells
        max_items: Upper bound on cells drawn
        columns: Fixed column count (None = as many as fit)
    """

    def __init__(
        self,
        min_cell_width: int = 16,
        cell_height: int = 2,
        gap_x: int = 1,
        gap_y: int = 0,
        max_items: int = DEFAULT_MAX_ITEMS,
        columns: int | None = None,
    ) -> None:
        if min_cell_width < 1 or cell_height < 1:
            raise ValueError("Grid cells must be at least 1x1")
        self.min_cell_width = min_cell_width
        self.cell_height = cell_height
        self.gap_x = max(0, gap_x)
        self.gap_y = max(0, gap_y)
        self.max_items = max_items
        self.columns = columns
        self._compact = CompactListLayout(max_items)

    def column_count(self, width: int, item_count: int) -> int:
        """Columns that fit a surface of the given width."""
        fit = max(1, (width + self.gap_x) // (self.min_cell_width + self.gap_x))
        if self.columns is not None:
            fit = max(1, min(self.columns, fit))
        return max(1, min(fit, item_count)) if item_count > 0 else 1

    def render(
        self,
        surface: RenderSurface,
        items: Sequence[T],
        format_item: Callable[[T], RenderItem],
        start_y: int = 0,
        end_y: int | None = None,
        zones: TouchZoneMap | None = None,
    ) -> LayoutResult:
        """Draw items as a grid (or compact list on narrow surfaces).

        Args:
            surface: Target surface
            items: Data to draw, already sorted
            format_item: Turns one data item into a RenderItem
            start_y: First row of the region
            end_y: Row after the last row of the region (default: height)
            zones: Zone map to record one ITEM zone per cell into

        Returns:
            LayoutResult with strategy "grid" or "compact"
        """
        width, height = surface.get_size()
        if width < COMPACT_LIST_THRESHOLD:
            return self._compact.render(surface, items, format_item, start_y, end_y, zones)

        end_y = height if end_y is None else min(end_y, height)
        rows = end_y - start_y
        candidates = min(len(items), self.max_items)
        columns = self.column_count(width, candidates)
        cell_width = max(1, (width + self.gap_x) // columns - self.gap_x)
        pitch = self.cell_height + self.gap_y

        def capacity(available_rows: int) -> int:
            if available_rows < self.cell_height:
                return 0
            return columns * ((available_rows + self.gap_y) // pitch)

        shown = min(candidates, capacity(rows))
        overflow = shown < len(items)
        if overflow:
            # Give up the last row to the "+K more" indicator
            shown = min(candidates, capacity(rows - 1))

        for index in range(shown):
            item = items[index]
            formatted = format_item(item)
            col = index % columns
            row = index // columns
            x = col * (cell_width + self.gap_x)
            y = start_y + row * pitch

            for line_no in range(min(self.cell_height, len(formatted.lines))):
                surface.set_foreground(formatted.color(line_no))
                surface.write(x, y + line_no, truncate_middle(formatted.line(line_no), cell_width))

            if zones is not None:
                zones.add(
                    TouchZone(
                        ZoneKind.ITEM,
                        x,
                        y,
                        x + cell_width - 1,
                        y + self.cell_height - 1,
                        item=item,
                        index=index,
                        action=formatted.touch_action or "select",
                        payload=formatted.touch_payload if formatted.touch_payload is not None else item,
                    )
                )

        hidden = len(items) - shown
        if overflow and rows > 0:
            write_overflow(surface, end_y - 1, hidden)
        return LayoutResult("grid", shown=shown, overflow=hidden, columns=columns)
