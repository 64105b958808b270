"""Interactive paginated list.

Holds the scroll state of one view instance. The offset is clamped to
[0, max(0, total - page_size)] after every adjustment, including when
the data shrinks or the surface is resized.
"""

import logging
import math
from typing import Any, Callable, Sequence, TypeVar

from ..surface.base import RenderSurface
from ..surface.colors import Colors
from ..surface.text import truncate_middle
from .items import LayoutResult, RenderItem
from .touch import TouchZone, TouchZoneMap, ZoneKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCROLL_UP_GLYPH = "^"
SCROLL_DOWN_GLYPH = "v"


class PaginatedList:
    """Scroll state plus the paginated render strategy.

    Usage:
        pages = PaginatedList()
        pages.render(surface, items, format_item, start_y=1, zones=zones)
        pages.next_page()
    """

    strategy = "paginated"

    def __init__(self, page_size: int = 1) -> None:
        self._offset = 0
        self._page_size = max(1, page_size)
        self._total = 0

    def __repr__(self) -> str:
        return (
            f"PaginatedList(offset={self._offset}, page_size={self._page_size}, "
            f"total={self._total})"
        )

    # =========================================================================
    # State
    # =========================================================================

    @property
    def scroll_offset(self) -> int:
        return self._offset

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def total(self) -> int:
        return self._total

    @property
    def max_offset(self) -> int:
        return max(0, self._total - self._page_size)

    @property
    def page_number(self) -> int:
        """Current page, 1-based."""
        return self._offset // self._page_size + 1

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self._total / self._page_size))

    def _clamp(self) -> None:
        self._offset = max(0, min(self._offset, self.max_offset))

    def set_geometry(self, page_size: int | None = None, total: int | None = None) -> None:
        """Recompute page size and/or data length, then clamp."""
        if page_size is not None:
            self._page_size = max(1, page_size)
        if total is not None:
            self._total = max(0, total)
        self._clamp()

    def scroll(self, delta: int) -> int:
        """Move the offset by delta rows.

        Returns:
            The new offset
        """
        self._offset += delta
        self._clamp()
        return self._offset

    def next_page(self) -> int:
        return self.scroll(self._page_size)

    def prev_page(self) -> int:
        return self.scroll(-self._page_size)

    def get_state(self) -> dict[str, int]:
        return {"scroll_offset": self._offset, "page_size": self._page_size}

    def set_state(self, state: dict[str, Any]) -> None:
        """Restore state saved with get_state()."""
        self._page_size = max(1, int(state.get("page_size", self._page_size)))
        self._offset = int(state.get("scroll_offset", 0))
        self._clamp()

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(
        self,
        surface: RenderSurface,
        items: Sequence[T],
        format_item: Callable[[T], RenderItem],
        start_y: int = 0,
        end_y: int | None = None,
        zones: TouchZoneMap | None = None,
    ) -> LayoutResult:
        """Draw the current page.

        The last row of the region holds the page indicator.

        Args:
            surface: Target surface
            items: Full data list
            format_item: Turns one data item into a RenderItem
            start_y: First row of the region
            end_y: Row after the last row of the region (default: height)
            zones: Zone map to record item, scroll and page zones into

        Returns:
            LayoutResult with the number of visible items
        """
        width, height = surface.get_size()
        end_y = height if end_y is None else min(end_y, height)
        page_y = end_y - 1
        rows = max(0, page_y - start_y)

        self.set_geometry(page_size=max(1, rows), total=len(items))
        visible = max(0, min(self._page_size, rows, self._total - self._offset))

        for i in range(visible):
            index = self._offset + i
            item = items[index]
            formatted = format_item(item)
            y = start_y + i
            line = truncate_middle(formatted.line(0), width - 1)

            surface.set_foreground(formatted.color(0))
            surface.write(0, y, line)

            second = formatted.line(1)
            if second:
                x = width - 1 - len(second)
                if x > len(line) + 1:
                    surface.set_foreground(formatted.color(1, Colors.GRAY))
                    surface.write(x, y, second)

            if zones is not None:
                zones.add_row(
                    ZoneKind.ITEM,
                    y,
                    width,
                    item=item,
                    index=index,
                    action=formatted.touch_action or "select",
                    payload=formatted.touch_payload if formatted.touch_payload is not None else item,
                )

        surface.set_foreground(Colors.GRAY)
        if self._offset > 0 and rows > 0:
            surface.write(width - 1, start_y, SCROLL_UP_GLYPH)
            if zones is not None:
                zones.add_cell(ZoneKind.SCROLL_UP, width - 1, start_y)

        if self._offset + self._page_size < self._total and visible > 0:
            last_y = start_y + visible - 1
            surface.write(width - 1, last_y, SCROLL_DOWN_GLYPH)
            if zones is not None:
                zones.add_cell(ZoneKind.SCROLL_DOWN, width - 1, last_y)

        if page_y >= 0:
            text = f"Page {self.page_number}/{self.page_count}"
            surface.write(max(0, (width - len(text)) // 2), page_y, text)
            if zones is not None:
                zones.add_row(ZoneKind.PAGE_INDICATOR, page_y, width)

        return LayoutResult(
            self.strategy,
            shown=visible,
            overflow=self._total - visible,
            extra={"page": self.page_number, "pages": self.page_count},
        )

    # =========================================================================
    # Touch
    # =========================================================================

    def handle_zone(self, zone: TouchZone, x: int, width: int) -> bool:
        """Apply a navigation zone.

        Args:
            zone: Zone resolved by the dispatcher
            x: Touch column (selects previous/next half of the indicator)
            width: Surface width

        Returns:
            True if the zone was a navigation zone
        """
        if zone.kind == ZoneKind.SCROLL_UP:
            self.scroll(-1)
        elif zone.kind == ZoneKind.SCROLL_DOWN:
            self.scroll(1)
        elif zone.kind == ZoneKind.PAGE_INDICATOR:
            if x < width / 2:
                self.prev_page()
            else:
                self.next_page()
        else:
            return False
        logger.debug("Scrolled to offset %d (%s)", self._offset, zone.kind.value)
        return True
