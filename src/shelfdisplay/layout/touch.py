"""Touch zones and dispatch.

Every render pass builds a fresh TouchZoneMap; the view swaps it in as a
whole, so a touch is always resolved against the most recent render.
Coordinates are surface-local and zero-based.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)


class ZoneKind(Enum):
    """Touch zone categories, in dispatch precedence order."""

    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    PAGE_INDICATOR = "page_indicator"
    ITEM = "item"


# First match wins
DISPATCH_ORDER = (
    ZoneKind.SCROLL_UP,
    ZoneKind.SCROLL_DOWN,
    ZoneKind.PAGE_INDICATOR,
    ZoneKind.ITEM,
)


@dataclass(frozen=True)
class TouchZone:
    """A rectangular region of the surface bound to an action.

    Bounds are inclusive.

    Attributes:
        kind: Zone category
        x1, y1: Top-left cell
        x2, y2: Bottom-right cell
        item: Item drawn in the zone (ITEM zones)
        index: Position of the item in the full data list
        action: Action tag ("select" unless the item says otherwise)
        payload: Opaque value from the item's RenderItem
    """

    kind: ZoneKind
    x1: int
    y1: int
    x2: int
    y2: int
    item: Any = None
    index: int | None = None
    action: str | None = None
    payload: Any = None

    def contains(self, x: int, y: int) -> bool:
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2


class TouchZoneMap:
    """Zones recorded during one render pass."""

    def __init__(self) -> None:
        self._zones: list[TouchZone] = []

    def __len__(self) -> int:
        return len(self._zones)

    def __iter__(self) -> Iterator[TouchZone]:
        return iter(self._zones)

    def add(self, zone: TouchZone) -> TouchZone:
        self._zones.append(zone)
        return zone

    def add_row(
        self,
        kind: ZoneKind,
        y: int,
        width: int,
        **kwargs: Any,
    ) -> TouchZone:
        """Add a zone covering a whole row."""
        return self.add(TouchZone(kind, 0, y, max(0, width - 1), y, **kwargs))

    def add_cell(self, kind: ZoneKind, x: int, y: int, **kwargs: Any) -> TouchZone:
        """Add a single-cell zone."""
        return self.add(TouchZone(kind, x, y, x, y, **kwargs))

    def of_kind(self, kind: ZoneKind) -> list[TouchZone]:
        return [zone for zone in self._zones if zone.kind == kind]

    def items(self) -> list[TouchZone]:
        """Return the item zones in render order."""
        return self.of_kind(ZoneKind.ITEM)


class TouchDispatcher:
    """Resolves a touch against a zone map and invokes a handler.

    Usage:
        dispatcher = TouchDispatcher()
        handled = dispatcher.dispatch(view.zones, x, y, view.on_zone)
    """

    def resolve(self, zones: TouchZoneMap | None, x: int, y: int) -> TouchZone | None:
        """Find the zone a touch lands in.

        Args:
            zones: Zones from the latest render (None = nothing rendered yet)
            x: Column
            y: Row

        Returns:
            The winning zone, or None if the touch hit nothing
        """
        if zones is None:
            return None
        for kind in DISPATCH_ORDER:
            for zone in zones.of_kind(kind):
                if zone.contains(x, y):
                    return zone
        return None

    def dispatch(
        self,
        zones: TouchZoneMap | None,
        x: int,
        y: int,
        handler: Callable[[TouchZone, int, int], bool],
    ) -> bool:
        """Resolve a touch and pass the zone to handler.

        Returns:
            The handler's result, or False if no zone matched
        """
        zone = self.resolve(zones, x, y)
        if zone is None:
            logger.debug("Touch at (%d, %d) hit no zone", x, y)
            return False
        logger.debug("Touch at (%d, %d) -> %s zone", x, y, zone.kind.value)
        return bool(handler(zone, x, y))
