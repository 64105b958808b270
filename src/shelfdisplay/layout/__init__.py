"""Render surface layout strategies.

Provides:
- RenderItem formatted records and LayoutResult
- GridLayout with compact-list fallback on narrow surfaces
- ListLayout and CompactListLayout
- PaginatedList interactive strategy
- Touch zones and TouchDispatcher
"""

from .grid import COMPACT_LIST_THRESHOLD, GridLayout
from .items import LayoutResult, RenderItem
from .lists import CompactListLayout, ListLayout
from .paginated import PaginatedList
from .touch import TouchDispatcher, TouchZone, TouchZoneMap, ZoneKind

__all__ = [
    # Records
    "RenderItem",
    "LayoutResult",
    # Strategies
    "COMPACT_LIST_THRESHOLD",
    "GridLayout",
    "ListLayout",
    "CompactListLayout",
    "PaginatedList",
    # Touch
    "TouchDispatcher",
    "TouchZone",
    "TouchZoneMap",
    "ZoneKind",
]
