"""Interactive item browser.

Scrollable, paginated list of every stored item. Touching a row shows
its id and exact amount in the footer; touching it again hides it.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from ..layout.items import RenderItem
from ..layout.touch import TouchZone
from ..providers.base import FEATURE_ITEMS, KIND_ITEMS, ResourceEntry
from ..surface.colors import Colors
from ..surface.text import format_number
from .base import ErrorMarker, InteractiveListView, ViewCapability, ViewDescriptor
from .renderers import Footer, Header
from .resource_list import display_name
from .schema import ConfigField, FieldType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrowserListing:
    """Sorted entries plus an id index, so drawing never scans the sample."""

    entries: tuple[ResourceEntry, ...]
    by_id: Mapping[str, ResourceEntry]


class ItemBrowserView(InteractiveListView):
    """Paginated item browser with per-row details."""

    descriptor = ViewDescriptor(
        id="item_browser",
        name="Item Browser",
        description="Scrollable list of stored items",
        poll_interval_ms=2000,
        config_schema=(
            ConfigField(
                key="sort_by",
                type=FieldType.SELECT,
                label="Sort By",
                default="amount",
                options=("amount", "name"),
            ),
        ),
    )
    requires = (FEATURE_ITEMS,)
    capabilities = frozenset(
        {ViewCapability.TOUCH, ViewCapability.STATE, ViewCapability.CONFIG}
    )
    empty_message = "No items"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.expanded: str | None = None

    async def get_data(self) -> BrowserListing | ErrorMarker | None:
        provider = self.ensure_provider()
        if provider is None:
            return None

        result = self.query(provider.sample, KIND_ITEMS, operation="sample(items)")
        if not result.ok:
            return ErrorMarker.from_result(result, "Error reading items")

        entries = await self.scheduler.filter(result.value or (), lambda entry: entry.amount > 0)
        if self._config.get("sort_by") == "name":
            entries.sort(key=display_name)
        else:
            entries.sort(key=lambda entry: entry.amount, reverse=True)

        by_id: dict[str, ResourceEntry] = {}
        for count, entry in enumerate(entries, start=1):
            by_id[entry.id] = entry
            await self.scheduler.check(count)
        return BrowserListing(tuple(entries), MappingProxyType(by_id))

    def items(self, data: BrowserListing) -> tuple[ResourceEntry, ...]:
        return data.entries

    def header(self, data: BrowserListing) -> Header:
        return Header("Browser", secondary=f" ({len(data.entries)})")

    def footer(self, data: BrowserListing) -> Footer | None:
        entry = data.by_id.get(self.expanded) if self.expanded is not None else None
        if entry is None:
            return None
        return Footer(f"{entry.id} = {entry.amount:g}", Colors.CYAN)

    def format_item(self, entry: ResourceEntry) -> RenderItem:
        selected = entry.id == self.expanded
        return RenderItem.of(
            display_name(entry),
            format_number(entry.amount, 0),
            colors=(Colors.YELLOW if selected else Colors.WHITE, Colors.GRAY),
            action="expand",
            payload=entry.id,
        )

    def on_item_touch(self, zone: TouchZone) -> bool:
        resource_id = zone.payload
        self.expanded = None if self.expanded == resource_id else resource_id
        return True

    def get_state(self) -> dict[str, Any]:
        state = super().get_state()
        state["expanded"] = self.expanded
        return state

    def set_state(self, state: dict[str, Any]) -> None:
        super().set_state(state)
        self.expanded = state.get("expanded")
