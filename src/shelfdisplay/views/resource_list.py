"""Resource list views.

Grids of stored items or fluids with low-stock coloring. The item list
can merge a separate craftable lookup into the sample and filter on it.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, ClassVar

from ..layout.items import RenderItem
from ..providers.base import (
    FEATURE_FLUIDS,
    FEATURE_ITEMS,
    KIND_CRAFTABLE,
    KIND_FLUIDS,
    KIND_ITEMS,
    ResourceEntry,
    ResourceProvider,
)
from ..surface.colors import Color, Colors
from ..surface.text import format_number, prettify_name
from .base import ErrorMarker, GridView, ViewCapability, ViewDescriptor
from .renderers import Header
from .schema import ConfigField, FieldType

logger = logging.getLogger(__name__)

SORT_AMOUNT = "amount"
SORT_NAME = "name"

SHOW_ALL = "all"
SHOW_CRAFTABLE = "craftable"
SHOW_STORED = "stored"


@dataclass(frozen=True)
class ResourceListing:
    """Sorted, filtered entries plus their total amount (display units)."""

    entries: tuple[ResourceEntry, ...]
    total: float


def display_name(entry: ResourceEntry) -> str:
    return entry.display_name or prettify_name(entry.id)


class ResourceListView(GridView):
    """Stored resources of one kind, largest first."""

    kind: ClassVar[str] = KIND_ITEMS
    noun: ClassVar[str] = "Item"
    unit_divisor: ClassVar[float] = 1
    unit_label: ClassVar[str] = ""
    header_color: ClassVar[Color] = Colors.WHITE
    craftable_indicator: ClassVar[bool] = False

    capabilities = frozenset({ViewCapability.CONFIG})
    empty_message = "No resources in network"
    max_items = 100

    async def get_data(self) -> ResourceListing | ErrorMarker | None:
        provider = self.ensure_provider()
        if provider is None:
            return None

        result = self.query(provider.sample, self.kind, operation=f"sample({self.kind})")
        if not result.ok:
            return ErrorMarker.from_result(result, f"Error reading {self.noun.lower()}s")

        entries = list(result.value or ())
        entries = await self._filter(provider, entries)

        if self._config.get("sort_by") == SORT_NAME:
            entries.sort(key=display_name)
        else:
            entries.sort(key=lambda entry: entry.amount, reverse=True)

        total = 0.0
        for count, entry in enumerate(entries, start=1):
            total += entry.amount / self.unit_divisor
            await self.scheduler.check(count)

        return ResourceListing(tuple(entries), total)

    async def _filter(
        self, provider: ResourceProvider, entries: list[ResourceEntry]
    ) -> list[ResourceEntry]:
        """Hook for view-specific filtering."""
        return entries

    def items(self, data: ResourceListing) -> tuple[ResourceEntry, ...]:
        return data.entries

    def header(self, data: ResourceListing) -> Header:
        total = format_number(data.total, 0) + self.unit_label
        return Header(
            text=f"{self.noun}s",
            color=self.header_color,
            secondary=f" ({len(data.entries)} | {total})",
        )

    def format_item(self, entry: ResourceEntry) -> RenderItem:
        amount = entry.amount / self.unit_divisor
        warning = self._config.get("warning_below") or 0

        amount_color = Colors.WHITE
        if amount < warning:
            amount_color = Colors.RED
        elif amount < warning * 2:
            amount_color = Colors.ORANGE
        elif self.craftable_indicator and amount >= warning * 10:
            amount_color = Colors.LIME

        amount_text = format_number(amount, 0) + self.unit_label
        if self.craftable_indicator and entry.craftable:
            if entry.amount == 0:
                amount_text = "[C]"
                amount_color = Colors.CYAN
            else:
                amount_text += "*"

        return RenderItem.of(
            display_name(entry),
            amount_text,
            colors=(Colors.WHITE, amount_color),
            payload=entry.id,
        )


class ItemListView(ResourceListView):
    """Stored items, with craftable markers and filter."""

    descriptor = ViewDescriptor(
        id="item_list",
        name="Item List",
        description="Grid of stored items",
        poll_interval_ms=2000,
        config_schema=(
            ConfigField(
                key="warning_below",
                type=FieldType.NUMBER,
                label="Warning Below",
                default=64,
                min_value=1,
                max_value=100000,
            ),
            ConfigField(
                key="sort_by",
                type=FieldType.SELECT,
                label="Sort By",
                default=SORT_AMOUNT,
                options=(SORT_AMOUNT, SORT_NAME),
            ),
            ConfigField(
                key="show_craftable",
                type=FieldType.SELECT,
                label="Show Craftable",
                default=SHOW_ALL,
                options=(SHOW_ALL, SHOW_CRAFTABLE, SHOW_STORED),
            ),
        ),
    )
    requires = (FEATURE_ITEMS,)
    craftable_indicator = True

    async def _filter(
        self, provider: ResourceProvider, entries: list[ResourceEntry]
    ) -> list[ResourceEntry]:
        entries = await self.merge_craftable(provider, entries)

        show = self._config.get("show_craftable", SHOW_ALL)
        if show == SHOW_CRAFTABLE:
            return await self.scheduler.filter(entries, lambda entry: entry.craftable)
        if show == SHOW_STORED:
            return await self.scheduler.filter(entries, lambda entry: entry.amount > 0)
        return entries

    async def merge_craftable(
        self, provider: ResourceProvider, entries: list[ResourceEntry]
    ) -> list[ResourceEntry]:
        """Mark craftable entries and add craftable-only ones with amount 0.

        A failed craftable lookup is treated as "nothing is craftable".
        """
        result = self.query(provider.sample, KIND_CRAFTABLE, operation="sample(craftable)")
        if not result.ok:
            logger.warning(
                "%s: craftable lookup failed, showing no craftable data: %s",
                self.descriptor.id,
                result.message,
            )
            return await self.scheduler.map(entries, lambda entry: replace(entry, craftable=False))

        craftable: dict[str, ResourceEntry] = {}
        for count, entry in enumerate(result.value or (), start=1):
            craftable[entry.id] = entry
            await self.scheduler.check(count)

        merged = await self.scheduler.map(
            entries, lambda entry: replace(entry, craftable=entry.id in craftable)
        )
        stored = {entry.id for entry in entries}
        for count, (resource_id, entry) in enumerate(craftable.items(), start=1):
            if resource_id not in stored:
                merged.append(
                    ResourceEntry(resource_id, 0, entry.display_name, craftable=True)
                )
            await self.scheduler.check(count)
        return merged


class FluidListView(ResourceListView):
    """Stored fluids in buckets."""

    descriptor = ViewDescriptor(
        id="fluid_list",
        name="Fluid List",
        description="Grid of stored fluids",
        poll_interval_ms=2000,
        config_schema=(
            ConfigField(
                key="warning_below",
                type=FieldType.NUMBER,
                label="Warning Below (B)",
                default=100,
                min_value=1,
                max_value=100000,
            ),
            ConfigField(
                key="sort_by",
                type=FieldType.SELECT,
                label="Sort By",
                default=SORT_AMOUNT,
                options=(SORT_AMOUNT, SORT_NAME),
            ),
        ),
    )
    requires = (FEATURE_FLUIDS,)

    kind = KIND_FLUIDS
    noun = "Fluid"
    unit_divisor = 1000
    unit_label = "B"
    header_color = Colors.LIGHT_BLUE
    empty_message = "No fluids in network"
