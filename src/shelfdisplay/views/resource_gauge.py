"""Single-resource gauge view.

Follows the amount of one configured item with a short history trend.
Without a resource_id the view shows a "needs configuration" placeholder.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any

from ..providers.base import FEATURE_ITEMS, KIND_ITEMS
from ..surface.colors import Colors
from ..surface.text import format_number, prettify_name, write_centered
from .base import BaseView, ErrorMarker, ViewCapability, ViewDescriptor
from .renderers import Header, render_header, sparkline
from .schema import ConfigField, FieldType

logger = logging.getLogger(__name__)

HISTORY_SIZE = 60


@dataclass(frozen=True)
class GaugeReading:
    """Current amount of the tracked resource and its recent history."""

    resource_id: str
    name: str
    amount: float
    history: tuple[float, ...]

    @property
    def trend(self) -> float:
        """Change across the recorded history."""
        if len(self.history) < 2:
            return 0.0
        return self.history[-1] - self.history[0]


class ItemGaugeView(BaseView):
    """Amount and trend of one item."""

    descriptor = ViewDescriptor(
        id="item_gauge",
        name="Item Gauge",
        description="Amount and trend of a single item",
        poll_interval_ms=2000,
        config_schema=(
            ConfigField(
                key="resource_id",
                type=FieldType.STRING,
                label="Item",
                required=True,
                description="Registry id, e.g. minecraft:iron_ingot",
            ),
            ConfigField(
                key="warning_below",
                type=FieldType.NUMBER,
                label="Warning Below",
                default=64,
                min_value=0,
                max_value=1_000_000,
            ),
        ),
    )
    requires = (FEATURE_ITEMS,)
    capabilities = frozenset({ViewCapability.CONFIG})

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.history: deque[float] = deque(maxlen=HISTORY_SIZE)

    async def get_data(self) -> GaugeReading | ErrorMarker | None:
        provider = self.ensure_provider()
        if provider is None:
            return None

        result = self.query(provider.sample, KIND_ITEMS, operation="sample(items)")
        if not result.ok:
            return ErrorMarker.from_result(result, "Error reading items")

        resource_id = self._config["resource_id"]
        amount = 0.0
        name = None
        for count, entry in enumerate(result.value or (), start=1):
            if entry.id == resource_id:
                amount += entry.amount
                name = name or entry.display_name
            await self.scheduler.check(count)

        self.history.append(amount)
        return GaugeReading(
            resource_id=resource_id,
            name=name or prettify_name(resource_id),
            amount=amount,
            history=tuple(self.history),
        )

    def render(self, reading: GaugeReading) -> None:
        width, height = self.surface.get_size()
        render_header(self.surface, Header(reading.name))

        warning = self._config.get("warning_below") or 0
        color = Colors.RED if reading.amount < warning else Colors.WHITE
        middle = max(1, height // 2 - 1)
        write_centered(self.surface, middle, format_number(reading.amount, 1), color)

        trend = reading.trend
        if trend and middle + 1 < height:
            sign = "+" if trend > 0 else ""
            write_centered(
                self.surface,
                middle + 1,
                f"{sign}{format_number(trend, 1)}",
                Colors.GAIN if trend > 0 else Colors.LOSS,
            )

        if height > 3:
            self.surface.set_foreground(Colors.CYAN)
            self.surface.write(0, height - 1, sparkline(list(reading.history), width))
