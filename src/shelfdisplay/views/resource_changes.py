"""Resource change views.

Show which items or fluids were gained or lost since the tracking period
began. Touching a change opens a detail panel; any touch closes it.
"""

import logging
from typing import Any, ClassVar

from ..layout.items import RenderItem
from ..layout.touch import TouchZone
from ..providers.base import FEATURE_FLUIDS, FEATURE_ITEMS, KIND_FLUIDS, KIND_ITEMS
from ..providers.boundary import ErrorKind, ProviderResult
from ..surface.colors import Color, Colors
from ..surface.text import format_number, prettify_name, truncate_end, truncate_middle, write_centered
from .base import ErrorMarker, GridView, ViewCapability, ViewDescriptor
from .changes import ChangeRecord, ChangeTracker, ResourceSnapshot, ShowMode, TrackerStatus, TrackerUpdate, take_snapshot
from .renderers import draw_timer_bar
from .schema import ConfigField, FieldType

logger = logging.getLogger(__name__)

# Below this height the gains/losses summary row is dropped
SUMMARY_MIN_HEIGHT = 8

DETAIL_MAX_WIDTH = 28


def _schema(default_min_change: int) -> tuple[ConfigField, ...]:
    return (
        ConfigField(
            key="period_seconds",
            type=FieldType.NUMBER,
            label="Reset Period (sec)",
            default=60,
            min_value=10,
            max_value=86400,
        ),
        ConfigField(
            key="show_mode",
            type=FieldType.SELECT,
            label="Show Changes",
            default=ShowMode.BOTH.value,
            options=tuple(mode.value for mode in ShowMode),
        ),
        ConfigField(
            key="min_change",
            type=FieldType.NUMBER,
            label="Min Change",
            default=default_min_change,
            min_value=1,
            max_value=100000,
        ),
    )


class ResourceChangesView(GridView):
    """Gains and losses of one resource kind against a rolling baseline."""

    kind: ClassVar[str] = KIND_ITEMS
    noun: ClassVar[str] = "Item"
    unit_divisor: ClassVar[float] = 1
    unit_label: ClassVar[str] = ""
    title_color: ClassVar[Color] = Colors.WHITE
    bar_color: ClassVar[Color] = Colors.BLUE
    accent_color: ClassVar[Color] = Colors.CYAN

    capabilities = frozenset({ViewCapability.TOUCH, ViewCapability.CONFIG})
    error_message = "Error tracking changes"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        config = self._config
        self.tracker = ChangeTracker(
            self._sample,
            period_seconds=config["period_seconds"],
            min_change=config["min_change"],
            mode=config["show_mode"],
            clock=self.context.clock,
            scheduler=self.context.scheduler,
        )
        self.selected: ChangeRecord | None = None

    def _on_configure(self) -> None:
        config = self._config
        self.tracker.configure(
            period_seconds=config["period_seconds"],
            min_change=config["min_change"],
            mode=config["show_mode"],
        )

    async def _sample(self) -> ProviderResult[ResourceSnapshot]:
        provider = self.ensure_provider()
        if provider is None:
            return ProviderResult.failure(ErrorKind.PROVIDER_UNAVAILABLE, "No provider")

        result = self.query(provider.sample, self.kind, operation=f"sample({self.kind})")
        if not result.ok:
            return result
        snapshot = await take_snapshot(result.value or (), self.scheduler, captured_at=self.now())
        return ProviderResult.success(snapshot)

    async def get_data(self) -> TrackerUpdate | ErrorMarker:
        update = await self.tracker.poll()
        if update.status == TrackerStatus.FAILED:
            return ErrorMarker(
                f"Error reading {self.noun.lower()}s",
                kind=update.error or ErrorKind.PROVIDER_QUERY_FAILED,
                details={"message": update.message},
            )
        return update

    # -- Formatting -----------------------------------------------------------

    def format_amount(self, amount: float, signed: bool = False) -> str:
        sign = "+" if signed and amount > 0 else ""
        return f"{sign}{format_number(amount / self.unit_divisor, 1)}{self.unit_label}"

    def format_item(self, record: ChangeRecord) -> RenderItem:
        color = Colors.GAIN if record.is_gain else Colors.LOSS
        return RenderItem.of(
            record.display_name or prettify_name(record.id),
            self.format_amount(record.delta, signed=True),
            colors=(Colors.WHITE, color),
            action="detail",
        )

    # -- Rendering ------------------------------------------------------------

    def render(self, update: TrackerUpdate) -> None:
        width, height = self.surface.get_size()
        middle = height // 2
        title = f"{self.noun} Changes"
        plural = f"{self.noun.lower()}s"

        if update.status == TrackerStatus.WAITING:
            write_centered(self.surface, max(0, middle - 1), title, Colors.WHITE)
            write_centered(self.surface, min(height - 1, middle + 1), "Waiting for data...", Colors.GRAY)
            return

        if update.status == TrackerStatus.BASELINE_CAPTURED:
            write_centered(self.surface, max(0, middle - 1), title, Colors.WHITE)
            write_centered(
                self.surface, min(height - 1, middle + 1),
                f"Baseline: {update.baseline_count} {plural}", Colors.LIME,
            )
            draw_timer_bar(self.surface, height - 1, 0, update.period_seconds, self.bar_color)
            return

        if update.status == TrackerStatus.PERIOD_RESET:
            write_centered(self.surface, max(0, middle - 1), "Period Reset", Colors.ORANGE)
            write_centered(
                self.surface, min(height - 1, middle + 1),
                f"New baseline: {update.baseline_count} {plural}", Colors.GRAY,
            )
            draw_timer_bar(self.surface, height - 1, 0, update.period_seconds, self.bar_color)
            return

        changes = update.changes
        if self.selected is not None:
            current = changes.find(self.selected.id) if changes is not None else None
            self._render_detail(current or self.selected)
            return

        if changes is None or len(changes) == 0:
            write_centered(self.surface, 0, title, self.title_color)
            write_centered(self.surface, max(0, middle - 1), "No changes detected", Colors.GRAY)
            if changes is not None:
                info = f"Baseline: {changes.baseline_count} | Current: {changes.current_count}"
                write_centered(
                    self.surface, min(height - 1, middle + 1),
                    truncate_middle(info, width - 2), Colors.LIGHT_GRAY,
                )
            draw_timer_bar(self.surface, height - 1, update.elapsed, update.period_seconds, self.bar_color)
            return

        self._render_header(len(changes), update.remaining)
        start_y = 1
        if height >= SUMMARY_MIN_HEIGHT:
            self._render_summary(changes.total_gains, changes.total_losses)
            start_y = 2

        self.last_layout = self.grid.render(
            self.surface, changes.records, self.format_item, start_y, height - 1, self.zones
        )
        draw_timer_bar(self.surface, height - 1, update.elapsed, update.period_seconds, self.bar_color)

    def _render_header(self, count: int, remaining: float) -> None:
        width, _ = self.surface.get_size()
        title = f"{self.noun}s"
        self.surface.set_foreground(self.title_color)
        self.surface.write(0, 0, title)
        self.surface.set_foreground(Colors.LIGHT_GRAY)
        self.surface.write(len(title), 0, f" ({count})")

        time_text = f"{int(remaining)}s"
        self.surface.set_foreground(Colors.GRAY)
        self.surface.write(max(0, width - len(time_text)), 0, time_text)

    def _render_summary(self, gains: float, losses: float) -> None:
        x = 0
        if gains > 0:
            text = "+" + self.format_amount(gains)
            self.surface.set_foreground(Colors.GAIN)
            self.surface.write(x, 1, text)
            x += len(text) + 1
        if losses > 0:
            self.surface.set_foreground(Colors.LOSS)
            self.surface.write(x, 1, "-" + self.format_amount(losses))

    def _render_detail(self, record: ChangeRecord) -> None:
        width, height = self.surface.get_size()
        panel_width = min(DETAIL_MAX_WIDTH, width)
        x = (width - panel_width) // 2
        inner = panel_width - 2
        title_color = Colors.GAIN if record.is_gain else Colors.LOSS

        self.surface.set_background(title_color)
        self.surface.set_foreground(Colors.BLACK)
        title = truncate_middle(self.format_amount(record.delta, signed=True), panel_width)
        self.surface.write(x, 0, title.center(panel_width))
        self.surface.set_background(Colors.BLACK)

        lines = [
            (record.display_name or prettify_name(record.id), Colors.WHITE),
            (record.id, Colors.LIGHT_GRAY),
        ]
        for offset, (text, color) in enumerate(lines, start=2):
            if offset < height:
                self.surface.set_foreground(color)
                self.surface.write(x + 1, offset, truncate_end(text, inner))

        if height > 5:
            was = self.format_amount(record.baseline)
            now = self.format_amount(record.current)
            self.surface.set_foreground(Colors.WHITE)
            self.surface.write(x + 1, 5, "Was: ")
            self.surface.set_foreground(Colors.YELLOW)
            self.surface.write(x + 6, 5, was)
            self.surface.set_foreground(Colors.GRAY)
            self.surface.write(x + 6 + len(was), 5, " -> ")
            self.surface.set_foreground(self.accent_color)
            self.surface.write(x + 10 + len(was), 5, now)

        write_centered(self.surface, height - 1, "[Close]", Colors.WHITE)

    # -- Touch ----------------------------------------------------------------

    def on_touch(self, x: int, y: int) -> bool:
        if self.selected is not None:
            self.selected = None
            return True
        return super().on_touch(x, y)

    def on_item_touch(self, zone: TouchZone) -> bool:
        if isinstance(zone.item, ChangeRecord):
            self.selected = zone.item
            logger.debug("%s: showing detail for %s", self.descriptor.id, zone.item.id)
            return True
        return False


class ItemChangesView(ResourceChangesView):
    """Item gains and losses."""

    descriptor = ViewDescriptor(
        id="item_changes",
        name="Item Changes",
        description="Items gained or lost over a rolling period",
        poll_interval_ms=3000,
        config_schema=_schema(default_min_change=1),
    )
    requires = (FEATURE_ITEMS,)


class FluidChangesView(ResourceChangesView):
    """Fluid gains and losses, shown in buckets."""

    descriptor = ViewDescriptor(
        id="fluid_changes",
        name="Fluid Changes",
        description="Fluids gained or lost over a rolling period",
        poll_interval_ms=3000,
        config_schema=_schema(default_min_change=1000),
    )
    requires = (FEATURE_FLUIDS,)

    kind = KIND_FLUIDS
    noun = "Fluid"
    unit_divisor = 1000
    unit_label = "B"
    title_color = Colors.LIGHT_BLUE
    bar_color = Colors.LIGHT_BLUE
