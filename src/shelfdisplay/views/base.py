"""Base classes for views.

Defines the lifecycle every view follows, the context it runs in, and
the grid/list/interactive families built on the layout strategies.

Lifecycle:
    1. mount(context) - Class-level eligibility check against capabilities
    2. __init__() - Instance bound to one surface with validated config
    3. initialize() - One-time provider acquisition (retried lazily later)
    4. refresh() - get_data() then draw(), repeated by run() every poll
    5. stop() - Terminal
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, ClassVar, Sequence

from ..core.errors import ValidationError
from ..core.scheduler import YieldScheduler
from ..layout.grid import GridLayout
from ..layout.items import LayoutResult, RenderItem
from ..layout.lists import ListLayout
from ..layout.paginated import PaginatedList
from ..layout.touch import TouchDispatcher, TouchZone, TouchZoneMap, ZoneKind
from ..providers.base import ProviderDriver, ResourceProvider
from ..providers.boundary import ErrorKind, ProviderResult, call_provider
from ..providers.capabilities import CapabilityCache
from ..surface.base import RenderSurface
from ..surface.colors import Colors
from .renderers import (
    Footer,
    Header,
    render_empty,
    render_error,
    render_footer,
    render_header,
    render_needs_config,
)
from .schema import ConfigField, missing_required, validate_config

logger = logging.getLogger(__name__)


class ViewState(Enum):
    """View lifecycle states."""

    UNMOUNTED = "unmounted"
    INITIALIZED = "initialized"
    RUNNING = "running"
    STOPPED = "stopped"


class ViewCapability(Enum):
    """Optional extensions a view class may declare."""

    TOUCH = "touch"  # on_touch()
    EMPTY_STATE = "empty_state"  # custom render_empty()
    CONFIG = "config"  # non-empty config schema
    STATE = "state"  # get_state() / set_state()


@dataclass(frozen=True)
class ViewDescriptor:
    """Static description of a view class.

    Attributes:
        id: Manifest identifier
        name: Human-readable name
        description: Short description
        poll_interval_ms: Default delay between refreshes
        config_schema: Ordered configuration fields
    """

    id: str
    name: str
    description: str = ""
    poll_interval_ms: int = 1000
    config_schema: tuple[ConfigField, ...] = ()


@dataclass(frozen=True)
class ErrorMarker:
    """Returned by get_data() instead of data when something went wrong."""

    message: str
    kind: ErrorKind = ErrorKind.PROVIDER_QUERY_FAILED
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_result(cls, result: ProviderResult, message: str | None = None) -> "ErrorMarker":
        """Build a marker from a failed provider result."""
        return cls(
            message=message or result.message,
            kind=result.error or ErrorKind.PROVIDER_QUERY_FAILED,
        )


class ViewContext:
    """Services shared by every view in a process.

    Usage:
        context = ViewContext(driver=MockProvider())
        view = ItemListView(surface, context)
    """

    def __init__(
        self,
        driver: ProviderDriver | None = None,
        capabilities: CapabilityCache | None = None,
        scheduler: YieldScheduler | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the context.

        Args:
            driver: Provider driver (None = no provider attached)
            capabilities: Capability cache (created for driver if omitted)
            scheduler: Yield scheduler (default interval if omitted)
            clock: Monotonic time source in seconds
            wall_clock: Local time source for clock displays
        """
        self.driver = driver
        self.clock = clock
        self.wall_clock = wall_clock
        self.capabilities = capabilities or CapabilityCache(driver, clock=clock)
        self.scheduler = scheduler or YieldScheduler()

    def acquire_provider(self) -> ProviderResult[ResourceProvider]:
        """Open a provider handle through the call boundary."""
        if self.driver is None:
            return ProviderResult.failure(ErrorKind.PROVIDER_UNAVAILABLE, "No provider attached")
        return call_provider(self.driver.open, operation="open")


class BaseView(ABC):
    """Abstract base class for views.

    One instance is bound to one surface and owns all of its state
    (provider handle, history, pagination, baselines). Instances are
    never shared between surfaces.
    """

    descriptor: ClassVar[ViewDescriptor]
    capabilities: ClassVar[frozenset[ViewCapability]] = frozenset()

    # Provider features required to mount (empty = always mountable)
    requires: ClassVar[tuple[str, ...]] = ()
    uses_provider: ClassVar[bool] = True

    empty_message: ClassVar[str] = "No data"
    error_message: ClassVar[str] = "Error loading data"

    def __init__(
        self,
        surface: RenderSurface,
        context: ViewContext,
        config: dict[str, Any] | None = None,
        poll_interval_ms: int | None = None,
    ) -> None:
        """Bind the view to a surface.

        Args:
            surface: Surface this instance draws on
            context: Shared services
            config: Materialized configuration values
            poll_interval_ms: Override of the descriptor's poll interval
        """
        self.surface = surface
        self.context = context
        self.provider: ResourceProvider | None = None
        self.zones = TouchZoneMap()
        self._dispatcher = TouchDispatcher()
        self._config = self._validated(config)
        self._poll_interval_ms = poll_interval_ms or self.descriptor.poll_interval_ms
        self._state = ViewState.UNMOUNTED
        self._last_data: Any = None
        self._reported: set[str] = set()
        self._stop_event: asyncio.Event | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.descriptor.id!r}, state={self._state.value})"

    # =========================================================================
    # Class-level contract
    # =========================================================================

    @classmethod
    def mount(cls, context: ViewContext) -> bool:
        """Decide whether this view can run with the current provider.

        Override for deeper checks. The default requires every feature
        in `requires` to be present in the capability snapshot.
        """
        if not cls.requires:
            return True
        snapshot = context.capabilities.get_capabilities()
        return all(snapshot.has(feature) for feature in cls.requires)

    @classmethod
    def can_mount(cls, context: ViewContext) -> bool:
        """Guarded mount(); any fault means "not mountable"."""
        try:
            return bool(cls.mount(context))
        except Exception as e:
            logger.debug("mount() of %s raised: %s", cls.descriptor.id, e)
            return False

    @classmethod
    def supports(cls, capability: ViewCapability) -> bool:
        return capability in cls.capabilities

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def config(self) -> dict[str, Any]:
        """Current configuration (copy)."""
        return self._config.copy()

    @property
    def poll_interval(self) -> float:
        """Seconds between refreshes."""
        return self._poll_interval_ms / 1000.0

    @property
    def last_data(self) -> Any:
        return self._last_data

    @property
    def scheduler(self) -> YieldScheduler:
        return self.context.scheduler

    def now(self) -> float:
        return self.context.clock()

    def _validated(self, config: dict[str, Any] | None) -> dict[str, Any]:
        validated, errors = validate_config(self.descriptor.config_schema, config)
        for key, message in errors.items():
            logger.warning("%s: invalid %s (%s), using default", self.descriptor.id, key, message)
        return validated

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self, config: dict[str, Any] | None = None) -> None:
        """One-time setup.

        Attempts to acquire the provider; failure leaves the handle unset
        and each poll retries through ensure_provider().

        Args:
            config: Replacement configuration values
        """
        if config is not None:
            self._config = self._validated(config)
        if self.uses_provider:
            self.ensure_provider()
        self._on_initialize()
        self._state = ViewState.INITIALIZED
        logger.debug("Initialized %r", self)

    def _on_initialize(self) -> None:
        """Override for view-specific setup."""
        pass

    def configure(self, updates: dict[str, Any]) -> dict[str, Any]:
        """Apply config updates at runtime.

        Unlike construction, invalid values are rejected rather than
        replaced by defaults.

        Returns:
            The new configuration

        Raises:
            ValidationError: If any updated value fails its field check
        """
        merged = {**self._config, **updates}
        validated, errors = validate_config(self.descriptor.config_schema, merged)
        if errors:
            raise ValidationError(f"Invalid config for {self.descriptor.id}", details=errors)
        self._config = validated
        self._on_configure()
        logger.info("%s reconfigured: %s", self.descriptor.id, ", ".join(sorted(updates)))
        return self.config

    def _on_configure(self) -> None:
        """Override to react to configure()."""
        pass

    def ensure_provider(self) -> ResourceProvider | None:
        """Return the provider handle, acquiring it if needed."""
        if self.provider is not None:
            return self.provider

        result = self.context.acquire_provider()
        if result.ok:
            self.provider = result.value
            logger.info("%s acquired provider", self.descriptor.id)
        else:
            self._report(result)
        return self.provider

    def query(
        self, func: Callable[..., Any], *args: Any, operation: str | None = None
    ) -> ProviderResult[Any]:
        """Call a provider function through the boundary.

        An "unavailable" failure drops the handle so the next poll
        re-acquires it.
        """
        result = call_provider(func, *args, operation=operation)
        if not result.ok:
            self._report(result)
            if result.error == ErrorKind.PROVIDER_UNAVAILABLE:
                self.provider = None
        return result

    def _report(self, result: ProviderResult) -> None:
        """Log a provider failure once per distinct message."""
        if result.message in self._reported:
            return
        self._reported.add(result.message)
        logger.warning(
            "%s: %s (%s)",
            self.descriptor.id,
            result.message,
            result.error.value,
            extra={"view": self.descriptor.id, "surface": getattr(self.surface, "surface_id", None)},
        )

    def stop(self) -> None:
        """Stop the view; run() returns at its next wake-up."""
        self._state = ViewState.STOPPED
        if self._stop_event is not None:
            self._stop_event.set()
        self._on_stop()

    def _on_stop(self) -> None:
        """Override for view-specific cleanup."""
        pass

    # =========================================================================
    # Data and rendering
    # =========================================================================

    @abstractmethod
    async def get_data(self) -> Any:
        """Read from the provider.

        Returns:
            Data for render(), None for "no data yet", or an ErrorMarker
        """

    @abstractmethod
    def render(self, data: Any) -> None:
        """Draw data onto the surface.

        Must not touch provider state. Record touch zones in self.zones.
        """

    def render_empty(self, data: Any = None) -> None:
        render_empty(self.surface, self.empty_message)

    def render_error(self, marker: ErrorMarker) -> None:
        render_error(self.surface, marker.message or self.error_message)

    def on_touch(self, x: int, y: int) -> bool:
        """Handle a touch in surface coordinates.

        Returns:
            True if the touch was consumed
        """
        return False

    def draw(self, data: Any) -> None:
        """Clear the surface and draw data, an error or a placeholder."""
        self.zones = TouchZoneMap()
        self.surface.set_background(Colors.BLACK)
        self.surface.set_foreground(Colors.WHITE)
        self.surface.clear()

        if data is None:
            self.render_empty(data)
        elif isinstance(data, ErrorMarker):
            if data.kind == ErrorKind.CONFIG_INVALID:
                render_needs_config(self.surface, data.details.get("missing", []))
            elif data.kind == ErrorKind.DATA_EMPTY:
                self.render_empty(data)
            else:
                self.render_error(data)
        else:
            self.render(data)

        self.surface.set_foreground(Colors.WHITE)

    def redraw(self) -> None:
        """Draw the last data again (after a touch changed view state)."""
        self._safe_draw(self._last_data)

    def _safe_draw(self, data: Any) -> None:
        try:
            self.draw(data)
        except Exception:
            logger.exception("%s: render failed", self.descriptor.id)
            self.zones = TouchZoneMap()
            self.surface.clear()
            render_error(self.surface, self.error_message)

    async def refresh(self) -> Any:
        """Run one get_data + draw cycle.

        Never raises: faults become an ErrorMarker and are drawn as such.

        Returns:
            Whatever was drawn (data, None or ErrorMarker)
        """
        if self._state == ViewState.STOPPED:
            return self._last_data
        if self._state == ViewState.UNMOUNTED:
            self.initialize()

        missing = missing_required(self.descriptor.config_schema, self._config)
        if missing:
            data: Any = ErrorMarker(
                "Needs configuration", ErrorKind.CONFIG_INVALID, {"missing": missing}
            )
        else:
            if self.uses_provider:
                self.ensure_provider()
            try:
                data = await self.get_data()
            except Exception as e:
                logger.exception("%s: get_data failed", self.descriptor.id)
                data = ErrorMarker(self.error_message, details={"exception": str(e)})

        self._last_data = data
        self._safe_draw(data)
        self._state = ViewState.RUNNING
        return data

    async def run(self) -> None:
        """Refresh every poll interval until stop() is called."""
        self._stop_event = asyncio.Event()
        if self._state == ViewState.STOPPED:
            return
        logger.info("Running %s every %.1fs", self.descriptor.id, self.poll_interval)

        while self._state != ViewState.STOPPED:
            await self.refresh()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass

    def handle_touch(self, x: int, y: int) -> bool:
        """Guarded on_touch(); only called for touches on this surface."""
        if not self.supports(ViewCapability.TOUCH):
            return False
        try:
            return bool(self.on_touch(x, y))
        except Exception:
            logger.exception("%s: touch handler failed", self.descriptor.id)
            return False


class LayoutView(BaseView):
    """View rendered with a layout strategy plus optional header and footer."""

    def items(self, data: Any) -> Sequence[Any]:
        """Extract the item list from get_data()'s result."""
        return data

    @abstractmethod
    def format_item(self, item: Any) -> RenderItem:
        """Turn one item into a RenderItem."""

    def header(self, data: Any) -> Header | str | None:
        return None

    def footer(self, data: Any) -> Footer | str | None:
        return None

    @abstractmethod
    def _layout(self, surface: RenderSurface, items: Sequence[Any], start_y: int, end_y: int) -> LayoutResult:
        ...

    def render(self, data: Any) -> None:
        items = self.items(data)
        if not items:
            self.render_empty(data)
            return

        start_y = render_header(self.surface, self.header(data))
        footer = self.footer(data)
        _, height = self.surface.get_size()
        end_y = height - 1 if footer is not None else height

        self.last_layout = self._layout(self.surface, items, start_y, end_y)
        render_footer(self.surface, footer)

    def on_touch(self, x: int, y: int) -> bool:
        return self._dispatcher.dispatch(self.zones, x, y, self._on_zone)

    def _on_zone(self, zone: TouchZone, x: int, y: int) -> bool:
        if zone.kind == ZoneKind.ITEM:
            return bool(self.on_item_touch(zone))
        return False

    def on_item_touch(self, zone: TouchZone) -> bool:
        """Override to react to a touched item."""
        return False


class GridView(LayoutView):
    """Items in a grid (compact list on narrow surfaces)."""

    min_cell_width: ClassVar[int] = 16
    cell_height: ClassVar[int] = 2
    gap_x: ClassVar[int] = 1
    gap_y: ClassVar[int] = 0
    max_items: ClassVar[int] = 50

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.grid = GridLayout(
            min_cell_width=self.min_cell_width,
            cell_height=self.cell_height,
            gap_x=self.gap_x,
            gap_y=self.gap_y,
            max_items=self.max_items,
        )
        self.last_layout: LayoutResult | None = None

    def _layout(self, surface: RenderSurface, items: Sequence[Any], start_y: int, end_y: int) -> LayoutResult:
        return self.grid.render(surface, items, self.format_item, start_y, end_y, self.zones)


class ListView(LayoutView):
    """One item per row."""

    max_items: ClassVar[int | None] = None

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.list_layout = ListLayout(self.max_items)
        self.last_layout: LayoutResult | None = None

    def _layout(self, surface: RenderSurface, items: Sequence[Any], start_y: int, end_y: int) -> LayoutResult:
        return self.list_layout.render(surface, items, self.format_item, start_y, end_y, self.zones)


class InteractiveListView(LayoutView):
    """Paginated list with scroll arrows, page indicator and item touch."""

    capabilities = frozenset({ViewCapability.TOUCH, ViewCapability.STATE})

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.pages = PaginatedList()
        self.last_layout: LayoutResult | None = None

    def _layout(self, surface: RenderSurface, items: Sequence[Any], start_y: int, end_y: int) -> LayoutResult:
        return self.pages.render(surface, items, self.format_item, start_y, end_y, self.zones)

    def _on_zone(self, zone: TouchZone, x: int, y: int) -> bool:
        width, _ = self.surface.get_size()
        if self.pages.handle_zone(zone, x, width):
            return True
        return super()._on_zone(zone, x, y)

    def get_state(self) -> dict[str, Any]:
        return self.pages.get_state()

    def set_state(self, state: dict[str, Any]) -> None:
        self.pages.set_state(state)
