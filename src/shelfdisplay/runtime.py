"""Multi-surface display runtime.

Binds one view instance to each configured surface, runs every instance
as a task on one asyncio event loop, and routes touch events to the
instance that owns the touched surface.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .core.config import Config, SurfaceConfig
from .core.scheduler import YieldScheduler
from .providers.base import ProviderDriver
from .providers.capabilities import CapabilityCache
from .surface.base import RenderSurface
from .surface.buffer import BufferSurface
from .surface.image import save_snapshot
from .views.base import BaseView, ViewContext
from .views.manager import ViewManager
from .views.manifest import ViewManifest

logger = logging.getLogger(__name__)


@dataclass
class SurfaceSlot:
    """One surface and the view currently assigned to it."""

    config: SurfaceConfig
    surface: RenderSurface
    view: BaseView | None = None
    view_id: str | None = None
    reason: str = ""
    task: asyncio.Task | None = None

    @property
    def id(self) -> str:
        return self.config.id


class DisplaySystem:
    """Runtime coordinator.

    Usage:
        system = DisplaySystem(config, driver=MockProvider())
        await system.start()
        system.submit_touch("main", 3, 4)
        await system.stop()
    """

    def __init__(
        self,
        config: Config,
        driver: ProviderDriver | None = None,
        surfaces: dict[str, RenderSurface] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the runtime.

        Args:
            config: Validated configuration
            driver: Provider driver (None = no provider)
            surfaces: Surface objects by id (BufferSurface created for missing ids)
            clock: Monotonic time source
        """
        self.config = config
        self.context = ViewContext(
            driver=driver,
            capabilities=CapabilityCache(driver, ttl=config.capabilities.ttl_seconds, clock=clock),
            scheduler=YieldScheduler(config.scheduler.yield_interval),
            clock=clock,
        )
        self.manager = ViewManager(
            ViewManifest.builtin().merged(config.views),
            self.context,
            mountable_ttl=config.manager.mountable_ttl_seconds,
            default_view=config.manager.default_view,
        )
        self._surfaces = dict(surfaces or {})
        self.slots: dict[str, SurfaceSlot] = {}
        self._touches: asyncio.Queue[tuple[str, int, int]] | None = None
        self._touch_task: asyncio.Task | None = None
        self._retired: set[asyncio.Task] = set()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # Assignment
    # =========================================================================

    def assign(self) -> None:
        """Create slots and assign a view to each surface.

        Surfaces with an explicit view get it; the rest share the
        manager's suggestions.
        """
        self.slots = {}
        for surface_config in self.config.surfaces:
            surface = self._surfaces.get(surface_config.id) or BufferSurface(
                surface_config.width, surface_config.height, surface_config.id
            )
            self.slots[surface_config.id] = SurfaceSlot(surface_config, surface)

        auto = [slot for slot in self.slots.values() if not slot.config.view]
        suggestions = self.manager.suggest_views_for_monitors(len(auto)) if auto else []

        for slot in self.slots.values():
            if slot.config.view:
                self.set_view(slot.id, slot.config.view, reason="Configured")

        for slot, (view_id, reason) in zip(auto, suggestions):
            self.set_view(slot.id, view_id, reason=reason)

        for slot in auto[len(suggestions):]:
            logger.warning("No view available for surface %s", slot.id)

    def set_view(self, surface_id: str, view_id: str, reason: str = "Manual") -> bool:
        """Replace the view on a surface.

        Settings from the surface config apply only to its configured view.

        Returns:
            True if the new view was created
        """
        slot = self.slots.get(surface_id)
        if slot is None:
            logger.warning("Unknown surface: %s", surface_id)
            return False

        configured = view_id == slot.config.view
        view, error = self.manager.create_instance(
            view_id,
            slot.surface,
            slot.config.settings if configured else self.manager.get_default_config(view_id),
            slot.config.poll_interval_ms if configured else None,
        )
        if view is None:
            logger.error("Cannot show %s on %s: %s", view_id, surface_id, error)
            return False

        self._stop_slot(slot)
        slot.view = view
        slot.view_id = view_id
        slot.reason = reason
        logger.info(
            "Surface %s -> %s (%s)",
            surface_id,
            view_id,
            reason,
            extra={"surface": surface_id, "view": view_id},
        )

        if self._running:
            slot.task = asyncio.create_task(view.run(), name=f"view:{surface_id}")
        return True

    def cycle_view(self, surface_id: str) -> str | None:
        """Switch a surface to the next mountable view.

        Returns:
            The new view id, or None if nothing changed
        """
        slot = self.slots.get(surface_id)
        if slot is None:
            return None

        mountable = self.manager.get_mountable_views()
        if not mountable:
            return None
        if slot.view_id in mountable:
            next_id = mountable[(mountable.index(slot.view_id) + 1) % len(mountable)]
        else:
            next_id = mountable[0]

        if next_id == slot.view_id:
            return None
        return next_id if self.set_view(surface_id, next_id, reason="Cycled by touch") else None

    def _stop_slot(self, slot: SurfaceSlot) -> None:
        if slot.view is not None:
            slot.view.stop()
        task, slot.task = slot.task, None
        if task is None:
            return
        task.cancel()
        self._retired.add(task)
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Task) -> None:
        """Collect the outcome of a replaced view task."""
        self._retired.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Replaced view task %s failed", task.get_name(), exc_info=error)

    # =========================================================================
    # Touch
    # =========================================================================

    def submit_touch(self, surface_id: str, x: int, y: int) -> None:
        """Queue a touch event for the touch loop."""
        if self._touches is None:
            logger.debug("Touch on %s dropped: not running", surface_id)
            return
        self._touches.put_nowait((surface_id, x, y))

    def handle_touch(self, surface_id: str, x: int, y: int) -> bool:
        """Route a touch to the view that owns the surface.

        A touch the view does not consume on the header row switches to
        the next view.

        Returns:
            True if the touch had an effect
        """
        slot = self.slots.get(surface_id)
        if slot is None or slot.view is None:
            return False

        if slot.view.handle_touch(x, y):
            slot.view.redraw()
            return True

        if y == 0:
            return self.cycle_view(surface_id) is not None
        return False

    async def _touch_loop(self, touches: asyncio.Queue[tuple[str, int, int]]) -> None:
        while True:
            surface_id, x, y = await touches.get()
            try:
                self.handle_touch(surface_id, x, y)
            except Exception:
                logger.exception("Touch on %s failed", surface_id)
            finally:
                touches.task_done()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Assign views (if needed) and start every view loop."""
        if self._running:
            return
        if not self.slots:
            await self.manager.refresh_mountable()
            self.assign()

        self._running = True
        self._touches = asyncio.Queue()
        self._touch_task = asyncio.create_task(self._touch_loop(self._touches), name="touch")
        for slot in self.slots.values():
            if slot.view is not None:
                slot.task = asyncio.create_task(slot.view.run(), name=f"view:{slot.id}")
        logger.info("Display system started with %d surface(s)", len(self.slots))

    async def stop(self) -> None:
        """Stop every view loop and the touch loop."""
        if not self._running:
            return
        self._running = False

        tasks = list(self._retired)
        for slot in self.slots.values():
            if slot.view is not None:
                slot.view.stop()
            if slot.task is not None:
                tasks.append(slot.task)
                slot.task = None
        if self._touch_task is not None:
            self._touch_task.cancel()
            tasks.append(self._touch_task)
            self._touch_task = None

        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._touches = None
        logger.info("Display system stopped")

    async def run(self, duration: float | None = None, stop_event: asyncio.Event | None = None) -> None:
        """Run until duration elapses or stop_event is set."""
        await self.start()
        stop_event = stop_event or asyncio.Event()
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=duration)
        except asyncio.TimeoutError:
            pass
        finally:
            await self.stop()

    def save_snapshots(self, directory: str | Path) -> list[Path]:
        """Write a PNG of every in-memory surface."""
        directory = Path(directory)
        paths = []
        for slot in self.slots.values():
            if isinstance(slot.surface, BufferSurface):
                paths.append(save_snapshot(slot.surface, directory / f"{slot.id}.png"))
        return paths
