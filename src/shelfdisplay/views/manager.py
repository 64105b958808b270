"""View registry and manager.

Loads view classes from the manifest, checks which of them can mount
against the current provider, suggests views for surfaces, and creates
instances. Loaded classes and mount results are cached on the manager
object; clear_cache() resets them.
"""

import logging
from dataclasses import dataclass
from typing import Any

from ..providers.base import FEATURE_ENERGY, FEATURE_FLUIDS, FEATURE_ITEMS
from ..surface.base import RenderSurface
from ..core.errors import ViewError
from .base import BaseView, ViewContext
from .manifest import ViewManifest
from .schema import default_config

logger = logging.getLogger(__name__)

MOUNTABLE_CACHE_TTL = 5.0

# Mount checks can query the provider, so refreshes suspend more often.
MOUNT_CHECK_YIELD_INTERVAL = 5


@dataclass(frozen=True)
class SuggestionRule:
    """Suggest view_id when the provider reports feature."""

    feature: str
    view_id: str
    reason: str


# Checked in order; the first rule whose view can mount wins
SUGGESTION_RULES = (
    SuggestionRule(FEATURE_ITEMS, "item_changes", "Item storage detected"),
    SuggestionRule(FEATURE_ENERGY, "energy_status", "Energy storage detected"),
    SuggestionRule(FEATURE_FLUIDS, "fluid_list", "Fluid storage detected"),
)

# Preferred order of views per feature when filling several surfaces
MONITOR_PRIORITY: tuple[tuple[str, tuple[str, ...]], ...] = (
    (FEATURE_ITEMS, ("item_list", "item_changes", "item_browser")),
    (FEATURE_ENERGY, ("energy_status",)),
    (FEATURE_FLUIDS, ("fluid_list", "fluid_changes")),
)


@dataclass(frozen=True)
class ViewInfo:
    """Summary of a view class for menus and config tools."""

    id: str
    name: str
    description: str
    poll_interval_ms: int
    has_config: bool
    config_schema: tuple


class ViewManager:
    """Discovers, checks and instantiates views.

    Usage:
        manager = ViewManager(ViewManifest.builtin(), context)
        view_id, reason = manager.suggest_view()
        view, error = manager.create_instance(view_id, surface, {})
    """

    def __init__(
        self,
        manifest: ViewManifest,
        context: ViewContext,
        mountable_ttl: float = MOUNTABLE_CACHE_TTL,
        default_view: str = "clock",
    ) -> None:
        """Initialize the manager.

        Args:
            manifest: Declared views
            context: Shared services handed to mount() and new instances
            mountable_ttl: Seconds a mountable-views result stays valid
            default_view: Preferred fallback when no rule matches
        """
        self.manifest = manifest
        self.context = context
        self.default_view = default_view
        self._mountable_ttl = mountable_ttl
        self._classes: dict[str, type[BaseView]] = {}
        self._mount_errors: dict[str, str] = {}
        self._mountable: list[str] | None = None
        self._mountable_at = 0.0

    # =========================================================================
    # Loading
    # =========================================================================

    def get_available_views(self) -> list[str]:
        """All declared view ids, in manifest order."""
        return self.manifest.ids()

    def load(self, view_id: str) -> type[BaseView] | None:
        """Load (and cache) the class for view_id.

        Returns:
            The view class, or None if it is unknown or fails to import
        """
        cached = self._classes.get(view_id)
        if cached is not None:
            return cached

        if view_id not in self.manifest:
            logger.debug("Unknown view: %s", view_id)
            return None

        try:
            view_class = self.manifest.resolve(view_id)
        except ViewError as e:
            logger.error("Error loading view %s: %s", view_id, e)
            return None

        if not isinstance(view_class, type) or not issubclass(view_class, BaseView):
            logger.error("Invalid view %s: not a BaseView subclass", view_id)
            return None

        self._classes[view_id] = view_class
        return view_class

    def can_mount(self, view_id: str) -> bool:
        """Check whether a view can run with the current provider.

        Never raises. A failing mount() is logged once per distinct error.
        """
        view_class = self.load(view_id)
        if view_class is None:
            return False

        try:
            result = bool(view_class.mount(self.context))
        except Exception as e:
            error = str(e) or e.__class__.__name__
            if self._mount_errors.get(view_id) != error:
                logger.warning("Mount error for %s: %s", view_id, error)
                self._mount_errors[view_id] = error
            return False

        self._mount_errors.pop(view_id, None)
        return result

    def get_mountable_views(self, force_refresh: bool = False) -> list[str]:
        """Mountable view ids, cached for a short TTL.

        Returns:
            Copy of the cached list
        """
        now = self.context.clock()
        if (
            not force_refresh
            and self._mountable is not None
            and now - self._mountable_at < self._mountable_ttl
        ):
            return list(self._mountable)

        mountable = [view_id for view_id in self.get_available_views() if self.can_mount(view_id)]
        return self._store_mountable(mountable)

    async def refresh_mountable(self) -> list[str]:
        """Recompute the mountable cache from an event loop task.

        Suspends through the context scheduler between mount checks, so a
        large manifest does not stall other surfaces. Later calls to
        get_mountable_views() are served from the refreshed cache.
        """
        mountable: list[str] = []
        for count, view_id in enumerate(self.get_available_views(), start=1):
            if self.can_mount(view_id):
                mountable.append(view_id)
            await self.context.scheduler.check(count, MOUNT_CHECK_YIELD_INTERVAL)
        return self._store_mountable(mountable)

    def _store_mountable(self, mountable: list[str]) -> list[str]:
        self._mountable = mountable
        self._mountable_at = self.context.clock()
        logger.debug("Mountable views: %s", ", ".join(mountable) or "none")
        return list(mountable)

    def get_view_info(self, view_id: str) -> ViewInfo | None:
        view_class = self.load(view_id)
        if view_class is None:
            return None
        descriptor = view_class.descriptor
        return ViewInfo(
            id=view_id,
            name=descriptor.name,
            description=descriptor.description,
            poll_interval_ms=descriptor.poll_interval_ms,
            has_config=bool(descriptor.config_schema),
            config_schema=descriptor.config_schema,
        )

    def get_default_config(self, view_id: str) -> dict[str, Any]:
        """Config dict with every schema default set ({} if unknown)."""
        view_class = self.load(view_id)
        if view_class is None:
            return {}
        return {
            key: value
            for key, value in default_config(view_class.descriptor.config_schema).items()
            if value is not None
        }

    def clear_cache(self) -> None:
        """Drop loaded classes and cached mount results."""
        self._classes.clear()
        self._mount_errors.clear()
        self.invalidate_mountable()
        logger.debug("View cache cleared")

    def invalidate_mountable(self) -> None:
        self._mountable = None
        self._mountable_at = 0.0

    # =========================================================================
    # Suggestions
    # =========================================================================

    def suggest_view(self) -> tuple[str | None, str]:
        """Pick the best view for a single surface.

        Returns:
            Tuple of (view id or None, reason)
        """
        snapshot = self.context.capabilities.get_capabilities()
        for rule in SUGGESTION_RULES:
            if snapshot.has(rule.feature) and self.can_mount(rule.view_id):
                return rule.view_id, rule.reason

        mountable = self.get_mountable_views()
        if self.default_view in mountable:
            return self.default_view, "Default fallback"
        if mountable:
            return mountable[0], "First available view"
        return None, "No views available"

    def suggest_views_for_monitors(self, count: int) -> list[tuple[str, str]]:
        """Assign views to count surfaces, preferring variety.

        Returns:
            One (view id, reason) per surface; empty if nothing can mount
        """
        mountable = self.get_mountable_views()
        if not mountable or count <= 0:
            return []

        snapshot = self.context.capabilities.get_capabilities()
        prioritized: list[str] = []
        for feature, view_ids in MONITOR_PRIORITY:
            if not snapshot.has(feature):
                continue
            for view_id in view_ids:
                if view_id in mountable and view_id not in prioritized:
                    prioritized.append(view_id)

        for view_id in mountable:
            if view_id not in prioritized:
                prioritized.append(view_id)

        return [
            (
                prioritized[i % len(prioritized)],
                "Auto-assigned" if i < len(prioritized) else "Cycled",
            )
            for i in range(count)
        ]

    # =========================================================================
    # Instances
    # =========================================================================

    def create_instance(
        self,
        view_id: str,
        surface: RenderSurface,
        config: dict[str, Any] | None = None,
        poll_interval_ms: int | None = None,
    ) -> tuple[BaseView | None, str | None]:
        """Create and initialize a view instance.

        Returns:
            Tuple of (instance, None) or (None, error message)
        """
        view_class = self.load(view_id)
        if view_class is None:
            return None, f"View not found: {view_id}"

        try:
            instance = view_class(surface, self.context, config or {}, poll_interval_ms)
            instance.initialize()
        except Exception as e:
            logger.error("Failed to create %s: %s", view_id, e)
            return None, str(e) or e.__class__.__name__

        logger.info("Created %s", view_id)
        return instance, None
