"""View manifest.

Maps view ids to "module:Class" import paths. Classes are imported only
when the manager first needs them.
"""

import importlib
import logging
from typing import Iterator, Mapping

from ..core.errors import ViewError

logger = logging.getLogger(__name__)

BUILTIN_VIEWS: dict[str, str] = {
    "clock": "shelfdisplay.views.clock:ClockView",
    "item_list": "shelfdisplay.views.resource_list:ItemListView",
    "fluid_list": "shelfdisplay.views.resource_list:FluidListView",
    "item_browser": "shelfdisplay.views.resource_browser:ItemBrowserView",
    "item_changes": "shelfdisplay.views.resource_changes:ItemChangesView",
    "fluid_changes": "shelfdisplay.views.resource_changes:FluidChangesView",
    "item_gauge": "shelfdisplay.views.resource_gauge:ItemGaugeView",
    "energy_status": "shelfdisplay.views.energy_status:EnergyStatusView",
}


class ViewManifest:
    """Ordered view id -> import path mapping.

    Usage:
        manifest = ViewManifest.builtin().merged(config.views)
        view_class = manifest.resolve("clock")
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __contains__(self, view_id: object) -> bool:
        return view_id in self._entries

    @classmethod
    def builtin(cls) -> "ViewManifest":
        return cls(BUILTIN_VIEWS)

    def merged(self, extra: Mapping[str, str] | None) -> "ViewManifest":
        """Return a manifest with extra entries added (or overriding)."""
        entries = dict(self._entries)
        entries.update(extra or {})
        return ViewManifest(entries)

    def ids(self) -> list[str]:
        return list(self._entries)

    def path(self, view_id: str) -> str | None:
        return self._entries.get(view_id)

    def resolve(self, view_id: str) -> type:
        """Import and return the class registered for view_id.

        Raises:
            ViewError: If the id is unknown or importing its target fails for any reason
        """
        target = self._entries.get(view_id)
        if target is None:
            raise ViewError(f"Unknown view: {view_id}")

        module_name, _, attr = target.partition(":")
        try:
            module = importlib.import_module(module_name)
            return getattr(module, attr)
        except Exception as e:
            raise ViewError(
                f"Cannot import view {view_id}",
                details={"target": target},
                cause=e,
            ) from e
