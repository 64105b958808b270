"""Views subsystem.

Provides:
- BaseView lifecycle, ViewContext and the grid/list/interactive families
- Change tracking engine
- Built-in views
- Manifest and ViewManager
"""

from .base import (
    BaseView,
    ErrorMarker,
    GridView,
    InteractiveListView,
    ListView,
    ViewCapability,
    ViewContext,
    ViewDescriptor,
    ViewState,
)
from .changes import ChangeRecord, ChangeTracker, ResourceSnapshot, ShowMode, TrackerStatus
from .clock import ClockView
from .energy_status import EnergyStatusView
from .manager import ViewManager
from .manifest import ViewManifest
from .resource_browser import ItemBrowserView
from .resource_changes import FluidChangesView, ItemChangesView
from .resource_gauge import ItemGaugeView
from .resource_list import FluidListView, ItemListView
from .schema import ConfigField, FieldType

__all__ = [
    # Lifecycle
    "BaseView",
    "ErrorMarker",
    "GridView",
    "InteractiveListView",
    "ListView",
    "ViewCapability",
    "ViewContext",
    "ViewDescriptor",
    "ViewState",
    # Change tracking
    "ChangeRecord",
    "ChangeTracker",
    "ResourceSnapshot",
    "ShowMode",
    "TrackerStatus",
    # Built-in views
    "ClockView",
    "EnergyStatusView",
    "ItemBrowserView",
    "ItemChangesView",
    "FluidChangesView",
    "ItemGaugeView",
    "ItemListView",
    "FluidListView",
    # Registry
    "ViewManager",
    "ViewManifest",
    # Config
    "ConfigField",
    "FieldType",
]
