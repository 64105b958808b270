"""Tests for the view manifest and ViewManager."""

import asyncio
import logging

import pytest

from shelfdisplay.core.errors import ViewError
from shelfdisplay.providers.capabilities import CapabilityCache
from shelfdisplay.providers.mock import MockProvider
from shelfdisplay.views import BaseView, ClockView, ViewContext, ViewDescriptor, ViewManager, ViewManifest, ViewState
from shelfdisplay.views.manifest import BUILTIN_VIEWS


class FailingMountView(BaseView):
    descriptor = ViewDescriptor(id="bad", name="Bad", description="")

    @classmethod
    def mount(cls, context):
        raise RuntimeError("mount exploded")

    async def get_data(self):
        return None

    def render(self, data):
        pass


class FailingInitView(FailingMountView):
    def __init__(self, *args, **kwargs):
        raise RuntimeError("cannot build")


class StaticManifest(ViewManifest):
    """Manifest serving already-imported classes."""

    def __init__(self, classes):
        super().__init__({view_id: f"static:{view_id}" for view_id in classes})
        self.classes = classes

    def resolve(self, view_id):
        return self.classes[view_id]


@pytest.fixture
def raising_module(tmp_path, monkeypatch):
    """Importable module whose body raises."""
    (tmp_path / "shelf_raising_view.py").write_text("raise RuntimeError(\"driver table missing\")\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    return "shelf_raising_view:View"


def make_context(clock, **provider_kwargs):
    provider = MockProvider(**provider_kwargs)
    return ViewContext(provider, CapabilityCache(provider, clock=clock), clock=clock)


class TestViewManifest:
    """Declared views."""

    def test_builtin_ids(self):
        manifest = ViewManifest.builtin()
        assert manifest.ids() == list(BUILTIN_VIEWS)
        assert "clock" in manifest

    def test_merged_overrides(self):
        manifest = ViewManifest.builtin().merged({"clock": "x.y:Z", "new": "a.b:C"})

        assert manifest.path("clock") == "x.y:Z"
        assert manifest.ids()[-1] == "new"
        assert ViewManifest.builtin().path("clock") == BUILTIN_VIEWS["clock"]

    def test_resolve(self):
        assert ViewManifest.builtin().resolve("clock") is ClockView

    def test_resolve_errors(self):
        manifest = ViewManifest({"broken": "shelfdisplay.views.nope:Missing"})
        with pytest.raises(ViewError):
            manifest.resolve("broken")
        with pytest.raises(ViewError):
            manifest.resolve("unknown")

    def test_module_raising_at_import(self, raising_module):
        manifest = ViewManifest({"raising": raising_module})
        with pytest.raises(ViewError) as excinfo:
            manifest.resolve("raising")
        assert isinstance(excinfo.value.cause, RuntimeError)


class TestLoading:
    """Class loading and info."""

    def test_unknown_and_broken_views(self, context):
        manifest = ViewManifest.builtin().merged(
            {
                "broken": "shelfdisplay.views.nope:Missing",
                "not_a_view": "shelfdisplay.views.schema:ConfigField",
            }
        )
        manager = ViewManager(manifest, context)

        assert manager.load("nope") is None
        assert manager.load("broken") is None
        assert manager.load("not_a_view") is None
        assert manager.load("clock") is ClockView

    def test_view_info(self, context):
        manager = ViewManager(ViewManifest.builtin(), context)
        info = manager.get_view_info("clock")

        assert info.name == "Clock"
        assert info.has_config
        assert not manager.get_view_info("energy_status").has_config
        assert manager.get_view_info("missing") is None

    def test_default_config(self, context):
        manager = ViewManager(ViewManifest.builtin(), context)

        assert manager.get_default_config("item_list") == {
            "warning_below": 64,
            "sort_by": "amount",
            "show_craftable": "all",
        }
        assert manager.get_default_config("item_gauge") == {"warning_below": 64}
        assert manager.get_default_config("missing") == {}


class TestMountable:
    """Mount checks and the mountable cache."""

    def test_all_features(self, context):
        manager = ViewManager(ViewManifest.builtin(), context)
        assert manager.get_mountable_views() == list(BUILTIN_VIEWS)

    def test_no_provider(self, empty_context):
        manager = ViewManager(ViewManifest.builtin(), empty_context)
        assert manager.get_mountable_views() == ["clock"]

    def test_cached_for_ttl(self, clock):
        context = make_context(clock)
        manager = ViewManager(ViewManifest.builtin(), context, mountable_ttl=5.0)
        assert "item_list" in manager.get_mountable_views()

        context.driver.disconnect()
        clock.advance(3)
        assert "item_list" in manager.get_mountable_views()

        clock.advance(3)
        assert manager.get_mountable_views() == ["clock"]

    def test_returns_copy(self, context):
        manager = ViewManager(ViewManifest.builtin(), context)
        manager.get_mountable_views().clear()
        assert manager.get_mountable_views()

    def test_force_refresh_and_invalidate(self, clock):
        context = make_context(clock)
        manager = ViewManager(ViewManifest.builtin(), context)
        manager.get_mountable_views()

        context.driver.disconnect()
        context.capabilities.invalidate()
        assert manager.get_mountable_views(force_refresh=True) == ["clock"]

        context.driver.connect()
        context.capabilities.invalidate()
        manager.invalidate_mountable()
        assert len(manager.get_mountable_views()) == len(BUILTIN_VIEWS)

    def test_view_raising_at_import_is_skipped(self, context, raising_module):
        manager = ViewManager(ViewManifest.builtin().merged({"raising": raising_module}), context)

        assert not manager.can_mount("raising")
        assert "raising" not in manager.get_mountable_views()
        assert manager.suggest_view() == ("item_changes", "Item storage detected")
        assert len(manager.suggest_views_for_monitors(3)) == 3

    def test_mount_error_logged_once(self, context, caplog):
        manager = ViewManager(StaticManifest({"bad": FailingMountView}), context)
        with caplog.at_level(logging.WARNING, logger="shelfdisplay.views.manager"):
            for _ in range(3):
                assert not manager.can_mount("bad")

        messages = [r.getMessage() for r in caplog.records if "Mount error" in r.getMessage()]
        assert messages == ["Mount error for bad: mount exploded"]

    @pytest.mark.asyncio
    async def test_refresh_suspends_between_mount_checks(self, context):
        classes = {f"clock_{i:02d}": ClockView for i in range(30)}
        manager = ViewManager(StaticManifest(classes), context)
        seen_during_refresh = []

        async def other_surface():
            seen_during_refresh.append(manager._mountable is None)

        before = context.scheduler.suspensions
        mountable, _ = await asyncio.gather(manager.refresh_mountable(), other_surface())

        assert seen_during_refresh == [True]
        assert context.scheduler.suspensions - before == 6
        assert mountable == sorted(classes)
        assert manager.get_mountable_views() == mountable

    @pytest.mark.asyncio
    async def test_refresh_feeds_cache(self, context, raising_module):
        manager = ViewManager(ViewManifest.builtin().merged({"raising": raising_module}), context)
        refreshed = await manager.refresh_mountable()
        assert "raising" not in refreshed

        context.driver.disconnect()
        context.capabilities.invalidate()
        assert manager.get_mountable_views() == refreshed
        assert manager.get_mountable_views(force_refresh=True) == ["clock"]


class TestSuggestions:
    """View suggestions for one or more surfaces."""

    def test_items_first(self, context):
        manager = ViewManager(ViewManifest.builtin(), context)
        assert manager.suggest_view() == ("item_changes", "Item storage detected")

    def test_energy_only(self, clock):
        manager = ViewManager(ViewManifest.builtin(), make_context(clock, features=["energy"]))
        assert manager.suggest_view() == ("energy_status", "Energy storage detected")

    def test_fluids_only(self, clock):
        manager = ViewManager(ViewManifest.builtin(), make_context(clock, features=["fluids"]))
        assert manager.suggest_view() == ("fluid_list", "Fluid storage detected")

    def test_default_fallback(self, empty_context):
        manager = ViewManager(ViewManifest.builtin(), empty_context)
        assert manager.suggest_view() == ("clock", "Default fallback")

    def test_first_available(self, empty_context):
        manifest = ViewManifest({"clock": BUILTIN_VIEWS["clock"]})
        manager = ViewManager(manifest, empty_context, default_view="missing")
        assert manager.suggest_view() == ("clock", "First available view")

    def test_nothing_available(self, empty_context):
        manifest = ViewManifest({"item_list": BUILTIN_VIEWS["item_list"]})
        manager = ViewManager(manifest, empty_context)
        assert manager.suggest_view() == (None, "No views available")

    def test_multi_surface_priority(self, context):
        manager = ViewManager(ViewManifest.builtin(), context)
        suggestions = manager.suggest_views_for_monitors(10)

        assert [view_id for view_id, _ in suggestions[:6]] == [
            "item_list",
            "item_changes",
            "item_browser",
            "energy_status",
            "fluid_list",
            "fluid_changes",
        ]
        assert suggestions[7] == ("item_gauge", "Auto-assigned")
        assert suggestions[8] == ("item_list", "Cycled")

    def test_multi_surface_without_provider(self, empty_context):
        manager = ViewManager(ViewManifest.builtin(), empty_context)
        assert manager.suggest_views_for_monitors(2) == [
            ("clock", "Auto-assigned"),
            ("clock", "Cycled"),
        ]
        assert manager.suggest_views_for_monitors(0) == []


class TestInstances:
    """Instance creation."""

    def test_create_instance(self, context, surface):
        manager = ViewManager(ViewManifest.builtin(), context)
        view, error = manager.create_instance("item_list", surface, {"sort_by": "name"}, 500)

        assert error is None
        assert view.state == ViewState.INITIALIZED
        assert view.config["sort_by"] == "name"
        assert view.poll_interval == 0.5

    def test_unknown_view(self, context, surface):
        manager = ViewManager(ViewManifest.builtin(), context)
        assert manager.create_instance("nope", surface) == (None, "View not found: nope")

    def test_constructor_failure(self, context, surface):
        manager = ViewManager(StaticManifest({"bad": FailingInitView}), context)
        assert manager.create_instance("bad", surface) == (None, "cannot build")

    def test_clear_cache(self, context):
        manager = ViewManager(ViewManifest.builtin(), context)
        manager.load("clock")
        manager.clear_cache()
        assert manager.load("clock") is ClockView
