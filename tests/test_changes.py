"""Tests for snapshots, diffs and the change tracker."""

import pytest

from shelfdisplay.core.scheduler import YieldScheduler
from shelfdisplay.providers.base import ResourceEntry
from shelfdisplay.providers.boundary import ErrorKind, ProviderResult
from shelfdisplay.views.changes import (
    ChangeTracker,
    ResourceSnapshot,
    ShowMode,
    TrackerStatus,
    diff_snapshots,
    diff_snapshots_async,
    take_snapshot,
    totals,
)


def snap(**amounts):
    return ResourceSnapshot(amounts)


class ScriptedSampler:
    """Sampler returning queued snapshots (or failures) in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def push(self, result):
        self.results.append(result)

    async def __call__(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, ProviderResult):
            return result
        return ProviderResult.success(result)


class TestTakeSnapshot:
    """Building snapshots from provider samples."""

    @pytest.mark.asyncio
    async def test_skips_empty_and_non_positive(self):
        entries = [
            ResourceEntry("a", 5),
            ResourceEntry("b", 0),
            ResourceEntry("c", -3),
            ResourceEntry("", 9),
        ]
        snapshot = await take_snapshot(entries, YieldScheduler())
        assert dict(snapshot.amounts) == {"a": 5}

    @pytest.mark.asyncio
    async def test_duplicates_are_summed(self):
        entries = [ResourceEntry("a", 5, "Alpha"), ResourceEntry("a", 7)]
        snapshot = await take_snapshot(entries, YieldScheduler())
        assert snapshot.get("a") == 12
        assert snapshot.name("a") == "Alpha"

    @pytest.mark.asyncio
    async def test_large_sample_suspends(self):
        scheduler = YieldScheduler()
        entries = [ResourceEntry(f"r{i}", 1) for i in range(1000)]
        snapshot = await take_snapshot(entries, scheduler)

        assert len(snapshot) == 1000
        assert scheduler.suspensions >= 10

    def test_snapshot_is_read_only(self):
        snapshot = snap(a=1)
        with pytest.raises(TypeError):
            snapshot.amounts["a"] = 2


class TestDiffSnapshots:
    """Change detection rules."""

    def test_gain(self):
        records = diff_snapshots(snap(iron=100), snap(iron=140))

        assert [(r.id, r.delta) for r in records] == [("iron", 40)]
        assert totals(records) == (40, 0)

    def test_depleted_resource_is_a_loss(self):
        records = diff_snapshots(snap(copper=50), snap())
        assert [(r.id, r.delta, r.current) for r in records] == [("copper", -50, 0)]

    def test_gains_mode_hides_losses(self):
        assert diff_snapshots(snap(copper=50), snap(), mode=ShowMode.GAINS) == []

    def test_losses_mode_hides_gains(self):
        records = diff_snapshots(snap(a=10, b=10), snap(a=15, b=5), mode=ShowMode.LOSSES)
        assert [r.id for r in records] == ["b"]

    def test_new_resource_is_a_gain(self):
        records = diff_snapshots(snap(), snap(gold=3))
        assert records[0].baseline == 0
        assert records[0].is_gain

    def test_min_change_threshold(self):
        baseline = snap(a=100, b=100, c=100)
        current = snap(a=104, b=105, c=95)
        records = diff_snapshots(baseline, current, min_change=5)

        assert sorted(r.id for r in records) == ["b", "c"]

    def test_zero_deltas_never_reported(self):
        assert diff_snapshots(snap(a=5), snap(a=5), min_change=0) == []

    def test_sorted_by_magnitude(self):
        records = diff_snapshots(snap(a=100, b=100, c=100), snap(a=90, b=150, c=120))
        assert [r.id for r in records] == ["b", "c", "a"]

    def test_reported_iff_rule_holds(self):
        baseline = snap(a=10, b=20, c=30, d=40)
        current = snap(a=12, b=20, c=10, e=7)
        for mode in ShowMode:
            for min_change in (1, 2, 3, 20, 41):
                reported = {r.id for r in diff_snapshots(baseline, current, min_change, mode)}
                for rid in set(baseline) | set(current):
                    delta = current.get(rid) - baseline.get(rid)
                    expected = delta != 0 and abs(delta) >= min_change and mode.accepts(delta)
                    assert (rid in reported) == expected

    def test_repeated_calls_agree(self):
        baseline = snap(a=1, b=2)
        current = snap(a=3, c=4)
        first = diff_snapshots(baseline, current)
        second = diff_snapshots(baseline, current)
        assert first == second

    def test_snapshot_against_itself_has_no_changes(self):
        baseline = snap(iron=640, gold=3, dirt=0, cobblestone=12_000, redstone=1)
        for mode in ShowMode:
            for min_change in (0, 1, 5, 1000):
                assert diff_snapshots(baseline, baseline, min_change, mode) == []

    @pytest.mark.asyncio
    async def test_async_matches_sync(self):
        baseline = snap(**{f"r{i}": i + 1 for i in range(300)})
        current = snap(**{f"r{i}": i * 2 + 1 for i in range(150, 450)})
        expected = diff_snapshots(baseline, current)
        result = await diff_snapshots_async(baseline, current, YieldScheduler())

        assert sorted(result, key=lambda r: r.id) == sorted(expected, key=lambda r: r.id)


class TestChangeTracker:
    """Rolling baseline state machine."""

    @pytest.mark.asyncio
    async def test_first_poll_captures_baseline(self, clock):
        tracker = ChangeTracker(ScriptedSampler(snap(iron=100, gold=5)), clock=clock)
        update = await tracker.poll()

        assert update.status == TrackerStatus.BASELINE_CAPTURED
        assert update.baseline_count == 2
        assert tracker.baseline is not None

    @pytest.mark.asyncio
    async def test_tracks_changes_after_baseline(self, clock):
        sampler = ScriptedSampler(snap(iron=100), snap(iron=140))
        tracker = ChangeTracker(sampler, clock=clock)
        await tracker.poll()
        clock.advance(5)
        update = await tracker.poll()

        assert update.status == TrackerStatus.TRACKING
        assert [(r.id, r.delta) for r in update.changes] == [("iron", 40)]
        assert update.changes.total_gains == 40
        assert update.changes.total_losses == 0
        assert update.elapsed == 5
        assert update.remaining == 55

    @pytest.mark.asyncio
    async def test_empty_first_sample_waits(self, clock):
        tracker = ChangeTracker(ScriptedSampler(snap()), clock=clock)
        update = await tracker.poll()

        assert update.status == TrackerStatus.WAITING
        assert tracker.baseline is None

    @pytest.mark.asyncio
    async def test_period_expiry_rebaselines(self, clock):
        sampler = ScriptedSampler(snap(a=1), snap(a=5), snap(a=9, b=2, c=3))
        tracker = ChangeTracker(sampler, period_seconds=60, clock=clock)
        await tracker.poll()
        clock.advance(10)
        await tracker.poll()
        assert tracker.latest() is not None

        clock.advance(50)
        update = await tracker.poll()

        assert update.status == TrackerStatus.PERIOD_RESET
        assert update.baseline_count == 3
        assert tracker.period_start == clock.now
        assert tracker.latest() is None
        assert tracker.baseline.get("a") == 9

    @pytest.mark.asyncio
    async def test_rebaseline_then_unchanged_sample_reports_nothing(self, clock):
        sampler = ScriptedSampler(snap(a=1), snap(a=7, b=2), snap(a=7, b=2))
        tracker = ChangeTracker(sampler, period_seconds=10, clock=clock)
        await tracker.poll()
        clock.advance(10)
        assert (await tracker.poll()).status == TrackerStatus.PERIOD_RESET

        clock.advance(1)
        update = await tracker.poll()
        assert update.status == TrackerStatus.TRACKING
        assert len(update.changes) == 0

    @pytest.mark.asyncio
    async def test_failed_sample_keeps_state(self, clock):
        failure = ProviderResult.failure(ErrorKind.PROVIDER_QUERY_FAILED, "boom")
        sampler = ScriptedSampler(snap(a=1), failure, snap(a=3))
        tracker = ChangeTracker(sampler, clock=clock)
        await tracker.poll()
        start = tracker.period_start
        baseline = tracker.baseline

        clock.advance(3)
        update = await tracker.poll()
        assert update.status == TrackerStatus.FAILED
        assert update.error == ErrorKind.PROVIDER_QUERY_FAILED
        assert tracker.baseline is baseline
        assert tracker.period_start == start

        clock.advance(3)
        update = await tracker.poll()
        assert update.status == TrackerStatus.TRACKING
        assert update.changes.find("a").delta == 2

    @pytest.mark.asyncio
    async def test_failed_first_sample(self, clock):
        failure = ProviderResult.failure(ErrorKind.PROVIDER_UNAVAILABLE, "gone")
        tracker = ChangeTracker(ScriptedSampler(failure), clock=clock)
        update = await tracker.poll()

        assert update.status == TrackerStatus.FAILED
        assert tracker.baseline is None

    @pytest.mark.asyncio
    async def test_min_sample_interval_reuses_diff(self, clock):
        sampler = ScriptedSampler(snap(a=1), snap(a=2))
        tracker = ChangeTracker(sampler, clock=clock, min_sample_interval=5)
        await tracker.poll()
        clock.advance(1)
        first = await tracker.poll()
        clock.advance(1)
        second = await tracker.poll()

        assert sampler.calls == 2
        assert tracker.diff_count == 1
        assert first.changes is second.changes

    @pytest.mark.asyncio
    async def test_configure_clears_memo(self, clock):
        tracker = ChangeTracker(ScriptedSampler(snap(a=1), snap(a=2)), clock=clock)
        await tracker.poll()
        clock.advance(1)
        await tracker.poll()

        tracker.configure(mode="gains", min_change=2)
        assert tracker.latest() is None
        assert tracker.mode == ShowMode.GAINS
        assert tracker.min_change == 2

    def test_rejects_non_positive_period(self):
        with pytest.raises(ValueError):
            ChangeTracker(ScriptedSampler(snap()), period_seconds=0)
