"""Change tracking engine.

Keeps a baseline snapshot of resource amounts and reports what changed
since the baseline was captured. The baseline is replaced as a whole
when the tracking period expires.

States:
    no baseline -> BASELINE_CAPTURED -> TRACKING ... -> PERIOD_RESET -> TRACKING ...

Provides:
- ResourceSnapshot immutable id -> amount mapping
- take_snapshot() / diff_snapshots() building blocks
- ChangeTracker, the per-poll state machine
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Awaitable, Callable, Iterable, Iterator, Mapping

from ..core.scheduler import YieldScheduler
from ..providers.base import ResourceEntry
from ..providers.boundary import ErrorKind, ProviderResult

logger = logging.getLogger(__name__)

# Snapshot loops suspend more rarely than the default; each step is tiny
SNAPSHOT_YIELD_INTERVAL = 100


class ShowMode(str, Enum):
    """Which change directions are reported."""

    BOTH = "both"
    GAINS = "gains"
    LOSSES = "losses"

    def accepts(self, delta: float) -> bool:
        if self == ShowMode.GAINS:
            return delta > 0
        if self == ShowMode.LOSSES:
            return delta < 0
        return True


@dataclass(frozen=True)
class ResourceSnapshot:
    """Resource amounts captured at one instant.

    Attributes:
        amounts: Read-only mapping of resource id to amount
        names: Read-only mapping of resource id to display name
        captured_at: Monotonic capture time in seconds
    """

    amounts: Mapping[str, float] = field(default_factory=dict)
    names: Mapping[str, str] = field(default_factory=dict)
    captured_at: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "amounts", MappingProxyType(dict(self.amounts)))
        object.__setattr__(self, "names", MappingProxyType(dict(self.names)))

    def __len__(self) -> int:
        return len(self.amounts)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self.amounts

    def __iter__(self) -> Iterator[str]:
        return iter(self.amounts)

    def get(self, resource_id: str, default: float = 0) -> float:
        return self.amounts.get(resource_id, default)

    def name(self, resource_id: str) -> str | None:
        return self.names.get(resource_id)


@dataclass(frozen=True)
class ChangeRecord:
    """One resource whose amount moved since the baseline."""

    id: str
    delta: float
    current: float
    baseline: float
    display_name: str | None = None

    @property
    def is_gain(self) -> bool:
        return self.delta > 0


@dataclass(frozen=True)
class ChangeSet:
    """Result of diffing a sample against the baseline.

    Attributes:
        records: Changes sorted by absolute delta, largest first
        total_gains: Sum of positive deltas
        total_losses: Sum of magnitudes of negative deltas
        baseline_count: Entries in the baseline
        current_count: Entries in the sample
        sampled_at: Monotonic time the sample was fetched
        by_id: Records keyed by resource id (built while polling)
    """

    records: tuple[ChangeRecord, ...] = ()
    total_gains: float = 0
    total_losses: float = 0
    baseline_count: int = 0
    current_count: int = 0
    sampled_at: float = 0.0
    by_id: Mapping[str, ChangeRecord] = field(default_factory=lambda: MappingProxyType({}))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ChangeRecord]:
        return iter(self.records)

    def find(self, resource_id: str) -> ChangeRecord | None:
        return self.by_id.get(resource_id)


# =============================================================================
# Snapshots and diffs
# =============================================================================


async def take_snapshot(
    entries: Iterable[ResourceEntry],
    scheduler: YieldScheduler,
    captured_at: float = 0.0,
) -> ResourceSnapshot:
    """Build a snapshot from a provider sample.

    Entries with no id or a non-positive amount are skipped; duplicate
    ids are summed.

    Args:
        entries: Provider sample
        scheduler: Yield scheduler (the sample may hold thousands of entries)
        captured_at: Monotonic capture time

    Returns:
        Immutable snapshot
    """
    amounts: dict[str, float] = {}
    names: dict[str, str] = {}

    await scheduler.yield_now()
    for count, entry in enumerate(entries, start=1):
        if entry.id and entry.amount > 0:
            amounts[entry.id] = amounts.get(entry.id, 0) + entry.amount
            if entry.display_name:
                names[entry.id] = entry.display_name
        await scheduler.check(count, SNAPSHOT_YIELD_INTERVAL)

    return ResourceSnapshot(amounts, names, captured_at)


def _include(delta: float, min_change: float, mode: ShowMode) -> bool:
    return delta != 0 and abs(delta) >= min_change and mode.accepts(delta)


def _record(resource_id: str, baseline: ResourceSnapshot, current: ResourceSnapshot) -> ChangeRecord:
    before = baseline.get(resource_id, 0)
    after = current.get(resource_id, 0)
    return ChangeRecord(
        id=resource_id,
        delta=after - before,
        current=after,
        baseline=before,
        display_name=current.name(resource_id) or baseline.name(resource_id),
    )


def _sort(records: list[ChangeRecord]) -> list[ChangeRecord]:
    # Order among equal magnitudes is unspecified
    records.sort(key=lambda record: abs(record.delta), reverse=True)
    return records


def diff_snapshots(
    baseline: ResourceSnapshot,
    current: ResourceSnapshot,
    min_change: float = 1,
    mode: ShowMode = ShowMode.BOTH,
) -> list[ChangeRecord]:
    """Compute change records between two snapshots.

    A resource is reported iff its delta is non-zero, its magnitude is at
    least min_change and mode accepts its sign. Resources missing from
    current count as fully depleted.

    Returns:
        Records sorted by absolute delta, largest first
    """
    records = []
    for resource_id in current:
        record = _record(resource_id, baseline, current)
        if _include(record.delta, min_change, mode):
            records.append(record)
    for resource_id in baseline:
        if resource_id not in current:
            record = _record(resource_id, baseline, current)
            if _include(record.delta, min_change, mode):
                records.append(record)
    return _sort(records)


async def diff_snapshots_async(
    baseline: ResourceSnapshot,
    current: ResourceSnapshot,
    scheduler: YieldScheduler,
    min_change: float = 1,
    mode: ShowMode = ShowMode.BOTH,
) -> list[ChangeRecord]:
    """diff_snapshots() that suspends periodically on large snapshots."""
    records = []
    count = 0
    for resource_id in current:
        count += 1
        record = _record(resource_id, baseline, current)
        if _include(record.delta, min_change, mode):
            records.append(record)
        await scheduler.check(count)
    for resource_id in baseline:
        count += 1
        if resource_id not in current:
            record = _record(resource_id, baseline, current)
            if _include(record.delta, min_change, mode):
                records.append(record)
        await scheduler.check(count)
    return _sort(records)


def totals(records: Iterable[ChangeRecord]) -> tuple[float, float]:
    """Return (total gains, total losses) of the given records."""
    gains = 0.0
    losses = 0.0
    for record in records:
        if record.delta > 0:
            gains += record.delta
        else:
            losses += -record.delta
    return gains, losses


# =============================================================================
# Tracker
# =============================================================================


class TrackerStatus(Enum):
    """Outcome of one tracker poll."""

    WAITING = "waiting"
    BASELINE_CAPTURED = "baseline_captured"
    PERIOD_RESET = "period_reset"
    TRACKING = "tracking"
    FAILED = "failed"


@dataclass(frozen=True)
class TrackerUpdate:
    """What one poll produced.

    Attributes:
        status: Outcome
        changes: Diff result (TRACKING only)
        baseline_count: Entries in the baseline (0 without one)
        elapsed: Seconds since the period started
        period_seconds: Period length
        error: Failure kind (FAILED only)
        message: Failure description (FAILED only)
    """

    status: TrackerStatus
    changes: ChangeSet | None = None
    baseline_count: int = 0
    elapsed: float = 0.0
    period_seconds: float = 0.0
    error: ErrorKind | None = None
    message: str = ""

    @property
    def remaining(self) -> float:
        return max(0.0, self.period_seconds - self.elapsed)


Sampler = Callable[[], Awaitable[ProviderResult[ResourceSnapshot]]]


class ChangeTracker:
    """Rolling-baseline change tracker.

    Usage:
        tracker = ChangeTracker(sampler, period_seconds=60)
        update = await tracker.poll()
        if update.status == TrackerStatus.TRACKING:
            for record in update.changes:
                ...
    """

    def __init__(
        self,
        sampler: Sampler,
        period_seconds: float = 60,
        min_change: float = 1,
        mode: ShowMode | str = ShowMode.BOTH,
        clock: Callable[[], float] = time.monotonic,
        scheduler: YieldScheduler | None = None,
        min_sample_interval: float = 0.0,
    ) -> None:
        """Initialize the tracker.

        Args:
            sampler: Coroutine function returning a snapshot result
            period_seconds: Baseline lifetime
            min_change: Smallest reported change magnitude
            mode: Which change directions are reported
            clock: Monotonic time source in seconds
            scheduler: Yield scheduler for large diffs
            min_sample_interval: Seconds during which polls reuse the last diff
        """
        if period_seconds <= 0:
            raise ValueError("period_seconds must be > 0")
        self._sampler = sampler
        self._period = float(period_seconds)
        self._min_change = min_change
        self._mode = ShowMode(mode)
        self._clock = clock
        self._scheduler = scheduler or YieldScheduler()
        self._min_sample_interval = max(0.0, min_sample_interval)

        self._baseline: ResourceSnapshot | None = None
        self._period_start = 0.0
        self._latest: ChangeSet | None = None
        self._diff_count = 0

    @property
    def baseline(self) -> ResourceSnapshot | None:
        return self._baseline

    @property
    def period_start(self) -> float:
        return self._period_start

    @property
    def period_seconds(self) -> float:
        return self._period

    @property
    def mode(self) -> ShowMode:
        return self._mode

    @property
    def min_change(self) -> float:
        return self._min_change

    @property
    def diff_count(self) -> int:
        """Number of diffs actually computed."""
        return self._diff_count

    def latest(self) -> ChangeSet | None:
        """Return the memoized diff of the most recent sample."""
        return self._latest

    def configure(
        self,
        period_seconds: float | None = None,
        min_change: float | None = None,
        mode: ShowMode | str | None = None,
    ) -> None:
        """Change tracking parameters; the memoized diff is dropped."""
        if period_seconds is not None:
            if period_seconds <= 0:
                raise ValueError("period_seconds must be > 0")
            self._period = float(period_seconds)
        if min_change is not None:
            self._min_change = min_change
        if mode is not None:
            self._mode = ShowMode(mode)
        self._latest = None

    def reset(self) -> None:
        """Forget the baseline; the next poll captures a new one."""
        self._baseline = None
        self._latest = None

    async def poll(self) -> TrackerUpdate:
        """Advance the tracker by one poll."""
        now = self._clock()
        baseline = self._baseline
        expired = baseline is not None and now - self._period_start >= self._period

        if baseline is None or expired:
            result = await self._sampler()
            if not result.ok:
                return self._failed(result, now)

            snapshot = result.value
            if snapshot is not None and len(snapshot) > 0:
                self._baseline = snapshot
                self._period_start = now
                self._latest = None
                status = TrackerStatus.PERIOD_RESET if expired else TrackerStatus.BASELINE_CAPTURED
                logger.info(
                    "Baseline %s: %d entries",
                    "reset" if expired else "captured",
                    len(snapshot),
                )
                return TrackerUpdate(
                    status,
                    baseline_count=len(snapshot),
                    elapsed=0.0,
                    period_seconds=self._period,
                )

            if baseline is None:
                return TrackerUpdate(TrackerStatus.WAITING, period_seconds=self._period)

            # Period expired but the sample was empty: keep the old baseline
            current = snapshot or ResourceSnapshot(captured_at=now)
        else:
            latest = self._latest
            if latest is not None and now - latest.sampled_at < self._min_sample_interval:
                return self._tracking(latest, now)

            result = await self._sampler()
            if not result.ok:
                return self._failed(result, now)
            current = result.value or ResourceSnapshot(captured_at=now)

        changes = await self._diff(baseline, current, now)
        return self._tracking(changes, now)

    async def _diff(
        self, baseline: ResourceSnapshot, current: ResourceSnapshot, now: float
    ) -> ChangeSet:
        records = await diff_snapshots_async(
            baseline, current, self._scheduler, self._min_change, self._mode
        )
        gains, losses = totals(records)
        by_id: dict[str, ChangeRecord] = {}
        for count, record in enumerate(records, start=1):
            by_id[record.id] = record
            await self._scheduler.check(count)
        changes = ChangeSet(
            records=tuple(records),
            total_gains=gains,
            total_losses=losses,
            baseline_count=len(baseline),
            current_count=len(current),
            sampled_at=now,
            by_id=MappingProxyType(by_id),
        )
        self._diff_count += 1
        self._latest = changes
        return changes

    def _tracking(self, changes: ChangeSet, now: float) -> TrackerUpdate:
        return TrackerUpdate(
            TrackerStatus.TRACKING,
            changes=changes,
            baseline_count=changes.baseline_count,
            elapsed=now - self._period_start,
            period_seconds=self._period,
        )

    def _failed(self, result: ProviderResult, now: float) -> TrackerUpdate:
        baseline = self._baseline
        return TrackerUpdate(
            TrackerStatus.FAILED,
            baseline_count=len(baseline) if baseline is not None else 0,
            elapsed=now - self._period_start if baseline is not None else 0.0,
            period_seconds=self._period,
            error=result.error,
            message=result.message,
        )
