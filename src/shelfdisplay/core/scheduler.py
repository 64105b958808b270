"""Cooperative yield scheduler.

All views on a process share one asyncio event loop. Nothing preempts a
view, so any loop whose length depends on what the provider returned must
suspend regularly or every other surface stalls.

Usage:
    scheduler = YieldScheduler()

    for count, entry in enumerate(entries, start=1):
        ...
        await scheduler.check(count)
"""

import asyncio
import logging
from typing import Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_YIELD_INTERVAL = 50


class YieldScheduler:
    """Bounded-work suspension primitives.

    Suspension happens only at explicit await points. asyncio resumes
    ready tasks in the order they were scheduled, so suspended views are
    resumed FIFO with no priority levels.
    """

    def __init__(self, interval: int = DEFAULT_YIELD_INTERVAL) -> None:
        """Initialize the scheduler.

        Args:
            interval: Default iterations between suspensions
        """
        if interval < 1:
            raise ValueError("interval must be >= 1")
        self._interval = interval
        self._suspensions = 0

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def suspensions(self) -> int:
        """Number of times this scheduler suspended the caller."""
        return self._suspensions

    async def yield_now(self) -> None:
        """Unconditional suspension point.

        Resumes on the next pass of the event loop.
        """
        self._suspensions += 1
        await asyncio.sleep(0)

    async def check(self, counter: int, interval: int | None = None) -> bool:
        """Suspend when counter is a multiple of interval.

        Args:
            counter: Current iteration count
            interval: Override of the default interval

        Returns:
            True if the caller was suspended
        """
        interval = interval or self._interval
        if counter % interval == 0:
            await self.yield_now()
            return True
        return False

    async def for_each(
        self,
        items: Iterable[T],
        callback: Callable[[T, int], object],
        interval: int | None = None,
    ) -> int:
        """Call callback(item, index) for each item, suspending periodically.

        Returns:
            Number of items processed
        """
        count = 0
        for count, item in enumerate(items, start=1):
            callback(item, count)
            await self.check(count, interval)
        return count

    async def map(
        self,
        items: Iterable[T],
        transform: Callable[[T], R],
        interval: int | None = None,
    ) -> list[R]:
        """Transform items into a new list, suspending periodically."""
        result: list[R] = []
        for count, item in enumerate(items, start=1):
            result.append(transform(item))
            await self.check(count, interval)
        return result

    async def filter(
        self,
        items: Iterable[T],
        predicate: Callable[[T], bool],
        interval: int | None = None,
    ) -> list[T]:
        """Keep items where predicate is true, suspending periodically."""
        result: list[T] = []
        for count, item in enumerate(items, start=1):
            if predicate(item):
                result.append(item)
            await self.check(count, interval)
        return result

