"""TTL-gated capability cache.

Probing a provider is slow compared to how often views poll, and many
views share one provider. The cache keeps exactly one immutable snapshot
so every reader within a TTL window sees the same answer.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from .base import ProviderDriver
from .boundary import call_provider

logger = logging.getLogger(__name__)

DEFAULT_CAPABILITY_TTL = 2.0


@dataclass(frozen=True)
class CapabilitySnapshot:
    """What the provider supported at captured_at.

    Attributes:
        available: Provider present
        features: Supported feature names
        captured_at: Monotonic capture time in seconds
    """

    available: bool
    features: frozenset[str] = field(default_factory=frozenset)
    captured_at: float = 0.0

    def has(self, feature: str) -> bool:
        """Check that the provider is present and supports feature."""
        return self.available and feature in self.features


class CapabilityCache:
    """Memoizes the provider existence probe for a fixed TTL.

    Usage:
        cache = CapabilityCache(driver)
        if cache.get_capabilities().has("items"):
            ...
        cache.invalidate()  # after a reconnect
    """

    def __init__(
        self,
        driver: ProviderDriver | None,
        ttl: float = DEFAULT_CAPABILITY_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            driver: Provider driver to probe (None = never available)
            ttl: Snapshot lifetime in seconds
            clock: Monotonic time source
        """
        if ttl <= 0:
            raise ValueError("ttl must be > 0")
        self._driver = driver
        self._ttl = ttl
        self._clock = clock
        self._snapshot: CapabilitySnapshot | None = None
        self._probe_count = 0

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def probe_count(self) -> int:
        """Number of probes actually sent to the driver."""
        return self._probe_count

    def get_capabilities(self, force_refresh: bool = False) -> CapabilitySnapshot:
        """Return the current capability snapshot.

        Args:
            force_refresh: Probe even if the cached snapshot is fresh

        Returns:
            Immutable snapshot (a failed probe reports unavailable)
        """
        now = self._clock()
        cached = self._snapshot
        if not force_refresh and cached is not None and now - cached.captured_at < self._ttl:
            return cached

        snapshot = self._probe(now)
        if cached is None or cached.available != snapshot.available:
            logger.info(
                "Provider %s (features: %s)",
                "available" if snapshot.available else "unavailable",
                ", ".join(sorted(snapshot.features)) or "none",
            )
        self._snapshot = snapshot
        return snapshot

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next read re-probes."""
        self._snapshot = None

    def _probe(self, now: float) -> CapabilitySnapshot:
        self._probe_count += 1
        if self._driver is None:
            return CapabilitySnapshot(available=False, captured_at=now)

        result = call_provider(self._driver.exists, operation="exists")
        if not result.ok or not result.value:
            return CapabilitySnapshot(available=False, captured_at=now)

        try:
            present, features = result.value
            feature_set = frozenset(str(f) for f in (features or ()))
        except (TypeError, ValueError) as e:
            logger.warning("Malformed capability probe result: %s", e)
            return CapabilitySnapshot(available=False, captured_at=now)

        if not present:
            return CapabilitySnapshot(available=False, captured_at=now)
        return CapabilitySnapshot(available=True, features=feature_set, captured_at=now)
