"""Mock provider for development and testing.

Provides an in-memory driver and handle with the same interface as a
real network bridge, plus hooks to simulate disconnects and failures.
"""

import logging
import random
from typing import Iterable, Sequence

from ..core.errors import ProviderQueryError, ProviderUnavailableError
from .base import (
    FEATURE_CRAFTING,
    FEATURE_ENERGY,
    FEATURE_FLUIDS,
    FEATURE_ITEMS,
    KIND_CRAFTABLE,
    EnergyReading,
    ResourceEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_ITEMS: dict[str, float] = {
    "minecraft:diamond": 256,
    "minecraft:iron_ingot": 1024,
    "minecraft:gold_ingot": 512,
    "minecraft:redstone": 4096,
    "minecraft:coal": 2048,
}

DEFAULT_FLUIDS: dict[str, float] = {
    "minecraft:water": 64000,
    "minecraft:lava": 16000,
}

DEFAULT_CRAFTABLE = frozenset({"minecraft:diamond", "minecraft:iron_ingot"})


class MockProvider:
    """Mock resource network.

    Acts as both the driver (exists/open) and the acquired handle
    (sample/energy), which is all the views need.

    Usage:
        provider = MockProvider()
        provider.set_amount("items", "minecraft:coal", 10)
        provider.disconnect()
    """

    def __init__(
        self,
        items: dict[str, float] | None = None,
        fluids: dict[str, float] | None = None,
        craftable: Iterable[str] | None = None,
        energy: EnergyReading | None = None,
        connected: bool = True,
        features: Iterable[str] | None = None,
    ) -> None:
        self._data: dict[str, dict[str, float]] = {
            "items": dict(DEFAULT_ITEMS if items is None else items),
            "fluids": dict(DEFAULT_FLUIDS if fluids is None else fluids),
        }
        self._craftable = set(DEFAULT_CRAFTABLE if craftable is None else craftable)
        self._energy = energy or EnergyReading(
            stored=4_000_000, capacity=10_000_000, usage=1200, input=1500
        )
        self._connected = connected
        self._features = frozenset(
            features
            if features is not None
            else (FEATURE_ITEMS, FEATURE_FLUIDS, FEATURE_ENERGY, FEATURE_CRAFTING)
        )
        self._fail_kinds: set[str] = set()
        self._fail_probe = False
        self.sample_calls = 0
        self.open_calls = 0

    # -- Driver side -----------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self._connected

    def exists(self) -> tuple[bool, Iterable[str]]:
        """Report presence and features."""
        if self._fail_probe:
            raise ProviderQueryError("Probe failed")
        if not self._connected:
            return False, ()
        return True, self._features

    def open(self) -> "MockProvider":
        """Acquire a handle (self)."""
        self.open_calls += 1
        if not self._connected:
            raise ProviderUnavailableError("No bridge found")
        return self

    def connect(self) -> None:
        self._connected = True
        logger.debug("MockProvider: connected")

    def disconnect(self) -> None:
        self._connected = False
        logger.debug("MockProvider: disconnected")

    # -- Handle side -----------------------------------------------------------

    def sample(self, kind: str) -> Sequence[ResourceEntry]:
        """Return all resources of one kind."""
        self.sample_calls += 1
        if not self._connected:
            raise ProviderUnavailableError("Bridge detached")
        if kind in self._fail_kinds:
            raise ProviderQueryError(f"Failed to read {kind}", details={"kind": kind})

        if kind == KIND_CRAFTABLE:
            return [ResourceEntry(id=rid, amount=0, craftable=True) for rid in sorted(self._craftable)]

        if kind not in self._data:
            raise ProviderQueryError(f"Unknown kind: {kind}")

        return [
            ResourceEntry(
                id=rid,
                amount=amount,
                display_name=None,
                craftable=rid in self._craftable,
            )
            for rid, amount in self._data[kind].items()
        ]

    def energy(self) -> EnergyReading:
        """Return the current energy reading."""
        if not self._connected:
            raise ProviderUnavailableError("Bridge detached")
        if "energy" in self._fail_kinds:
            raise ProviderQueryError("Failed to read energy")
        return self._energy

    # -- Test helpers ----------------------------------------------------------

    def set_amount(self, kind: str, resource_id: str, amount: float) -> None:
        """Set (or add) a resource amount; amount <= 0 removes it."""
        if amount <= 0:
            self._data.setdefault(kind, {}).pop(resource_id, None)
        else:
            self._data.setdefault(kind, {})[resource_id] = amount

    def set_resources(self, kind: str, amounts: dict[str, float]) -> None:
        """Replace every resource of one kind."""
        self._data[kind] = dict(amounts)

    def set_energy(self, reading: EnergyReading) -> None:
        self._energy = reading

    def fail(self, kind: str, failing: bool = True) -> None:
        """Make sample(kind) (or energy()) raise until cleared."""
        if failing:
            self._fail_kinds.add(kind)
        else:
            self._fail_kinds.discard(kind)

    def fail_probe(self, failing: bool = True) -> None:
        """Make exists() raise until cleared."""
        self._fail_probe = failing

    def drift(self, rng: random.Random | None = None, spread: float = 0.05) -> None:
        """Randomly nudge every amount (demo mode)."""
        rng = rng or random.Random()
        for amounts in self._data.values():
            for rid, amount in list(amounts.items()):
                change = int(amount * spread * (rng.random() * 2 - 1))
                amounts[rid] = max(1, amount + change)

        stored = self._energy.stored + (self._energy.input - self._energy.usage) * 20
        self._energy = EnergyReading(
            stored=max(0.0, min(self._energy.capacity, stored)),
            capacity=self._energy.capacity,
            usage=max(0.0, self._energy.usage * (0.9 + rng.random() * 0.2)),
            input=self._energy.input,
        )
