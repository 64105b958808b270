"""Resource provider interfaces.

Drivers for real networks (ME/RS bridges, energy cells, sensor
peripherals) live outside this package and only need to satisfy these
protocols. Amounts are always in the provider's native unit.
"""

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, runtime_checkable

# Sample kinds understood by the built-in views
KIND_ITEMS = "items"
KIND_FLUIDS = "fluids"
KIND_CRAFTABLE = "craftable"

# Feature flags reported by exists()
FEATURE_ITEMS = "items"
FEATURE_FLUIDS = "fluids"
FEATURE_ENERGY = "energy"
FEATURE_CRAFTING = "crafting"


@dataclass(frozen=True)
class ResourceEntry:
    """One resource as reported by a provider sample.

    Attributes:
        id: Unique resource id (e.g. "minecraft:iron_ingot")
        amount: Amount in the provider's native unit
        display_name: Optional human-readable name
        craftable: Whether the network can craft this resource
    """

    id: str
    amount: float
    display_name: str | None = None
    craftable: bool = False


@dataclass(frozen=True)
class EnergyReading:
    """Energy storage reading."""

    stored: float
    capacity: float
    usage: float = 0.0
    input: float = 0.0

    @property
    def percent(self) -> float:
        """Fill level 0-100."""
        if self.capacity <= 0:
            return 0.0
        return max(0.0, min(100.0, self.stored / self.capacity * 100.0))

    @property
    def net(self) -> float:
        """Net flow per tick (positive = charging)."""
        return self.input - self.usage


@runtime_checkable
class ResourceProvider(Protocol):
    """An acquired provider handle."""

    def sample(self, kind: str) -> Sequence[ResourceEntry]:
        """Return every resource of the given kind, captured at one instant."""
        ...

    def energy(self) -> EnergyReading:
        """Return the current energy reading."""
        ...


@runtime_checkable
class ProviderDriver(Protocol):
    """Discovers a provider and hands out handles to it."""

    def exists(self) -> tuple[bool, Iterable[str]]:
        """Cheap existence probe.

        Returns:
            Tuple of (present, feature names)
        """
        ...

    def open(self) -> ResourceProvider:
        """Acquire a handle.

        Raises:
            ProviderUnavailableError: If no provider is attached
        """
        ...
