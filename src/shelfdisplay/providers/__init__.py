"""Resource provider subsystem.

Provides:
- Provider protocols and reading types
- The guarded call boundary and error taxonomy
- TTL-gated capability cache
- Mock provider for development and tests
"""

from .base import EnergyReading, ProviderDriver, ResourceEntry, ResourceProvider
from .boundary import ErrorKind, ProviderResult, call_provider
from .capabilities import CapabilityCache, CapabilitySnapshot
from .mock import MockProvider

__all__ = [
    "EnergyReading",
    "ProviderDriver",
    "ResourceEntry",
    "ResourceProvider",
    "ErrorKind",
    "ProviderResult",
    "call_provider",
    "CapabilityCache",
    "CapabilitySnapshot",
    "MockProvider",
]
