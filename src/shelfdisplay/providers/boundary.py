"""Provider call boundary.

Every call into a provider goes through call_provider(), which turns a
raised fault into a typed ProviderResult. Nothing a driver raises can
reach a view's lifecycle or the shared event loop.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

from ..core.errors import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(Enum):
    """Outcome taxonomy for provider-facing operations."""

    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PROVIDER_QUERY_FAILED = "provider_query_failed"
    DATA_EMPTY = "data_empty"
    CONFIG_INVALID = "config_invalid"


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """Result of a guarded provider call.

    Attributes:
        value: Returned value when the call succeeded
        error: Error kind when it failed
        message: Failure description (empty on success)
    """

    value: T | None = None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ProviderResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "ProviderResult[T]":
        return cls(error=error, message=message)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or default when the call failed."""
        if self.ok and self.value is not None:
            return self.value
        return default


def classify(exc: BaseException) -> ErrorKind:
    """Map an exception raised by a driver to an error kind."""
    if isinstance(exc, ProviderError):
        return ErrorKind(exc.kind)
    return ErrorKind.PROVIDER_QUERY_FAILED


def call_provider(
    func: Callable[..., T],
    *args: Any,
    operation: str | None = None,
    **kwargs: Any,
) -> ProviderResult[T]:
    """Invoke a provider function and capture any fault.

    Args:
        func: Provider callable
        *args: Positional arguments for func
        operation: Name used in log messages (defaults to func's name)
        **kwargs: Keyword arguments for func

    Returns:
        ProviderResult holding either the return value or the error kind
    """
    name = operation or getattr(func, "__name__", "provider call")
    try:
        return ProviderResult.success(func(*args, **kwargs))
    except Exception as e:
        kind = classify(e)
        logger.debug("Provider call %s failed (%s): %s", name, kind.value, e)
        return ProviderResult.failure(kind, str(e) or e.__class__.__name__)
