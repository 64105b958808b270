"""Exception hierarchy for the shelf display system.

Drivers may raise these (or anything else). The provider boundary turns
whatever a driver raises into a result value, so these reach a view only
as data. Configuration and view-definition errors are raised normally.
"""

from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """How loudly an error should be reported."""

    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ShelfDisplayError(Exception):
    """Base exception carrying a message, context details and an optional cause.

    ``str(error)`` appends the details as ``key=value`` pairs so a plain
    ``logger.error("%s", error)`` shows them.
    """

    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})
        self.cause = cause

    def __str__(self) -> str:
        if not self.details:
            return self.message
        pairs = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({pairs})"

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for structured log records."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "details": self.details,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data


class ConfigurationError(ShelfDisplayError):
    """The config file cannot be read or does not validate."""

    severity = ErrorSeverity.CRITICAL


class ProviderError(ShelfDisplayError):
    """A provider driver failed.

    ``kind`` names the provider error kind the boundary reports for it.
    """

    kind = "provider_query_failed"
    severity = ErrorSeverity.WARNING


class ProviderUnavailableError(ProviderError):
    """The provider is absent (bridge missing or peripheral detached).

    Views decline to mount and re-acquire the handle on a later poll.
    """

    kind = "provider_unavailable"


class ProviderQueryError(ProviderError):
    """A sample or accessor on a present provider failed; the next poll retries."""


class ViewError(ShelfDisplayError):
    """A manifest entry cannot be imported or is not a view class."""


class ValidationError(ShelfDisplayError):
    """View settings failed schema validation.

    ``details`` maps each rejected key to its message.
    """

    severity = ErrorSeverity.WARNING
