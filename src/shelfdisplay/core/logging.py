"""Logging setup for the shelf display system.

Console output is colored and compact. Structured (JSON) output is used for
log files and, optionally, the console. Records may carry a display
context through ``extra={"surface": ..., "view": ...}``; both formatters
show it.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import LoggingConfig

CONTEXT_FIELDS = ("surface", "view")

# Attributes every LogRecord has; anything else came in through extra=
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

# Libraries that are chatty at DEBUG
_QUIET_LOGGERS = ("PIL", "asyncio")


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _STANDARD_ATTRS}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, extras included."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        task = getattr(record, "taskName", None)
        if task:
            data["task"] = task
        data.update(_extras(record))

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Short colored lines: time, level, module, display context, message."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors and record.levelno in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelno]}{level}{self.RESET}"

        source = record.name.rsplit(".", 1)[-1]
        context = ":".join(
            str(getattr(record, field)) for field in CONTEXT_FIELDS if getattr(record, field, None)
        )
        if context:
            source = f"{source} {context}"

        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{stamp} {level} [{source}] {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    log_format: str = "simple",
    log_file: str | Path | None = None,
    max_size_mb: int = 10,
    backup_count: int = 3,
) -> None:
    """Replace the root handlers with console and optional file output.

    Args:
        level: Root level name (unknown names fall back to INFO)
        log_format: "simple" for colored console lines, "structured" for JSON
        log_file: Rotating JSON log file, parent directories are created
        max_size_mb: Size at which the file rotates
        backup_count: Rotated files kept
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    if log_format == "structured":
        console.setFormatter(JSONFormatter())
    else:
        console.setFormatter(ConsoleFormatter(use_colors=sys.stdout.isatty()))
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def apply_logging_config(config: "LoggingConfig", debug: bool = False) -> None:
    """setup_logging() from the logging section of the config file."""
    setup_logging(
        level="DEBUG" if debug else config.level,
        log_format=config.format,
        log_file=config.file,
        max_size_mb=config.max_size_mb,
        backup_count=config.backup_count,
    )
