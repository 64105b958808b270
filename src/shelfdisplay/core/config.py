"""Configuration management with Pydantic validation.

Provides type-safe configuration with:
- Pydantic models for validation
- YAML file loading
- Defaults suitable for a single 3x2 advanced monitor

The core never writes configuration back to storage; persistence belongs
to whatever tool produced the YAML file.
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_IMPORT_PATH_RE = re.compile(r"^[A-Za-z_][\w\.]*:[A-Za-z_]\w*$")


# =============================================================================
# Configuration Models
# =============================================================================


class CapabilityConfig(BaseModel):
    """Capability probe cache settings."""

    ttl_seconds: float = Field(2.0, gt=0, le=60, description="Capability snapshot lifetime")


class SchedulerConfig(BaseModel):
    """Cooperative scheduling settings."""

    yield_interval: int = Field(
        50, ge=1, le=10000, description="Iterations between forced suspensions"
    )


class ManagerConfig(BaseModel):
    """View manager settings."""

    mountable_ttl_seconds: float = Field(5.0, ge=0, description="Mountable list cache lifetime")
    default_view: str = Field("clock", description="Preferred fallback view")


class SurfaceConfig(BaseModel):
    """A single character-grid surface and its view assignment."""

    id: str = Field(..., min_length=1, max_length=64, description="Surface identifier")
    width: int = Field(39, ge=1, le=328, description="Columns")
    height: int = Field(13, ge=1, le=162, description="Rows")
    view: str | None = Field(None, description="Assigned view id (None = auto-suggest)")
    poll_interval_ms: int | None = Field(
        None, ge=100, le=3_600_000, description="Override of the view's poll interval"
    )
    settings: dict[str, Any] = Field(default_factory=dict, description="View config values")

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Validate surface id contains safe characters."""
        if not re.match(r"^[\w\-\.]+$", v):
            raise ValueError("Surface id contains invalid characters")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    format: str = Field("simple", description="Format: simple, structured")
    file: str | None = Field(None, description="Log file path")
    max_size_mb: int = Field(10, ge=1, description="Max log file size")
    backup_count: int = Field(3, ge=0, description="Number of backup files")


class Config(BaseModel):
    """Root configuration model."""

    capabilities: CapabilityConfig = Field(default_factory=CapabilityConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    manager: ManagerConfig = Field(default_factory=ManagerConfig)
    surfaces: list[SurfaceConfig] = Field(default_factory=list)
    views: dict[str, str] = Field(
        default_factory=dict, description="Extra manifest entries: id -> module:Class"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("views")
    @classmethod
    def validate_views(cls, v: dict[str, str]) -> dict[str, str]:
        """Validate manifest entries look like import paths."""
        for view_id, target in v.items():
            if not _IMPORT_PATH_RE.match(target):
                raise ValueError(f"Invalid import path for view {view_id}: {target}")
        return v

    @model_validator(mode="after")
    def validate_unique_surfaces(self) -> "Config":
        """Surface ids must be unique."""
        ids = [s.id for s in self.surfaces]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate surface ids")
        return self


# =============================================================================
# Configuration Manager
# =============================================================================


class ConfigManager:
    """Read-only configuration loader.

    Provides:
    - Pydantic validation on load
    - Fallback to defaults when the file is missing or malformed
    - Deep copies on read so callers cannot mutate shared state

    Usage:
        config_manager = ConfigManager("/path/to/config.yaml")
        config = config_manager.get()
    """

    def __init__(self, config_path: str | Path | None = None, strict: bool = False) -> None:
        self._config_path = Path(config_path) if config_path else None
        self._strict = strict
        self._config: Config = self._load()

    @property
    def path(self) -> Path | None:
        return self._config_path

    def _load(self) -> Config:
        """Load and validate configuration from file."""
        if self._config_path is None:
            return Config()

        if not self._config_path.exists():
            logger.info("Config file not found, using defaults")
            return Config()

        try:
            with open(self._config_path) as f:
                data = yaml.safe_load(f) or {}
            config = Config.model_validate(data)
            logger.info("Loaded config from %s", self._config_path)
            return config
        except Exception as e:
            if self._strict:
                raise ConfigurationError(
                    "Failed to load config",
                    details={"path": str(self._config_path)},
                    cause=e,
                ) from e
            logger.warning("Failed to load config, using defaults: %s", e)
            return Config()

    def reload(self) -> Config:
        """Re-read the config file."""
        self._config = self._load()
        return self.get()

    def get(self) -> Config:
        """Get current configuration (copy).

        Returns:
            Deep copy of current configuration
        """
        return self._config.model_copy(deep=True)

    def get_surface(self, surface_id: str) -> SurfaceConfig | None:
        """Get the configuration of one surface."""
        for surface in self._config.surfaces:
            if surface.id == surface_id:
                return surface.model_copy(deep=True)
        return None


def load_config(path: str | Path | None = None, strict: bool = False) -> Config:
    """Load configuration from a YAML file.

    Args:
        path: Path to config file (None = defaults)
        strict: Raise ConfigurationError instead of falling back to defaults

    Returns:
        Validated configuration
    """
    return ConfigManager(path, strict=strict).get()
