"""Tests for configuration loading, view schemas and logging setup."""

import json
import logging
import sys

import pytest
import yaml
from pydantic import ValidationError as PydanticValidationError

from shelfdisplay.core.config import Config, ConfigManager, LoggingConfig, SurfaceConfig, load_config
from shelfdisplay.core.errors import (
    ConfigurationError,
    ProviderQueryError,
    ProviderUnavailableError,
    ShelfDisplayError,
    ValidationError,
)
from shelfdisplay.core.logging import ConsoleFormatter, JSONFormatter, apply_logging_config, setup_logging
from shelfdisplay.providers.boundary import ErrorKind, classify
from shelfdisplay.views.schema import (
    ConfigField,
    FieldType,
    default_config,
    missing_required,
    validate_config,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "capabilities": {"ttl_seconds": 3},
                "surfaces": [
                    {"id": "main", "width": 39, "height": 13, "view": "item_list"},
                    {"id": "side", "width": 15, "height": 10},
                ],
                "views": {"extra": "my_views.extra:ExtraView"},
            }
        )
    )
    return path


class TestConfigLoading:
    """YAML loading and validation."""

    def test_defaults(self):
        config = load_config()
        assert config.capabilities.ttl_seconds == 2.0
        assert config.scheduler.yield_interval == 50
        assert config.manager.default_view == "clock"
        assert config.surfaces == []

    def test_load_file(self, config_file):
        config = load_config(config_file)

        assert config.capabilities.ttl_seconds == 3
        assert [s.id for s in config.surfaces] == ["main", "side"]
        assert config.surfaces[0].view == "item_list"
        assert config.surfaces[1].view is None
        assert config.views == {"extra": "my_views.extra:ExtraView"}

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.yaml").surfaces == []

    def test_malformed_file_falls_back(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("surfaces: [{id: 'bad id!'}]")
        assert load_config(path).surfaces == []

    def test_malformed_file_strict(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("capabilities: {ttl_seconds: -1}")
        with pytest.raises(ConfigurationError):
            load_config(path, strict=True)

    def test_duplicate_surface_ids(self):
        with pytest.raises(PydanticValidationError):
            Config(surfaces=[SurfaceConfig(id="a"), SurfaceConfig(id="a")])

    def test_invalid_view_path(self):
        with pytest.raises(PydanticValidationError):
            Config(views={"x": "not a path"})

    def test_get_returns_copy(self, config_file):
        manager = ConfigManager(config_file)
        manager.get().surfaces.clear()

        assert len(manager.get().surfaces) == 2
        assert manager.get_surface("side").width == 15
        assert manager.get_surface("nope") is None


class TestConfigField:
    """Per-field validation and coercion."""

    def test_number_range_and_coercion(self):
        field = ConfigField("n", FieldType.NUMBER, "N", default=5, min_value=1, max_value=10)

        assert field.validate(None) == (5, None)
        assert field.validate("7") == (7, None)
        assert field.validate(2.5) == (2.5, None)
        assert field.validate(0)[1] == "N must be >= 1"
        assert field.validate(11)[1] == "N must be <= 10"
        assert field.validate("x")[1] == "N must be a number"
        assert field.validate(True)[1] == "N must be a number"

    def test_boolean(self):
        field = ConfigField("b", FieldType.BOOLEAN, "B", default=False)

        assert field.validate("true") == (True, None)
        assert field.validate(0) == (False, None)
        assert field.validate("maybe")[1] is not None

    def test_select(self):
        field = ConfigField("s", FieldType.SELECT, "S", default="a", options=("a", "b"))

        assert field.validate("b") == ("b", None)
        assert field.validate("c")[1] == "S must be one of: a, b"

    def test_string(self):
        assert ConfigField("t", FieldType.STRING, "T").validate(12) == ("12", None)


class TestSchemaHelpers:
    """Whole-config validation."""

    schema = (
        ConfigField("a", FieldType.NUMBER, "A", default=1, min_value=0),
        ConfigField("b", FieldType.STRING, "B", required=True),
    )

    def test_default_config(self):
        assert default_config(self.schema) == {"a": 1, "b": None}

    def test_invalid_values_fall_back(self):
        validated, errors = validate_config(self.schema, {"a": -1, "b": "x", "extra": 3})

        assert validated == {"a": 1, "b": "x", "extra": 3}
        assert set(errors) == {"a"}

    def test_missing_required(self):
        assert missing_required(self.schema, {"b": ""}) == ["b"]
        assert missing_required(self.schema, {"b": "set"}) == []


class TestErrors:
    """Exception hierarchy."""

    def test_details_in_message(self):
        error = ValidationError("Bad config", details={"field": "a"})

        assert isinstance(error, ShelfDisplayError)
        assert str(error) == "Bad config (field=a)"
        assert error.to_dict()["severity"] == "warning"

    def test_cause_serialized(self):
        error = ConfigurationError("Cannot read", cause=OSError("denied"))
        assert error.to_dict()["cause"] == "OSError: denied"
        assert "cause" not in ShelfDisplayError("plain").to_dict()

    def test_provider_errors_carry_their_kind(self):
        assert classify(ProviderUnavailableError("gone")) == ErrorKind.PROVIDER_UNAVAILABLE
        assert classify(ProviderQueryError("bad read")) == ErrorKind.PROVIDER_QUERY_FAILED
        assert classify(KeyError("x")) == ErrorKind.PROVIDER_QUERY_FAILED


class TestLogging:
    """Logging setup."""

    def test_structured_file_output(self, tmp_path):
        log_file = tmp_path / "logs" / "display.log"
        setup_logging(level="DEBUG", log_format="structured", log_file=log_file)
        try:
            logging.getLogger("shelfdisplay.test").info("hello %s", "world", extra={"surface": "main"})
            for handler in logging.getLogger().handlers:
                handler.flush()

            record = json.loads(log_file.read_text().strip().splitlines()[-1])
            assert record["message"] == "hello world"
            assert record["surface"] == "main"
            assert record["level"] == "INFO"
        finally:
            for handler in list(logging.getLogger().handlers):
                handler.close()
            logging.getLogger().handlers.clear()

    def test_json_formatter_exception(self):
        try:
            raise RuntimeError("bad")
        except RuntimeError:
            record = logging.LogRecord(
                "x", logging.ERROR, __file__, 1, "failed", None, exc_info=sys.exc_info()
            )

        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "failed"
        assert "RuntimeError: bad" in data["exception"]

    def test_console_shows_display_context(self):
        record = logging.LogRecord(
            "shelfdisplay.views.base", logging.WARNING, __file__, 1, "read %s", ("failed",), None
        )
        record.surface = "main"
        record.view = "item_list"

        line = ConsoleFormatter(use_colors=False).format(record)
        assert "WARNING" in line
        assert line.endswith("[base main:item_list] read failed")

    def test_apply_logging_config(self):
        try:
            apply_logging_config(LoggingConfig(level="ERROR"))
            assert logging.getLogger().level == logging.ERROR

            apply_logging_config(LoggingConfig(level="ERROR"), debug=True)
            assert logging.getLogger().level == logging.DEBUG
        finally:
            for handler in list(logging.getLogger().handlers):
                handler.close()
            logging.getLogger().handlers.clear()
