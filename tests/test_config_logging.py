"""Tests for settings and structured logging."""
import io
import json
import logging
import os
import sys
from unittest.mock import patch

import pytest

from academic_records.core.config import Settings, configure_logging
from academic_records.core.logging import ContextLogger, JSONFormatter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back after a test reconfigures it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg="Auto-fixed %s", args=("x",), exc_info=None, **attrs):
    record = logging.LogRecord(
        "academic_records.test", logging.WARNING, __file__, 10, msg, args, exc_info
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.log_json is False

    def test_reads_environment(self):
        env = {"ENVIRONMENT": "production", "LOG_LEVEL": "warning", "LOG_JSON": "true"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.environment == "production"
        assert settings.log_json is True
        assert settings.effective_log_level == "WARNING"

    def test_debug_forces_debug_level(self):
        settings = Settings(debug=True, log_level="ERROR")
        assert settings.effective_log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="LOG_LEVEL must be one of"):
            Settings(log_level="LOUD").validate_required_settings()


class TestConfigureLogging:
    """Test applying settings to the root logger."""

    def test_configure_json_logging(self, restore_root_logger):
        root = configure_logging(Settings(log_level="ERROR", log_json=True))

        assert root.level == logging.ERROR
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_setup_plain_logging(self, restore_root_logger):
        root = setup_logging(level="debug")

        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.handlers[0].stream is sys.stdout

    def test_invalid_level_is_rejected_before_setup(self, restore_root_logger):
        with pytest.raises(ValueError):
            configure_logging(Settings(log_level="LOUD"))

    def test_numeric_level_and_custom_stream(self, restore_root_logger):
        stream = io.StringIO()
        root = setup_logging(level=logging.WARNING, stream=stream)
        logging.getLogger("academic_records.sample").warning("pattern repaired")

        assert root.level == logging.WARNING
        assert "WARNING" in stream.getvalue()
        assert "[academic_records.sample] pattern repaired" in stream.getvalue()

    def test_unknown_level_name(self, restore_root_logger):
        with pytest.raises(ValueError, match="Unknown log level: LOUD"):
            setup_logging(level="LOUD")


class TestJSONFormatter:
    """Test the JSON log payload."""

    def test_basic_fields(self):
        payload = json.loads(JSONFormatter().format(_record()))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "academic_records.test"
        assert payload["message"] == "Auto-fixed x"
        assert payload["line"] == 10
        assert "timestamp" in payload

    def test_context_fields_are_included(self):
        record = _record(entity="PhoneNumberConfig", country="Việt Nam", pattern=r"^0\d{9}$", matches=["+1", "+12"])
        payload = json.loads(JSONFormatter().format(record))

        assert payload["entity"] == "PhoneNumberConfig"
        assert payload["country"] == "Việt Nam"
        assert payload["pattern"] == r"^0\d{9}$"
        assert payload["matches"] == ["+1", "+12"]

    def test_non_ascii_is_kept(self):
        output = JSONFormatter().format(_record(country="Việt Nam"))
        assert "Việt Nam" in output

    def test_exception_block(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())

        payload = json.loads(JSONFormatter().format(record))

        assert payload["exception"]["type"] == "RuntimeError"
        assert payload["exception"]["message"] == "boom"


class TestGetLogger:
    """Test logger factory and context adapter."""

    def test_plain_logger(self):
        logger = get_logger("academic_records.sample")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "academic_records.sample"

    def test_context_logger_merges_extra(self):
        logger = get_logger("academic_records.sample", {"entity": "Student"})
        msg, kwargs = logger.process("loaded", {"extra": {"entity_id": "s-1"}})

        assert isinstance(logger, ContextLogger)
        assert msg == "loaded"
        assert kwargs["extra"] == {"entity_id": "s-1", "entity": "Student"}

    def test_context_reaches_records(self, caplog):
        caplog.set_level(logging.INFO, logger="academic_records.sample")
        get_logger("academic_records.sample", {"entity": "Faculty"}).info("renamed")

        assert caplog.records[-1].entity == "Faculty"

    def test_caller_extra_is_not_modified(self):
        """Test the adapter builds a new extra mapping for each call."""
        logger = get_logger("academic_records.sample", {"entity": "Student"})
        caller_extra = {"entity_id": "s-1"}
        _, kwargs = logger.process("loaded", {"extra": caller_extra})

        assert caller_extra == {"entity_id": "s-1"}
        assert kwargs["extra"] is not caller_extra

    def test_bound_context_wins_on_clash(self):
        logger = get_logger("academic_records.sample", {"entity": "Student"})
        _, kwargs = logger.process("loaded", {"extra": {"entity": "Faculty"}})

        assert kwargs["extra"] == {"entity": "Student"}

    def test_context_is_copied(self):
        context = {"entity": "Student"}
        logger = get_logger("academic_records.sample", context)
        context["entity"] = "Faculty"

        assert logger.extra == {"entity": "Student"}
