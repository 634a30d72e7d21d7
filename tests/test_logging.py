"""Tests for structured logging configuration."""

from __future__ import annotations

import pytest
import structlog

from core.config import LoggingSettings
from core.logging import bound_context, configure_from_settings, configure_logging, get_logger


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_default(self) -> None:
        """configure_logging should work with defaults."""
        configure_logging()

        assert structlog.get_logger() is not None

    def test_configure_logging_json_format(self) -> None:
        """configure_logging should configure JSON format."""
        configure_logging(json_format=True)

        assert structlog.is_configured()

    def test_configure_logging_accepts_lowercase_level(self) -> None:
        """Level names are case-insensitive."""
        configure_logging(log_level="debug")

        assert structlog.is_configured()

    def test_configure_from_settings(self) -> None:
        """The LOG_ settings section drives the configuration."""
        configure_from_settings(LoggingSettings(level="WARNING", json_format=True))

        assert structlog.is_configured()


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_with_name(self) -> None:
        """get_logger should accept a name."""
        configure_logging()

        assert get_logger("services.customs") is not None

    def test_logger_can_log_info(self) -> None:
        """Logger should be able to log info messages."""
        configure_logging()
        logger = get_logger("test")

        logger.info("Simulated import", hs10="4819100000", total_payable="353.49")

    def test_logger_can_log_warning(self) -> None:
        """Logger should be able to log warnings."""
        configure_logging()
        logger = get_logger("test")

        logger.warning("Comparative row failed", study_case_id=7)


class TestBoundContext:
    """Tests for bound_context."""

    def test_binds_inside_block(self) -> None:
        """Keys are visible to every log line inside the block."""
        structlog.contextvars.clear_contextvars()

        with bound_context(study_case_id=3, hs10="4819100000"):
            assert structlog.contextvars.get_contextvars() == {
                "study_case_id": 3,
                "hs10": "4819100000",
            }

        assert structlog.contextvars.get_contextvars() == {}

    def test_restores_outer_keys(self) -> None:
        """Nested blocks restore the values bound outside them."""
        structlog.contextvars.clear_contextvars()

        with bound_context(study_case_id=1):
            with bound_context(study_case_id=2):
                assert structlog.contextvars.get_contextvars() == {"study_case_id": 2}
            assert structlog.contextvars.get_contextvars() == {"study_case_id": 1}

    def test_unbinds_on_error(self) -> None:
        """Keys are dropped even when the block raises."""
        structlog.contextvars.clear_contextvars()

        with pytest.raises(ArithmeticError), bound_context(study_case_id=3):
            raise ArithmeticError("boom")

        assert structlog.contextvars.get_contextvars() == {}


class TestLoggingIntegration:
    """Integration tests for logging functionality."""

    def test_json_logging_workflow(self) -> None:
        """Test JSON format logging workflow."""
        configure_logging(json_format=True, log_level="DEBUG")
        logger = get_logger("json.test")
        with bound_context(study_case_id=1):
            logger.debug("Resolved rule profile", fta_rate=None)
            logger.info("Registered import", import_id=1)
