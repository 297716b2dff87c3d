"""Tests for structured logging setup."""

from __future__ import annotations

import io
import json
import sys

from confluence.utils.logging import (
    get_logger,
    get_run_id,
    new_run_id,
    set_run_id,
    setup_logging,
)


def _capture(emit: object) -> str:
    """Run ``emit`` with stderr redirected and return what it wrote."""
    captured = io.StringIO()
    old_stderr = sys.stderr
    sys.stderr = captured
    try:
        emit()  # type: ignore[operator]
    finally:
        sys.stderr = old_stderr
    return captured.getvalue().strip()


class TestSetupLogging:
    """Test logging configuration."""

    def test_setup_logging_returns_none(self) -> None:
        result = setup_logging(level="INFO", log_format="json")
        assert result is None

    def test_get_logger_returns_bound_logger(self) -> None:
        setup_logging(level="INFO", log_format="json")
        assert get_logger("test") is not None


class TestJsonFormat:
    """Test JSON log output."""

    def test_json_output_is_valid(self) -> None:
        """Log entry in JSON mode is valid JSON with expected keys."""
        setup_logging(level="INFO", log_format="json")
        logger = get_logger("test_json")

        output = _capture(lambda: logger.info("test message", extra_key="extra_value"))

        if output:
            parsed = json.loads(output)
            assert parsed["event"] == "test message"
            assert parsed["extra_key"] == "extra_value"
            assert "timestamp" in parsed
            assert "level" in parsed


class TestConsoleFormat:
    """Test console (pretty-print) log output."""

    def test_console_output_is_not_json(self) -> None:
        setup_logging(level="INFO", log_format="console")
        logger = get_logger("test_console")

        output = _capture(lambda: logger.info("console test"))

        if output:
            try:
                json.loads(output)
                is_json = True
            except json.JSONDecodeError:
                is_json = False
            assert not is_json


class TestRunId:
    """Test analysis run ID context variable."""

    def test_set_and_get_run_id(self) -> None:
        set_run_id("run-123")
        assert get_run_id() == "run-123"
        set_run_id("")

    def test_default_run_id(self) -> None:
        set_run_id("")
        assert get_run_id() == ""

    def test_new_run_ids_are_distinct(self) -> None:
        first, second = new_run_id(), new_run_id()
        assert first != second
        assert len(first) == 12

    def test_run_id_in_log(self) -> None:
        """Run ID appears in JSON log output when set."""
        setup_logging(level="INFO", log_format="json")
        set_run_id("run-456")
        logger = get_logger("test_run")
        try:
            output = _capture(lambda: logger.info("scored"))
        finally:
            set_run_id("")

        if output:
            parsed = json.loads(output)
            assert parsed.get("analysis_run_id") == "run-456"

    def test_run_id_absent_when_unset(self) -> None:
        setup_logging(level="INFO", log_format="json")
        set_run_id("")
        logger = get_logger("test_no_run")

        output = _capture(lambda: logger.info("idle"))

        if output:
            assert "analysis_run_id" not in json.loads(output)
