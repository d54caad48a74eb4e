"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from gdrive_sync.config.models import LoggingConfig, LogOutputConfig
from gdrive_sync.core.errors import FileCheckError
from gdrive_sync.core.logging import (
    configure_logging,
    get_log_file_path,
    get_logger,
    log_error,
    upload_context,
)


def _json_lines(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        structlog.contextvars.clear_contextvars()
        logging.getLogger().handlers.clear()

    def test_given_json_format_when_log_then_valid_json_output(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """JSON format produces valid JSON with required fields."""
        # Given
        configure_logging(json_format=True, level="INFO")
        logger = get_logger("test")

        # When
        logger.info("test message", key="value")

        # Then
        captured = capsys.readouterr()
        lines = [line for line in captured.err.strip().split("\n") if line]
        if lines:
            data = json.loads(lines[-1])
            assert data["event"] == "test message"
            assert data["key"] == "value"
            assert "timestamp" in data
            assert data["level"] == "info"

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        # Given
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When
        configure_logging(config=config, json_format=False, level="ERROR")
        get_logger().debug("debug msg")

        # Then
        assert "debug msg" in log_file.read_text()
        assert get_log_file_path() == log_file

    def test_given_multi_output_config_when_configure_then_logs_to_all(
        self, tmp_path: Path
    ) -> None:
        """Multiple outputs receive logs according to their levels."""
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content

        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content


class TestUploadContext:
    """Per-upload path binding."""

    def setup_method(self) -> None:
        structlog.reset_defaults()
        structlog.contextvars.clear_contextvars()
        logging.getLogger().handlers.clear()

    def test_given_upload_context_when_log_then_path_bound(self, tmp_path: Path) -> None:
        # Given
        log_file = tmp_path / "ctx.log"
        configure_logging(
            config=LoggingConfig(
                level="DEBUG",
                outputs=[LogOutputConfig(format="json", destination=str(log_file))],
            )
        )
        logger = get_logger()

        # When
        with upload_context(Path("/share/Scans/a.pdf")):
            logger.info("inside")
        logger.info("outside")

        # Then
        inside, outside = _json_lines(log_file)
        assert inside["path"] == "/share/Scans/a.pdf"
        assert "path" not in outside

    def test_given_structured_error_when_log_error_then_fields_flattened(
        self, tmp_path: Path
    ) -> None:
        # Given
        log_file = tmp_path / "err.log"
        configure_logging(
            config=LoggingConfig(
                outputs=[LogOutputConfig(format="json", destination=str(log_file))],
            )
        )
        error = FileCheckError.probe_failed("/x", "boom", returncode=2)

        # When
        log_error(get_logger(), "upload_failed", error, attempt=1)

        # Then
        (record,) = _json_lines(log_file)
        assert record["event"] == "upload_failed"
        assert record["error"] == "PROBE_FAILED"
        assert record["code"] == 3003
        assert record["attempt"] == 1

    def test_given_plain_exception_when_log_error_then_type_recorded(
        self, tmp_path: Path
    ) -> None:
        # Given
        log_file = tmp_path / "err.log"
        configure_logging(
            config=LoggingConfig(
                outputs=[LogOutputConfig(format="json", destination=str(log_file))],
            )
        )

        # When
        log_error(get_logger(), "oops", ValueError("bad"))

        # Then
        (record,) = _json_lines(log_file)
        assert record["error"] == "bad"
        assert record["error_type"] == "ValueError"
