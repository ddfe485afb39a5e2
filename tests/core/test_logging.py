# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import asyncio
import io
import json
import logging
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Put back the suite-wide logging setup after each test."""
    yield
    from filestages.core.logging import configure_logging

    configure_logging(level="DEBUG")


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from filestages.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs structured JSON."""
        from filestages.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        log_line = captured.out.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert "_record" not in data
        assert "_from_structlog" not in data

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs human-readable in console mode."""
        from filestages.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.out
        assert not captured.out.strip().startswith("{")

    def test_stdlib_logger_uses_same_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """stdlib logging.getLogger() records go through the structlog chain."""
        from filestages.core.logging import configure_logging

        configure_logging(json_output=True)
        logging.getLogger("filestages.plugins.discovery").warning("plain stdlib %s", "message")

        captured = capsys.readouterr()
        data = json.loads(captured.out.strip().split("\n")[-1])
        assert data["event"] == "plain stdlib message"
        assert data["level"] == "warning"

    def test_level_filters_lower_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        from filestages.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="WARNING")
        logger = get_logger("test")

        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_logger_binds_context(self) -> None:
        from filestages.core.logging import get_logger

        logger = get_logger("test")
        bound = logger.bind(stage="glob_read")

        assert bound is not logger

    def test_quiet_loggers_never_below_warning(self) -> None:
        from filestages.core.logging import _QUIET_LOGGERS, configure_logging

        configure_logging(level="DEBUG")

        for name in _QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_quiet_loggers_follow_stricter_root(self) -> None:
        from filestages.core.logging import _QUIET_LOGGERS, configure_logging

        configure_logging(level="ERROR")

        for name in _QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.ERROR

    def test_unknown_level_rejected(self) -> None:
        from filestages.core.logging import configure_logging

        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(level="LOUD")

    def test_explicit_stream(self) -> None:
        from filestages.core.logging import configure_logging, get_logger

        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)

        get_logger("filestages.test").info("to stream")

        data = json.loads(stream.getvalue().strip())
        assert data["event"] == "to stream"
        assert data["logger"] == "filestages.test"


class TestBinaryFields:
    def test_bytes_logged_as_size(self) -> None:
        from filestages.core.logging import configure_logging, get_logger

        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)

        get_logger("test").info("Received record", record=b"\x00" * 512, name="archive.zip")

        data = json.loads(stream.getvalue().strip())
        assert data["record"] == "<512 bytes>"
        assert data["name"] == "archive.zip"

    def test_processor_leaves_text_alone(self) -> None:
        from filestages.core.logging import describe_binary_fields

        event = describe_binary_fields(None, "info", {"event": "x", "record": "text", "raw": bytearray(b"ab")})

        assert event == {"event": "x", "record": "text", "raw": "<2 bytes>"}


class TestStageContext:
    def test_binds_stage_and_channels(self) -> None:
        from filestages.core.logging import configure_logging, get_logger, stage_context

        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)

        with stage_context("unzip_file", reader="raw", writer="files"):
            get_logger("test").info("inside")
        get_logger("test").info("outside")

        inside, outside = (json.loads(line) for line in stream.getvalue().strip().split("\n"))
        assert inside["stage"] == "unzip_file"
        assert inside["reader"] == "raw"
        assert inside["writer"] == "files"
        assert "stage" not in outside

    def test_stdlib_records_get_bindings(self) -> None:
        from filestages.core.logging import configure_logging, stage_context

        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)

        with stage_context("glob_read", writer="raw"):
            logging.getLogger("filestages.plugins.discovery").warning("from stdlib")

        data = json.loads(stream.getvalue().strip())
        assert data["stage"] == "glob_read"
        assert data["writer"] == "raw"
        assert "reader" not in data

    @pytest.mark.asyncio
    async def test_bindings_are_per_task(self) -> None:
        from filestages.core.logging import configure_logging, get_logger, stage_context

        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)
        both_bound = asyncio.Event()
        ready: list[str] = []

        async def stage(name: str) -> None:
            with stage_context(name):
                ready.append(name)
                if len(ready) == 2:
                    both_bound.set()
                await both_bound.wait()
                get_logger("test").info("running", expected=name)

        await asyncio.gather(stage("first"), stage("second"))

        events = [json.loads(line) for line in stream.getvalue().strip().split("\n")]
        assert len(events) == 2
        assert all(event["stage"] == event["expected"] for event in events)
