"""
Tests for structured logging configuration.
"""

from __future__ import annotations

import json

import pytest
import structlog

from sm_common.logging import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", json_output=True, service="test-svc")
        structlog.get_logger("t").info("clip_uploaded", clip_id="abc")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "clip_uploaded"
        assert event["clip_id"] == "abc"
        assert event["level"] == "info"
        assert event["service"] == "test-svc"
        assert "timestamp" in event

    def test_level_filtering(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("WARNING", json_output=True)
        logger = structlog.get_logger("t")
        logger.info("hidden_event")
        logger.warning("shown_event")

        err = capsys.readouterr().err
        assert "hidden_event" not in err
        assert "shown_event" in err

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("DEBUG", json_output=False)
        structlog.get_logger("t").debug("console_event", engine="vosk-small")
        assert "console_event" in capsys.readouterr().err

    def test_exception_rendered(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", json_output=True)
        try:
            raise RuntimeError("decoder crashed")
        except RuntimeError:
            structlog.get_logger("t").exception("transcription_failed")

        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert "decoder crashed" in event["exception"]

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            configure_logging("CHATTY")
