"""Unit tests for structlog configuration."""

import logging

import pytest
import structlog

from infrastructure.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output_without_tty(self, monkeypatch, capsys):
        monkeypatch.delenv("FORCE_COLOR", raising=False)

        configure_logging()
        structlog.get_logger().info("permission_evaluated", allowed=True)

        out = capsys.readouterr().out
        assert '"event": "permission_evaluated"' in out
        assert '"allowed": true' in out

    def test_debug_events_filtered_at_info(self, monkeypatch, capsys):
        monkeypatch.delenv("FORCE_COLOR", raising=False)

        configure_logging(logging.INFO)
        structlog.get_logger().debug("permission_evaluated")

        assert capsys.readouterr().out == ""

    def test_accepts_level_names(self, monkeypatch, capsys):
        monkeypatch.delenv("FORCE_COLOR", raising=False)

        configure_logging("debug")
        structlog.get_logger().debug("permission_evaluated")

        assert "permission_evaluated" in capsys.readouterr().out
