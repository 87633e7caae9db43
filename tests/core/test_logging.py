"""
Tests for logging configuration.
"""

import json
import logging

import pytest
import structlog

from genrepo.core.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """Put the root logger and structlog back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_renders_stdlib_records(self, capsys):
        """Test module loggers are rendered as JSON lines."""
        configure_logging("INFO", "json")

        logging.getLogger("genrepo.catalog").info("Seeded %d products", 11)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "Seeded 11 products"
        assert payload["level"] == "info"
        assert payload["logger"] == "genrepo.catalog"
        assert "timestamp" in payload

    def test_json_includes_exception(self, capsys):
        """Test exception tracebacks are rendered into the JSON payload."""
        configure_logging("INFO", "json")

        try:
            raise ValueError("boom")
        except ValueError:
            logging.getLogger("genrepo.db").warning("Health check failed", exc_info=True)

        payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert "ValueError: boom" in payload["exception"]

    def test_structlog_logger_shares_handler(self, capsys):
        """Test structlog loggers go through the same handler."""
        configure_logging("INFO", "json")

        structlog.get_logger("genrepo.api").info("request", path="/api/v1/products")

        payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert payload["event"] == "request"
        assert payload["path"] == "/api/v1/products"

    def test_text_format(self, capsys):
        """Test the console renderer for text output."""
        configure_logging("DEBUG", "text")

        logging.getLogger("genrepo.repository").debug("Evaluating in-process")

        out = capsys.readouterr().out
        assert "Evaluating in-process" in out
        assert "genrepo.repository" in out
        with pytest.raises(json.JSONDecodeError):
            json.loads(out.strip().splitlines()[-1])

    def test_level_filters_records(self, capsys):
        """Test records below the configured level are dropped."""
        configure_logging("WARNING", "json")

        logging.getLogger("genrepo.catalog").info("hidden")
        logging.getLogger("genrepo.catalog").warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out
