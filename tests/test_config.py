"""Tests for settings, metrics and logging setup."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from crawlbase_mcp.config import Settings
from crawlbase_mcp.logging_setup import configure_logging
from crawlbase_mcp.metrics import CrawlRecord, ServerMetrics, format_uptime

ENV_VARS = [
    "CRAWLBASE_TOKEN",
    "CRAWLBASE_JS_TOKEN",
    "DEBUG",
    "CRAWLBASE_LOG_DIR",
    "CRAWLBASE_TIMEOUT",
    "CRAWLBASE_MAX_CONCURRENCY",
    "CRAWLBASE_WINDOW_MS",
    "CRAWLBASE_MAX_PER_WINDOW",
    "CRAWLBASE_MAX_RETRIES",
    "CRAWLBASE_BASE_DELAY_MS",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove all settings variables from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo configure_logging after a test."""
    yield
    package_logger = logging.getLogger("crawlbase_mcp")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test settings with an empty environment."""
        settings = Settings.from_env()

        assert settings.normal_token is None
        assert settings.js_token is None
        assert settings.debug is False
        assert settings.timeout == 90
        assert settings.queue.max_concurrency == 20
        assert settings.queue.window_ms == 1000
        assert settings.queue.max_admissions_per_window == 20
        assert settings.queue.max_retries == 3
        assert settings.queue.base_delay_ms == 1000

    def test_from_environment(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test reading every variable."""
        clean_env.setenv("CRAWLBASE_TOKEN", "normal")
        clean_env.setenv("CRAWLBASE_JS_TOKEN", "js")
        clean_env.setenv("DEBUG", "true")
        clean_env.setenv("CRAWLBASE_LOG_DIR", str(tmp_path))
        clean_env.setenv("CRAWLBASE_TIMEOUT", "30")
        clean_env.setenv("CRAWLBASE_MAX_CONCURRENCY", "5")
        clean_env.setenv("CRAWLBASE_WINDOW_MS", "2000")
        clean_env.setenv("CRAWLBASE_MAX_PER_WINDOW", "10")
        clean_env.setenv("CRAWLBASE_MAX_RETRIES", "0")
        clean_env.setenv("CRAWLBASE_BASE_DELAY_MS", "250")

        settings = Settings.from_env()

        assert settings.normal_token == "normal"
        assert settings.js_token == "js"
        assert settings.debug is True
        assert settings.log_dir == tmp_path
        assert settings.timeout == 30
        assert settings.queue.max_concurrency == 5
        assert settings.queue.window_ms == 2000
        assert settings.queue.max_admissions_per_window == 10
        assert settings.queue.max_retries == 0
        assert settings.queue.base_delay_ms == 250

    def test_empty_token_is_unset(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that an empty token variable counts as missing."""
        clean_env.setenv("CRAWLBASE_TOKEN", "")
        assert Settings.from_env().normal_token is None

    def test_malformed_integer(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that non-numeric values are rejected."""
        clean_env.setenv("CRAWLBASE_MAX_RETRIES", "many")
        with pytest.raises(ValueError, match="CRAWLBASE_MAX_RETRIES"):
            Settings.from_env()

    def test_out_of_range_queue_setting(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that queue validation applies to environment values."""
        clean_env.setenv("CRAWLBASE_MAX_CONCURRENCY", "0")
        with pytest.raises(ValueError, match="max_concurrency"):
            Settings.from_env()


class TestMetrics:
    """Tests for ServerMetrics."""

    def _record(self, success: bool, attempts: int = 1, tool: str = "crawl") -> CrawlRecord:
        return CrawlRecord(
            tool=tool,
            url="https://example.com",
            timestamp=datetime.now(),
            success=success,
            attempts=attempts,
            error=None if success else "boom",
        )

    def test_counters(self) -> None:
        """Test totals, retries and per-tool counts."""
        metrics = ServerMetrics()
        metrics.record(self._record(True))
        metrics.record(self._record(True, attempts=3, tool="crawl_markdown"))
        metrics.record(self._record(False, attempts=4))
        metrics.record(self._record(False, attempts=0))

        stats = metrics.to_dict()

        assert stats["requests"]["total"] == 4
        assert stats["requests"]["successful"] == 2
        assert stats["requests"]["failed"] == 2
        assert stats["requests"]["success_rate"] == 50.0
        assert stats["requests"]["per_tool"] == {"crawl": 3, "crawl_markdown": 1}
        assert stats["retries"]["total"] == 5
        assert len(stats["recent_errors"]) == 2

    def test_recent_requests_newest_first(self) -> None:
        """Test ordering and truncation of recent requests."""
        metrics = ServerMetrics()
        for i in range(15):
            record = self._record(True)
            record.url = f"https://example.com/{i}"
            metrics.record(record)

        recent = metrics.to_dict()["recent_requests"]

        assert len(recent) == 10
        assert recent[0]["url"] == "https://example.com/14"
        assert recent[-1]["url"] == "https://example.com/5"

    def test_empty_metrics(self) -> None:
        """Test rates with no requests."""
        stats = ServerMetrics(start_time=datetime.now() - timedelta(seconds=5)).to_dict()

        assert stats["requests"]["success_rate"] == 0.0
        assert stats["retries"]["average_per_request"] == 0.0
        assert stats["uptime"]["seconds"] >= 5

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(45, "45s"), (192, "3m 12s"), (18120, "5h 2m"), (187200, "2d 4h")],
    )
    def test_format_uptime(self, seconds: float, expected: str) -> None:
        """Test human-readable uptime."""
        assert format_uptime(seconds) == expected


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_debug_log_file(self, tmp_path: Path, restore_logging: None) -> None:
        """Test that debug mode writes debug.log and error.log."""
        configure_logging(debug=True, log_dir=tmp_path)
        logger = logging.getLogger("crawlbase_mcp.retry_queue")

        logger.debug("debug message")
        logger.error("error message")
        for handler in logging.getLogger("crawlbase_mcp").handlers:
            handler.flush()

        debug_log = (tmp_path / "debug.log").read_text()
        error_log = (tmp_path / "error.log").read_text()
        assert "debug message" in debug_log
        assert "error message" in debug_log
        assert "error message" in error_log
        assert "debug message" not in error_log

    def test_no_debug_log_by_default(self, tmp_path: Path, restore_logging: None) -> None:
        """Test that debug.log is only created in debug mode."""
        configure_logging(debug=False, log_dir=tmp_path)
        logging.getLogger("crawlbase_mcp.client").debug("hidden")

        assert not (tmp_path / "debug.log").exists()
        assert (tmp_path / "error.log").exists()

    def test_reconfigure_replaces_handlers(self, tmp_path: Path, restore_logging: None) -> None:
        """Test that calling twice does not duplicate handlers."""
        configure_logging(debug=True, log_dir=tmp_path)
        configure_logging(debug=True, log_dir=tmp_path)

        assert len(logging.getLogger("crawlbase_mcp").handlers) == 3
