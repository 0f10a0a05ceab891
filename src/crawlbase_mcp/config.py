"""Environment-driven settings for the Crawlbase MCP server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from crawlbase_mcp.retry_queue import QueueConfig
from crawlbase_mcp.transport import DEFAULT_TIMEOUT


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() in ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


@dataclass(frozen=True)
class Settings:
    """Server settings.

    Attributes:
        normal_token: Crawlbase token for plain requests (CRAWLBASE_TOKEN)
        js_token: Crawlbase token for JavaScript rendering (CRAWLBASE_JS_TOKEN)
        debug: Write debug logs to debug.log (DEBUG)
        log_dir: Directory for debug.log and error.log (CRAWLBASE_LOG_DIR)
        timeout: Per-request timeout in seconds (CRAWLBASE_TIMEOUT)
        queue: Retry queue settings (CRAWLBASE_MAX_CONCURRENCY, CRAWLBASE_WINDOW_MS,
            CRAWLBASE_MAX_PER_WINDOW, CRAWLBASE_MAX_RETRIES, CRAWLBASE_BASE_DELAY_MS)
    """

    normal_token: str | None = None
    js_token: str | None = None
    debug: bool = False
    log_dir: Path = Path(".")
    timeout: int = DEFAULT_TIMEOUT
    queue: QueueConfig = field(default_factory=QueueConfig)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables.

        Raises:
            ValueError: If a numeric variable is malformed or out of range
        """
        defaults = QueueConfig()
        queue = QueueConfig(
            max_concurrency=_env_int("CRAWLBASE_MAX_CONCURRENCY", defaults.max_concurrency),
            window_ms=_env_int("CRAWLBASE_WINDOW_MS", defaults.window_ms),
            max_admissions_per_window=_env_int("CRAWLBASE_MAX_PER_WINDOW", defaults.max_admissions_per_window),
            max_retries=_env_int("CRAWLBASE_MAX_RETRIES", defaults.max_retries),
            base_delay_ms=_env_int("CRAWLBASE_BASE_DELAY_MS", defaults.base_delay_ms),
        )

        return cls(
            normal_token=os.getenv("CRAWLBASE_TOKEN") or None,
            js_token=os.getenv("CRAWLBASE_JS_TOKEN") or None,
            debug=_env_bool("DEBUG"),
            log_dir=Path(os.getenv("CRAWLBASE_LOG_DIR", ".")),
            timeout=_env_int("CRAWLBASE_TIMEOUT", DEFAULT_TIMEOUT),
            queue=queue,
        )
