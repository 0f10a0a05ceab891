"""Admin service layer for stats and configuration reporting."""

from __future__ import annotations

from typing import Any

from crawlbase_mcp.core.client import get_client
from crawlbase_mcp.metrics import get_metrics


def get_stats() -> dict[str, Any]:
    """Get server statistics and metrics.

    Returns:
        Dictionary with request metrics and a snapshot of the retry queue
    """
    stats = get_metrics().to_dict()
    stats["queue"] = get_client().retry_queue.stats()
    return stats


def get_current_config() -> dict[str, Any]:
    """Get the effective configuration without exposing token values.

    Returns:
        Dictionary with token availability, timeout and queue settings
    """
    client = get_client()
    queue_config = client.retry_queue.config

    return {
        "config": {
            "base_url": client.base_url,
            "has_normal_token": bool(client.normal_token),
            "has_js_token": bool(client.js_token),
            "timeout": client.transport.timeout,
            "queue": {
                "max_concurrency": queue_config.max_concurrency,
                "window_ms": queue_config.window_ms,
                "max_admissions_per_window": queue_config.max_admissions_per_window,
                "max_retries": queue_config.max_retries,
                "base_delay_ms": queue_config.base_delay_ms,
            },
        },
        "note": "Configuration is read from the environment at startup",
    }
