"""In-memory crawl metrics for the stats endpoint."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class CrawlRecord:
    """One crawled URL as seen by a tool."""

    tool: str
    url: str
    timestamp: datetime
    success: bool
    status_code: int | None = None
    duration_ms: int | None = None
    attempts: int = 1
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "url": self.url,
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "status_code": self.status_code,
            "duration_ms": self.duration_ms,
            "attempts": self.attempts,
            "error": self.error,
        }


@dataclass
class ServerMetrics:
    """Counters and recent history for crawls handled by this process."""

    start_time: datetime = field(default_factory=datetime.now)
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_retries: int = 0
    per_tool: dict[str, int] = field(default_factory=dict)
    recent_requests: deque[CrawlRecord] = field(default_factory=lambda: deque(maxlen=50))
    recent_errors: deque[CrawlRecord] = field(default_factory=lambda: deque(maxlen=20))

    def record(self, record: CrawlRecord) -> None:
        """Add a crawl to the counters and history."""
        self.total_requests += 1
        self.per_tool[record.tool] = self.per_tool.get(record.tool, 0) + 1

        if record.success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
            self.recent_errors.append(record)

        # attempts - 1 retries; 0 attempts means the request never reached the API
        self.total_retries += max(record.attempts - 1, 0)
        self.recent_requests.append(record)

    def uptime_seconds(self) -> float:
        return (datetime.now() - self.start_time).total_seconds()

    def success_rate(self) -> float:
        """Success rate as a percentage."""
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests * 100

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to a JSON-serializable dictionary."""
        uptime = self.uptime_seconds()
        average_retries = round(self.total_retries / self.total_requests, 2) if self.total_requests else 0.0

        return {
            "status": "healthy",
            "uptime": {"seconds": uptime, "formatted": format_uptime(uptime)},
            "start_time": self.start_time.isoformat(),
            "requests": {
                "total": self.total_requests,
                "successful": self.successful_requests,
                "failed": self.failed_requests,
                "success_rate": round(self.success_rate(), 2),
                "per_tool": dict(self.per_tool),
            },
            "retries": {
                "total": self.total_retries,
                "average_per_request": average_retries,
            },
            # Newest first
            "recent_requests": [r.to_dict() for r in reversed(list(self.recent_requests)[-10:])],
            "recent_errors": [r.to_dict() for r in reversed(list(self.recent_errors)[-10:])],
        }


def format_uptime(seconds: float) -> str:
    """Format a duration like "45s", "3m 12s", "5h 2m" or "2d 4h"."""
    total = int(seconds)
    if total < 60:
        return f"{total}s"
    if total < 3600:
        return f"{total // 60}m {total % 60}s"
    if total < 86400:
        return f"{total // 3600}h {total % 3600 // 60}m"
    return f"{total // 86400}d {total % 86400 // 3600}h"


# Global metrics instance
_metrics = ServerMetrics()


def get_metrics() -> ServerMetrics:
    """Get the global metrics instance."""
    return _metrics


def record_request(
    tool: str,
    url: str,
    success: bool,
    status_code: int | None = None,
    duration_ms: int | None = None,
    attempts: int = 1,
    error: str | None = None,
) -> None:
    """Record a crawl in the global metrics.

    Args:
        tool: Name of the MCP tool that made the request
        url: The URL that was crawled
        success: Whether the crawl was successful
        status_code: HTTP status code if available
        duration_ms: Time taken including retries, in milliseconds
        attempts: Number of API calls made (1 = no retries)
        error: Error message if failed
    """
    _metrics.record(
        CrawlRecord(
            tool=tool,
            url=url,
            timestamp=datetime.now(),
            success=success,
            status_code=status_code,
            duration_ms=duration_ms,
            attempts=attempts,
            error=error,
        )
    )
