"""Shared Crawlbase client for the MCP server."""

from __future__ import annotations

import logging

from crawlbase_mcp.client import CrawlbaseClient
from crawlbase_mcp.config import Settings
from crawlbase_mcp.retry_queue import TaskRetryQueue
from crawlbase_mcp.transport import RequestsTransport

logger = logging.getLogger(__name__)

# All tools share one client so they share one retry queue
_client: CrawlbaseClient | None = None


def create_client(settings: Settings) -> CrawlbaseClient:
    """Build a client and its retry queue from settings.

    Args:
        settings: Server settings

    Returns:
        A new CrawlbaseClient
    """
    if not settings.normal_token and not settings.js_token:
        logger.warning("Neither CRAWLBASE_TOKEN nor CRAWLBASE_JS_TOKEN is set; every crawl will fail")

    return CrawlbaseClient(
        normal_token=settings.normal_token,
        js_token=settings.js_token,
        transport=RequestsTransport(timeout=settings.timeout),
        retry_queue=TaskRetryQueue(settings.queue),
    )


def get_client() -> CrawlbaseClient:
    """Get the shared client, creating it from the environment on first use."""
    global _client
    if _client is None:
        _client = create_client(Settings.from_env())
    return _client


def set_client(client: CrawlbaseClient | None) -> None:
    """Replace the shared client (None resets it)."""
    global _client
    _client = client
