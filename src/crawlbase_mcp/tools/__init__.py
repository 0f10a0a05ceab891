"""MCP crawl tools and business logic.

This module provides the crawling functionality exposed as MCP tools:
- crawl: Raw HTML retrieval through Crawlbase
- crawl_markdown: Main-content extraction as Markdown
- crawl_screenshot: Page screenshots

The tools module follows a router -> service pattern:
- router.py: MCP tool definitions and registration
- service.py: Per-URL crawling, post-processing and batch orchestration

All tools accept several URLs at once. Every request goes through the
shared client's retry queue, which bounds concurrency and request rate
and retries transient failures.
"""

from crawlbase_mcp.tools.router import (
    crawl,
    crawl_markdown,
    crawl_screenshot,
    register_crawl_tools,
)
from crawlbase_mcp.tools.service import (
    CrawlFailedError,
    batch_crawl_screenshots,
    batch_crawl_urls,
    batch_crawl_urls_markdown,
    build_options,
)

__all__ = [
    # MCP tool functions
    "crawl",
    "crawl_markdown",
    "crawl_screenshot",
    # Registration functions
    "register_crawl_tools",
    # Service functions
    "batch_crawl_urls",
    "batch_crawl_urls_markdown",
    "batch_crawl_screenshots",
    "build_options",
    "CrawlFailedError",
]
