"""Pydantic data models for crawl operations and responses.

This module defines the data structures used throughout the server,
providing type-safe request/response models for:
- Crawlbase API parameters and results (CrawlParameters, CrawlResult)
- Batch tool responses (BatchCrawlResponse, BatchMarkdownResponse,
  BatchScreenshotResponse)

All models use Pydantic v2 for validation and serialization, ensuring
data integrity across the MCP tool interface.
"""

from crawlbase_mcp.models.batch import (
    BatchCrawlResponse,
    BatchMarkdownResponse,
    BatchScreenshotResponse,
    CrawlResultItem,
    MarkdownResult,
    MarkdownResultItem,
    PageContent,
    ScreenshotResult,
    ScreenshotResultItem,
)
from crawlbase_mcp.models.crawl import (
    CrawlError,
    CrawlParameters,
    CrawlResponse,
    CrawlResult,
)

__all__ = [
    # Crawlbase API models
    "CrawlParameters",
    "CrawlResponse",
    "CrawlError",
    "CrawlResult",
    # Tool response models
    "MarkdownResult",
    "PageContent",
    "ScreenshotResult",
    "CrawlResultItem",
    "MarkdownResultItem",
    "ScreenshotResultItem",
    "BatchCrawlResponse",
    "BatchMarkdownResponse",
    "BatchScreenshotResponse",
]
