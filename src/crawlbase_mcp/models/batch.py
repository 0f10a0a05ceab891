"""Pydantic models for batch tool responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MarkdownResult(BaseModel):
    """Markdown extracted from a crawled page."""

    title: str = Field(description="Document title")
    content: str = Field(description="Markdown content")
    excerpt: str = Field(description="Plain-text excerpt of at most ~200 characters")
    url: str = Field(description="Source URL")
    length: int = Field(description="Length of the markdown content")


class PageContent(BaseModel):
    """Raw page returned by the crawl tool."""

    url: str = Field(description="The crawled URL")
    content: str = Field(description="Page HTML (or JSON when format=json)")
    original_status: int | None = Field(default=None, description="Status returned by the target site")
    pc_status: int | None = Field(default=None, description="Crawlbase proxy crawl status")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


class ScreenshotResult(BaseModel):
    """Screenshot captured for a page."""

    url: str = Field(description="The crawled URL")
    screenshot_url: str = Field(description="URL of the captured screenshot")


class CrawlResultItem(BaseModel):
    """Individual result item for batch crawls."""

    url: str = Field(description="The URL that was requested")
    success: bool = Field(description="Whether the crawl was successful")
    data: PageContent | None = Field(default=None, description="Page data if successful")
    error: str | None = Field(default=None, description="Error message if failed")


class MarkdownResultItem(BaseModel):
    """Individual result item for batch markdown extraction."""

    url: str = Field(description="The URL that was requested")
    success: bool = Field(description="Whether the extraction was successful")
    data: MarkdownResult | None = Field(default=None, description="Markdown data if successful")
    error: str | None = Field(default=None, description="Error message if failed")


class ScreenshotResultItem(BaseModel):
    """Individual result item for batch screenshots."""

    url: str = Field(description="The URL that was requested")
    success: bool = Field(description="Whether the screenshot was captured")
    data: ScreenshotResult | None = Field(default=None, description="Screenshot data if successful")
    error: str | None = Field(default=None, description="Error message if failed")


class BatchCrawlResponse(BaseModel):
    """Response model for batch crawl operations."""

    total: int = Field(description="Total number of URLs processed")
    successful: int = Field(description="Number of successful crawls")
    failed: int = Field(description="Number of failed crawls")
    results: list[CrawlResultItem] = Field(description="Results for each URL")


class BatchMarkdownResponse(BaseModel):
    """Response model for batch markdown operations."""

    total: int = Field(description="Total number of URLs processed")
    successful: int = Field(description="Number of successful extractions")
    failed: int = Field(description="Number of failed extractions")
    results: list[MarkdownResultItem] = Field(description="Results for each URL")


class BatchScreenshotResponse(BaseModel):
    """Response model for batch screenshot operations."""

    total: int = Field(description="Total number of URLs processed")
    successful: int = Field(description="Number of screenshots captured")
    failed: int = Field(description="Number of failed screenshots")
    results: list[ScreenshotResultItem] = Field(description="Results for each URL")
