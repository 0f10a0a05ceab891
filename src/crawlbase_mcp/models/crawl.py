"""Pydantic models for Crawlbase requests and responses."""

from __future__ import annotations

from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CrawlParameters(BaseModel):
    """Query options accepted by the Crawlbase Crawling API."""

    model_config = ConfigDict(extra="forbid")

    url: str = Field(description="The URL to crawl")
    token: str | None = Field(default=None, description="Token overriding the configured one")
    user_agent: str | None = Field(default=None, description="Custom user agent")
    format: Literal["json", "html"] | None = Field(default=None, description="Response format")
    device: Literal["desktop", "mobile", "tablet"] | None = Field(default=None, description="Device type")
    country: str | None = Field(default=None, description="Two-letter country code")
    session: int | None = Field(default=None, description="Session ID")
    session_sticky_proxy: bool | None = Field(default=None, description="Use sticky proxy")
    proxy_pool: Literal["datacenter", "residential"] | None = Field(default=None, description="Proxy pool type")
    correlation_id: str | None = Field(default=None, description="Correlation ID")
    original_status: bool | None = Field(default=None, description="Include original status")
    pc_status: bool | None = Field(default=None, description="Include proxy crawl status")
    get_cookies: bool | None = Field(default=None, description="Return cookies")
    custom_headers: dict[str, str] | None = Field(default=None, description="Custom headers")
    ajax_wait: int | None = Field(default=None, description="AJAX wait time")
    page_wait: int | None = Field(default=None, description="Page wait time in milliseconds")
    screenshot: bool | None = Field(default=None, description="Take screenshot")
    screenshot_selector: str | None = Field(default=None, description="CSS selector to screenshot")
    mode: Literal["fullpage", "viewport"] | None = Field(default=None, description="Screenshot mode")
    width: int | None = Field(default=None, description="Screenshot width")
    height: int | None = Field(default=None, description="Screenshot height")
    pdf: bool | None = Field(default=None, description="Generate PDF")
    autoparse: bool | None = Field(default=None, description="Auto parse content")
    css_extractor: dict[str, str] | None = Field(default=None, description="CSS extractor config")
    scraper: str | None = Field(default=None, description="Scraper name")
    webhook: str | None = Field(default=None, description="Webhook URL")
    get_headers: bool | None = Field(default=None, description="Return headers")
    store: bool | None = Field(default=None, description="Store data")
    stored_data: str | None = Field(default=None, description="Stored data ID")
    scroll: bool | None = Field(default=None, description="Scroll page")
    scroll_interval: int | None = Field(default=None, description="Scroll interval in seconds")
    body: str | None = Field(default=None, description="Request body")
    post_content_type: str | None = Field(default=None, description="POST content type")

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid URL: {value!r}")
        return value


class CrawlResponse(BaseModel):
    """A successful crawl returned by the API."""

    body: str = Field(description="Response body")
    status: int = Field(description="HTTP status code of the API response")
    url: str = Field(description="The crawled URL")
    original_status: int | None = Field(default=None, description="Status returned by the target site")
    pc_status: int | None = Field(default=None, description="Crawlbase proxy crawl status")
    headers: dict[str, str] | None = Field(default=None, description="Response headers")
    cookies: dict[str, str] | None = Field(default=None, description="Cookies set by the target site")
    screenshot_url: str | None = Field(default=None, description="URL of the captured screenshot")


class CrawlError(BaseModel):
    """Error information for a failed crawl."""

    error: str = Field(description="Error message")
    status: int = Field(description="HTTP status code")
    pc_status: int | None = Field(default=None, description="Crawlbase proxy crawl status")
    original_status: int | None = Field(default=None, description="Status returned by the target site")


class CrawlResult(BaseModel):
    """Outcome of a crawl request."""

    success: bool = Field(description="Whether the request was successful")
    data: CrawlResponse | None = Field(default=None, description="Response data if successful")
    error: CrawlError | None = Field(default=None, description="Error information if failed")
    request_id: str = Field(description="Short random request ID")
    duration_ms: int = Field(description="Total duration including retries, in milliseconds")
    attempts: int = Field(default=0, description="Number of API calls made")
