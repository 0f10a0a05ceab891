"""Business logic for the crawl tools."""

from __future__ import annotations

import asyncio
from typing import Any

from crawlbase_mcp.client import CrawlbaseClient
from crawlbase_mcp.core.client import get_client
from crawlbase_mcp.markdown import MarkdownExtractor, filter_html_by_selector
from crawlbase_mcp.metrics import record_request
from crawlbase_mcp.models.batch import (
    BatchCrawlResponse,
    BatchMarkdownResponse,
    BatchScreenshotResponse,
    CrawlResultItem,
    MarkdownResultItem,
    PageContent,
    ScreenshotResult,
    ScreenshotResultItem,
)
from crawlbase_mcp.models.crawl import CrawlResponse, CrawlResult

_extractor = MarkdownExtractor()


class CrawlFailedError(Exception):
    """A crawl ended without usable content."""

    def __init__(self, result: CrawlResult) -> None:
        error = result.error
        message = f"[{error.status}] {error.error}" if error else "Crawl failed"
        super().__init__(message)
        self.result = result


def build_options(**options: Any) -> dict[str, Any]:
    """Drop unset options so they are not sent to the API.

    False booleans count as unset; the API defaults them to false anyway.
    """
    return {key: value for key, value in options.items() if value is not None and value is not False}


async def crawl_or_raise(client: CrawlbaseClient, url: str, options: dict[str, Any]) -> tuple[CrawlResponse, CrawlResult]:
    """Crawl a URL and return its response, raising if the crawl failed.

    Args:
        client: Crawlbase client
        url: The URL to crawl
        options: Extra Crawlbase parameters

    Returns:
        Tuple of (response data, full crawl result)

    Raises:
        CrawlFailedError: If the API or network failed after retries
        pydantic.ValidationError: If the URL or options are invalid
    """
    result = await client.crawl({"url": url, **options})
    if not result.success or result.data is None:
        raise CrawlFailedError(result)
    return result.data, result


def _record_failure(tool: str, url: str, error: Exception) -> str:
    error_msg = f"{type(error).__name__}: {error}"
    if isinstance(error, CrawlFailedError):
        record_request(
            tool=tool,
            url=url,
            success=False,
            status_code=error.result.error.status if error.result.error else None,
            duration_ms=error.result.duration_ms,
            attempts=error.result.attempts,
            error=error_msg,
        )
    else:
        record_request(tool=tool, url=url, success=False, attempts=0, error=error_msg)
    return error_msg


def _record_success(tool: str, url: str, result: CrawlResult) -> None:
    record_request(
        tool=tool,
        url=url,
        success=True,
        status_code=result.data.original_status if result.data else None,
        duration_ms=result.duration_ms,
        attempts=result.attempts,
    )


async def crawl_single_url_safe(
    client: CrawlbaseClient,
    url: str,
    options: dict[str, Any],
    css_selector: str | None = None,
) -> CrawlResultItem:
    """Safely crawl a single URL with error handling.

    Args:
        client: Crawlbase client
        url: The URL to crawl
        options: Extra Crawlbase parameters
        css_selector: Optional CSS selector to filter HTML elements

    Returns:
        CrawlResultItem with success/error status
    """
    try:
        response, result = await crawl_or_raise(client, url, options)

        content = response.body
        metadata: dict[str, Any] = {"request_id": result.request_id, "duration_ms": result.duration_ms}
        if result.attempts > 1:
            metadata["attempts"] = result.attempts

        if css_selector:
            content, elements_matched = filter_html_by_selector(content, css_selector)
            metadata["css_selector_applied"] = css_selector
            metadata["elements_matched"] = elements_matched

        if response.cookies:
            metadata["cookies"] = response.cookies

        _record_success("crawl", url, result)

        return CrawlResultItem(
            url=url,
            success=True,
            data=PageContent(
                url=response.url,
                content=content,
                original_status=response.original_status,
                pc_status=response.pc_status,
                metadata=metadata,
            ),
        )
    except Exception as e:
        return CrawlResultItem(url=url, success=False, error=_record_failure("crawl", url, e))


async def crawl_single_url_markdown_safe(
    client: CrawlbaseClient,
    url: str,
    options: dict[str, Any],
    css_selector: str | None = None,
) -> MarkdownResultItem:
    """Safely crawl a single URL and convert it to markdown.

    Args:
        client: Crawlbase client
        url: The URL to crawl
        options: Extra Crawlbase parameters
        css_selector: Optional CSS selector applied before conversion

    Returns:
        MarkdownResultItem with success/error status
    """
    try:
        response, result = await crawl_or_raise(client, url, options)

        html = response.body
        if css_selector:
            html, _ = filter_html_by_selector(html, css_selector)

        markdown = _extractor.extract_markdown(html, response.url)

        _record_success("crawl_markdown", url, result)

        return MarkdownResultItem(url=url, success=True, data=markdown)
    except Exception as e:
        return MarkdownResultItem(url=url, success=False, error=_record_failure("crawl_markdown", url, e))


async def crawl_single_url_screenshot_safe(
    client: CrawlbaseClient,
    url: str,
    options: dict[str, Any],
) -> ScreenshotResultItem:
    """Safely capture a screenshot of a single URL.

    Args:
        client: Crawlbase client
        url: The URL to capture
        options: Extra Crawlbase parameters (screenshot is forced on)

    Returns:
        ScreenshotResultItem with success/error status
    """
    try:
        response, result = await crawl_or_raise(client, url, {**options, "screenshot": True})

        if not response.screenshot_url:
            raise ValueError("Screenshot requested but no screenshot URL was returned")

        _record_success("crawl_screenshot", url, result)

        return ScreenshotResultItem(
            url=url,
            success=True,
            data=ScreenshotResult(url=response.url, screenshot_url=response.screenshot_url),
        )
    except Exception as e:
        return ScreenshotResultItem(url=url, success=False, error=_record_failure("crawl_screenshot", url, e))


async def batch_crawl_urls(
    urls: list[str],
    options: dict[str, Any],
    css_selector: str | None = None,
) -> BatchCrawlResponse:
    """Crawl multiple URLs concurrently.

    Concurrency and rate limits come from the client's retry queue.

    Args:
        urls: List of URLs to crawl
        options: Extra Crawlbase parameters applied to every URL
        css_selector: Optional CSS selector to filter HTML elements

    Returns:
        BatchCrawlResponse with results for all URLs
    """
    client = get_client()
    results = await asyncio.gather(*(crawl_single_url_safe(client, url, options, css_selector) for url in urls))

    successful = sum(1 for r in results if r.success)
    return BatchCrawlResponse(
        total=len(results),
        successful=successful,
        failed=len(results) - successful,
        results=list(results),
    )


async def batch_crawl_urls_markdown(
    urls: list[str],
    options: dict[str, Any],
    css_selector: str | None = None,
) -> BatchMarkdownResponse:
    """Crawl multiple URLs concurrently and convert each to markdown.

    Args:
        urls: List of URLs to crawl
        options: Extra Crawlbase parameters applied to every URL
        css_selector: Optional CSS selector applied before conversion

    Returns:
        BatchMarkdownResponse with markdown results for all URLs
    """
    client = get_client()
    results = await asyncio.gather(
        *(crawl_single_url_markdown_safe(client, url, options, css_selector) for url in urls)
    )

    successful = sum(1 for r in results if r.success)
    return BatchMarkdownResponse(
        total=len(results),
        successful=successful,
        failed=len(results) - successful,
        results=list(results),
    )


async def batch_crawl_screenshots(urls: list[str], options: dict[str, Any]) -> BatchScreenshotResponse:
    """Capture screenshots of multiple URLs concurrently.

    Args:
        urls: List of URLs to capture
        options: Extra Crawlbase parameters applied to every URL

    Returns:
        BatchScreenshotResponse with screenshot URLs for all URLs
    """
    client = get_client()
    results = await asyncio.gather(*(crawl_single_url_screenshot_safe(client, url, options) for url in urls))

    successful = sum(1 for r in results if r.success)
    return BatchScreenshotResponse(
        total=len(results),
        successful=successful,
        failed=len(results) - successful,
        results=list(results),
    )
