"""MCP tool definitions for Crawlbase crawling."""

from __future__ import annotations

from typing import Literal

from mcp.server.fastmcp import FastMCP

from crawlbase_mcp.models.batch import (
    BatchCrawlResponse,
    BatchMarkdownResponse,
    BatchScreenshotResponse,
)
from crawlbase_mcp.tools.service import (
    batch_crawl_screenshots,
    batch_crawl_urls,
    batch_crawl_urls_markdown,
    build_options,
)


async def crawl(
    urls: list[str],
    device: Literal["desktop", "mobile", "tablet"] | None = None,
    country: str | None = None,
    ajax_wait: int | None = None,
    page_wait: int | None = None,
    scroll: bool = False,
    user_agent: str | None = None,
    css_selector: str | None = None,
) -> BatchCrawlResponse:
    """Crawl one or more URLs through Crawlbase and return the raw HTML.

    Args:
        urls: List of URLs to crawl (must be http:// or https://)
        device: Device to emulate (requires the JavaScript token)
        country: Two-letter country code for the proxy location
        ajax_wait: Wait for AJAX requests to finish (requires the JavaScript token)
        page_wait: Milliseconds to wait after page load (requires the JavaScript token)
        scroll: Scroll the page to load lazy content (requires the JavaScript token)
        user_agent: Custom user agent string
        css_selector: Optional CSS selector to filter HTML elements
                     (e.g., "article", ".product-details")

    Returns:
        BatchCrawlResponse with results for all URLs
    """
    options = build_options(
        device=device,
        country=country,
        ajax_wait=ajax_wait,
        page_wait=page_wait,
        scroll=scroll,
        user_agent=user_agent,
    )
    return await batch_crawl_urls(urls, options, css_selector)


async def crawl_markdown(
    urls: list[str],
    device: Literal["desktop", "mobile", "tablet"] | None = None,
    country: str | None = None,
    ajax_wait: int | None = None,
    page_wait: int | None = None,
    scroll: bool = False,
    user_agent: str | None = None,
    css_selector: str | None = None,
) -> BatchMarkdownResponse:
    """Crawl one or more URLs and extract the main content as markdown.

    Navigation, headers, footers, ads, reviews and similar page chrome are
    removed before conversion.

    Args:
        urls: List of URLs to crawl (must be http:// or https://)
        device: Device to emulate (requires the JavaScript token)
        country: Two-letter country code for the proxy location
        ajax_wait: Wait for AJAX requests to finish (requires the JavaScript token)
        page_wait: Milliseconds to wait after page load (requires the JavaScript token)
        scroll: Scroll the page to load lazy content (requires the JavaScript token)
        user_agent: Custom user agent string
        css_selector: Optional CSS selector to scope the content before conversion

    Returns:
        BatchMarkdownResponse with title, markdown and excerpt for all URLs
    """
    options = build_options(
        device=device,
        country=country,
        ajax_wait=ajax_wait,
        page_wait=page_wait,
        scroll=scroll,
        user_agent=user_agent,
    )
    return await batch_crawl_urls_markdown(urls, options, css_selector)


async def crawl_screenshot(
    urls: list[str],
    mode: Literal["fullpage", "viewport"] | None = None,
    width: int | None = None,
    height: int | None = None,
    device: Literal["desktop", "mobile", "tablet"] | None = None,
    screenshot_selector: str | None = None,
) -> BatchScreenshotResponse:
    """Capture screenshots of one or more URLs (requires the JavaScript token).

    Args:
        urls: List of URLs to capture (must be http:// or https://)
        mode: "fullpage" for the whole page or "viewport" for the visible area
        width: Viewport width in pixels
        height: Viewport height in pixels
        device: Device to emulate
        screenshot_selector: CSS selector of a single element to capture

    Returns:
        BatchScreenshotResponse with a screenshot URL for each page
    """
    options = build_options(
        mode=mode,
        width=width,
        height=height,
        device=device,
        screenshot_selector=screenshot_selector,
    )
    return await batch_crawl_screenshots(urls, options)


def register_crawl_tools(mcp: FastMCP) -> None:
    """Register the crawl tools on the MCP server.

    Args:
        mcp: FastMCP server instance to register tools on
    """
    mcp.tool()(crawl)
    mcp.tool()(crawl_markdown)
    mcp.tool()(crawl_screenshot)
