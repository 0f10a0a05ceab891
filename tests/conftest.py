"""Pytest configuration and fixtures for crawlbase-mcp tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from unittest.mock import AsyncMock

import pytest
from requests.structures import CaseInsensitiveDict

from crawlbase_mcp.client import CrawlbaseClient
from crawlbase_mcp.core.client import set_client
from crawlbase_mcp.retry_queue import QueueConfig, TaskRetryQueue
from crawlbase_mcp.transport import HttpResponse


@pytest.fixture
def make_response() -> Callable[..., HttpResponse]:
    """Factory for transport responses."""

    def _make(
        status: int = 200,
        body: str = "<html><body><p>ok</p></body></html>",
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        if headers is None:
            headers = {"pc_status": "200", "original_status": "200"}
        return HttpResponse(status=status, body=body, headers=CaseInsensitiveDict(headers), elapsed_ms=12.5)

    return _make


@pytest.fixture
def fast_queue_config() -> QueueConfig:
    """Queue config with millisecond backoff so retry tests stay fast."""
    return QueueConfig(max_concurrency=20, window_ms=1000, max_admissions_per_window=100, max_retries=3, base_delay_ms=1)


@pytest.fixture
def transport() -> AsyncMock:
    """Transport double whose get() is an AsyncMock."""
    fake = AsyncMock()
    fake.timeout = 90
    return fake


@pytest.fixture
def client(transport: AsyncMock, fast_queue_config: QueueConfig) -> CrawlbaseClient:
    """Client with both tokens, a fake transport and a fast retry queue."""
    return CrawlbaseClient(
        normal_token="normal-token-123",
        js_token="js-token-456",
        transport=transport,
        retry_queue=TaskRetryQueue(fast_queue_config),
    )


@pytest.fixture
def shared_client(client: CrawlbaseClient) -> Iterator[CrawlbaseClient]:
    """Install the test client as the server-wide client."""
    set_client(client)
    yield client
    set_client(None)


@pytest.fixture
def product_html() -> str:
    """Product page with navigation, reviews and other page chrome."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta property="og:title" content="OG Widget">
        <title>Widget Pro</title>
        <style>.price { color: red; }</style>
    </head>
    <body>
        <header><nav><a href="/">Home</a> <a href="/shop">Shop</a></nav></header>
        <div class="sidebar">Sidebar categories</div>
        <main>
            <h1>Widget Pro</h1>
            <p>The <strong>best</strong> widget for <em>everything</em>.</p>
            <p><a href="https://example.com/buy">Buy now</a> or <a href="#specs">see specs</a>.</p>
            <div class="reviews">Great product! Five stars.</div>
            <div class="customer-comment-box">I love it</div>
        </main>
        <footer>Copyright Widget Co</footer>
        <script>console.log('should be stripped');</script>
        <noscript>No JavaScript content</noscript>
    </body>
    </html>
    """


@pytest.fixture
def simple_html() -> str:
    """Simple HTML for basic testing."""
    return """
    <html>
    <head><title>Simple Page</title></head>
    <body>
        <h1>Hello World</h1>
        <p>This is a simple test.</p>
    </body>
    </html>
    """
