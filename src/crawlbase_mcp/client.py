"""Crawlbase Crawling API client with queued, retried requests."""

from __future__ import annotations

import json
import logging
import secrets
import time
from typing import Any

from crawlbase_mcp import __version__
from crawlbase_mcp.errors import CrawlbaseAPIError, ErrorCause, TaskError, TokenError
from crawlbase_mcp.models.crawl import CrawlError, CrawlParameters, CrawlResponse, CrawlResult
from crawlbase_mcp.retry_queue import TaskRetryQueue
from crawlbase_mcp.transport import HttpResponse, RequestsTransport

# Configure logging
logger = logging.getLogger(__name__)

BASE_URL = "https://api.crawlbase.com"

# Options that only work with the JavaScript (headless browser) token
JS_ONLY_OPTIONS = ("device", "ajax_wait", "page_wait", "scroll", "screenshot", "pdf")

# Crawlbase charges for these original statuses when pc_status is 200
CHARGEABLE_STATUSES = frozenset({200, 201, 204, 301, 302, 404, 410})


def _parse_status(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_cookies(set_cookie: str) -> dict[str, str]:
    """Parse a combined Set-Cookie header into a name -> value mapping.

    Args:
        set_cookie: Set-Cookie header value, multiple cookies joined by ", "

    Returns:
        Dictionary of cookie names to values (attributes are dropped)
    """
    cookies: dict[str, str] = {}
    for cookie in set_cookie.split(", "):
        name_value = cookie.split(";", 1)[0]
        name, _, value = name_value.partition("=")
        if name.strip() and value.strip():
            cookies[name.strip()] = value.strip()
    return cookies


def _mask_token(token: str | None) -> str:
    return f"{token[:4]}..." if token else "none"


class CrawlbaseClient:
    """Client for the Crawlbase Crawling API.

    Every request runs as a task on the client's TaskRetryQueue, so
    concurrent crawls share one concurrency cap and rate limit, and
    rate-limit or server errors are retried with backoff.
    """

    def __init__(
        self,
        normal_token: str | None = None,
        js_token: str | None = None,
        transport: RequestsTransport | None = None,
        retry_queue: TaskRetryQueue | None = None,
        base_url: str = BASE_URL,
    ) -> None:
        """Initialize the client.

        Args:
            normal_token: Token for plain HTTP requests
            js_token: Token for JavaScript-rendered requests
            transport: HTTP transport (default: RequestsTransport())
            retry_queue: Queue shared by all requests (default: TaskRetryQueue())
            base_url: API base URL
        """
        self.base_url = base_url
        self.normal_token = normal_token
        self.js_token = js_token
        self.transport = transport or RequestsTransport()
        self.retry_queue = retry_queue or TaskRetryQueue()

        logger.debug(
            f"CrawlbaseClient initialized (normal_token={bool(normal_token)}, "
            f"js_token={bool(js_token)}, base_url={base_url})"
        )

    def needs_js_token(self, params: CrawlParameters) -> bool:
        """Check whether a request needs the JavaScript token.

        Args:
            params: Request parameters

        Returns:
            True if any browser-only option is set
        """
        return any(getattr(params, option) for option in JS_ONLY_OPTIONS)

    def get_token(self, params: CrawlParameters) -> str:
        """Select the token for a request.

        Args:
            params: Request parameters

        Returns:
            The JavaScript token for browser-only options, else the normal token

        Raises:
            TokenError: If the required token is not configured
        """
        needs_js = self.needs_js_token(params)
        logger.debug(
            f"Token selection: needs_js={needs_js}, has_js_token={bool(self.js_token)}, "
            f"has_normal_token={bool(self.normal_token)}"
        )

        if needs_js:
            if not self.js_token:
                raise TokenError("JavaScript token required for this request but not provided")
            return self.js_token

        if not self.normal_token:
            raise TokenError("Normal token required but not provided")

        return self.normal_token

    def build_request_params(self, params: CrawlParameters) -> list[tuple[str, str]]:
        """Build the query string pairs for a request.

        Args:
            params: Request parameters

        Returns:
            List of (name, value) pairs, token and url first
        """
        token = params.token or self.get_token(params)
        query: list[tuple[str, str]] = [("token", token), ("url", params.url)]

        for key, value in params.model_dump(exclude_none=True).items():
            if key in ("token", "url"):
                continue
            if isinstance(value, bool):
                query.append((key, "true" if value else "false"))
            elif isinstance(value, (dict, list)):
                query.append((key, json.dumps(value, separators=(",", ":"))))
            else:
                query.append((key, str(value)))

        return query

    async def crawl(self, params: CrawlParameters | dict[str, Any]) -> CrawlResult:
        """Crawl a URL through the Crawlbase API.

        Args:
            params: Request parameters, as a model or a plain dictionary

        Returns:
            CrawlResult describing success or the final failure. API and network
            failures are reported in the result, never raised.

        Raises:
            pydantic.ValidationError: If the parameters are invalid
        """
        validated = params if isinstance(params, CrawlParameters) else CrawlParameters.model_validate(params)
        start_time = time.monotonic()
        request_id = secrets.token_hex(4)
        attempts = 0

        logger.debug(
            f"[{request_id}] Starting crawl of {validated.url} "
            f"(screenshot={validated.screenshot}, device={validated.device})"
        )

        async def request_once() -> CrawlResponse:
            nonlocal attempts
            attempts += 1
            query = self.build_request_params(validated)
            logger.debug(f"[{request_id}] Making API request (attempt {attempts})")

            response = await self.transport.get(
                self.base_url,
                params=query,
                headers={
                    "User-Agent": f"crawlbase-mcp/{__version__}",
                    "Accept-Encoding": "gzip, deflate",
                },
            )
            return self._interpret_response(request_id, validated, response)

        try:
            data = await self.retry_queue.add(request_once)
        except TaskError as e:
            logger.debug(f"[{request_id}] Crawl failed after {attempts} attempt(s): {e.message}")
            return CrawlResult(
                success=False,
                error=CrawlError(
                    error=e.message,
                    status=e.status or 500,
                    pc_status=getattr(e, "pc_status", None),
                    original_status=getattr(e, "original_status", None),
                ),
                request_id=request_id,
                duration_ms=self._elapsed_ms(start_time),
                attempts=attempts,
            )
        except Exception as e:
            logger.error(f"[{request_id}] Unexpected crawl error: {type(e).__name__}: {e}")
            return CrawlResult(
                success=False,
                error=CrawlError(error=str(e) or type(e).__name__, status=500),
                request_id=request_id,
                duration_ms=self._elapsed_ms(start_time),
                attempts=attempts,
            )

        logger.debug(f"[{request_id}] Crawl completed in {attempts} attempt(s)")
        return CrawlResult(
            success=True,
            data=data,
            request_id=request_id,
            duration_ms=self._elapsed_ms(start_time),
            attempts=attempts,
        )

    def _interpret_response(
        self,
        request_id: str,
        params: CrawlParameters,
        response: HttpResponse,
    ) -> CrawlResponse:
        """Turn an API response into a CrawlResponse or raise the matching error."""
        logger.debug(
            f"[{request_id}] API response received: status={response.status}, "
            f"length={len(response.body)}"
        )

        # Errors from the Crawlbase API itself
        if response.status >= 400:
            raise CrawlbaseAPIError.from_status(response.status, response.body or "Request failed")

        pc_status = _parse_status(response.headers.get("pc_status"))
        original_status = _parse_status(response.headers.get("original_status"))

        if pc_status != 200 or (original_status and original_status not in CHARGEABLE_STATUSES):
            raise CrawlbaseAPIError(
                f"Non-chargeable response: pc_status={pc_status}, original_status={original_status}",
                cause=ErrorCause.NOT_CHARGEABLE,
                status=response.status,
                pc_status=pc_status,
                original_status=original_status,
            )

        crawl_response = CrawlResponse(
            body=response.body,
            status=response.status,
            url=params.url,
            original_status=original_status,
            pc_status=pc_status,
        )

        screenshot_url = response.headers.get("screenshot_url")
        if screenshot_url:
            crawl_response.screenshot_url = screenshot_url
        elif params.screenshot:
            logger.warning(
                f"[{request_id}] Screenshot requested but no URL in headers "
                f"(url={params.url}, token={_mask_token(params.token)}, "
                f"headers={sorted(response.headers.keys())})"
            )

        set_cookie = response.headers.get("set-cookie")
        if set_cookie:
            crawl_response.cookies = parse_cookies(set_cookie)

        return crawl_response

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)
