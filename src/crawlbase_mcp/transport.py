"""HTTP transport used by the Crawlbase client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests
from requests.structures import CaseInsensitiveDict

from crawlbase_mcp.errors import ErrorCause, TransportError

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 90


@dataclass
class HttpResponse:
    """Status, headers and body of a completed HTTP request."""

    status: int
    body: str
    headers: CaseInsensitiveDict[str] = field(default_factory=CaseInsensitiveDict)
    elapsed_ms: float | None = None


def connection_error_cause(error: BaseException) -> ErrorCause:
    """Work out whether a connection error was a reset, a refusal or neither.

    requests wraps the OS error several levels deep (urllib3 MaxRetryError,
    NewConnectionError, ProtocolError), so the whole chain is searched.

    Args:
        error: The exception raised by requests

    Returns:
        CONNECTION_REFUSED, CONNECTION_RESET, or CONNECTION_FAILED
    """
    seen: set[int] = set()
    stack: list[Any] = [error]

    while stack:
        current = stack.pop()
        if not isinstance(current, BaseException) or id(current) in seen:
            continue
        seen.add(id(current))

        if isinstance(current, ConnectionRefusedError):
            return ErrorCause.CONNECTION_REFUSED
        if isinstance(current, ConnectionResetError):
            return ErrorCause.CONNECTION_RESET

        stack.extend(current.args)
        stack.append(getattr(current, "reason", None))
        stack.append(current.__cause__)
        stack.append(current.__context__)

    message = str(error).lower()
    if "refused" in message:
        return ErrorCause.CONNECTION_REFUSED
    if "reset" in message:
        return ErrorCause.CONNECTION_RESET
    return ErrorCause.CONNECTION_FAILED


class RequestsTransport:
    """Blocking requests session driven from a worker thread."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None) -> None:
        """Initialize the transport.

        Args:
            timeout: Per-request timeout in seconds (default: 90)
            session: Optional pre-configured requests session
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    async def get(
        self,
        url: str,
        params: list[tuple[str, str]] | Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        """Perform a GET request.

        Args:
            url: Request URL
            params: Query parameters
            headers: Request headers

        Returns:
            HttpResponse for any HTTP status, including errors

        Raises:
            TransportError: If no response was received
        """
        # Run requests in thread pool to avoid blocking
        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(
                None,
                lambda: self.session.get(
                    url,
                    params=params,
                    headers=dict(headers or {}),
                    timeout=self.timeout,
                ),
            )
        except requests.Timeout as e:
            raise TransportError(f"Request timed out: {e}", cause=ErrorCause.TIMEOUT) from e
        except requests.ConnectionError as e:
            cause = connection_error_cause(e)
            raise TransportError(f"Connection failed: {e}", cause=cause) from e
        except requests.RequestException as e:
            raise TransportError(f"Request failed: {e}") from e

        logger.debug(f"GET {url} -> {response.status_code} ({len(response.text)} chars)")

        return HttpResponse(
            status=response.status_code,
            body=response.text,
            headers=CaseInsensitiveDict(response.headers),
            elapsed_ms=response.elapsed.total_seconds() * 1000 if response.elapsed else None,
        )
