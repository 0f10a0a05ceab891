"""Core infrastructure shared by the server and the tools.

The core module owns the single Crawlbase client instance, and with it
the retry queue that every tool call goes through.
"""

from crawlbase_mcp.core.client import (
    create_client,
    get_client,
    set_client,
)

__all__ = [
    "create_client",
    "get_client",
    "set_client",
]
