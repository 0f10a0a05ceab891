"""MCP server exposing Crawlbase crawling as tools."""

from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from crawlbase_mcp.admin import register_admin_routes
from crawlbase_mcp.config import Settings
from crawlbase_mcp.core.client import create_client, set_client
from crawlbase_mcp.logging_setup import configure_logging
from crawlbase_mcp.tools import register_crawl_tools

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "Crawlbase MCP",
    instructions=(
        "Crawl web pages through the Crawlbase API. "
        "Use crawl for raw HTML, crawl_markdown for readable page content, "
        "and crawl_screenshot for page screenshots. "
        "Every tool accepts a list of URLs and reports each one separately."
    ),
    stateless_http=True,  # Accept requests without requiring initialize handshake
)

register_crawl_tools(mcp)
register_admin_routes(mcp)


def run_server(transport: str = "stdio", host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the MCP server.

    Args:
        transport: Transport type ('stdio', 'streamable-http' or 'sse')
        host: Host to bind to for HTTP transports (default: 0.0.0.0)
        port: Port to bind to for HTTP transports (default: 8000)
    """
    settings = Settings.from_env()
    configure_logging(debug=settings.debug, log_dir=settings.log_dir)
    set_client(create_client(settings))

    logger.info(f"Starting Crawlbase MCP server with {transport} transport")

    # Configure host and port via settings
    mcp.settings.host = host
    mcp.settings.port = port

    mcp.run(transport=transport)


if __name__ == "__main__":
    run_server()
