"""Main entry point for the Crawlbase MCP server."""

from __future__ import annotations

import sys

from crawlbase_mcp.server import run_server


def main() -> None:
    """Main entry point.

    Usage: python -m crawlbase_mcp [transport] [host] [port]
    """
    transport = "stdio"
    host = "0.0.0.0"
    port = 8000

    if len(sys.argv) > 1:
        transport = sys.argv[1]
    if len(sys.argv) > 2:
        host = sys.argv[2]
    if len(sys.argv) > 3:
        port = int(sys.argv[3])

    # stdout belongs to the stdio transport
    print(f"Starting Crawlbase MCP server ({transport} transport)...", file=sys.stderr)
    run_server(transport=transport, host=host, port=port)


if __name__ == "__main__":
    main()
