"""Tests for the MCP server wiring and admin routes."""

from __future__ import annotations

import json
from unittest.mock import Mock, patch

import pytest

from crawlbase_mcp.admin import api_config_get, api_stats, health_check
from crawlbase_mcp.client import CrawlbaseClient
from crawlbase_mcp.server import mcp, run_server


class TestServer:
    """Tests for the FastMCP server instance."""

    @pytest.mark.asyncio
    async def test_tools_registered(self) -> None:
        """Test that the crawl tools are exposed."""
        tools = await mcp.list_tools()
        names = {tool.name for tool in tools}

        assert {"crawl", "crawl_markdown", "crawl_screenshot"} <= names

    @pytest.mark.asyncio
    async def test_tool_schema_lists_urls(self) -> None:
        """Test that tool input schemas require a list of URLs."""
        tools = {tool.name: tool for tool in await mcp.list_tools()}
        schema = tools["crawl_markdown"].inputSchema

        assert "urls" in schema["required"]
        assert schema["properties"]["urls"]["type"] == "array"

    def test_run_server_configures_and_runs(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        """Test that run_server installs a client from the environment."""
        monkeypatch.setenv("CRAWLBASE_TOKEN", "env-token")
        monkeypatch.setenv("CRAWLBASE_LOG_DIR", str(tmp_path))
        monkeypatch.setenv("CRAWLBASE_MAX_RETRIES", "5")

        with patch("crawlbase_mcp.server.configure_logging") as mock_logging:
            with patch("crawlbase_mcp.server.set_client") as mock_set_client:
                with patch.object(mcp, "run") as mock_run:
                    run_server(transport="sse", host="127.0.0.1", port=9000)

        mock_logging.assert_called_once()
        client = mock_set_client.call_args[0][0]
        assert isinstance(client, CrawlbaseClient)
        assert client.normal_token == "env-token"
        assert client.retry_queue.config.max_retries == 5
        assert mcp.settings.host == "127.0.0.1"
        assert mcp.settings.port == 9000
        mock_run.assert_called_once_with(transport="sse")


class TestAdminRoutes:
    """Tests for the admin HTTP routes."""

    @pytest.mark.asyncio
    async def test_health_check(self) -> None:
        """Test the health endpoint."""
        response = await health_check(Mock())

        assert response.status_code == 200
        assert json.loads(response.body) == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_stats_include_queue(self, shared_client: CrawlbaseClient) -> None:
        """Test that stats include metrics and the queue snapshot."""
        response = await api_stats(Mock())
        stats = json.loads(response.body)

        assert stats["status"] == "healthy"
        assert "requests" in stats
        assert stats["queue"]["running"] == 0
        assert stats["queue"]["max_concurrency"] == 20

    @pytest.mark.asyncio
    async def test_config_hides_tokens(self, shared_client: CrawlbaseClient) -> None:
        """Test that the config endpoint reports token presence only."""
        response = await api_config_get(Mock())
        body = response.body.decode()
        config = json.loads(body)["config"]

        assert config["has_normal_token"] is True
        assert config["has_js_token"] is True
        assert config["queue"]["max_retries"] == 3
        assert "normal-token-123" not in body
        assert "js-token-456" not in body
