"""Admin HTTP endpoints for monitoring.

This module provides read-only administrative endpoints for:
- Health checks
- Crawl statistics and retry queue occupancy
- Effective configuration (token values are never exposed)

The admin module follows a router -> service pattern:
- router.py: HTTP endpoint handlers and registration
- service.py: Stats and configuration gathering
"""

from crawlbase_mcp.admin.router import (
    api_config_get,
    api_stats,
    health_check,
    register_admin_routes,
)
from crawlbase_mcp.admin.service import (
    get_current_config,
    get_stats,
)

__all__ = [
    # Router functions
    "api_config_get",
    "api_stats",
    "health_check",
    "register_admin_routes",
    # Service functions
    "get_current_config",
    "get_stats",
]
