"""Streamable HTTP MCP server exposing read-only CKAN catalog tools."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from cachetools import TTLCache
from fastmcp import FastMCP

from ckan_catalog.logging import configure_logging
from ckan_catalog.registry import load_registry
from ckan_catalog.services.catalog import CatalogService

configure_logging()

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = "demo"

RATE_LIMIT_WINDOW = 60
RATE_LIMITS: TTLCache[str, int] = TTLCache(maxsize=512, ttl=RATE_LIMIT_WINDOW)
RATE_LIMITS_PER_TOOL: Dict[str, int] = {
    "list_catalogs": 15,
    "list_publishers": 20,
    "search_datasets": 100,
    "get_dataset": 40,
    "get_resource": 40,
    "list_groups": 20,
    "list_tags": 20,
    "list_licenses": 15,
}


def enforce_rate_limit(tool_name: str) -> None:
    limit = RATE_LIMITS_PER_TOOL.get(tool_name, 60)
    count = RATE_LIMITS.get(tool_name, 0)
    if count >= limit:
        raise RuntimeError(f"Rate limit reached for {tool_name}")
    RATE_LIMITS[tool_name] = count + 1


def audit_tool(tool_name: str, status: str, details: Dict[str, Any] | None = None) -> None:
    logger.info(
        f"tool_event {tool_name}",
        extra={
            "tool": tool_name,
            "status": status,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


mcp = FastMCP("CKAN Catalog MCP")
registry = load_registry()
catalog_service = CatalogService(registry)


@mcp.tool()
def list_catalogs() -> List[Dict[str, Any]]:
    enforce_rate_limit("list_catalogs")
    result = [
        {
            "id": catalog.id,
            "title": catalog.title,
            "base_url": catalog.base_url,
            "has_token": catalog.token is not None,
        }
        for catalog in registry.list()
    ]
    audit_tool("list_catalogs", "success", {"count": len(result)})
    return result


@mcp.tool()
def list_publishers(
    catalog_id: str = DEFAULT_CATALOG,
    query: str = "",
    limit: int = 200,
) -> List[Dict[str, Any]]:
    enforce_rate_limit("list_publishers")
    result = catalog_service.list_publishers(catalog_id, query, limit)
    audit_tool("list_publishers", "success", {"count": len(result)})
    return result


@mcp.tool()
def search_datasets(
    catalog_id: str = DEFAULT_CATALOG,
    query: str = "",
    publisher: Optional[str] = None,
    tag: Optional[str] = None,
    group: Optional[str] = None,
    rows: int = 10,
    start: int = 0,
) -> Dict[str, Any]:
    enforce_rate_limit("search_datasets")
    result = catalog_service.search_datasets(catalog_id, query, publisher, tag, group, rows, start)
    audit_tool("search_datasets", "success", {"count": result.get("count")})
    return result


@mcp.tool()
def get_dataset(
    catalog_id: str = DEFAULT_CATALOG,
    dataset_id_or_name: str = "",
) -> Dict[str, Any]:
    enforce_rate_limit("get_dataset")
    result = catalog_service.get_dataset(catalog_id, dataset_id_or_name)
    audit_tool("get_dataset", "success", {"dataset": result.get("id")})
    return result


@mcp.tool()
def get_resource(
    catalog_id: str = DEFAULT_CATALOG,
    resource_id: str = "",
) -> Dict[str, Any]:
    enforce_rate_limit("get_resource")
    result = catalog_service.get_resource(catalog_id, resource_id)
    audit_tool("get_resource", "success", {"resource": result.get("id")})
    return result


@mcp.tool()
def list_groups(catalog_id: str = DEFAULT_CATALOG) -> List[Dict[str, Any]]:
    enforce_rate_limit("list_groups")
    result = catalog_service.list_groups(catalog_id)
    audit_tool("list_groups", "success", {"count": len(result)})
    return result


@mcp.tool()
def list_tags(catalog_id: str = DEFAULT_CATALOG, query: Optional[str] = None) -> List[str]:
    enforce_rate_limit("list_tags")
    result = catalog_service.list_tags(catalog_id, query)
    audit_tool("list_tags", "success", {"count": len(result)})
    return result


@mcp.tool()
def list_licenses(catalog_id: str = DEFAULT_CATALOG) -> List[Dict[str, Any]]:
    enforce_rate_limit("list_licenses")
    result = catalog_service.list_licenses(catalog_id)
    audit_tool("list_licenses", "success", {"count": len(result)})
    return result


if __name__ == "__main__":
    mcp.run(
        transport="streamable-http",
        host="0.0.0.0",
        port=8000,
    )
