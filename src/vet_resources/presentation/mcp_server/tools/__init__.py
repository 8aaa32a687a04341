"""
Veteran Resources MCP Tools

- search_resources, recommend_resources, get_resource, resource_category_counts

Usage:
    from .tools import register_all_tools
    register_all_tools(mcp, search_service, recommendation_service)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .resources import register_resource_tools

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from vet_resources.application.search import RecommendationService, ResourceSearchService

logger = logging.getLogger(__name__)


def register_all_tools(
    mcp: FastMCP,
    search_service: ResourceSearchService,
    recommendation_service: RecommendationService,
) -> None:
    """Register every tool group on ``mcp``."""
    register_resource_tools(mcp, search_service, recommendation_service)
    logger.info("Registered resource tools")


__all__ = ["register_all_tools", "register_resource_tools"]
