"""
Resource MCP Tools - directory search and symptom-based recommendations.

Tools:
- search_resources: filtered list/search with pagination
- recommend_resources: symptom wizard ordering (VA / NGO / other mix)
- get_resource: one record by id
- resource_category_counts: records per category

All tools return JSON strings. Storage and remote failures come back as an
empty result with a message, never as a tool error.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from vet_resources.application.search import RecommendationService, ResourceSearchService

logger = logging.getLogger(__name__)


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, default=str)


def _drop_empty(params: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in params.items() if v not in (None, "", [])}


def register_resource_tools(
    mcp: FastMCP,
    search_service: ResourceSearchService,
    recommendation_service: RecommendationService,
):
    """Register resource directory tools (4 tools)."""

    @mcp.tool()
    async def search_resources(
        query: str | None = None,
        tags: list[str] | str | None = None,
        category: str | None = None,
        resource_type: str | None = None,
        veteran_type: str | None = None,
        service_branch: str | None = None,
        veteran_era: str | None = None,
        state: str | None = None,
        min_rating: float | None = None,
        featured_only: bool = False,
        verified_only: bool = False,
        veteran_led_only: bool = False,
        recently_updated: bool = False,
        sort_by: str = "relevance",
        page: int = 1,
        limit: int = 30,
        session_id: str | None = None,
    ) -> str:
        """
        Search the veteran resource directory.

        Args:
            query: Free text; every word must match title, description, tags
                   or organization. Example: "ptsd counseling"
            tags: Tags or symptoms; a resource matches if ANY appears in its
                  tags, title or description. List or comma-separated string.
            category: Category name, e.g. "Mental Health", "Housing Support"
            resource_type: "va", "ngo", "state", "federal", "other"
            veteran_type: e.g. "Combat Veteran", "Post-9/11" (comma list ok)
            service_branch: e.g. "Army", "Navy" (comma list ok)
            veteran_era: e.g. "Vietnam", "Post-9/11" (comma list ok)
            state: Two-letter state code (includes national resources) or
                   "national" for national resources only
            min_rating: Minimum rating 0-5
            featured_only: Only featured resources
            verified_only: Only verified resources
            veteran_led_only: Only veteran-founded or veteran-led organizations
            recently_updated: Only resources updated in the last 90 days
            sort_by: "relevance" (default), "rating", "name", "date"
            page: 1-based page number
            limit: Page size, 1-50 (default 30)
            session_id: Opaque id; varies tie ordering per session, stable
                        for the same id

        Returns:
            JSON: {resources, total, page, totalPages, limit, message?}
        """
        params = _drop_empty(
            {
                "searchTerm": query,
                "tags": tags,
                "category": category,
                "resourceType": resource_type,
                "veteranType": veteran_type,
                "serviceBranch": service_branch,
                "veteranEra": veteran_era,
                "location": state,
                "minRating": min_rating,
                "featuredOnly": featured_only,
                "verifiedOnly": verified_only,
                "veteranLedOnly": veteran_led_only,
                "recentlyUpdated": recently_updated,
                "sortBy": sort_by,
                "page": page,
                "limit": limit,
                "sessionId": session_id,
            }
        )
        logger.info(f"search_resources: {params}")
        result = await search_service.search(params)
        return _dumps(result.to_dict())

    @mcp.tool()
    async def recommend_resources(
        category: str,
        symptoms: list[str] | str | None = None,
        severity: str | None = None,
        selection_hash: str | None = None,
    ) -> str:
        """
        Recommend resources for a symptom selection.

        Severe or crisis selections put VA resources first; mild and moderate
        selections interleave NGO, VA and other providers.

        Args:
            category: "mental", "physical", "life" or "crisis"
            symptoms: Symptom keywords, e.g. ["ptsd", "insomnia"]
            severity: "mild", "moderate", "severe" or "crisis"
            selection_hash: Opaque seed; same value gives the same ordering

        Returns:
            JSON: {resources, selection, source, relaxations, bucketCounts}
        """
        params = _drop_empty(
            {
                "categoryId": category,
                "symptomIds": symptoms,
                "severityId": severity,
                "selectionHash": selection_hash,
            }
        )
        result = await recommendation_service.recommend(params)
        if not result.resources and result.selection.category_id is None:
            return _dumps(
                {
                    **result.to_dict(),
                    "message": f"Unknown category {category!r}. Use mental, physical, life or crisis.",
                }
            )
        return _dumps(result.to_dict())

    @mcp.tool()
    async def get_resource(resource_id: str) -> str:
        """
        Get one resource by id.

        Args:
            resource_id: Resource identifier from search results

        Returns:
            JSON resource, or {"error": ...} when not found
        """
        record = await search_service.get_resource(resource_id)
        if record is None:
            return _dumps({"error": f"Resource {resource_id} not found"})
        return _dumps(record.to_dict())

    @mcp.tool()
    async def resource_category_counts() -> str:
        """Number of resources per category, most common first."""
        return _dumps(await search_service.category_counts())
