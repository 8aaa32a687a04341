"""
Application Layer - Use Cases and Orchestration

Contains:
- search: normalization, query building, ranking, read services
- session: saved resources, search history, cached location
"""

from .search import (
    QueryBuilder,
    RecommendationService,
    ResourceRanker,
    ResourceSearchService,
    normalize_filter_params,
    normalize_selection,
)
from .session import LocationCache, SavedResources, SearchHistory

__all__ = [
    # Search
    "QueryBuilder",
    "ResourceRanker",
    "ResourceSearchService",
    "RecommendationService",
    "normalize_filter_params",
    "normalize_selection",
    # Session
    "SavedResources",
    "SearchHistory",
    "LocationCache",
]
