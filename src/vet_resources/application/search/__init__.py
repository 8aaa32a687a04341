"""
Resource Search Pipeline

Key Components:
- normalizer: raw params / documents → FilterRequest, SelectionState, ResourceRecord
- QueryBuilder: FilterRequest → MongoDB-style query + sort + pagination
- ResourceRanker: symptom selection → diversified VA / NGO / Other ordering
- ResourceSearchService / RecommendationService: read-path orchestration

Architecture:
    HTTP / MCP params
        │
        ▼
    ┌──────────────────┐
    │    normalizer    │  ← one pass, aliases resolved here
    └────────┬─────────┘
             │
      ┌──────┴───────┐
      ▼              ▼
  QueryBuilder   ResourceRanker
      │              │
      ▼              ▼
  ResourceStore   remote client / store.all()
      │              │
      ▼              ▼
  ResourcePage   Recommendation
"""

from __future__ import annotations

from .normalizer import (
    classify_provider,
    normalize_filter_params,
    normalize_resource_document,
    normalize_selection,
    resource_from_document,
)
from .query_builder import (
    SESSION_SORT_VARIANTS,
    BuiltQuery,
    QueryBuilder,
    total_pages,
)
from .resource_ranker import (
    CATEGORY_DISPLAY_NAMES,
    RankingOutcome,
    ResourceRanker,
    bucket_of,
)
from .seeding import choose_variant, derive_seed, seeded_key, seeded_order
from .service import (
    NO_RESULTS_MESSAGE,
    RecommendationService,
    ResourceSearchService,
)

__all__ = [
    # Normalization
    "normalize_filter_params",
    "normalize_selection",
    "normalize_resource_document",
    "resource_from_document",
    "classify_provider",
    # Query building
    "QueryBuilder",
    "BuiltQuery",
    "SESSION_SORT_VARIANTS",
    "total_pages",
    # Ranking
    "ResourceRanker",
    "RankingOutcome",
    "CATEGORY_DISPLAY_NAMES",
    "bucket_of",
    # Seeding
    "derive_seed",
    "seeded_key",
    "seeded_order",
    "choose_variant",
    # Services
    "ResourceSearchService",
    "RecommendationService",
    "NO_RESULTS_MESSAGE",
]
