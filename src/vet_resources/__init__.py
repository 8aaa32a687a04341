"""
Veteran Resources - Search and Recommendation Service for Veteran Health Resources

Find VA, NGO, state and federal health/support resources with faceted search
and a symptom-based recommendation wizard.

Usage:
    from vet_resources import InMemoryResourceStore, ResourceSearchService

    store = InMemoryResourceStore(load_packaged_resources())
    page = await ResourceSearchService(store).search({"q": "ptsd", "state": "TX"})

    for resource in page.resources:
        print(f"{resource.id}: {resource.title}")

Features:
    - MongoDB-style query building from loosely-typed filter parameters
    - Symptom / severity recommendations diversified across VA, NGO and others
    - Deterministic, seed-varied orderings
    - Saved resources, search history and location cache
    - FastAPI HTTP API and MCP tool server
"""

__version__ = "0.1.0"

from .application.search import (
    QueryBuilder,
    RecommendationService,
    ResourceRanker,
    ResourceSearchService,
    normalize_filter_params,
    normalize_selection,
    resource_from_document,
)
from .domain import (
    FilterRequest,
    ProviderCategory,
    Recommendation,
    ResourcePage,
    ResourceRecord,
    SelectionState,
    Severity,
    SortOption,
    SymptomCategory,
)
from .infrastructure.store import InMemoryResourceStore, load_packaged_resources, load_resources

__all__ = [
    "__version__",
    # Domain
    "ResourceRecord",
    "ProviderCategory",
    "FilterRequest",
    "SortOption",
    "SelectionState",
    "SymptomCategory",
    "Severity",
    "ResourcePage",
    "Recommendation",
    # Pipeline
    "QueryBuilder",
    "ResourceRanker",
    "ResourceSearchService",
    "RecommendationService",
    "normalize_filter_params",
    "normalize_selection",
    "resource_from_document",
    # Store
    "InMemoryResourceStore",
    "load_resources",
    "load_packaged_resources",
]
