"""
Domain Layer - Core Data Model

Contains:
- entities: ResourceRecord, FilterRequest, SelectionState, result types
"""

from .entities import (
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

__all__ = [
    "ResourceRecord",
    "ProviderCategory",
    "FilterRequest",
    "SortOption",
    "SelectionState",
    "SymptomCategory",
    "Severity",
    "ResourcePage",
    "Recommendation",
]
