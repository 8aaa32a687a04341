"""
Domain entities for the veteran resource directory.
"""

from __future__ import annotations

from .query import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    FilterRequest,
    SelectionState,
    Severity,
    SortOption,
    SymptomCategory,
)
from .resource import NATIONAL_SCOPE, Contact, Location, ProviderCategory, ResourceRecord
from .results import Recommendation, ResourcePage

__all__ = [
    # Resource
    "ResourceRecord",
    "ProviderCategory",
    "Location",
    "Contact",
    "NATIONAL_SCOPE",
    # Requests
    "FilterRequest",
    "SortOption",
    "SelectionState",
    "SymptomCategory",
    "Severity",
    "DEFAULT_PAGE",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    # Results
    "ResourcePage",
    "Recommendation",
]
