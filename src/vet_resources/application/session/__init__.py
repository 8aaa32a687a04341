"""Per-owner client state: saved resources, search history, location."""

from __future__ import annotations

from .location_cache import CachedLocation, LocationCache
from .saved_resources import SavedResources
from .search_history import SearchEntry, SearchHistory

__all__ = [
    "SavedResources",
    "SearchHistory",
    "SearchEntry",
    "LocationCache",
    "CachedLocation",
]
