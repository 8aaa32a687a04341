"""Remote search integration."""

from __future__ import annotations

from .search_client import SEARCH_PATH, RemoteSearchClient

__all__ = ["RemoteSearchClient", "SEARCH_PATH"]
