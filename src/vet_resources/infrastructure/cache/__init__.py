"""
Cache Infrastructure

Key/value persistence for per-owner client state.
"""

from __future__ import annotations

from vet_resources.infrastructure.cache.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
