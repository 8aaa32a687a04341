"""
Resource Store Infrastructure

- ResourceStore: async read contract (find / count / get / all)
- InMemoryResourceStore: query-document evaluation over loaded records
- load_resources: JSON / YAML seed files
"""

from __future__ import annotations

from .base import ResourceStore
from .loader import load_packaged_resources, load_resources, parse_resources
from .matcher import QueryError, matches
from .memory import InMemoryResourceStore

__all__ = [
    "ResourceStore",
    "InMemoryResourceStore",
    "matches",
    "QueryError",
    "load_resources",
    "load_packaged_resources",
    "parse_resources",
]
