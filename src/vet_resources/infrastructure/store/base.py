"""
Resource Store contract.

The read services only need "query in, records + count out". Any backend
that understands MongoDB-style query documents can implement this.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from vet_resources.domain.entities import ResourceRecord


class ResourceStore(ABC):
    """Async, read-mostly access to resource records."""

    @abstractmethod
    async def find(
        self,
        query: dict[str, Any],
        sort: Sequence[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[ResourceRecord]:
        """Records matching ``query`` in ``sort`` order, windowed by skip/limit."""

    @abstractmethod
    async def count(self, query: dict[str, Any]) -> int:
        """Number of records matching ``query``."""

    @abstractmethod
    async def get(self, resource_id: str) -> ResourceRecord | None:
        """One record by id, or None."""

    @abstractmethod
    async def all(self) -> list[ResourceRecord]:
        """Every record, in insertion order."""
