"""
In-memory Resource Store

Holds normalized records and evaluates query documents with
``matcher.matches``. Used for the packaged directory and in tests.

Sort order: strings compare case-insensitively, booleans as 0/1, and
records with a missing/None sort key go last in either direction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from functools import cmp_to_key
from typing import Any

from vet_resources.application.search.normalizer import resource_from_document
from vet_resources.domain.entities import ResourceRecord
from vet_resources.shared.exceptions import ErrorContext, StoreUnavailableError

from .base import ResourceStore
from .matcher import field_value
from .matcher import matches as query_matches

logger = logging.getLogger(__name__)


def _match_document(record: ResourceRecord) -> dict[str, Any]:
    """Wire shape with ``lastUpdated`` kept as a datetime for range queries."""
    document = record.to_dict()
    document["lastUpdated"] = record.last_updated
    return document


def _sortable(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, list):
        return _sortable(value[0]) if value else None
    return value


def _compare_key(a: Any, b: Any, direction: int) -> int:
    a, b = _sortable(a), _sortable(b)
    if a is None or b is None:
        return (a is None) - (b is None)
    try:
        result = (a > b) - (a < b)
    except TypeError:
        result = (str(a) > str(b)) - (str(a) < str(b))
    return result if direction >= 0 else -result


class InMemoryResourceStore(ResourceStore):
    """
    Dict-backed store.

    Example:
        store = InMemoryResourceStore.from_documents(raw_docs)
        records = await store.find({"rating": {"$gte": 4}}, sort=[("title", 1)])
    """

    def __init__(self, records: Iterable[ResourceRecord] = ()):
        self._records: dict[str, ResourceRecord] = {}
        self._documents: dict[str, dict[str, Any]] = {}
        self._available = True
        for record in records:
            self.add(record)

    @classmethod
    def from_documents(cls, documents: Iterable[Mapping[str, Any]]) -> InMemoryResourceStore:
        return cls(resource_from_document(doc) for doc in documents)

    # -------------------------------------------------------------------------
    # Mutation (ingestion side)
    # -------------------------------------------------------------------------

    def add(self, record: ResourceRecord) -> None:
        if not record.id:
            logger.warning(f"Skipping resource without id: {record.title!r}")
            return
        if record.id in self._records:
            logger.debug(f"Replacing resource {record.id}")
        self._records[record.id] = record
        self._documents[record.id] = _match_document(record)

    def set_available(self, available: bool) -> None:
        """Simulate the backing store going offline (or coming back)."""
        self._available = available

    def __len__(self) -> int:
        return len(self._records)

    # -------------------------------------------------------------------------
    # ResourceStore
    # -------------------------------------------------------------------------

    def _check_available(self, operation: str) -> None:
        if not self._available:
            raise StoreUnavailableError(context=ErrorContext(operation=operation))

    def _matching_ids(self, query: dict[str, Any]) -> list[str]:
        return [rid for rid, doc in self._documents.items() if query_matches(doc, query)]

    def _sorted(self, ids: list[str], sort: Sequence[tuple[str, int]]) -> list[str]:
        def compare(a: str, b: str) -> int:
            doc_a, doc_b = self._documents[a], self._documents[b]
            for path, direction in sort:
                result = _compare_key(field_value(doc_a, path), field_value(doc_b, path), direction)
                if result:
                    return result
            return 0

        return sorted(ids, key=cmp_to_key(compare))

    async def find(
        self,
        query: dict[str, Any],
        sort: Sequence[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[ResourceRecord]:
        self._check_available("find")
        ids = self._matching_ids(query)
        if sort:
            ids = self._sorted(ids, sort)
        window = ids[skip:] if limit is None else ids[skip : skip + limit]
        return [self._records[rid] for rid in window]

    async def count(self, query: dict[str, Any]) -> int:
        self._check_available("count")
        return len(self._matching_ids(query))

    async def get(self, resource_id: str) -> ResourceRecord | None:
        self._check_available("get")
        return self._records.get(resource_id)

    async def all(self) -> list[ResourceRecord]:
        self._check_available("all")
        return list(self._records.values())
