"""
Recent search history per owner.

Entries are stored newest first and de-duplicated on the (case-folded)
search term, so repeating a search just refreshes it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from vet_resources.infrastructure.cache import KeyValueStore
from vet_resources.shared.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

KEY_PREFIX = "search_history"
DEFAULT_MAX_ENTRIES = 10


@dataclass(frozen=True)
class SearchEntry:
    term: str
    filters: dict[str, Any] = field(default_factory=dict)
    searched_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "term": self.term,
            "filters": dict(self.filters),
            "searchedAt": self.searched_at.isoformat() if self.searched_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchEntry:
        searched_at = data.get("searchedAt")
        return cls(
            term=str(data.get("term", "")),
            filters=dict(data.get("filters") or {}),
            searched_at=datetime.fromisoformat(searched_at) if searched_at else None,
        )


class SearchHistory:
    def __init__(
        self,
        kv: KeyValueStore,
        owner_id: str,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] | None = None,
    ):
        self._kv = kv
        self._key = f"{KEY_PREFIX}:{owner_id}"
        self._max = max_entries
        self._clock = clock or (lambda: datetime.now(UTC))

    def recent(self) -> list[SearchEntry]:
        raw = self._kv.get(self._key, [])
        entries: list[SearchEntry] = []
        for item in raw if isinstance(raw, list) else []:
            try:
                entries.append(SearchEntry.from_dict(item))
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed history entry in {self._key}: {e}")
        return entries

    def record(self, term: str, filters: Mapping[str, Any] | None = None) -> list[SearchEntry]:
        term = " ".join((term or "").split())
        if not term:
            raise InvalidParameterError("term", term, "a non-empty search term")
        entry = SearchEntry(term=term, filters=dict(filters or {}), searched_at=self._clock())
        folded = term.casefold()
        entries = [e for e in self.recent() if e.term.casefold() != folded]
        entries = [entry, *entries][: self._max]
        self._kv.set(self._key, [e.to_dict() for e in entries])
        return entries

    def clear(self) -> None:
        self._kv.delete(self._key)
