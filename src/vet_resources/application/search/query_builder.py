"""
QueryBuilder - FilterRequest to MongoDB-style query document + sort.

Output is a plain query document (``$and``, ``$or``, ``$regex`` ...) so it
can be handed to any store that speaks the MongoDB query dialect, including
the in-memory store used for the packaged directory and tests.

Rules:
    - No filter field set => ``{}`` (matches everything)
    - Free text: every term must hit title, description, tags or organization
    - Tags/symptoms: ANY tag hitting tags, title or description
    - State: "national" => national-scope only; other states => that state
      OR national-scope
    - Every sort ends on ``id`` ascending so pages are stable

Example:
    >>> built = QueryBuilder().build(FilterRequest(min_rating=4.0, page=2, limit=10))
    >>> built.filter, built.skip
    ({'rating': {'$gte': 4.0}}, 10)
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from vet_resources.domain.entities import NATIONAL_SCOPE, FilterRequest, SortOption

from .seeding import choose_variant, derive_seed

logger = logging.getLogger(__name__)

ASCENDING = 1
DESCENDING = -1

RECENTLY_UPDATED_WINDOW = timedelta(days=90)

TEXT_FIELDS = ("title", "description", "tags", "organization")
TAG_FIELDS = ("tags", "title", "description")

SortSpec = list[tuple[str, int]]

_PRIMARY_SORTS: dict[SortOption, SortSpec] = {
    SortOption.RATING: [("rating", DESCENDING)],
    SortOption.NAME: [("title", ASCENDING)],
    SortOption.DATE: [("lastUpdated", DESCENDING)],
    SortOption.RELEVANCE: [
        ("isFeatured", DESCENDING),
        ("isVerified", DESCENDING),
        ("isVeteranLed", DESCENDING),
        ("rating", DESCENDING),
    ],
}

# Secondary keys a session seed may pick from.
SESSION_SORT_VARIANTS: tuple[tuple[str, int], ...] = (
    ("reviewCount", DESCENDING),
    ("lastUpdated", DESCENDING),
    ("title", ASCENDING),
    ("rating", DESCENDING),
)

TIE_BREAK: tuple[str, int] = ("id", ASCENDING)


@dataclass(frozen=True)
class BuiltQuery:
    """Query document, sort spec and pagination window for one request."""

    filter: dict[str, Any]
    sort: SortSpec = field(default_factory=list)
    skip: int = 0
    limit: int = 30
    page: int = 1


def total_pages(total: int, limit: int) -> int:
    """``ceil(total / limit)``; zero results means zero pages."""
    if total <= 0 or limit <= 0:
        return 0
    return math.ceil(total / limit)


def _regex(pattern: str) -> dict[str, str]:
    return {"$regex": pattern, "$options": "i"}


def _national_clauses() -> list[dict[str, Any]]:
    return [
        {"location.state": _regex(f"^{NATIONAL_SCOPE}$")},
        {"location.state": {"$in": ["", None]}},
        {"location.state": {"$exists": False}},
    ]


class QueryBuilder:
    """
    Build query documents from ``FilterRequest`` objects.

    Args:
        clock: Returns "now" for the recently-updated window. Defaults to
            ``datetime.now(UTC)``.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(UTC))

    def build(self, request: FilterRequest) -> BuiltQuery:
        query = self.build_filter(request)
        sort = self.build_sort(request)
        skip = (request.page - 1) * request.limit
        logger.debug(f"Built query filter={query} sort={sort} skip={skip} limit={request.limit}")
        return BuiltQuery(filter=query, sort=sort, skip=skip, limit=request.limit, page=request.page)

    def build_filter(self, request: FilterRequest) -> dict[str, Any]:
        if request.is_empty():
            return {}

        query: dict[str, Any] = {}
        clauses: list[dict[str, Any]] = []

        for term in request.search_term.split():
            pattern = re.escape(term)
            clauses.append({"$or": [{name: _regex(pattern)} for name in TEXT_FIELDS]})

        if request.tags:
            alternation = "|".join(re.escape(tag) for tag in request.tags)
            clauses.append({"$or": [{name: _regex(alternation)} for name in TAG_FIELDS]})

        if request.category:
            query["categories"] = _regex(re.escape(request.category))

        if request.resource_type:
            query["resourceType"] = _regex(re.escape(request.resource_type))

        if request.veteran_types:
            query["veteranTypes"] = {"$in": [_anchored(v) for v in request.veteran_types]}

        if request.service_branches:
            query["serviceBranches"] = {"$in": [_anchored(b) for b in request.service_branches]}

        if request.veteran_eras:
            query["veteranEras"] = {"$in": [_anchored(e) for e in request.veteran_eras]}

        if request.state:
            if request.state.lower() == NATIONAL_SCOPE:
                clauses.append({"$or": _national_clauses()})
            else:
                state_clause = {"location.state": _regex(f"^{re.escape(request.state)}$")}
                clauses.append({"$or": [state_clause, *_national_clauses()]})

        if request.min_rating is not None:
            query["rating"] = {"$gte": request.min_rating}

        if request.featured_only:
            query["isFeatured"] = True

        if request.verified_only:
            query["isVerified"] = True

        if request.veteran_led_only:
            query["isVeteranLed"] = True

        if request.recently_updated:
            query["lastUpdated"] = {"$gte": self._clock() - RECENTLY_UPDATED_WINDOW}

        if clauses:
            query["$and"] = clauses
        return query

    def build_sort(self, request: FilterRequest) -> SortSpec:
        sort = list(_PRIMARY_SORTS[request.sort])
        if request.session_id:
            variant = choose_variant(derive_seed("session", request.session_id), SESSION_SORT_VARIANTS)
            if variant[0] not in {name for name, _ in sort}:
                sort.append(variant)
        sort.append(TIE_BREAK)
        return sort


def _anchored(value: str) -> re.Pattern[str]:
    return re.compile(f"^{re.escape(value)}$", re.IGNORECASE)
