"""
Search Services - read-path orchestration.

ResourceSearchService:
    params → normalize → QueryBuilder → store.count + store.find → ResourcePage

RecommendationService:
    selection → remote candidates (timeout) ─┬─► ResourceRanker → Recommendation
                └─ on any failure: store.all() ┘

Read paths never raise: storage and remote failures are logged and turned
into empty (but successful) results.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from vet_resources.domain.entities import (
    FilterRequest,
    Recommendation,
    ResourcePage,
    ResourceRecord,
    SelectionState,
)
from vet_resources.shared.async_utils import timeout_with_fallback
from vet_resources.shared.exceptions import VetResourcesError

from .normalizer import normalize_filter_params, normalize_selection
from .query_builder import QueryBuilder, total_pages
from .resource_ranker import ResourceRanker

if TYPE_CHECKING:
    from vet_resources.infrastructure.remote import RemoteSearchClient
    from vet_resources.infrastructure.store import ResourceStore

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No resources found matching your criteria"
STORE_FAILURE_MESSAGE = "Resources are temporarily unavailable. Please try again later."

DEFAULT_REMOTE_TIMEOUT = 5.0


class ResourceSearchService:
    """List/search and single-record lookups over a ``ResourceStore``."""

    def __init__(self, store: ResourceStore, query_builder: QueryBuilder | None = None):
        self._store = store
        self._builder = query_builder or QueryBuilder()

    async def search(self, params: Mapping[str, Any] | FilterRequest | None = None) -> ResourcePage:
        request = params if isinstance(params, FilterRequest) else normalize_filter_params(params)
        built = self._builder.build(request)

        try:
            total = await self._store.count(built.filter)
            records = await self._store.find(built.filter, sort=built.sort, skip=built.skip, limit=built.limit)
        except Exception as e:
            logger.warning(f"Resource search degraded to empty result: {e}")
            return ResourcePage.empty(built.page, built.limit, STORE_FAILURE_MESSAGE, degraded=True)

        return ResourcePage(
            resources=records,
            total=total,
            page=built.page,
            limit=built.limit,
            total_pages=total_pages(total, built.limit),
            message=None if total else NO_RESULTS_MESSAGE,
        )

    async def get_resource(self, resource_id: str) -> ResourceRecord | None:
        try:
            return await self._store.get(resource_id)
        except Exception as e:
            logger.warning(f"Lookup of resource {resource_id!r} failed: {e}")
            return None

    async def category_counts(self) -> dict[str, int]:
        """Number of records per category, most common first."""
        try:
            records = await self._store.all()
        except Exception as e:
            logger.warning(f"Category counts unavailable: {e}")
            return {}
        counts = Counter(category for record in records for category in record.categories)
        return dict(counts.most_common())


class RecommendationService:
    """
    Symptom-wizard recommendations.

    Args:
        store: Local candidate store, also the fallback source.
        remote_client: Optional remote search client tried first.
        ranker: Ranker instance (default ``ResourceRanker()``).
        timeout: Seconds allowed for the remote lookup.
    """

    def __init__(
        self,
        store: ResourceStore,
        remote_client: RemoteSearchClient | None = None,
        ranker: ResourceRanker | None = None,
        timeout: float = DEFAULT_REMOTE_TIMEOUT,
    ):
        self._store = store
        self._remote = remote_client
        self._ranker = ranker or ResourceRanker()
        self._timeout = timeout

    async def recommend(self, params: Mapping[str, Any] | SelectionState | None = None) -> Recommendation:
        selection = params if isinstance(params, SelectionState) else normalize_selection(params)
        if selection.category_id is None:
            return Recommendation(resources=[], selection=selection)

        candidates = await self._remote_candidates(selection)
        source = "remote"
        if not candidates:
            candidates = await self._local_candidates()
            source = "local"

        outcome = self._ranker.rank(candidates, selection)
        return Recommendation(
            resources=outcome.resources,
            selection=selection,
            source=source,
            relaxations=outcome.relaxations,
            bucket_counts=outcome.bucket_counts,
        )

    async def _remote_candidates(self, selection: SelectionState) -> list[ResourceRecord]:
        if self._remote is None:
            return []
        try:
            return await timeout_with_fallback(
                self._remote.fetch_candidates(selection),
                timeout=self._timeout,
                fallback=list,
            )
        except VetResourcesError as e:
            logger.warning(f"Remote recommendation lookup failed, using local data: {e}")
        except Exception as e:
            logger.exception(f"Unexpected remote lookup error, using local data: {e}")
        return []

    async def _local_candidates(self) -> list[ResourceRecord]:
        try:
            return await self._store.all()
        except Exception as e:
            logger.warning(f"Local candidate store unavailable: {e}")
            return []
