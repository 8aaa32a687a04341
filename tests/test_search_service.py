"""Tests for ResourceSearchService and RecommendationService."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from vet_resources.application.search import (
    NO_RESULTS_MESSAGE,
    QueryBuilder,
    RecommendationService,
    ResourceSearchService,
)
from vet_resources.application.search.service import STORE_FAILURE_MESSAGE
from vet_resources.domain.entities import FilterRequest, SelectionState, SymptomCategory
from vet_resources.shared.exceptions import NetworkError, ParseError


@pytest.fixture
def search_service(store, fixed_clock):
    return ResourceSearchService(store, QueryBuilder(clock=fixed_clock))


def _remote(result=None, side_effect=None):
    client = MagicMock()
    client.fetch_candidates = AsyncMock(return_value=result, side_effect=side_effect)
    return client


# ============================================================
# ResourceSearchService
# ============================================================


class TestSearch:
    async def test_page_metadata(self, search_service):
        page = await search_service.search({"limit": "2", "page": "2", "sortBy": "rating"})
        assert [r.id for r in page.resources] == ["ngo-1", "state-1"]
        assert (page.total, page.page, page.limit, page.total_pages) == (5, 2, 2, 3)
        assert page.message is None
        assert not page.degraded

    async def test_accepts_filter_request(self, search_service):
        page = await search_service.search(FilterRequest(state="CA"))
        assert {r.id for r in page.resources} == {"state-2", "va-1", "fed-1"}

    async def test_no_results_message(self, search_service):
        page = await search_service.search({"q": "no-such-resource"})
        assert page.resources == []
        assert page.total == 0
        assert page.total_pages == 0
        assert page.message == NO_RESULTS_MESSAGE
        assert page.to_dict()["message"] == NO_RESULTS_MESSAGE

    async def test_page_past_end(self, search_service):
        page = await search_service.search({"page": 9, "limit": 2})
        assert page.resources == []
        assert page.total == 5
        assert page.message is None

    async def test_store_failure_degrades(self, store, search_service):
        store.set_available(False)
        page = await search_service.search({"q": "ptsd", "page": 2, "limit": 10})
        assert page.resources == []
        assert page.degraded
        assert page.message == STORE_FAILURE_MESSAGE
        assert (page.page, page.limit, page.total) == (2, 10, 0)

    async def test_wire_shape(self, search_service):
        data = (await search_service.search({"limit": 1})).to_dict()
        assert set(data) == {"resources", "total", "page", "totalPages", "limit"}
        assert data["resources"][0]["id"] == "va-1"


class TestLookups:
    async def test_get_resource(self, search_service):
        assert (await search_service.get_resource("fed-1")).title == "National Helpline"
        assert await search_service.get_resource("nope") is None

    async def test_get_resource_store_down(self, store, search_service):
        store.set_available(False)
        assert await search_service.get_resource("fed-1") is None

    async def test_category_counts(self, search_service):
        counts = await search_service.category_counts()
        assert counts["Mental Health"] == 2
        assert list(counts)[0] == "Mental Health"
        assert sum(counts.values()) == 6

    async def test_category_counts_store_down(self, store, search_service):
        store.set_available(False)
        assert await search_service.category_counts() == {}


# ============================================================
# RecommendationService
# ============================================================


class TestRecommend:
    async def test_no_category_is_empty(self, store):
        remote = _remote([])
        recommendation = await RecommendationService(store, remote).recommend({"symptomIds": ["ptsd"]})
        assert recommendation.resources == []
        remote.fetch_candidates.assert_not_awaited()

    async def test_local_when_no_remote(self, store):
        recommendation = await RecommendationService(store).recommend({"categoryId": "mental"})
        assert recommendation.source == "local"
        assert {"va-1", "fed-1", "ngo-1"} <= {r.id for r in recommendation.resources}

    async def test_remote_candidates_used(self, store, record_factory):
        remote_records = [
            record_factory(f"remote-{i}", categories=["Mental Health"], rating=4.5, resourceType="ngo") for i in range(6)
        ]
        remote = _remote(remote_records)
        recommendation = await RecommendationService(store, remote).recommend(
            SelectionState(category_id=SymptomCategory.MENTAL)
        )
        assert recommendation.source == "remote"
        assert {r.id for r in recommendation.resources} == {f"remote-{i}" for i in range(6)}
        remote.fetch_candidates.assert_awaited_once()

    @pytest.mark.parametrize("error", [NetworkError("down"), ParseError("bad shape"), RuntimeError("boom")])
    async def test_remote_failure_falls_back(self, store, error):
        remote = _remote(side_effect=error)
        recommendation = await RecommendationService(store, remote).recommend({"categoryId": "mental"})
        assert recommendation.source == "local"
        assert recommendation.resources

    async def test_empty_remote_falls_back(self, store):
        recommendation = await RecommendationService(store, _remote([])).recommend({"categoryId": "life"})
        assert recommendation.source == "local"
        assert {"state-1", "state-2"} <= {r.id for r in recommendation.resources}

    async def test_remote_timeout_falls_back(self, store):
        async def slow(selection):
            await asyncio.sleep(5)
            return []

        remote = MagicMock()
        remote.fetch_candidates = slow
        recommendation = await RecommendationService(store, remote, timeout=0.01).recommend({"categoryId": "mental"})
        assert recommendation.source == "local"
        assert recommendation.resources

    async def test_everything_down_is_empty(self, store):
        store.set_available(False)
        recommendation = await RecommendationService(store, _remote(side_effect=NetworkError())).recommend(
            {"categoryId": "crisis", "severityId": "crisis"}
        )
        assert recommendation.resources == []

    async def test_relaxations_reported(self, store):
        recommendation = await RecommendationService(store).recommend(
            {"categoryId": "mental", "symptomIds": ["ptsd"], "severityId": "crisis"}
        )
        assert "symptoms" in recommendation.relaxations
        assert recommendation.to_dict()["selection"]["severityId"] == "crisis"
