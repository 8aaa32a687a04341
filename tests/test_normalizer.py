"""Tests for normalizer.py - documents, filter params and wizard selections."""

from datetime import UTC, datetime

import pytest

from vet_resources.application.search.normalizer import (
    classify_provider,
    normalize_filter_params,
    normalize_resource_document,
    normalize_selection,
    resource_from_document,
)
from vet_resources.domain.entities import (
    FilterRequest,
    ProviderCategory,
    SelectionState,
    Severity,
    SortOption,
    SymptomCategory,
)

LEGACY_DOC = {
    "_id": "abc",
    "name": "Give an Hour",
    "category": "Mental Health",
    "categories": ["Counseling"],
    "veteranType": "Combat Veteran",
    "serviceBranch": "Army, Navy",
    "veteranEra": "Post-9/11",
    "phone": "555-0100",
    "email": "help@example.org",
    "website": "https://example.org",
    "location": "TX",
    "eligibility": "All veterans",
    "rating": "7.5",
    "reviewCount": "42",
    "isVerified": "yes",
    "resourceType": "NGO",
    "lastUpdated": "2026-01-02T03:04:05Z",
}


# ============================================================
# classify_provider
# ============================================================


class TestClassifyProvider:
    @pytest.mark.parametrize(
        ("resource_type", "organization", "expected"),
        [
            ("va", "", ProviderCategory.VA),
            ("", "U.S. Department of Veterans Affairs", ProviderCategory.VA),
            ("ngo", "", ProviderCategory.NGO),
            ("non-profit", "", ProviderCategory.NGO),
            ("", "Wounded Warrior NGO", ProviderCategory.NGO),
            ("state", "Texas Veterans Commission", ProviderCategory.STATE),
            ("federal", "SAMHSA", ProviderCategory.FEDERAL),
            ("", "Community Clinic", ProviderCategory.OTHER),
            (None, None, ProviderCategory.OTHER),
        ],
    )
    def test_classification(self, resource_type, organization, expected):
        assert classify_provider(resource_type, organization) is expected

    def test_va_wins_over_ngo_wording(self):
        assert classify_provider("", "Veterans Affairs NGO Liaison") is ProviderCategory.VA


# ============================================================
# normalize_resource_document
# ============================================================


class TestNormalizeResourceDocument:
    def test_legacy_fields_reconciled(self):
        doc = normalize_resource_document(LEGACY_DOC)
        assert doc["id"] == "abc"
        assert "_id" not in doc
        assert doc["title"] == "Give an Hour"
        assert "name" not in doc
        assert doc["categories"] == ["Counseling", "Mental Health"]
        assert doc["veteranTypes"] == ["Combat Veteran"]
        assert doc["serviceBranches"] == ["Army", "Navy"]
        assert doc["veteranEras"] == ["Post-9/11"]
        assert doc["contact"] == {
            "phone": "555-0100",
            "email": "help@example.org",
            "website": "https://example.org",
        }
        assert "phone" not in doc
        assert doc["url"] == "https://example.org"
        assert doc["location"]["state"] == "TX"
        assert doc["eligibility"] == ["All veterans"]
        assert doc["resourceType"] == "ngo"
        assert doc["providerCategory"] == "ngo"

    def test_scalars_coerced(self):
        doc = normalize_resource_document(LEGACY_DOC)
        assert doc["rating"] == 5.0  # clamped
        assert doc["reviewCount"] == 42
        assert doc["isVerified"] is True
        assert doc["isFeatured"] is False
        assert doc["lastUpdated"] == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)

    def test_unparseable_rating_is_zero(self):
        assert normalize_resource_document({"id": "x", "rating": "n/a"})["rating"] == 0.0
        assert normalize_resource_document({"id": "x", "rating": -2})["rating"] == 0.0

    @pytest.mark.parametrize("value", [".inf", "Infinity", float("inf"), float("-inf"), "nan"])
    def test_non_finite_review_count_is_zero(self, value):
        assert normalize_resource_document({"id": "x", "reviewCount": value})["reviewCount"] == 0

    def test_naive_dates_become_utc(self):
        doc = normalize_resource_document({"id": "x", "lastUpdated": "2025-06-01"})
        assert doc["lastUpdated"] == datetime(2025, 6, 1, tzinfo=UTC)

    def test_idempotent(self):
        once = normalize_resource_document(LEGACY_DOC)
        twice = normalize_resource_document(once)
        assert twice == once

    def test_idempotent_on_minimal_document(self):
        once = normalize_resource_document({"id": "m"})
        assert normalize_resource_document(once) == once

    def test_explicit_provider_category_kept(self):
        doc = normalize_resource_document(
            {"id": "x", "organization": "California Department of Veterans Affairs", "providerCategory": "state"}
        )
        assert doc["providerCategory"] == "state"

    def test_nested_contact_preferred_over_top_level(self):
        doc = normalize_resource_document({"id": "x", "phone": "111", "contact": {"phone": "222"}})
        assert doc["contact"]["phone"] == "222"

    def test_does_not_mutate_input(self):
        original = dict(LEGACY_DOC)
        normalize_resource_document(LEGACY_DOC)
        assert original == LEGACY_DOC


class TestResourceFromDocument:
    def test_builds_record(self):
        record = resource_from_document(LEGACY_DOC)
        assert record.id == "abc"
        assert record.categories == ("Counseling", "Mental Health")
        assert record.provider_category is ProviderCategory.NGO
        assert record.contact.phone == "555-0100"
        assert record.state == "TX"

    def test_record_round_trips_through_wire_shape(self):
        record = resource_from_document(LEGACY_DOC)
        assert resource_from_document(record.to_dict()) == record

    def test_missing_location_has_no_state(self):
        record = resource_from_document({"id": "x"})
        assert record.location is None
        assert record.state == ""


# ============================================================
# normalize_filter_params
# ============================================================


class TestNormalizeFilterParams:
    def test_empty_params(self):
        request = normalize_filter_params({})
        assert request == FilterRequest()
        assert request.is_empty()
        assert normalize_filter_params(None) == FilterRequest()

    @pytest.mark.parametrize("key", ["searchTerm", "q", "query"])
    def test_search_aliases(self, key):
        assert normalize_filter_params({key: "  ptsd   help "}).search_term == "ptsd help"

    def test_search_precedence(self):
        assert normalize_filter_params({"q": "b", "searchTerm": "a", "query": "c"}).search_term == "a"
        assert normalize_filter_params({"q": "b", "query": "c"}).search_term == "b"

    @pytest.mark.parametrize("key", ["minRating", "severity", "rating"])
    def test_rating_aliases_equivalent(self, key):
        assert normalize_filter_params({key: "3"}).min_rating == 3.0

    def test_rating_precedence(self):
        assert normalize_filter_params({"minRating": 4, "severity": 2, "rating": 1}).min_rating == 4.0
        assert normalize_filter_params({"severity": 2, "rating": 1}).min_rating == 2.0

    def test_unparseable_rating_alias_falls_through(self):
        assert normalize_filter_params({"minRating": "high", "rating": "3.5"}).min_rating == 3.5
        assert normalize_filter_params({"severity": "crisis"}).min_rating is None

    def test_location_aliases(self):
        assert normalize_filter_params({"location": "TX", "state": "CA"}).state == "TX"
        assert normalize_filter_params({"state": "CA"}).state == "CA"
        assert normalize_filter_params({"location": "all"}).state == ""

    def test_tags_union_symptoms(self):
        request = normalize_filter_params({"tags": "ptsd, Anxiety", "symptoms": ["anxiety", "insomnia"]})
        assert request.tags == ("ptsd", "Anxiety", "insomnia")

    def test_list_filters_drop_all(self):
        request = normalize_filter_params({"veteranType": "all,Combat Veteran", "serviceBranch": ["Army", "all"]})
        assert request.veteran_types == ("Combat Veteran",)
        assert request.service_branches == ("Army",)

    def test_facet_aliases(self):
        request = normalize_filter_params({"veteranEra": "Vietnam, all", "verified": "true", "veteranFounded": "yes"})
        assert request.veteran_eras == ("Vietnam",)
        assert request.verified_only and request.veteran_led_only
        assert not request.is_empty()
        assert normalize_filter_params({"verifiedOnly": "false", "verified": "true"}).verified_only is False

    def test_category_all_is_no_filter(self):
        assert normalize_filter_params({"category": "all", "resourceType": "All"}).is_empty()

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("rating", SortOption.RATING),
            ("name", SortOption.NAME),
            ("alphabetical", SortOption.NAME),
            ("date", SortOption.DATE),
            ("newest", SortOption.DATE),
            ("relevance", SortOption.RELEVANCE),
            ("bogus", SortOption.RELEVANCE),
        ],
    )
    def test_sort_aliases(self, value, expected):
        assert normalize_filter_params({"sortBy": value}).sort is expected

    def test_sort_precedence(self):
        assert normalize_filter_params({"sortBy": "rating", "sort": "name"}).sort is SortOption.RATING
        assert normalize_filter_params({"sort": "name"}).sort is SortOption.NAME

    @pytest.mark.parametrize(
        ("params", "page", "limit"),
        [
            ({"page": "3", "limit": "10"}, 3, 10),
            ({"page": "0", "limit": "0"}, 1, 30),
            ({"page": "-4", "limit": "-1"}, 1, 30),
            ({"page": "abc", "limit": "xyz"}, 1, 30),
            ({"limit": "500"}, 1, 50),
            ({"page": "2.7", "limit": "12.2"}, 2, 12),
            ({"page": "inf", "limit": "-inf"}, 1, 30),
            ({"page": "1e999", "limit": float("inf")}, 1, 30),
            ({"page": "nan", "limit": "NaN"}, 1, 30),
        ],
    )
    def test_pagination_defaults_and_clamps(self, params, page, limit):
        request = normalize_filter_params(params)
        assert (request.page, request.limit) == (page, limit)

    @pytest.mark.parametrize("value", ["true", "1", "yes", True])
    def test_boolean_flags(self, value):
        request = normalize_filter_params({"featuredOnly": value, "recentlyUpdated": value})
        assert request.featured_only and request.recently_updated

    def test_boolean_flags_false(self):
        request = normalize_filter_params({"featuredOnly": "false", "recentlyUpdated": "0"})
        assert not request.featured_only and not request.recently_updated

    def test_session_aliases(self):
        assert normalize_filter_params({"sessionId": "s1", "selectionHash": "h"}).session_id == "s1"
        assert normalize_filter_params({"selectionHash": "h"}).session_id == "h"

    def test_filter_request_passthrough(self):
        request = FilterRequest(search_term="x")
        assert normalize_filter_params(request) is request


# ============================================================
# normalize_selection
# ============================================================


class TestNormalizeSelection:
    def test_full_selection(self):
        selection = normalize_selection(
            {"categoryId": "Mental", "symptomIds": ["ptsd", "PTSD", "insomnia"], "severityId": "crisis", "selectionHash": "h1"}
        )
        assert selection.category_id is SymptomCategory.MENTAL
        assert selection.symptom_ids == ("ptsd", "insomnia")
        assert selection.severity is Severity.CRISIS
        assert selection.selection_hash == "h1"

    def test_alias_keys(self):
        selection = normalize_selection({"symptomCategory": "life", "symptoms": "housing,jobs", "severityLevel": "mild"})
        assert selection.category_id is SymptomCategory.LIFE
        assert selection.symptom_ids == ("housing", "jobs")
        assert selection.severity is Severity.MILD

    def test_unknown_values_become_none(self):
        selection = normalize_selection({"categoryId": "spiritual", "severityId": "extreme"})
        assert selection.category_id is None
        assert selection.severity is None

    def test_empty(self):
        assert normalize_selection(None) == SelectionState()

    def test_severity_thresholds(self):
        assert [s.min_rating for s in Severity] == [3.0, 3.5, 4.0, 4.5]
        assert [s.is_urgent for s in Severity] == [False, False, True, True]
