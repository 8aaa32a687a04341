"""Tests for ResourceRanker - symptom-wizard filtering, bucketing and interleaving."""

import pytest

from vet_resources.application.search.normalizer import resource_from_document
from vet_resources.application.search.resource_ranker import (
    BUCKET_NGO,
    BUCKET_OTHER,
    BUCKET_VA,
    RELAX_BEST_RATED,
    RELAX_SEVERITY,
    RELAX_SYMPTOMS,
    ResourceRanker,
    bucket_of,
)
from vet_resources.domain.entities import SelectionState, Severity, SymptomCategory


@pytest.fixture
def ranker():
    return ResourceRanker()


def _pool(record_factory, count_by_type, category="Mental Health", rating=4.6, tags=("ptsd",)):
    """``count_by_type`` maps resourceType -> how many records to make."""
    records = []
    for rtype, count in count_by_type.items():
        for i in range(count):
            records.append(
                record_factory(
                    f"{rtype}-{i}",
                    categories=[category],
                    tags=list(tags),
                    rating=rating,
                    resourceType=rtype,
                )
            )
    return records


def _ids(records):
    return [r.id for r in records]


# ============================================================
# Guard conditions
# ============================================================


class TestGuards:
    def test_no_category_returns_empty(self, ranker, record_factory):
        candidates = _pool(record_factory, {"va": 3})
        outcome = ranker.rank(candidates, SelectionState(symptom_ids=("ptsd",)))
        assert outcome.resources == []
        assert outcome.relaxations == []

    def test_no_candidates(self, ranker):
        outcome = ranker.rank([], SelectionState(category_id=SymptomCategory.MENTAL))
        assert outcome.resources == []
        assert outcome.bucket_counts == {BUCKET_VA: 0, BUCKET_NGO: 0, BUCKET_OTHER: 0}


# ============================================================
# Filtering and relaxation
# ============================================================


class TestFiltering:
    def test_category_by_id_substring(self, ranker, record_factory):
        record = record_factory("a", categories=["Mental Wellness"])
        assert ranker.matches_category(record, SymptomCategory.MENTAL)

    def test_category_by_display_name(self, ranker, record_factory):
        record = record_factory("a", categories=["Peer Support"])
        assert ranker.matches_category(record, SymptomCategory.MENTAL)
        assert not ranker.matches_category(record, SymptomCategory.PHYSICAL)

    def test_symptom_refinement_applied(self, ranker, record_factory):
        matching = _pool(record_factory, {"va": 3, "ngo": 3}, tags=("PTSD Support",))
        other = [record_factory(f"x{i}", categories=["Mental Health"], tags=["grief"], rating=4.0) for i in range(3)]
        pool, relaxations = ranker.filter_candidates(
            matching + other, SelectionState(category_id=SymptomCategory.MENTAL, symptom_ids=("ptsd",))
        )
        assert set(_ids(pool)) == set(_ids(matching))
        assert relaxations == []

    def test_symptom_refinement_relaxed(self, ranker, record_factory):
        candidates = [record_factory("hit", categories=["Mental Health"], tags=["ptsd"])]
        candidates += [record_factory(f"m{i}", categories=["Mental Health"], tags=["grief"]) for i in range(5)]
        pool, relaxations = ranker.filter_candidates(
            candidates, SelectionState(category_id=SymptomCategory.MENTAL, symptom_ids=("ptsd",))
        )
        assert len(pool) == 6
        assert relaxations == [RELAX_SYMPTOMS]

    def test_severity_relaxed_to_pre_severity_pool(self, ranker, record_factory):
        candidates = [
            record_factory(f"m{i}", categories=["Mental Health"], rating=3.0 + i * 0.3) for i in range(6)
        ]
        pool, relaxations = ranker.filter_candidates(
            candidates, SelectionState(category_id=SymptomCategory.MENTAL, severity=Severity.CRISIS)
        )
        assert len(pool) == 6
        assert relaxations == [RELAX_SEVERITY]

    def test_severity_threshold_applied(self, ranker, record_factory):
        high = _pool(record_factory, {"va": 5}, rating=4.6)
        low = _pool(record_factory, {"ngo": 3}, rating=3.2)
        pool, relaxations = ranker.filter_candidates(
            high + low, SelectionState(category_id=SymptomCategory.MENTAL, severity=Severity.CRISIS)
        )
        assert set(_ids(pool)) == set(_ids(high))
        assert relaxations == []

    def test_best_rated_fallback_fills_floor(self, ranker, record_factory):
        in_category = [record_factory("m1", categories=["Mental Health"], rating=2.0)]
        elsewhere = [record_factory(f"h{i}", categories=["Housing Support"], rating=3.0 + i * 0.1) for i in range(12)]
        pool, relaxations = ranker.filter_candidates(
            in_category + elsewhere, SelectionState(category_id=SymptomCategory.MENTAL)
        )
        assert RELAX_BEST_RATED in relaxations
        assert pool[0].id == "m1"
        assert len(pool) == 11
        assert _ids(pool)[1:4] == ["h11", "h10", "h9"]


# ============================================================
# Ranking invariants
# ============================================================


class TestRankingInvariants:
    @pytest.fixture
    def candidates(self, record_factory):
        return _pool(record_factory, {"va": 7, "ngo": 8, "state": 4, "federal": 3})

    @pytest.mark.parametrize("severity", [None, Severity.MILD, Severity.SEVERE, Severity.CRISIS])
    def test_no_duplicates_and_no_loss(self, ranker, candidates, severity):
        selection = SelectionState(category_id=SymptomCategory.MENTAL, severity=severity)
        ids = _ids(ranker.rank(candidates + candidates[:4], selection).resources)
        assert len(ids) == len(set(ids))
        assert set(ids) == set(_ids(candidates))

    def test_deterministic(self, ranker, candidates):
        selection = SelectionState(category_id=SymptomCategory.MENTAL, selection_hash="abc")
        first = _ids(ranker.rank(candidates, selection).resources)
        second = _ids(ranker.rank(list(reversed(candidates)), selection).resources)
        assert first == second

    def test_seed_sensitivity(self, ranker, candidates):
        orders = {
            tuple(
                _ids(
                    ranker.rank(
                        candidates, SelectionState(category_id=SymptomCategory.MENTAL, selection_hash=f"h{i}")
                    ).resources
                )
            )
            for i in range(8)
        }
        assert len(orders) > 1

    def test_seed_without_hash_uses_selection(self):
        a = SelectionState(category_id=SymptomCategory.MENTAL, symptom_ids=("ptsd",))
        b = SelectionState(category_id=SymptomCategory.MENTAL, symptom_ids=("anxiety",))
        assert ResourceRanker.seed_for(a) == ResourceRanker.seed_for(a)
        assert ResourceRanker.seed_for(a) != ResourceRanker.seed_for(b)

    def test_floor_guarantee(self, ranker, record_factory):
        candidates = [record_factory(f"r{i}", categories=["Housing Support"], rating=3.0) for i in range(7)]
        outcome = ranker.rank(candidates, SelectionState(category_id=SymptomCategory.MENTAL))
        assert len(outcome.resources) >= 5

    def test_bucket_counts(self, ranker, candidates):
        outcome = ranker.rank(candidates, SelectionState(category_id=SymptomCategory.MENTAL))
        assert outcome.bucket_counts == {BUCKET_VA: 7, BUCKET_NGO: 8, BUCKET_OTHER: 7}


# ============================================================
# Interleaving
# ============================================================


class TestInterleaving:
    def test_crisis_puts_va_first(self, ranker, candidates_crisis):
        outcome = ranker.rank(candidates_crisis, SelectionState(category_id=SymptomCategory.CRISIS, severity=Severity.CRISIS))
        first_five = outcome.resources[:5]
        assert all(bucket_of(r) == BUCKET_VA for r in first_five)
        assert [bucket_of(r) for r in outcome.resources[5:8]] == [BUCKET_NGO] * 3

    def test_standard_leads_with_ngo(self, ranker, candidates_crisis):
        outcome = ranker.rank(candidates_crisis, SelectionState(category_id=SymptomCategory.CRISIS, severity=Severity.MILD))
        assert [bucket_of(r) for r in outcome.resources[:3]] == [BUCKET_NGO, BUCKET_VA, BUCKET_OTHER]
        assert [bucket_of(r) for r in outcome.resources[3:5]] == [BUCKET_NGO, BUCKET_OTHER]

    def test_interleave_standard_shape(self):
        buckets = {BUCKET_VA: ["v0", "v1"], BUCKET_NGO: ["n0", "n1", "n2"], BUCKET_OTHER: ["o0"]}
        assert ResourceRanker.interleave_standard(buckets) == ["n0", "v0", "o0", "n1", "n2", "v1"]

    def test_interleave_urgent_shape(self):
        buckets = {
            BUCKET_VA: [f"v{i}" for i in range(12)],
            BUCKET_NGO: [f"n{i}" for i in range(4)],
            BUCKET_OTHER: [f"o{i}" for i in range(4)],
        }
        assert ResourceRanker.interleave_urgent(buckets) == [
            "v0", "v1", "v2", "v3", "v4",
            "n0", "n1", "n2",
            "v5", "v6", "v7", "v8", "v9",
            "o0", "o1", "o2",
            "n3",
            "v10", "v11",
            "o3",
        ]  # fmt: skip

    def test_three_record_crisis_scenario(self, ranker):
        candidates = [
            resource_from_document(
                {"id": "1", "category": "Mental Health", "rating": 4.6, "organization": "Veterans Affairs"}
            ),
            resource_from_document(
                {"id": "2", "category": "Mental Health", "rating": 4.0, "organization": "Wounded Warrior NGO"}
            ),
            resource_from_document(
                {"id": "3", "category": "Mental Health", "rating": 3.9, "organization": "Community Clinic"}
            ),
        ]
        selection = SelectionState(category_id=SymptomCategory.MENTAL, severity=Severity.CRISIS)
        assert _ids(ranker.rank(candidates, selection).resources) == ["1", "2", "3"]


@pytest.fixture
def candidates_crisis(record_factory):
    return _pool(record_factory, {"va": 8, "ngo": 5, "other": 5}, category="Crisis Services", rating=4.8)
