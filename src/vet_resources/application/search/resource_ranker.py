"""
ResourceRanker - symptom-wizard recommendation ordering.

Pipeline:
    candidates
        │
        ▼
    category filter ──(empty category => [])
        │
        ▼
    symptom refinement   (relax to category pool if < MIN_RESULTS)
        │
        ▼
    severity refinement  (relax to pre-severity pool if < MIN_RESULTS;
        │                 best-rated fallback if the pool itself is small)
        ▼
    de-duplicate ids → bucket VA / NGO / Other → seeded order per bucket
        │
        ▼
    interleave (urgent: VA first; otherwise NGO-forward round robin)

Every record that survives filtering appears exactly once in the output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from vet_resources.domain.entities import (
    ProviderCategory,
    ResourceRecord,
    SelectionState,
    SymptomCategory,
)

from .seeding import derive_seed, seeded_order

logger = logging.getLogger(__name__)

MIN_RESULTS = 5
FALLBACK_TOP_N = 10

CATEGORY_DISPLAY_NAMES: dict[SymptomCategory, tuple[str, ...]] = {
    SymptomCategory.MENTAL: (
        "Mental Health",
        "Crisis Services",
        "Family Support",
        "Counseling",
        "Peer Support",
    ),
    SymptomCategory.PHYSICAL: (
        "Physical Health",
        "Rehabilitation",
        "Specialized Care",
        "Medical Services",
        "Pain Management",
    ),
    SymptomCategory.LIFE: (
        "Family Support",
        "Housing Support",
        "Employment Services",
        "Financial Assistance",
        "Social Services",
        "Community Support",
    ),
    SymptomCategory.CRISIS: (
        "Crisis Services",
        "Mental Health",
        "Suicide Prevention",
        "Emergency Services",
    ),
}

# Relaxation step names reported in RankingOutcome.relaxations
RELAX_SYMPTOMS = "symptoms"
RELAX_SEVERITY = "severity"
RELAX_BEST_RATED = "best_rated"

BUCKET_VA = "va"
BUCKET_NGO = "ngo"
BUCKET_OTHER = "other"

# Urgent interleave: (bucket, start, stop); stop=None means "the rest"
_URGENT_PLAN: tuple[tuple[str, int, int | None], ...] = (
    (BUCKET_VA, 0, 5),
    (BUCKET_NGO, 0, 3),
    (BUCKET_VA, 5, 10),
    (BUCKET_OTHER, 0, 3),
    (BUCKET_NGO, 3, None),
    (BUCKET_VA, 10, None),
    (BUCKET_OTHER, 3, None),
)

ROUND_ROBIN_CAP = 10


@dataclass
class RankingOutcome:
    """Ordered records plus which relaxations fired and bucket sizes."""

    resources: list[ResourceRecord] = field(default_factory=list)
    relaxations: list[str] = field(default_factory=list)
    bucket_counts: dict[str, int] = field(default_factory=dict)


def bucket_of(record: ResourceRecord) -> str:
    if record.provider_category is ProviderCategory.VA:
        return BUCKET_VA
    if record.provider_category is ProviderCategory.NGO:
        return BUCKET_NGO
    return BUCKET_OTHER


def _contains_ci(haystack: Iterable[str], needle: str) -> bool:
    needle = needle.lower()
    return any(needle in item.lower() for item in haystack)


def _dedupe_ids(records: Iterable[ResourceRecord]) -> list[ResourceRecord]:
    seen: set[str] = set()
    unique: list[ResourceRecord] = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return unique


def _by_rating(records: Iterable[ResourceRecord]) -> list[ResourceRecord]:
    return sorted(records, key=lambda r: (-r.rating, r.id))


class ResourceRanker:
    """
    Filter, bucket and interleave candidates for one selection.

    Stateless; one instance can be shared across requests.
    """

    def __init__(self, min_results: int = MIN_RESULTS, fallback_top_n: int = FALLBACK_TOP_N):
        self.min_results = min_results
        self.fallback_top_n = fallback_top_n

    # -------------------------------------------------------------------------
    # Filtering
    # -------------------------------------------------------------------------

    def matches_category(self, record: ResourceRecord, category: SymptomCategory) -> bool:
        """Category id substring, or exact match on a mapped display name."""
        if _contains_ci(record.categories, category.value):
            return True
        names = {name.lower() for name in CATEGORY_DISPLAY_NAMES[category]}
        return any(c.lower() in names for c in record.categories)

    def matches_symptoms(self, record: ResourceRecord, symptoms: Sequence[str]) -> bool:
        return any(_contains_ci(record.tags, symptom) for symptom in symptoms)

    def filter_candidates(
        self,
        candidates: Sequence[ResourceRecord],
        selection: SelectionState,
    ) -> tuple[list[ResourceRecord], list[str]]:
        """Apply category, symptom and severity filters with relaxation."""
        if selection.category_id is None:
            return [], []

        relaxations: list[str] = []
        category = selection.category_id
        pool = [r for r in candidates if self.matches_category(r, category)]

        if selection.symptom_ids:
            refined = [r for r in pool if self.matches_symptoms(r, selection.symptom_ids)]
            if len(refined) >= self.min_results:
                pool = refined
            else:
                relaxations.append(RELAX_SYMPTOMS)

        if selection.severity is not None:
            threshold = selection.severity.min_rating
            refined = [r for r in pool if r.rating >= threshold]
            if len(refined) >= self.min_results:
                pool = refined
            else:
                relaxations.append(RELAX_SEVERITY)
                pool = _by_rating(pool)

        if len(pool) < self.min_results:
            top = _by_rating(candidates)[: self.fallback_top_n]
            pool = [*pool, *top]
            relaxations.append(RELAX_BEST_RATED)

        return _dedupe_ids(pool), relaxations

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    @staticmethod
    def seed_for(selection: SelectionState) -> int:
        if selection.selection_hash:
            return derive_seed(selection.selection_hash)
        return derive_seed(
            selection.category_id.value if selection.category_id else "",
            ",".join(selection.symptom_ids),
            selection.severity.value if selection.severity else "",
        )

    def bucketize(self, records: Iterable[ResourceRecord], seed: int) -> dict[str, list[ResourceRecord]]:
        buckets: dict[str, list[ResourceRecord]] = {BUCKET_VA: [], BUCKET_NGO: [], BUCKET_OTHER: []}
        for record in records:
            buckets[bucket_of(record)].append(record)
        return {name: seeded_order(members, seed, salt=name) for name, members in buckets.items()}

    @staticmethod
    def interleave_urgent(buckets: dict[str, list[ResourceRecord]]) -> list[ResourceRecord]:
        ordered: list[ResourceRecord] = []
        for name, start, stop in _URGENT_PLAN:
            ordered.extend(buckets[name][start:stop])
        return ordered

    @staticmethod
    def interleave_standard(buckets: dict[str, list[ResourceRecord]]) -> list[ResourceRecord]:
        va, ngo, other = buckets[BUCKET_VA], buckets[BUCKET_NGO], buckets[BUCKET_OTHER]
        ordered: list[ResourceRecord] = []
        for i in range(ROUND_ROBIN_CAP):
            if i < len(ngo):
                ordered.append(ngo[i])
            if i % 2 == 0 and i // 2 < len(va):
                ordered.append(va[i // 2])
            if i < len(other):
                ordered.append(other[i])
        # VA[i // 2] for even i < cap covers VA[0:cap // 2]
        ordered.extend(va[ROUND_ROBIN_CAP // 2 :])
        ordered.extend(ngo[ROUND_ROBIN_CAP:])
        ordered.extend(other[ROUND_ROBIN_CAP:])
        return ordered

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def rank(self, candidates: Sequence[ResourceRecord], selection: SelectionState) -> RankingOutcome:
        """
        Produce the recommendation ordering for ``selection``.

        Args:
            candidates: Candidate records; duplicate ids are collapsed.
            selection: Wizard selection. No category yields an empty outcome.

        Returns:
            RankingOutcome with the ordered records.
        """
        if selection.category_id is None:
            return RankingOutcome()

        unique = _dedupe_ids(candidates)
        filtered, relaxations = self.filter_candidates(unique, selection)
        buckets = self.bucketize(filtered, self.seed_for(selection))

        severity = selection.severity
        if severity is not None and severity.is_urgent:
            ordered = self.interleave_urgent(buckets)
        else:
            ordered = self.interleave_standard(buckets)

        if relaxations:
            logger.info(
                f"Relaxed filters {relaxations} for category={selection.category_id.value} "
                f"({len(ordered)} results)"
            )

        return RankingOutcome(
            resources=ordered,
            relaxations=relaxations,
            bucket_counts={name: len(members) for name, members in buckets.items()},
        )
