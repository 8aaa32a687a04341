"""
Query Entities - canonical request objects for search and recommendations.

Key Entities:
    - FilterRequest: one normalized list/search request
    - SortOption: relevance | rating | name | date
    - SelectionState: symptom-wizard selection (category, symptoms, severity)
    - SymptomCategory / Severity: the wizard's fixed enumerations

Both request types are frozen. They are built once at the boundary by
``application.search.normalizer`` so that no internal code branches on
which parameter alias a caller used.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 30
MAX_LIMIT = 50


class SortOption(Enum):
    """Result orderings for the list endpoint."""

    RELEVANCE = "relevance"
    RATING = "rating"
    NAME = "name"
    DATE = "date"


class SymptomCategory(Enum):
    """Top-level symptom wizard categories."""

    MENTAL = "mental"
    PHYSICAL = "physical"
    LIFE = "life"
    CRISIS = "crisis"


class Severity(Enum):
    """Self-reported severity, mapped to a minimum resource rating."""

    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRISIS = "crisis"

    @property
    def min_rating(self) -> float:
        return _SEVERITY_MIN_RATING[self]

    @property
    def is_urgent(self) -> bool:
        return self in (Severity.SEVERE, Severity.CRISIS)


_SEVERITY_MIN_RATING: dict[Severity, float] = {
    Severity.MILD: 3.0,
    Severity.MODERATE: 3.5,
    Severity.SEVERE: 4.0,
    Severity.CRISIS: 4.5,
}


@dataclass(frozen=True)
class FilterRequest:
    """
    Canonical list/search request.

    ``tags`` is the de-duplicated union of requested tags and symptoms.
    ``page`` and ``limit`` are already clamped.
    """

    search_term: str = ""
    tags: tuple[str, ...] = ()
    category: str = ""
    resource_type: str = ""
    veteran_types: tuple[str, ...] = ()
    service_branches: tuple[str, ...] = ()
    veteran_eras: tuple[str, ...] = ()
    state: str = ""
    min_rating: float | None = None
    featured_only: bool = False
    verified_only: bool = False
    veteran_led_only: bool = False
    recently_updated: bool = False
    sort: SortOption = SortOption.RELEVANCE
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    session_id: str = ""

    def is_empty(self) -> bool:
        """True when no filtering field is set (pagination and sort aside)."""
        return not (
            self.search_term
            or self.tags
            or self.category
            or self.resource_type
            or self.veteran_types
            or self.service_branches
            or self.veteran_eras
            or self.state
            or self.min_rating is not None
            or self.featured_only
            or self.verified_only
            or self.veteran_led_only
            or self.recently_updated
        )


@dataclass(frozen=True)
class SelectionState:
    """Symptom wizard selection. ``selection_hash`` only seeds ordering."""

    category_id: SymptomCategory | None = None
    symptom_ids: tuple[str, ...] = ()
    severity: Severity | None = None
    selection_hash: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "categoryId": self.category_id.value if self.category_id else None,
            "symptomIds": list(self.symptom_ids),
            "severityId": self.severity.value if self.severity else None,
            "selectionHash": self.selection_hash,
        }
