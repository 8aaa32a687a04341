"""
Normalizer - single boundary pass from raw input to canonical objects.

Three kinds of input reach the service in several historical shapes:

- Resource documents (``name`` vs ``title``, string ``category`` vs
  ``categories`` array, top-level ``phone`` vs ``contact.phone`` ...)
- List/search parameters (``searchTerm`` / ``q`` / ``query``,
  ``minRating`` / ``severity`` / ``rating``, ``location`` / ``state`` ...)
- Symptom-wizard selections (``categoryId`` / ``symptomCategory`` ...)

Everything downstream only ever sees ``ResourceRecord``, ``FilterRequest``
and ``SelectionState``.

Alias precedence (first present and parseable wins):
    search text     searchTerm > q > query
    minimum rating  minRating > severity > rating
    location        location > state
    sort            sortBy > sort
    session         sessionId > selectionHash
    verified        verifiedOnly > verified
    veteran-led     veteranLedOnly > veteranFounded
    tags            tags UNION symptoms

Malformed values never raise here; they fall back to defaults.

Example:
    >>> req = normalize_filter_params({"q": "ptsd", "limit": "500"})
    >>> req.search_term, req.limit
    ('ptsd', 50)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime
from typing import Any, TypeVar

from vet_resources.domain.entities import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    Contact,
    FilterRequest,
    Location,
    ProviderCategory,
    ResourceRecord,
    SelectionState,
    Severity,
    SortOption,
    SymptomCategory,
)

logger = logging.getLogger(__name__)

MAX_RATING = 5.0

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_ALL_SENTINELS = frozenset({"", "all", "any"})

_SORT_ALIASES: dict[str, SortOption] = {
    "relevance": SortOption.RELEVANCE,
    "rating": SortOption.RATING,
    "name": SortOption.NAME,
    "alphabetical": SortOption.NAME,
    "title": SortOption.NAME,
    "date": SortOption.DATE,
    "newest": SortOption.DATE,
    "recent": SortOption.DATE,
}

# Fields that may arrive as a scalar string and must become an array.
_ARRAY_FIELDS = (
    "categories",
    "tags",
    "veteranTypes",
    "serviceBranches",
    "veteranEras",
    "eligibility",
)

_BOOLEAN_FIELDS = ("isVerified", "isVeteranLed", "isFeatured")


# =============================================================================
# Primitive coercion
# =============================================================================


def _first_present(params: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = params.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return False


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if result != result:  # NaN
        return None
    return result


def _as_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        number = _as_float(value)
        if number is None or not math.isfinite(number):
            return default
        return int(number)


def _as_list(value: Any) -> list[str]:
    """Accept a string, a comma-separated string, or an iterable of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, Iterable) and not isinstance(value, Mapping):
        items = value
    else:
        items = [value]
    return [str(item).strip() for item in items if item is not None and str(item).strip()]


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    """Case-insensitive, order-preserving de-duplication."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(value)
    return tuple(result)


def _drop_all_sentinels(values: Iterable[str]) -> tuple[str, ...]:
    return _dedupe(v for v in values if v.lower() not in _ALL_SENTINELS)


def _parse_datetime(value: Any) -> datetime | None:
    """Parse ISO strings; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparseable lastUpdated value: {value!r}")
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _clamp_rating(value: Any) -> float:
    number = _as_float(value)
    if number is None:
        return 0.0
    return min(max(number, 0.0), MAX_RATING)


# =============================================================================
# Resource documents
# =============================================================================


def classify_provider(resource_type: str | None, organization: str | None) -> ProviderCategory:
    """
    Decide who operates a resource.

    ``va`` type or an organization naming Veterans Affairs is VA; ``ngo`` /
    ``non-profit`` type or an organization mentioning NGO is NGO; ``state``
    and ``federal`` map directly; anything else is OTHER.
    """
    rtype = (resource_type or "").strip().lower()
    org = organization or ""

    if rtype == "va" or "veterans affairs" in org.lower():
        return ProviderCategory.VA
    if rtype in ("ngo", "non-profit", "nonprofit") or "NGO" in org:
        return ProviderCategory.NGO
    if rtype == "state":
        return ProviderCategory.STATE
    if rtype == "federal":
        return ProviderCategory.FEDERAL
    return ProviderCategory.OTHER


def normalize_resource_document(doc: Mapping[str, Any]) -> dict[str, Any]:
    """
    Reconcile legacy resource shapes into the canonical camelCase document.

    Idempotent: normalizing an already-normalized document returns an equal
    document.
    """
    out: dict[str, Any] = dict(doc)

    # Identity
    if "id" not in out or out["id"] in (None, ""):
        if out.get("_id") not in (None, ""):
            out["id"] = out["_id"]
    out.pop("_id", None)
    out["id"] = str(out.get("id") or "")

    if not out.get("title") and out.get("name"):
        out["title"] = out["name"]
    out.pop("name", None)
    out["title"] = str(out.get("title") or "")
    out["description"] = str(out.get("description") or "")

    # Legacy scalar fields merged into their array counterparts
    categories = _as_list(out.get("categories"))
    legacy_category = out.pop("category", None)
    if legacy_category:
        categories.extend(_as_list(legacy_category))
    out["categories"] = categories

    for legacy, canonical in (
        ("veteranType", "veteranTypes"),
        ("serviceBranch", "serviceBranches"),
        ("veteranEra", "veteranEras"),
    ):
        merged = _as_list(out.get(canonical))
        legacy_value = out.pop(legacy, None)
        if legacy_value:
            merged.extend(_as_list(legacy_value))
        out[canonical] = merged

    for key in _ARRAY_FIELDS:
        out[key] = list(_dedupe(_as_list(out.get(key))))

    # Contact details
    contact = dict(out.get("contact") or {}) if isinstance(out.get("contact"), Mapping) else {}
    for key in ("phone", "email"):
        top_level = out.pop(key, None)
        if top_level and not contact.get(key):
            contact[key] = str(top_level)
    website = out.pop("website", None)
    if website and not contact.get("website"):
        contact["website"] = str(website)
    out["contact"] = {
        "phone": str(contact.get("phone") or ""),
        "email": str(contact.get("email") or ""),
        "website": str(contact.get("website") or ""),
    }

    link = out.pop("link", None)
    out["url"] = str(out.get("url") or link or out["contact"]["website"] or "")

    # Location
    location = out.get("location")
    if isinstance(location, str):
        out["location"] = {"state": location.strip(), "city": "", "address": "", "zipCode": ""}
    elif isinstance(location, Mapping):
        out["location"] = {
            "state": str(location.get("state") or ""),
            "city": str(location.get("city") or ""),
            "address": str(location.get("address") or ""),
            "zipCode": str(location.get("zipCode") or location.get("zip") or ""),
        }
    else:
        out["location"] = None

    # Scalars
    out["rating"] = _clamp_rating(out.get("rating"))
    out["reviewCount"] = max(_as_int(out.get("reviewCount"), 0), 0)
    for key in _BOOLEAN_FIELDS:
        out[key] = _as_bool(out.get(key))
    out["resourceType"] = str(out.get("resourceType") or "").strip().lower()
    out["organization"] = str(out.get("organization") or "")
    out["lastUpdated"] = _parse_datetime(out.get("lastUpdated"))

    provider = out.get("providerCategory")
    try:
        out["providerCategory"] = ProviderCategory(str(provider).lower()).value
    except ValueError:
        out["providerCategory"] = classify_provider(out["resourceType"], out["organization"]).value

    return out


def resource_from_document(doc: Mapping[str, Any]) -> ResourceRecord:
    """Build a ``ResourceRecord`` from any accepted document shape."""
    data = normalize_resource_document(doc)
    location = data["location"]
    contact = data["contact"]
    return ResourceRecord(
        id=data["id"],
        title=data["title"],
        description=data["description"],
        categories=tuple(data["categories"]),
        tags=tuple(data["tags"]),
        rating=data["rating"],
        review_count=data["reviewCount"],
        resource_type=data["resourceType"],
        organization=data["organization"],
        provider_category=ProviderCategory(data["providerCategory"]),
        is_verified=data["isVerified"],
        is_veteran_led=data["isVeteranLed"],
        is_featured=data["isFeatured"],
        service_branches=tuple(data["serviceBranches"]),
        veteran_eras=tuple(data["veteranEras"]),
        veteran_types=tuple(data["veteranTypes"]),
        eligibility=tuple(data["eligibility"]),
        location=(
            Location(
                state=location["state"],
                city=location["city"],
                address=location["address"],
                zip_code=location["zipCode"],
            )
            if location
            else None
        ),
        contact=Contact(phone=contact["phone"], email=contact["email"], website=contact["website"]),
        url=data["url"],
        last_updated=data["lastUpdated"],
    )


# =============================================================================
# List/search parameters
# =============================================================================


def _normalize_sort(value: Any) -> SortOption:
    if isinstance(value, SortOption):
        return value
    if value is None:
        return SortOption.RELEVANCE
    return _SORT_ALIASES.get(str(value).strip().lower(), SortOption.RELEVANCE)


def _normalize_min_rating(params: Mapping[str, Any]) -> float | None:
    for key in ("minRating", "severity", "rating"):
        number = _as_float(params.get(key))
        if number is not None:
            return min(max(number, 0.0), MAX_RATING)
    return None


def _normalize_state(params: Mapping[str, Any]) -> str:
    value = _first_present(params, "location", "state")
    if value is None:
        return ""
    state = str(value).strip()
    return "" if state.lower() in _ALL_SENTINELS else state


def normalize_filter_params(params: Mapping[str, Any] | None) -> FilterRequest:
    """
    Turn any parameter mapping into a ``FilterRequest``.

    Accepts HTTP query parameters, JSON bodies and MCP tool arguments.
    """
    if isinstance(params, FilterRequest):
        return params
    params = params or {}

    search = _first_present(params, "searchTerm", "q", "query")
    tags = _dedupe([*_as_list(params.get("tags")), *_as_list(params.get("symptoms"))])

    category = str(params.get("category") or "").strip()
    if category.lower() in _ALL_SENTINELS:
        category = ""
    resource_type = str(params.get("resourceType") or "").strip()
    if resource_type.lower() in _ALL_SENTINELS:
        resource_type = ""

    page = max(_as_int(params.get("page"), DEFAULT_PAGE), 1)
    limit = _as_int(params.get("limit"), DEFAULT_LIMIT)
    if limit < 1:
        limit = DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)

    session = _first_present(params, "sessionId", "selectionHash")

    return FilterRequest(
        search_term=" ".join(str(search).split()) if search is not None else "",
        tags=tags,
        category=category,
        resource_type=resource_type,
        veteran_types=_drop_all_sentinels(_as_list(params.get("veteranType") or params.get("veteranTypes"))),
        service_branches=_drop_all_sentinels(
            _as_list(params.get("serviceBranch") or params.get("serviceBranches"))
        ),
        veteran_eras=_drop_all_sentinels(_as_list(params.get("veteranEra") or params.get("veteranEras"))),
        state=_normalize_state(params),
        min_rating=_normalize_min_rating(params),
        featured_only=_as_bool(params.get("featuredOnly")),
        verified_only=_as_bool(_first_present(params, "verifiedOnly", "verified")),
        veteran_led_only=_as_bool(_first_present(params, "veteranLedOnly", "veteranFounded")),
        recently_updated=_as_bool(params.get("recentlyUpdated")),
        sort=_normalize_sort(_first_present(params, "sortBy", "sort")),
        page=page,
        limit=limit,
        session_id=str(session).strip() if session is not None else "",
    )


# =============================================================================
# Symptom-wizard selection
# =============================================================================


E = TypeVar("E")


def _enum_or_none(enum_cls: type[E], value: Any) -> E | None:
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())  # type: ignore[call-arg]
    except ValueError:
        logger.debug(f"Ignoring unknown {enum_cls.__name__} value: {value!r}")
        return None


def normalize_selection(params: Mapping[str, Any] | None) -> SelectionState:
    """Turn wizard parameters into a ``SelectionState``; unknown enums become None."""
    if isinstance(params, SelectionState):
        return params
    params = params or {}

    category = _enum_or_none(SymptomCategory, _first_present(params, "categoryId", "symptomCategory"))
    severity = _enum_or_none(Severity, _first_present(params, "severityId", "severityLevel"))
    symptoms = _dedupe(_as_list(_first_present(params, "symptomIds", "symptoms")))
    selection_hash = _first_present(params, "selectionHash")

    return SelectionState(
        category_id=category,
        symptom_ids=symptoms,
        severity=severity,
        selection_hash=str(selection_hash).strip() if selection_hash is not None else "",
    )
