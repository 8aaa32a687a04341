"""
Query Matcher - evaluate MongoDB-style query documents in memory.

Supported:
    logical     $and, $or, $nor
    comparison  $eq, $ne, $gt, $gte, $lt, $lte, $in, $nin
    element     $exists
    evaluation  $regex (+ $options), compiled ``re.Pattern`` values
    array       $elemMatch, implicit "any element matches" on arrays
    paths       dotted field names ("location.state")

Semantics follow MongoDB where it matters for resource queries: a missing
field equals ``None``, comparisons between incompatible types are false,
and a condition on an array field is satisfied if any element satisfies it.

Example:
    >>> matches({"tags": ["PTSD", "anxiety"]}, {"tags": {"$regex": "ptsd", "$options": "i"}})
    True
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from functools import lru_cache
from typing import Any

from vet_resources.shared.exceptions import ErrorContext, ValidationError

_MISSING = object()

_LOGICAL = frozenset({"$and", "$or", "$nor"})


class QueryError(ValidationError):
    """Unsupported or malformed query document."""


# =============================================================================
# Path resolution
# =============================================================================


def resolve_path(document: Any, path: str) -> Any:
    """
    Resolve a dotted path, fanning out over arrays.

    Returns ``_MISSING`` when nothing exists at the path, a single value, or
    a list of values when an intermediate array was traversed.
    """
    current: Any = document
    for i, part in enumerate(path.split(".")):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        elif isinstance(current, list):
            rest = ".".join(path.split(".")[i:])
            values = [resolve_path(item, rest) for item in current if isinstance(item, Mapping)]
            values = [v for v in values if v is not _MISSING]
            return values if values else _MISSING
        else:
            return _MISSING
        if current is _MISSING:
            return _MISSING
    return current


def field_value(document: Any, path: str) -> Any:
    """Like ``resolve_path`` but with None for missing fields."""
    value = resolve_path(document, path)
    return None if value is _MISSING else value


# =============================================================================
# Operators
# =============================================================================


@lru_cache(maxsize=512)
def _compile(pattern: str, options: str) -> re.Pattern[str]:
    flags = 0
    for opt in options:
        if opt == "i":
            flags |= re.IGNORECASE
        elif opt == "m":
            flags |= re.MULTILINE
        elif opt == "s":
            flags |= re.DOTALL
        elif opt == "x":
            flags |= re.VERBOSE
    return re.compile(pattern, flags)


def _candidates(value: Any) -> list[Any]:
    """Value itself plus, for arrays, each element."""
    if isinstance(value, list):
        return [value, *value]
    return [value]


def _regex_hit(pattern: re.Pattern[str], value: Any) -> bool:
    return any(isinstance(v, str) and pattern.search(v) is not None for v in _candidates(value))


def _equals(value: Any, expected: Any) -> bool:
    if isinstance(expected, re.Pattern):
        return _regex_hit(expected, value)
    if value is _MISSING:
        return expected is None
    return any(v == expected for v in _candidates(value))


def _compare(value: Any, op: str, bound: Any) -> bool:
    for v in _candidates(value):
        if v is _MISSING or v is None or isinstance(v, list):
            continue
        try:
            if op == "$gt" and v > bound:
                return True
            if op == "$gte" and v >= bound:
                return True
            if op == "$lt" and v < bound:
                return True
            if op == "$lte" and v <= bound:
                return True
        except TypeError:
            continue
    return False


def _operator_match(value: Any, op: str, arg: Any, spec: Mapping[str, Any]) -> bool:
    if op == "$eq":
        return _equals(value, arg)
    if op == "$ne":
        return not _equals(value, arg)
    if op in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(value, op, arg)
    if op == "$in":
        if not isinstance(arg, Iterable) or isinstance(arg, (str, Mapping)):
            raise QueryError("$in needs an array", context=ErrorContext(operation="match", input_value=arg))
        return any(_equals(value, expected) for expected in arg)
    if op == "$nin":
        return not _operator_match(value, "$in", arg, spec)
    if op == "$exists":
        return (value is not _MISSING) == bool(arg)
    if op == "$regex":
        pattern = arg if isinstance(arg, re.Pattern) else _compile(str(arg), str(spec.get("$options", "")))
        return _regex_hit(pattern, value)
    if op == "$options":
        return True  # consumed by $regex
    if op == "$elemMatch":
        if not isinstance(value, list):
            return False
        return any(_elem_matches(item, arg) for item in value)
    raise QueryError(f"Unsupported query operator: {op}", context=ErrorContext(operation="match", input_value=op))


def _elem_matches(item: Any, spec: Mapping[str, Any]) -> bool:
    if isinstance(item, Mapping) and not any(k.startswith("$") for k in spec):
        return matches(item, spec)
    return _field_match(item, spec)


def _field_match(value: Any, condition: Any) -> bool:
    if isinstance(condition, Mapping) and condition and all(k.startswith("$") for k in condition):
        return all(_operator_match(value, op, arg, condition) for op, arg in condition.items())
    return _equals(value, condition)


# =============================================================================
# Entry point
# =============================================================================


def matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """True if ``document`` satisfies ``query``. ``{}`` matches everything."""
    for key, condition in query.items():
        if key in _LOGICAL:
            if not isinstance(condition, Sequence) or isinstance(condition, str) or not condition:
                raise QueryError(
                    f"{key} needs a non-empty array",
                    context=ErrorContext(operation="match", input_value=condition),
                )
            results = (matches(document, sub) for sub in condition)
            if key == "$and" and not all(results):
                return False
            if key == "$or" and not any(results):
                return False
            if key == "$nor" and any(results):
                return False
            continue
        if key.startswith("$"):
            raise QueryError(
                f"Unsupported top-level operator: {key}",
                context=ErrorContext(operation="match", input_value=key),
            )
        if not _field_match(resolve_path(document, key), condition):
            return False
    return True
