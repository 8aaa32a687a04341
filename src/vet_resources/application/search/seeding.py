"""
Seeding - deterministic pseudo-random ordering.

Same seed and same input ids always give the same order; a different seed
gives a (usually) different order. Keys come from blake2b so they are
stable across processes and Python versions, unlike ``hash()``.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar


class _HasId(Protocol):
    id: str


_SEPARATOR = "\x1f"


def _digest64(text: str) -> int:
    return int.from_bytes(hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest(), "big")


def derive_seed(*parts: object) -> int:
    """64-bit seed from arbitrary parts (None is treated as empty)."""
    return _digest64(_SEPARATOR.join("" if p is None else str(p) for p in parts))


def seeded_key(seed: int, salt: str, record_id: str) -> int:
    """Stable per-record sort key for one ``(seed, salt)`` pair."""
    return _digest64(f"{seed}{_SEPARATOR}{salt}{_SEPARATOR}{record_id}")


R = TypeVar("R", bound=_HasId)
T = TypeVar("T")


def seeded_order(records: Iterable[R], seed: int, salt: str = "") -> list[R]:
    """Shuffle ``records`` deterministically; ties broken by id."""
    return sorted(records, key=lambda r: (seeded_key(seed, salt, r.id), r.id))


def choose_variant(seed: int, variants: Sequence[T]) -> T:
    """Pick one entry of a fixed, non-empty sequence."""
    if not variants:
        raise ValueError("variants must not be empty")
    return variants[seed % len(variants)]
