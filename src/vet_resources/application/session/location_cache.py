"""
Cached user location with a freshness window.

Only the state code matters for filtering; the city is kept for display.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from vet_resources.infrastructure.cache import KeyValueStore
from vet_resources.shared.exceptions import InvalidParameterError

KEY_PREFIX = "location"
DEFAULT_MAX_AGE = timedelta(hours=24)


@dataclass(frozen=True)
class CachedLocation:
    state: str
    city: str
    cached_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"state": self.state, "city": self.city, "cachedAt": self.cached_at.isoformat()}


class LocationCache:
    def __init__(
        self,
        kv: KeyValueStore,
        owner_id: str,
        max_age: timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], datetime] | None = None,
    ):
        self._kv = kv
        self._key = f"{KEY_PREFIX}:{owner_id}"
        self._max_age = max_age
        self._clock = clock or (lambda: datetime.now(UTC))

    def store(self, state: str, city: str = "") -> CachedLocation:
        state = (state or "").strip()
        if not state:
            raise InvalidParameterError("state", state, "a state code")
        location = CachedLocation(state=state, city=(city or "").strip(), cached_at=self._clock())
        self._kv.set(self._key, location.to_dict())
        return location

    def lookup(self) -> CachedLocation | None:
        """Cached location, or None when missing, malformed or stale."""
        raw = self._kv.get(self._key)
        if not isinstance(raw, dict):
            return None
        try:
            cached_at = datetime.fromisoformat(raw["cachedAt"])
            if cached_at.tzinfo is None:
                cached_at = cached_at.replace(tzinfo=UTC)
            location = CachedLocation(
                state=str(raw["state"]),
                city=str(raw.get("city", "")),
                cached_at=cached_at,
            )
        except (KeyError, TypeError, ValueError):
            return None
        if self._clock() - location.cached_at > self._max_age:
            return None
        return location

    def clear(self) -> None:
        self._kv.delete(self._key)
