"""
Key/Value Store

Small persistence abstraction for per-owner client state (saved resources,
search history, cached location).

Implementations:
- InMemoryKeyValueStore: cachetools.TTLCache, optional expiry
- JsonFileKeyValueStore: one JSON file per key under a directory

Values must be JSON-serializable.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from cachetools import TTLCache

from vet_resources.shared.exceptions import DataError, ErrorContext

logger = logging.getLogger(__name__)

# Effectively "never expires" for TTLCache
_NO_EXPIRY = float(10**9)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStore(ABC):
    """Minimal key/value contract used by the session helpers."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value or ``default``."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if something was removed."""

    @abstractmethod
    def clear(self) -> int:
        """Remove everything. Returns the number of keys removed."""


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store backed by ``cachetools.TTLCache``.

    Args:
        max_size: Maximum number of keys (LRU eviction beyond that)
        ttl: Seconds before a key expires; None keeps keys indefinitely
    """

    def __init__(self, max_size: int = 10_000, ttl: float | None = None):
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl or _NO_EXPIRY)

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self._cache[key]
        except KeyError:
            return default

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value

    def delete(self, key: str) -> bool:
        try:
            del self._cache[key]
            return True
        except KeyError:
            return False

    def clear(self) -> int:
        count = len(self._cache)
        self._cache.clear()
        return count

    def __len__(self) -> int:
        return len(self._cache)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Directory-backed store, one ``<key>.json`` file per key.

    Keys are sanitized for the filesystem; a short hash suffix keeps
    distinct keys with the same sanitized form apart.
    """

    def __init__(self, directory: str | Path):
        self._dir = Path(directory).expanduser()
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        safe = _SAFE_KEY.sub("_", key)[:80]
        digest = hashlib.blake2b(key.encode("utf-8"), digest_size=4).hexdigest()
        return self._dir / f"{safe}-{digest}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)["value"]
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable state file {path.name}: {e}")
            return default

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump({"key": key, "value": value}, f, ensure_ascii=False)
            tmp.replace(path)
        except TypeError as e:
            tmp.unlink(missing_ok=True)
            raise DataError(
                f"Value for {key!r} is not JSON-serializable",
                context=ErrorContext(operation="kv_set", input_value=key),
            ) from e

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def clear(self) -> int:
        removed = 0
        for path in self._dir.glob("*.json"):
            path.unlink()
            removed += 1
        return removed
