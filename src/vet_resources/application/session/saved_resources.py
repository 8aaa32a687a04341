"""Saved resource ids per owner."""

from __future__ import annotations

import logging

from vet_resources.infrastructure.cache import KeyValueStore
from vet_resources.shared.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

KEY_PREFIX = "saved_resources"


class SavedResources:
    """
    Ordered list of saved resource ids, most recently saved first.

    Saving an id that is already present moves it to the front instead of
    adding a second copy.
    """

    def __init__(self, kv: KeyValueStore, owner_id: str):
        self._kv = kv
        self._key = f"{KEY_PREFIX}:{owner_id}"

    def list_ids(self) -> list[str]:
        value = self._kv.get(self._key, [])
        if not isinstance(value, list):
            logger.warning(f"Discarding malformed saved-resource list under {self._key}")
            return []
        return [str(v) for v in value]

    def is_saved(self, resource_id: str) -> bool:
        return resource_id in self.list_ids()

    def save(self, resource_id: str) -> list[str]:
        if not resource_id or not resource_id.strip():
            raise InvalidParameterError("resource_id", resource_id, "a non-empty resource id")
        ids = [rid for rid in self.list_ids() if rid != resource_id]
        ids.insert(0, resource_id)
        self._kv.set(self._key, ids)
        return ids

    def remove(self, resource_id: str) -> bool:
        ids = self.list_ids()
        if resource_id not in ids:
            return False
        self._kv.set(self._key, [rid for rid in ids if rid != resource_id])
        return True

    def clear(self) -> None:
        self._kv.delete(self._key)
