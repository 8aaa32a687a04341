"""
Result Entities - what the read operations hand back to presentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .query import SelectionState
from .resource import ResourceRecord


@dataclass
class ResourcePage:
    """One page of list/search results."""

    resources: list[ResourceRecord]
    total: int
    page: int
    limit: int
    total_pages: int
    message: str | None = None
    degraded: bool = False

    @classmethod
    def empty(cls, page: int, limit: int, message: str, degraded: bool = False) -> ResourcePage:
        return cls(
            resources=[],
            total=0,
            page=page,
            limit=limit,
            total_pages=0,
            message=message,
            degraded=degraded,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "resources": [r.to_dict() for r in self.resources],
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
            "limit": self.limit,
        }
        if self.message:
            data["message"] = self.message
        return data


@dataclass
class Recommendation:
    """Ordered symptom-wizard recommendations plus how they were produced."""

    resources: list[ResourceRecord]
    selection: SelectionState
    source: str = "local"  # "remote" | "local"
    relaxations: list[str] = field(default_factory=list)
    bucket_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "resources": [r.to_dict() for r in self.resources],
            "selection": self.selection.to_dict(),
            "source": self.source,
            "relaxations": list(self.relaxations),
            "bucketCounts": dict(self.bucket_counts),
        }
