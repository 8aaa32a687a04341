"""
Resource Entities - Veteran Health Resource Domain Model

Key Entities:
    - ResourceRecord: A single directory entry (VA, NGO, state, federal, other)
    - ProviderCategory: Explicit provider classification used for bucketing
    - Location / Contact: Nested value objects

Architecture:
    Records are immutable dataclasses built by the normalizer from raw
    documents. ``provider_category`` is assigned once at ingestion; ranking
    code reads it and never re-derives it from organization strings.

Example:
    >>> record = ResourceRecord(
    ...     id="va-mental-health",
    ...     title="VA Mental Health Services",
    ...     categories=("Mental Health", "Crisis Services"),
    ...     rating=4.5,
    ...     provider_category=ProviderCategory.VA,
    ... )
    >>> record.state
    ''
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

NATIONAL_SCOPE = "national"


class ProviderCategory(Enum):
    """Who operates a resource."""

    VA = "va"
    NGO = "ngo"
    STATE = "state"
    FEDERAL = "federal"
    OTHER = "other"


@dataclass(frozen=True)
class Location:
    """Structured address. Only ``state`` is used for filtering."""

    state: str = ""
    city: str = ""
    address: str = ""
    zip_code: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "state": self.state,
            "city": self.city,
            "address": self.address,
            "zipCode": self.zip_code,
        }


@dataclass(frozen=True)
class Contact:
    """How to reach a provider."""

    phone: str = ""
    email: str = ""
    website: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"phone": self.phone, "email": self.email, "website": self.website}


@dataclass(frozen=True)
class ResourceRecord:
    """
    Canonical directory entry.

    ``id`` is the stable unique identifier; every other field is optional
    and defaults to an empty value.
    """

    id: str
    title: str = ""
    description: str = ""
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    rating: float = 0.0
    review_count: int = 0
    resource_type: str = ""
    organization: str = ""
    provider_category: ProviderCategory = ProviderCategory.OTHER
    is_verified: bool = False
    is_veteran_led: bool = False
    is_featured: bool = False
    service_branches: tuple[str, ...] = ()
    veteran_eras: tuple[str, ...] = ()
    veteran_types: tuple[str, ...] = ()
    eligibility: tuple[str, ...] = ()
    location: Location | None = None
    contact: Contact = field(default_factory=Contact)
    url: str = ""
    last_updated: datetime | None = None

    @property
    def state(self) -> str:
        return self.location.state if self.location else ""

    def to_dict(self) -> dict[str, Any]:
        """Wire shape (camelCase), also the shape the query matcher evaluates."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "categories": list(self.categories),
            "tags": list(self.tags),
            "rating": self.rating,
            "reviewCount": self.review_count,
            "resourceType": self.resource_type,
            "organization": self.organization,
            "providerCategory": self.provider_category.value,
            "isVerified": self.is_verified,
            "isVeteranLed": self.is_veteran_led,
            "isFeatured": self.is_featured,
            "serviceBranches": list(self.service_branches),
            "veteranEras": list(self.veteran_eras),
            "veteranTypes": list(self.veteran_types),
            "eligibility": list(self.eligibility),
            "location": self.location.to_dict() if self.location else None,
            "contact": self.contact.to_dict(),
            "url": self.url,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }
