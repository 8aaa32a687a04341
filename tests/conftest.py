"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from vet_resources.application.search.normalizer import resource_from_document
from vet_resources.domain.entities import ResourceRecord
from vet_resources.infrastructure.cache import InMemoryKeyValueStore
from vet_resources.infrastructure.store import InMemoryResourceStore

FIXED_NOW = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


# ============================================================
# Environment Fixtures
# ============================================================


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed instant."""
    return lambda: FIXED_NOW


# ============================================================
# Resource Fixtures
# ============================================================


def make_record(record_id: str, **fields: Any) -> ResourceRecord:
    """Build a normalized record from camelCase document fields."""
    return resource_from_document({"id": record_id, "title": f"Resource {record_id}", **fields})


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def sample_documents() -> list[dict[str, Any]]:
    """Small mixed directory: VA, NGO, state, federal, legacy shapes."""
    return [
        {
            "id": "va-1",
            "title": "VA PTSD Clinic",
            "description": "Evidence-based PTSD treatment",
            "categories": ["Mental Health"],
            "tags": ["ptsd", "therapy"],
            "rating": 4.8,
            "reviewCount": 300,
            "resourceType": "va",
            "organization": "U.S. Department of Veterans Affairs",
            "isVerified": True,
            "isFeatured": True,
            "location": "national",
            "lastUpdated": "2026-09-20T00:00:00Z",
        },
        {
            "id": "ngo-1",
            "name": "Peer Warriors",
            "description": "Peer support groups for anxiety and isolation",
            "category": "Peer Support",
            "tags": ["anxiety", "isolation"],
            "rating": "4.2",
            "resourceType": "ngo",
            "organization": "Peer Warriors NGO",
            "isVeteranLed": "true",
            "veteranType": "Combat Veteran",
            "serviceBranch": "Army",
            "veteranEras": ["Post-9/11", "Gulf War"],
            "location": {"state": "TX", "city": "Austin"},
            "phone": "555-0100",
            "lastUpdated": "2026-01-05",
        },
        {
            "id": "state-1",
            "title": "Texas Housing Help",
            "description": "Rental assistance for Texas veterans",
            "categories": ["Housing Support"],
            "tags": ["housing", "rent"],
            "rating": 3.6,
            "resourceType": "state",
            "organization": "Texas Veterans Commission",
            "location": {"state": "TX"},
            "lastUpdated": "2026-08-15T00:00:00Z",
        },
        {
            "id": "state-2",
            "title": "California Job Center",
            "description": "Employment services",
            "categories": ["Employment Services"],
            "tags": ["jobs"],
            "rating": 3.1,
            "resourceType": "state",
            "organization": "CalVet",
            "serviceBranches": ["Navy", "Marine Corps"],
            "location": {"state": "CA"},
        },
        {
            "id": "fed-1",
            "title": "National Helpline",
            "description": "Substance use referral line",
            "categories": ["Mental Health", "Crisis Services"],
            "tags": ["substance use", "crisis"],
            "rating": 4.3,
            "resourceType": "federal",
            "organization": "SAMHSA",
            "isVerified": True,
            "lastUpdated": "2025-01-01T00:00:00Z",
        },
    ]


@pytest.fixture
def store(sample_documents) -> InMemoryResourceStore:
    return InMemoryResourceStore.from_documents(sample_documents)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()
