"""
Seed loader - read resource documents from JSON or YAML files.

Accepted layouts:
    - a top-level list of documents
    - a mapping with a ``resources`` (or ``data``) list

Documents go through ``resource_from_document`` so legacy shapes are
normalized on the way in.
"""

from __future__ import annotations

import json
import logging
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

from vet_resources.application.search.normalizer import resource_from_document
from vet_resources.domain.entities import ResourceRecord
from vet_resources.shared.exceptions import ConfigurationError, ErrorContext, ParseError

logger = logging.getLogger(__name__)

PACKAGED_SEED = "seed_resources.yaml"


def _extract_documents(payload: Any, source: str) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        payload = payload.get("resources", payload.get("data"))
    if not isinstance(payload, list):
        raise ParseError("Expected a list of resources", source=source)
    documents = [doc for doc in payload if isinstance(doc, dict)]
    skipped = len(payload) - len(documents)
    if skipped:
        logger.warning(f"Skipped {skipped} non-object entries in {source}")
    return documents


def parse_resources(text: str, source: str = "<string>", fmt: str = "yaml") -> list[ResourceRecord]:
    """Parse document text; ``fmt`` is "json" or "yaml"."""
    try:
        payload = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ParseError(f"Could not parse {source}: {e}", source=source) from e
    return [resource_from_document(doc) for doc in _extract_documents(payload, source)]


def load_resources(path: str | Path) -> list[ResourceRecord]:
    """
    Load resource records from a ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        ConfigurationError: File missing or unreadable
        ParseError: Content is not a list of resource documents
    """
    path = Path(path).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read resource file {path}: {e}",
            context=ErrorContext(operation="load_resources", input_value=str(path)),
        ) from e

    fmt = "json" if path.suffix.lower() == ".json" else "yaml"
    records = parse_resources(text, source=str(path), fmt=fmt)
    logger.info(f"Loaded {len(records)} resources from {path}")
    return records


def load_packaged_resources() -> list[ResourceRecord]:
    """The starter directory shipped inside the package."""
    seed = importlib_resources.files("vet_resources.data").joinpath(PACKAGED_SEED)
    records = parse_resources(seed.read_text(encoding="utf-8"), source=PACKAGED_SEED)
    logger.info(f"Loaded {len(records)} packaged resources")
    return records
