"""
Application DI Container (dependency-injector).

Usage::

    from vet_resources.config import Settings
    from vet_resources.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict(Settings.from_env().to_container_config())

    search = container.search_service()
    recommend = container.recommendation_service()

    # In tests - override any provider:
    container.resource_store.override(providers.Object(store))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

logger = logging.getLogger(__name__)


def _create_resource_store(data_file: str | None) -> object:
    """Lazy factory for the in-memory store, seeded from file or package data."""
    from vet_resources.infrastructure.store import (
        InMemoryResourceStore,
        load_packaged_resources,
        load_resources,
    )

    records = load_resources(data_file) if data_file else load_packaged_resources()
    return InMemoryResourceStore(records)


def _create_kv_store(state_dir: str | None) -> object:
    """JSON files under ``state_dir`` when set, otherwise process memory."""
    from vet_resources.infrastructure.cache import InMemoryKeyValueStore, JsonFileKeyValueStore

    if state_dir:
        logger.info(f"Client state directory: {state_dir}")
        return JsonFileKeyValueStore(state_dir)
    return InMemoryKeyValueStore()


def _create_remote_client(base_url: str | None, timeout: float | None, max_retries: int | None) -> object:
    """None when no remote URL is configured."""
    if not base_url:
        return None
    from vet_resources.infrastructure.remote import RemoteSearchClient

    logger.info(f"Remote search enabled: {base_url}")
    return RemoteSearchClient(base_url, timeout=timeout or 5.0, max_retries=max_retries or 3)


def _create_search_service(store: object) -> object:
    from vet_resources.application.search import ResourceSearchService

    return ResourceSearchService(store)  # type: ignore[arg-type]


def _create_recommendation_service(store: object, remote_client: object, timeout: float | None) -> object:
    from vet_resources.application.search import RecommendationService

    return RecommendationService(store, remote_client=remote_client, timeout=timeout or 5.0)  # type: ignore[arg-type]


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container.

    - ``resource_store``: candidate store
    - ``kv_store``: client state persistence
    - ``remote_client``: optional remote search client
    - ``search_service`` / ``recommendation_service``: read paths
    """

    config = providers.Configuration()

    resource_store = providers.Singleton(
        _create_resource_store,
        data_file=config.data_file,
    )

    kv_store = providers.Singleton(
        _create_kv_store,
        state_dir=config.state_dir,
    )

    remote_client = providers.Singleton(
        _create_remote_client,
        base_url=config.remote_base_url,
        timeout=config.remote_timeout,
        max_retries=config.remote_max_retries,
    )

    search_service = providers.Singleton(
        _create_search_service,
        store=resource_store,
    )

    recommendation_service = providers.Singleton(
        _create_recommendation_service,
        store=resource_store,
        remote_client=remote_client,
        timeout=config.remote_timeout,
    )


__all__ = ["ApplicationContainer"]
