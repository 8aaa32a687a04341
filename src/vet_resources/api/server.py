"""
HTTP API Server for the veteran resource directory.

Read endpoints:
    GET  /health
    GET  /api/resources               list/search (all filter aliases accepted)
    GET  /api/resources/counts        records per category
    GET  /api/resources/{id}          single record (404 when missing)
    GET  /api/recommendations         symptom wizard (query parameters)
    POST /api/recommendations         symptom wizard (JSON body)

Client state:
    GET/DELETE   /api/saved/{owner_id}
    PUT/DELETE   /api/saved/{owner_id}/{resource_id}
    GET/POST/DELETE /api/history/{owner_id}
    GET/PUT      /api/location/{owner_id}

Read endpoints answer 200 with an empty list and a message when the store
is unavailable. Only client-state writes return 4xx for bad input.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from vet_resources import __version__
from vet_resources.application.session import LocationCache, SavedResources, SearchHistory
from vet_resources.config import Settings
from vet_resources.container import ApplicationContainer
from vet_resources.shared.exceptions import NotFoundError, ValidationError, VetResourcesError

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    resource_count: int


class ResourcePageResponse(BaseModel):
    """One page of list/search results."""

    resources: list[dict[str, Any]]
    total: int
    page: int
    totalPages: int
    limit: int
    message: str | None = None


class RecommendationRequest(BaseModel):
    """Symptom wizard selection. Unknown enum values are treated as unset."""

    categoryId: str | None = None
    symptomIds: list[str] = Field(default_factory=list)
    severityId: str | None = None
    selectionHash: str | None = None


class RecommendationResponse(BaseModel):
    resources: list[dict[str, Any]]
    selection: dict[str, Any]
    source: str
    relaxations: list[str]
    bucketCounts: dict[str, int]


class SavedResourcesResponse(BaseModel):
    ownerId: str
    resourceIds: list[str]


class HistoryRequest(BaseModel):
    term: str
    filters: dict[str, Any] = Field(default_factory=dict)


class HistoryResponse(BaseModel):
    ownerId: str
    searches: list[dict[str, Any]]


class LocationRequest(BaseModel):
    state: str
    city: str = ""


class LocationResponse(BaseModel):
    ownerId: str
    location: dict[str, Any] | None


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str


# =============================================================================
# Helpers
# =============================================================================


def _query_params(request: Request) -> dict[str, Any]:
    """Flatten query parameters; repeated keys become lists."""
    params: dict[str, Any] = {}
    for key in request.query_params:
        values = request.query_params.getlist(key)
        params[key] = values if len(values) > 1 else values[0]
    return params


def _container(request: Request) -> ApplicationContainer:
    return request.app.state.container


# =============================================================================
# App factory
# =============================================================================


def create_api_server(container: ApplicationContainer | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: Pre-configured DI container. When None, one is built
            from ``Settings.from_env()``.

    Returns:
        Configured FastAPI instance.
    """
    if container is None:
        container = ApplicationContainer()
        container.config.from_dict(Settings.from_env().to_container_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("HTTP API server starting")
        yield
        remote = container.remote_client()
        if remote is not None:
            await remote.close()
        logger.info("HTTP API server shutting down")

    app = FastAPI(
        title="Veteran Resources API",
        description="Search, filter and symptom-based recommendations for veteran health resources.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc), "error": exc.to_dict()})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc), "error": exc.to_dict()})

    @app.exception_handler(VetResourcesError)
    async def _domain_error(request: Request, exc: VetResourcesError) -> JSONResponse:
        logger.error(f"Request to {request.url.path} failed: {exc}")
        return JSONResponse(status_code=400, content={"detail": str(exc), "error": exc.to_dict()})

    _register_resource_routes(app)
    _register_state_routes(app)
    return app


def _register_resource_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint."""
        store = _container(request).resource_store()
        try:
            count = await store.count({})
        except VetResourcesError as e:
            logger.warning(f"Health check: store unavailable: {e}")
            return HealthResponse(status="degraded", version=__version__, resource_count=0)
        return HealthResponse(status="healthy", version=__version__, resource_count=count)

    @app.get("/api/resources", response_model=ResourcePageResponse)
    async def list_resources(request: Request) -> dict[str, Any]:
        """
        List/search resources.

        Accepts searchTerm|q|query, tags, symptoms, category, resourceType,
        veteranType, serviceBranch, veteranEra, location|state,
        minRating|severity|rating, featuredOnly, verifiedOnly|verified,
        veteranLedOnly|veteranFounded, recentlyUpdated, sortBy|sort, page, limit, sessionId.
        """
        page = await _container(request).search_service().search(_query_params(request))
        return page.to_dict()

    @app.get("/api/resources/counts")
    async def resource_category_counts(request: Request) -> dict[str, int]:
        return await _container(request).search_service().category_counts()

    @app.get(
        "/api/resources/{resource_id}",
        responses={404: {"model": ErrorResponse, "description": "Resource not found"}},
    )
    async def get_resource(resource_id: str, request: Request) -> dict[str, Any]:
        record = await _container(request).search_service().get_resource(resource_id)
        if record is None:
            raise NotFoundError("Resource", resource_id)
        return record.to_dict()

    @app.get("/api/recommendations", response_model=RecommendationResponse)
    async def recommend_from_query(request: Request) -> dict[str, Any]:
        result = await _container(request).recommendation_service().recommend(_query_params(request))
        return result.to_dict()

    @app.post("/api/recommendations", response_model=RecommendationResponse)
    async def recommend(body: RecommendationRequest, request: Request) -> dict[str, Any]:
        result = await _container(request).recommendation_service().recommend(body.model_dump())
        return result.to_dict()


def _register_state_routes(app: FastAPI) -> None:
    # -- Saved resources -----------------------------------------------------

    @app.get("/api/saved/{owner_id}", response_model=SavedResourcesResponse)
    async def list_saved(owner_id: str, request: Request) -> SavedResourcesResponse:
        saved = SavedResources(_container(request).kv_store(), owner_id)
        return SavedResourcesResponse(ownerId=owner_id, resourceIds=saved.list_ids())

    @app.put("/api/saved/{owner_id}/{resource_id}", response_model=SavedResourcesResponse)
    async def save_resource(owner_id: str, resource_id: str, request: Request) -> SavedResourcesResponse:
        saved = SavedResources(_container(request).kv_store(), owner_id)
        return SavedResourcesResponse(ownerId=owner_id, resourceIds=saved.save(resource_id))

    @app.delete("/api/saved/{owner_id}/{resource_id}", response_model=SavedResourcesResponse)
    async def unsave_resource(owner_id: str, resource_id: str, request: Request) -> SavedResourcesResponse:
        saved = SavedResources(_container(request).kv_store(), owner_id)
        if not saved.remove(resource_id):
            raise NotFoundError("Saved resource", resource_id)
        return SavedResourcesResponse(ownerId=owner_id, resourceIds=saved.list_ids())

    @app.delete("/api/saved/{owner_id}", response_model=SavedResourcesResponse)
    async def clear_saved(owner_id: str, request: Request) -> SavedResourcesResponse:
        SavedResources(_container(request).kv_store(), owner_id).clear()
        return SavedResourcesResponse(ownerId=owner_id, resourceIds=[])

    # -- Search history ------------------------------------------------------

    @app.get("/api/history/{owner_id}", response_model=HistoryResponse)
    async def recent_searches(owner_id: str, request: Request) -> HistoryResponse:
        history = SearchHistory(_container(request).kv_store(), owner_id)
        return HistoryResponse(ownerId=owner_id, searches=[e.to_dict() for e in history.recent()])

    @app.post("/api/history/{owner_id}", response_model=HistoryResponse)
    async def record_search(owner_id: str, body: HistoryRequest, request: Request) -> HistoryResponse:
        history = SearchHistory(_container(request).kv_store(), owner_id)
        entries = history.record(body.term, body.filters)
        return HistoryResponse(ownerId=owner_id, searches=[e.to_dict() for e in entries])

    @app.delete("/api/history/{owner_id}", response_model=HistoryResponse)
    async def clear_history(owner_id: str, request: Request) -> HistoryResponse:
        SearchHistory(_container(request).kv_store(), owner_id).clear()
        return HistoryResponse(ownerId=owner_id, searches=[])

    # -- Location ------------------------------------------------------------

    @app.get("/api/location/{owner_id}", response_model=LocationResponse)
    async def cached_location(owner_id: str, request: Request) -> LocationResponse:
        location = LocationCache(_container(request).kv_store(), owner_id).lookup()
        return LocationResponse(ownerId=owner_id, location=location.to_dict() if location else None)

    @app.put("/api/location/{owner_id}", response_model=LocationResponse)
    async def store_location(owner_id: str, body: LocationRequest, request: Request) -> LocationResponse:
        location = LocationCache(_container(request).kv_store(), owner_id).store(body.state, body.city)
        return LocationResponse(ownerId=owner_id, location=location.to_dict())


# =============================================================================
# Entry point
# =============================================================================


def run_api_server(settings: Settings | None = None) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = settings or Settings.from_env()
    container = ApplicationContainer()
    container.config.from_dict(settings.to_container_config())

    logger.info(f"Starting HTTP API server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        create_api_server(container),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    import argparse

    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Veteran Resources HTTP API Server")
    parser.add_argument("--host", default=settings.api_host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.api_port, help="Port to bind to")
    parser.add_argument("--data-file", default=settings.data_file, help="JSON/YAML resource file")
    parser.add_argument("--state-dir", default=settings.state_dir, help="Client state directory")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    run_api_server(
        replace(
            settings,
            api_host=args.host,
            api_port=args.port,
            data_file=args.data_file,
            state_dir=args.state_dir,
        )
    )


if __name__ == "__main__":
    main()
