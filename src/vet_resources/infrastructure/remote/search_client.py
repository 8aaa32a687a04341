"""
Remote Search Client - candidate lookup against an external directory API.

Calls ``GET {base_url}/api/health-resources`` with the wizard selection and
returns normalized ``ResourceRecord``s. Any failure is raised as a
``VetResourcesError`` subclass; ``RecommendationService`` decides to fall
back to local data.

Error mapping:
    transport error / timeout  → NetworkError (retried)
    5xx                        → ServiceUnavailableError (retried)
    429 / open circuit         → RateLimitError
    other 4xx                  → APIError
    unusable body              → ParseError
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from vet_resources.application.search.normalizer import resource_from_document
from vet_resources.domain.entities import ResourceRecord, SelectionState
from vet_resources.shared.async_utils import CircuitBreaker
from vet_resources.shared.exceptions import (
    APIError,
    ErrorContext,
    NetworkError,
    ParseError,
    RateLimitError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/health-resources"

MAX_RETRIES = 3
RETRY_DELAY = 0.5  # seconds


def _is_retryable_remote(error: BaseException) -> bool:
    return isinstance(error, (NetworkError, ServiceUnavailableError))


class RemoteSearchClient:
    """
    Async client for the remote resource search endpoint.

    Args:
        base_url: Service root, e.g. "https://resources.example.org"
        timeout: Per-request timeout in seconds
        max_retries: Attempts for transient failures (>= 1)
        retry_delay: Base delay for exponential backoff
        circuit_breaker: Shared breaker; a default one is created if None
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    _service_name = "remote-search"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
        circuit_breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._circuit_breaker = circuit_breaker or CircuitBreaker(failure_threshold=5, recovery_timeout=30.0)

    @property
    def base_url(self) -> str:
        return self._base_url

    @staticmethod
    def selection_params(selection: SelectionState) -> dict[str, str]:
        params: dict[str, str] = {"limit": "50"}
        if selection.category_id:
            params["symptomCategory"] = selection.category_id.value
        if selection.symptom_ids:
            params["symptoms"] = ",".join(selection.symptom_ids)
        if selection.severity:
            params["severityLevel"] = selection.severity.value
        if selection.selection_hash:
            params["selectionHash"] = selection.selection_hash
        return params

    async def fetch_candidates(self, selection: SelectionState) -> list[ResourceRecord]:
        """
        Fetch candidate records for a wizard selection.

        Raises:
            NetworkError, ServiceUnavailableError: after retries are exhausted
            RateLimitError: 429 or circuit breaker open
            ParseError: body is not ``{"data": [...]}`` / ``{"resources": [...]}``
        """
        params = self.selection_params(selection)
        payload = await self._get_json(SEARCH_PATH, params)
        records = self.parse_candidates(payload)
        logger.info(f"{self._service_name}: {len(records)} candidates for {params.get('symptomCategory')}")
        return records

    @staticmethod
    def parse_candidates(payload: Any) -> list[ResourceRecord]:
        items: Any = None
        if isinstance(payload, dict):
            items = payload.get("data", payload.get("resources"))
        if not isinstance(items, list):
            raise ParseError("expected a 'data' or 'resources' array", source=SEARCH_PATH)
        return [resource_from_document(item) for item in items if isinstance(item, dict)]

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._retry_delay, max=self._retry_delay * 4),
            retry=retry_if_exception(_is_retryable_remote),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._request_once(path, params)
        raise NetworkError("No request attempts were made")  # pragma: no cover

    async def _request_once(self, path: str, params: dict[str, str]) -> Any:
        context = ErrorContext(operation=f"GET {path}", input_value=params)
        async with self._circuit_breaker:
            try:
                response = await self._client.get(path, params=params)
            except httpx.TimeoutException as e:
                raise NetworkError(f"{self._service_name} timed out: {e}", context=context) from e
            except httpx.RequestError as e:
                raise NetworkError(f"{self._service_name} request failed: {e}", context=context) from e

            if response.status_code == 429:
                retry_after = _retry_after(response)
                raise RateLimitError(retry_after=retry_after, context=context)
            if response.status_code >= 500:
                raise ServiceUnavailableError(
                    f"{self._service_name} returned HTTP {response.status_code}",
                    service=self._service_name,
                    context=context,
                )
            if response.status_code >= 400:
                raise APIError(
                    f"{self._service_name} returned HTTP {response.status_code}",
                    context=context,
                    retryable=False,
                )
            try:
                return response.json()
            except ValueError as e:
                raise ParseError(f"invalid JSON: {e}", source=path, context=context) from e

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RemoteSearchClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


def _retry_after(response: httpx.Response) -> float:
    try:
        return float(response.headers.get("Retry-After", 1.0))
    except (TypeError, ValueError):
        return 1.0
