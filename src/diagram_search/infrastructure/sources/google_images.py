"""
Google Custom Search (image mode) Client

Provides diagram image search via the Custom Search JSON API.

API Documentation: https://developers.google.com/custom-search/v1/reference/rest/v1/cse/list

Limitations:
- At most 10 results per request ('num' param)
- 'start' is 1-based and start + num must stay <= 100
- Daily quota per key; exhaustion is reported as 403/429 or as an
  ``{"error": {...}}`` body, occasionally with HTTP 200

Every failure is raised as one of QuotaExceededError,
TransientNetworkError or MalformedResponseError so the caller can
decide between rotating credentials, retrying and falling back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from typing_extensions import Self

from diagram_search.core.async_utils import RateLimiter
from diagram_search.core.exceptions import (
    ErrorContext,
    MalformedResponseError,
    TransientNetworkError,
    classify_provider_error,
)

logger = logging.getLogger(__name__)

GOOGLE_CSE_URL = "https://www.googleapis.com/customsearch/v1"


@dataclass(frozen=True)
class ProviderHit:
    """Canonical provider result, whatever the raw payload looked like."""

    title: str
    image_location: str
    context_location: str | None = None
    display_origin: str | None = None
    snippet: str = ""

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> ProviderHit | None:
        """
        Map one raw item to a hit.

        Accepts the Custom Search shape (``link``, ``image.contextLink``,
        ``displayLink``) and the flat shape (``imageLocation``,
        ``contextLocation``, ``displayOrigin``). Items without an image
        URL return None.
        """
        if not isinstance(raw, dict):
            return None

        image = raw.get("image") if isinstance(raw.get("image"), dict) else {}
        location = raw.get("link") or raw.get("imageLocation")
        if not isinstance(location, str) or not location.strip():
            return None

        return cls(
            title=str(raw.get("title") or "Untitled diagram"),
            image_location=location.strip(),
            context_location=image.get("contextLink") or raw.get("contextLocation"),
            display_origin=raw.get("displayLink") or raw.get("displayOrigin"),
            snippet=str(raw.get("snippet") or ""),
        )


class ImageSearchProvider(Protocol):
    """What the search client needs from an image search backend."""

    async def search_images(
        self,
        query: str,
        credential: str,
        page: int,
        page_size: int,
    ) -> list[ProviderHit]: ...


class GoogleImageSearchClient:
    """
    Custom Search JSON API client in image mode.

    Owns an httpx.AsyncClient; close it with ``await client.close()`` or
    use the client as an async context manager.

    Usage:
        async with GoogleImageSearchClient(search_engine_id="cx") as client:
            hits = await client.search_images("network diagram", api_key, page=1, page_size=10)
    """

    _service_name = "Google CSE"
    MAX_PAGE_SIZE = 10
    MAX_RESULT_WINDOW = 100

    def __init__(
        self,
        search_engine_id: str,
        timeout: float = 15.0,
        rate_limit: float = 5.0,
        query_builder: Callable[[str], str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            search_engine_id: Programmable Search Engine id ('cx')
            timeout: Request timeout in seconds
            rate_limit: Requests per second across all keys
            query_builder: Maps the user query to the provider query (default: unchanged)
            http_client: Pre-built client (tests pass one with a MockTransport)
        """
        self._search_engine_id = search_engine_id
        self._query_builder = query_builder
        self._limiter = RateLimiter(rate=rate_limit, per=1.0)
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )

    def build_params(self, query: str, credential: str, page: int, page_size: int) -> dict[str, Any]:
        num = max(1, min(page_size, self.MAX_PAGE_SIZE))
        return {
            "key": credential,
            "cx": self._search_engine_id,
            "q": self._query_builder(query) if self._query_builder else query,
            "searchType": "image",
            "num": num,
            "start": (page - 1) * num + 1,
            "imgSize": "xlarge",
            "safe": "active",
        }

    async def search_images(
        self,
        query: str,
        credential: str,
        page: int,
        page_size: int,
    ) -> list[ProviderHit]:
        """
        One page of image hits.

        Returns:
            Hits in provider order (empty when the page lies beyond the
            provider's result window)

        Raises:
            QuotaExceededError: key rejected, over quota or rate limited
            TransientNetworkError: timeout, connection failure, 5xx
            MalformedResponseError: unusable payload
        """
        params = self.build_params(query, credential, page, page_size)
        if params["start"] + params["num"] - 1 > self.MAX_RESULT_WINDOW:
            logger.info(f"{self._service_name}: page {page} beyond result window")
            return []

        ctx = ErrorContext(operation="search_images", input_value=query)
        async with self._limiter:
            try:
                response = await self._client.get(GOOGLE_CSE_URL, params=params)
            except httpx.TimeoutException as e:
                raise TransientNetworkError(f"{self._service_name} timed out: {e}", context=ctx) from e
            except httpx.TransportError as e:
                raise TransientNetworkError(f"{self._service_name} request failed: {e}", context=ctx) from e

        return self._parse_response(response, ctx)

    def _parse_response(self, response: httpx.Response, ctx: ErrorContext) -> list[ProviderHit]:
        try:
            data = response.json()
        except ValueError as e:
            if response.status_code >= 400:
                raise classify_provider_error(response.status_code, response.text[:200]) from e
            raise MalformedResponseError(f"{self._service_name} returned non-JSON body", context=ctx) from e

        if not isinstance(data, dict):
            raise MalformedResponseError(f"{self._service_name} returned {type(data).__name__}", context=ctx)

        error = data.get("error")
        if response.status_code >= 400 or error:
            status, message = self._error_details(error, response.status_code)
            logger.warning(f"{self._service_name} error {status}: {message}")
            raise classify_provider_error(status, message)

        items = data.get("items", [])
        if not isinstance(items, list):
            raise MalformedResponseError(f"{self._service_name} 'items' is not a list", context=ctx)

        hits = [hit for hit in (ProviderHit.from_raw(item) for item in items) if hit is not None]
        if items and not hits:
            raise MalformedResponseError(f"{self._service_name} items carry no image links", context=ctx)

        logger.debug(f"{self._service_name}: {len(hits)} hit(s)")
        return hits

    @staticmethod
    def _error_details(error: Any, status_code: int) -> tuple[int, str]:
        if isinstance(error, dict):
            code = error.get("code")
            status = code if isinstance(code, int) and code >= 400 else status_code
            return status, str(error.get("message") or "")
        if isinstance(error, str):
            return status_code, error
        return status_code, ""

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
