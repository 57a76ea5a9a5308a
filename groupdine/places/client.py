"""
Async client for the Google Places API (New).

Text search and place details are plain JSON-over-HTTPS calls made with
httpx. Every failure leaves this module as one of the typed errors in
``groupdine.errors``; provider-specific status codes never leak out.
"""
from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
import pydantic

from ..errors import (
    APILimitError,
    APIUnavailableError,
    InvalidAPIResponseError,
    InvalidLocationError,
    SearchFailedError,
)
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig
from .models import PlaceDetails, SearchStatus, SearchTextRequest, SearchTextResponse

logger = logging.getLogger(__name__)

SEARCH_FIELDS: tuple[str, ...] = (
    "places.id",
    "places.displayName",
    "places.formattedAddress",
    "places.types",
    "places.rating",
    "places.userRatingCount",
    "places.priceLevel",
    "nextPageToken",
)

DETAIL_FIELDS: tuple[str, ...] = (
    "id",
    "displayName",
    "formattedAddress",
    "rating",
    "userRatingCount",
    "photos",
    "reviews",
    "websiteUri",
    "googleMapsUri",
    "internationalPhoneNumber",
    "regularOpeningHours.weekdayDescriptions",
    "types",
    "priceLevel",
)


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    try:
        return float(raw) if raw is not None else None
    except ValueError:
        return None


def _raise_for_http_status(response: httpx.Response, operation: str) -> None:
    status = response.status_code
    if status < 400:
        return
    context = {"operation": operation, "http_status": status}
    if status == 429:
        raise APILimitError(
            f"Places {operation} rate limited", retry_after=_retry_after(response), context=context,
        )
    if status in (401, 403):
        raise APIUnavailableError(f"Places {operation} request denied", context=context)
    if status == 400:
        raise InvalidLocationError(f"Places {operation} rejected the request", context=context)
    raise SearchFailedError(f"Places {operation} failed with status {status}", context=context)


def _raise_for_body_status(status: SearchStatus, body: dict[str, Any], operation: str) -> None:
    context = {"operation": operation, "status": status.value, "detail": body.get("error_message")}
    if status == SearchStatus.OVER_QUERY_LIMIT:
        raise APILimitError(f"Places {operation} over query limit", context=context)
    if status == SearchStatus.REQUEST_DENIED:
        raise APIUnavailableError(f"Places {operation} request denied", context=context)
    if status == SearchStatus.INVALID_REQUEST:
        raise InvalidLocationError(f"Places {operation} invalid request", context=context)


def _json_body(response: httpx.Response, operation: str) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise InvalidAPIResponseError(
            f"Places {operation} returned non-JSON body", context={"operation": operation},
        ) from exc
    if not isinstance(body, dict):
        raise InvalidAPIResponseError(
            f"Places {operation} returned {type(body).__name__}, expected object",
            context={"operation": operation},
        )
    return body


class PlacesClient:
    def __init__(
        self,
        config: PlacesConfig = DEFAULT_PLACES_CONFIG,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.config.api_key:
            raise APIUnavailableError("Google Places API key is not configured")
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=self._transport,
            headers={"X-Goog-Api-Key": self.config.api_key},
        )

    async def _send(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise SearchFailedError(
                f"Places {operation} timed out", context={"operation": operation},
            ) from exc
        except httpx.TransportError as exc:
            raise SearchFailedError(
                f"Places {operation} transport failure: {exc}", context={"operation": operation},
            ) from exc

    async def search_text(self, request: SearchTextRequest) -> SearchTextResponse:
        """One page of text search. ``ZERO_RESULTS`` comes back as an empty response."""
        response = await self._send(
            "searchText",
            "POST",
            "/places:searchText",
            json=request.model_dump(by_alias=True, exclude_none=True),
            headers={"X-Goog-FieldMask": ",".join(SEARCH_FIELDS)},
        )
        _raise_for_http_status(response, "searchText")
        body = _json_body(response, "searchText")

        try:
            parsed = SearchTextResponse.model_validate(body)
        except pydantic.ValidationError as exc:
            raise InvalidAPIResponseError(
                "Places searchText payload did not match schema", context={"errors": exc.errors()},
            ) from exc

        _raise_for_body_status(parsed.status, body, "searchText")
        if parsed.status == SearchStatus.ZERO_RESULTS:
            return SearchTextResponse(status=SearchStatus.ZERO_RESULTS)
        return parsed

    async def get_details(
        self,
        place_id: str,
        language_code: str | None = None,
        fields: Sequence[str] = DETAIL_FIELDS,
    ) -> PlaceDetails | None:
        """Fetch one place's detail record, or None if the provider no longer knows it."""
        response = await self._send(
            "getDetails",
            "GET",
            f"/places/{place_id}",
            params={"languageCode": language_code or self.config.language_code},
            headers={"X-Goog-FieldMask": ",".join(fields)},
        )
        if response.status_code == 404:
            logger.warning("Place %s not found (404)", place_id)
            return None
        _raise_for_http_status(response, "getDetails")
        body = _json_body(response, "getDetails")

        if "status" in body:
            try:
                status = SearchStatus(body["status"])
            except ValueError as exc:
                raise InvalidAPIResponseError(
                    f"Unknown details status {body['status']!r}", context={"place_id": place_id},
                ) from exc
            _raise_for_body_status(status, body, "getDetails")
            if status == SearchStatus.ZERO_RESULTS:
                return None

        try:
            return PlaceDetails.model_validate(body)
        except pydantic.ValidationError as exc:
            raise InvalidAPIResponseError(
                "Places getDetails payload did not match schema",
                context={"place_id": place_id, "errors": exc.errors()},
            ) from exc

    def photo_url(self, photo_name: str | None) -> str | None:
        if not photo_name or not self.config.api_key:
            return None
        return (
            f"{self.config.base_url}/{photo_name}/media"
            f"?maxHeightPx={self.config.photo_max_height_px}&key={self.config.api_key}"
        )
