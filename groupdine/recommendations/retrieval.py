from __future__ import annotations

import asyncio
import logging

from ..errors import APILimitError, CacheError, DataFetchError, RecommendationError
from ..places.client import PlacesClient
from ..places.config import DEFAULT_PLACES_CONFIG, PlacesConfig
from ..places.models import Place, PlaceDetails, SearchTextRequest
from .cache import DetailStore
from .config import DEFAULT_FILTER_CONFIG, FilterConfig
from .models import Candidate, Criteria

logger = logging.getLogger(__name__)


def build_search_query(criteria: Criteria, filter_config: FilterConfig = DEFAULT_FILTER_CONFIG) -> str:
    parts = [criteria.location, criteria.cuisine, "団体", "グループ"]
    if criteria.private_room_requested:
        parts.append("個室")
    parts.extend(f"-{word}" for word in filter_config.exclude_venue_words)
    parts.extend(f"-{phrase}" for phrase in filter_config.exclude_keywords)
    return " ".join(parts)


def summarize_reviews(details: PlaceDetails | None, count: int, max_length: int) -> str | None:
    """Concatenate the first few review bodies, each cut to ``max_length``."""
    if details is None:
        return None
    bodies = [r.body[:max_length] for r in details.reviews if r.body][:count]
    return "\n".join(bodies) or None


def to_candidate(place: Place, details: PlaceDetails | None, config: PlacesConfig = DEFAULT_PLACES_CONFIG) -> Candidate:
    # Detail records are fresher than search hits; fall back field by field
    source = details or place
    return Candidate(
        id=place.id,
        name=source.name,
        address=source.formatted_address or place.formatted_address,
        rating=source.rating if source.rating is not None else place.rating,
        user_rating_count=(
            source.user_rating_count if source.user_rating_count is not None else place.user_rating_count
        ),
        types=tuple(source.types or place.types),
        price_level=source.price_level or place.price_level,
        reviews_summary=summarize_reviews(details, config.review_summary_count, config.review_summary_length),
        details=details,
    )


class CandidateRetriever:
    """Search the place provider and enrich the top hits with detail records."""

    def __init__(
        self,
        places: PlacesClient,
        cache: DetailStore | None = None,
        config: PlacesConfig = DEFAULT_PLACES_CONFIG,
        filter_config: FilterConfig = DEFAULT_FILTER_CONFIG,
    ) -> None:
        self.places = places
        self.cache = cache
        self.config = config
        self.filter_config = filter_config

    async def search(self, criteria: Criteria) -> list[Place]:
        query = build_search_query(criteria, self.filter_config)
        limit = self.config.max_search_results
        collected: list[Place] = []
        seen_ids: set[str] = set()
        page_token: str | None = None

        while len(collected) < limit:
            response = await self.places.search_text(SearchTextRequest(
                text_query=query,
                language_code=self.config.language_code,
                max_result_count=min(20, limit - len(collected)),
                page_token=page_token,
            ))
            for place in response.places:
                if place.id not in seen_ids and len(collected) < limit:
                    seen_ids.add(place.id)
                    collected.append(place)
            if not response.places or not response.next_page_token or response.next_page_token == page_token:
                break
            page_token = response.next_page_token

        logger.info("Search %r returned %d places", query, len(collected))
        return collected

    def _cached(self, place_id: str) -> PlaceDetails | None:
        if self.cache is None:
            return None
        try:
            return self.cache.get(place_id)
        except CacheError:
            logger.warning("Detail cache read failed for %s, fetching from provider", place_id, exc_info=True)
            return None

    def _store(self, place_id: str, details: PlaceDetails) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(place_id, details)
        except CacheError:
            logger.warning("Detail cache write failed for %s", place_id, exc_info=True)

    async def fetch_details(self, place_id: str) -> PlaceDetails | None:
        cached = self._cached(place_id)
        if cached is not None:
            return cached
        details = await self.places.get_details(place_id, language_code=self.config.language_code)
        if details is not None:
            self._store(place_id, details)
        return details

    async def retrieve(self, criteria: Criteria) -> list[Candidate]:
        """
        Return up to ``max_search_results`` candidates in provider order.

        Detail lookups run concurrently. A lookup that fails is dropped and
        logged; only when every lookup fails does the run abort, with the
        first ``APILimitError`` if any lookup was rate limited and with
        ``DataFetchError`` otherwise.
        """
        places = await self.search(criteria)
        if not places:
            return []

        top = places[: self.config.detail_fetch_limit]
        results = await asyncio.gather(
            *(self.fetch_details(place.id) for place in top),
            return_exceptions=True,
        )

        candidates: list[Candidate] = []
        failures: dict[str, str] = {}
        rate_limited: APILimitError | None = None
        for place, result in zip(top, results):
            if isinstance(result, RecommendationError):
                logger.warning("Detail fetch failed for %s: %s", place.id, result)
                failures[place.id] = result.code.value
                if isinstance(result, APILimitError) and rate_limited is None:
                    rate_limited = result
                continue
            if isinstance(result, BaseException):
                raise result
            if result is None:
                failures[place.id] = "NOT_FOUND"
                continue
            candidates.append(to_candidate(place, result, self.config))

        if not candidates:
            # A rate limit keeps its own code and retry hint
            if rate_limited is not None:
                raise rate_limited
            raise DataFetchError(
                f"No detail record could be fetched for {len(top)} places",
                context={"failures": failures},
            )
        if failures:
            logger.info("Dropped %d of %d places without details", len(failures), len(top))
        return candidates
