"""
Recommendation pipeline.

Responsibilities:
- Retrieve candidates for the user's criteria from the place provider.
- Drop candidates unsuited to group dining with rating and keyword rules.
- Let the LLM shortlist group-friendly venues, then rank and analyse them.
- Assemble presentation-ready recommendations in the LLM's ranking order.
- Convert every failure into a user-safe message at the entry point.
"""
from __future__ import annotations

import logging
import time

from ..errors import ErrorCode, NoQualifiedRestaurantsError, RecommendationError, USER_MESSAGES
from .assembler import assemble
from .group_filter import select_suitable
from .heuristics import filter_candidates
from .models import Criteria, Recommendation, SuggestionResponse
from .select_analyze import select_and_analyze
from .services import Services, get_services

logger = logging.getLogger(__name__)


async def run_pipeline(criteria: Criteria, services: Services) -> list[Recommendation]:
    """Run every stage in order. Raises ``RecommendationError`` on pipeline-level failure."""
    config = services.filter_config

    candidates = await services.retriever.retrieve(criteria)
    if not candidates:
        logger.info("No search results for %s / %s", criteria.location, criteria.cuisine)
        return []

    filtered = filter_candidates(candidates, config)
    logger.info("Heuristic filter kept %d of %d candidates", len(filtered), len(candidates))
    if not filtered:
        raise NoQualifiedRestaurantsError(
            "All candidates failed the heuristic filter",
            context={"candidates": len(candidates), "min_rating": config.min_rating},
        )

    shortlist_ids = await select_suitable(filtered, criteria, services.llm, config)
    if not shortlist_ids:
        return []

    by_id = {c.id: c for c in filtered}
    shortlist = [by_id[place_id] for place_id in shortlist_ids]

    selections = await select_and_analyze(shortlist, criteria, services.llm, config)
    return assemble(selections, shortlist, criteria, services.places.photo_url)


async def get_restaurant_suggestion(
    criteria: Criteria,
    services: Services | None = None,
) -> SuggestionResponse:
    """Entry point for callers. Never raises; failures come back in ``error``."""
    services = services or get_services()
    start_time = time.time()

    try:
        recommendations = await run_pipeline(criteria, services)
    except RecommendationError as exc:
        logger.error("Recommendation failed [%s]: %s %s", exc.code.value, exc, exc.context, exc_info=True)
        return SuggestionResponse(
            error=exc.user_message,
            code=exc.code,
            retryable=exc.retryable,
            retry_after=exc.retry_after,
        )
    except Exception:
        logger.exception("Unexpected error in recommendation pipeline")
        return SuggestionResponse(
            error=USER_MESSAGES[ErrorCode.UNKNOWN],
            code=ErrorCode.UNKNOWN,
            retryable=False,
        )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info("Returning %d recommendations in %.1f ms", len(recommendations), elapsed_ms)
    return SuggestionResponse(data=recommendations)
