from __future__ import annotations

import logging

from ..errors import CacheError
from ..recommendations.assembler import PhotoUrlBuilder
from ..recommendations.cache import DetailStore
from ..recommendations.models import PopularRestaurant
from .store import ChoiceStore

logger = logging.getLogger(__name__)

POPULAR_LIMIT = 16


def log_choice(place_id: str, store: ChoiceStore) -> int:
    count = store.increment(place_id)
    logger.info("Logged user choice for %s (count=%d)", place_id, count)
    return count


def get_popular_restaurants(
    store: ChoiceStore,
    details: DetailStore,
    photo_url: PhotoUrlBuilder,
    limit: int = POPULAR_LIMIT,
) -> list[PopularRestaurant]:
    """Most chosen places, best first. Places with no cached details are skipped."""
    results: list[PopularRestaurant] = []
    for place_id, count in store.top(limit):
        try:
            record = details.get(place_id)
        except CacheError:
            logger.warning("Detail cache read failed for popular place %s", place_id, exc_info=True)
            continue
        if record is None:
            logger.debug("No cached details for popular place %s", place_id)
            continue
        results.append(PopularRestaurant(
            place_id=place_id,
            name=record.name,
            address=record.formatted_address or "住所不明",
            photo_url=photo_url(record.photos[0].name if record.photos else None),
            types=list(record.types),
            price_level=record.price_level,
            website_uri=record.website_uri,
            google_maps_uri=record.google_maps_uri,
            choice_count=count,
        ))
    return results
