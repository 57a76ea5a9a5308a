from __future__ import annotations

from typing import Callable, Sequence

from ..errors import DataFetchError
from .models import AnalyzedSelection, Candidate, Criteria, Recommendation, RecommendedSuggestion

PhotoUrlBuilder = Callable[[str | None], str | None]


def _no_photo(_: str | None) -> str | None:
    return None


def assemble(
    selections: Sequence[AnalyzedSelection],
    candidates: Sequence[Candidate],
    criteria: Criteria,
    photo_url: PhotoUrlBuilder = _no_photo,
) -> list[Recommendation]:
    """
    Join AI selections back to their retrieved records, keeping AI order.

    Presentation fields (photo, links) are attached here and nowhere else.
    """
    by_id = {c.id: c for c in candidates}
    results: list[Recommendation] = []

    for selection in selections:
        candidate = by_id.get(selection.place_id)
        if candidate is None:
            raise DataFetchError(
                f"Selection {selection.place_id} has no retrieved record",
                context={"place_id": selection.place_id},
            )
        details = candidate.details
        first_photo = details.photos[0].name if details and details.photos else None

        results.append(Recommendation(
            suggestion=RecommendedSuggestion(
                restaurant_name=candidate.name,
                recommendation_rationale=selection.suggestion.recommendation_rationale,
                place_id=candidate.id,
            ),
            analysis=selection.analysis,
            criteria=criteria,
            place_id=candidate.id,
            photo_url=photo_url(first_photo),
            website_uri=details.website_uri if details else None,
            google_maps_uri=details.google_maps_uri if details else None,
            address=candidate.address,
            rating=candidate.rating,
            user_ratings_total=candidate.user_rating_count,
            types=list(candidate.types),
            price_level=candidate.price_level,
        ))

    return results
