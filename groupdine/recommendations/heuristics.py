"""
Rule-based group-dining suitability check, applied before any AI call.

Candidates are dropped for a weak or thin rating, for an excluded place
type, for a venue word in their name, or for an exclusion phrase in their
review summary. Survivors keep their relative order and are capped at
``max_candidates``.
"""
from __future__ import annotations

from typing import Sequence

from .config import DEFAULT_FILTER_CONFIG, FilterConfig
from .models import Candidate


def passes_rating(candidate: Candidate, config: FilterConfig = DEFAULT_FILTER_CONFIG) -> bool:
    # Missing rating or count fails
    if candidate.rating is None or candidate.user_rating_count is None:
        return False
    return candidate.rating >= config.min_rating and candidate.user_rating_count >= config.min_rating_count


def exclusion_match(candidate: Candidate, config: FilterConfig = DEFAULT_FILTER_CONFIG) -> str | None:
    """Return the first place type, venue word or review phrase that rules the candidate out."""
    types = {t.lower() for t in candidate.types}
    for excluded in config.exclude_types:
        if excluded.lower() in types:
            return excluded

    name = candidate.name.lower()
    for word in config.exclude_venue_words:
        if word.lower() in name:
            return word

    reviews = (candidate.reviews_summary or "").lower()
    for phrase in config.exclude_keywords:
        if phrase.lower() in reviews:
            return phrase
    return None


def filter_candidates(
    candidates: Sequence[Candidate],
    config: FilterConfig = DEFAULT_FILTER_CONFIG,
) -> list[Candidate]:
    kept = [c for c in candidates if passes_rating(c, config) and exclusion_match(c, config) is None]
    return kept[: config.max_candidates]
