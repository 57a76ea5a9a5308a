from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

# Review phrases that signal a place cannot host a group. Matched against review text only,
# so each entry must be a phrase that does not occur inside ordinary words ("一人あたり").
_DEFAULT_EXCLUDE_KEYWORDS = (
    "カウンターのみ", "立ち飲み", "席が少ない", "店内が狭い", "小さい店",
    "一人で", "一人客", "おひとり様", "少人数向け", "2〜3人", "4人まで", "6人まで",
)

# Venue words matched against the place name only ("バー" is also in "メンバー")
_DEFAULT_EXCLUDE_VENUE_WORDS = (
    "バー", "スナック", "パブ", "クラブ", "ラーメン", "うどん", "そば", "テイクアウト専門",
)


def _keywords_from_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(k.strip() for k in raw.split(",") if k.strip())


@dataclass(frozen=True)
class FilterConfig:
    min_rating: float = float(os.getenv("MIN_RATING", "3.7"))
    min_rating_count: int = int(os.getenv("MIN_RATING_COUNT", "30"))
    max_candidates: int = int(os.getenv("MAX_CANDIDATES", "5"))
    exclude_keywords: tuple[str, ...] = _keywords_from_env("EXCLUDE_KEYWORDS", _DEFAULT_EXCLUDE_KEYWORDS)
    exclude_venue_words: tuple[str, ...] = _keywords_from_env("EXCLUDE_VENUE_WORDS", _DEFAULT_EXCLUDE_VENUE_WORDS)
    exclude_types: tuple[str, ...] = ("bar", "night_club", "meal_takeaway")
    shortlist_size: int = 5
    top_n: int = 3


@dataclass(frozen=True)
class CacheConfig:
    ttl_hours: float = float(os.getenv("CACHE_TTL_HOURS", "24"))
    enabled: bool = True

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_hours * 3600


DEFAULT_FILTER_CONFIG = FilterConfig()
DEFAULT_CACHE_CONFIG = CacheConfig()
