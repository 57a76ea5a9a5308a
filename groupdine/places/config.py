from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class PlacesConfig:
    api_key: str = os.getenv("GOOGLE_PLACES_API_KEY", "")
    base_url: str = "https://places.googleapis.com/v1"
    language_code: str = "ja"
    max_search_results: int = int(os.getenv("MAX_SEARCH_RESULTS", "20"))
    detail_fetch_limit: int = int(os.getenv("DETAIL_FETCH_LIMIT", "20"))
    review_summary_count: int = 3
    review_summary_length: int = 200
    photo_max_height_px: int = 600
    timeout: float = 15.0


DEFAULT_PLACES_CONFIG = PlacesConfig()
