from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..errors import ErrorCode
from ..places.models import PlaceDetails, PriceLevel

NO_INFO = "情報なし"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PurposeOfUse(str, Enum):
    farewell = "送別会"
    welcome = "歓迎会"
    year_end = "忘年会"
    new_year = "新年会"
    social = "懇親会"
    business = "接待"
    other = "その他"


class Criteria(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Reservation date, YYYY-MM-DD")
    time: str = Field(..., min_length=1)
    budget: str = Field(..., min_length=1, description='Per-person budget, e.g. "5,000円～8,000円"')
    cuisine: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    purpose_of_use: PurposeOfUse
    private_room_requested: bool = False
    custom_prompt_persona: str | None = None
    custom_prompt_priorities: str | None = None


class Candidate(BaseModel):
    """A retrieved place. ``id`` is the join key for every later stage."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    address: str | None = None
    rating: float | None = None
    user_rating_count: int | None = None
    types: tuple[str, ...] = ()
    price_level: PriceLevel | None = None
    reviews_summary: str | None = None
    details: PlaceDetails | None = Field(default=None, exclude=True, repr=False)


# ── AI output ────────────────────────────────────────────────────────────


class Suggestion(_CamelModel):
    restaurant_name: str = Field(..., min_length=1)
    recommendation_rationale: str = Field(..., min_length=1)


class KeyAspects(_CamelModel):
    food: str = NO_INFO
    service: str = NO_INFO
    ambiance: str = NO_INFO


class KanjiChecklist(_CamelModel):
    private_room_quality: str = NO_INFO
    noise_level: str = NO_INFO
    group_service: str = NO_INFO


class ReviewAnalysis(_CamelModel):
    overall_sentiment: str = Field(..., min_length=1)
    key_aspects: KeyAspects
    group_dining_experience: str = NO_INFO
    kanji_checklist: KanjiChecklist = Field(default_factory=KanjiChecklist)


class AnalyzedSelection(BaseModel):
    place_id: str
    suggestion: Suggestion
    analysis: ReviewAnalysis


# ── API output ───────────────────────────────────────────────────────────


class RecommendedSuggestion(Suggestion):
    place_id: str


class Recommendation(_CamelModel):
    suggestion: RecommendedSuggestion
    analysis: ReviewAnalysis
    criteria: Criteria
    place_id: str
    photo_url: str | None = None
    website_uri: str | None = None
    google_maps_uri: str | None = None
    address: str | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    types: list[str] = Field(default_factory=list)
    price_level: PriceLevel | None = None


class SuggestionResponse(_CamelModel):
    data: list[Recommendation] | None = None
    error: str | None = None
    code: ErrorCode | None = None
    retryable: bool | None = None
    retry_after: float | None = None


class ChoiceRequest(_CamelModel):
    place_id: str = Field(..., min_length=1)


class ChoiceResponse(_CamelModel):
    status: str
    count: int | None = None


class PopularRestaurant(_CamelModel):
    place_id: str
    name: str
    address: str | None = None
    photo_url: str | None = None
    types: list[str] = Field(default_factory=list)
    price_level: PriceLevel | None = None
    website_uri: str | None = None
    google_maps_uri: str | None = None
    choice_count: int = 0
