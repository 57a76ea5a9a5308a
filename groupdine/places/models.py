from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PriceLevel(str, Enum):
    UNSPECIFIED = "PRICE_LEVEL_UNSPECIFIED"
    FREE = "PRICE_LEVEL_FREE"
    INEXPENSIVE = "PRICE_LEVEL_INEXPENSIVE"
    MODERATE = "PRICE_LEVEL_MODERATE"
    EXPENSIVE = "PRICE_LEVEL_EXPENSIVE"
    VERY_EXPENSIVE = "PRICE_LEVEL_VERY_EXPENSIVE"


class SearchStatus(str, Enum):
    OK = "OK"
    ZERO_RESULTS = "ZERO_RESULTS"
    OVER_QUERY_LIMIT = "OVER_QUERY_LIMIT"
    REQUEST_DENIED = "REQUEST_DENIED"
    INVALID_REQUEST = "INVALID_REQUEST"


class _ProviderModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LocalizedText(_ProviderModel):
    text: str = ""
    language_code: str | None = None


class PlacePhoto(_ProviderModel):
    name: str
    width_px: int | None = None
    height_px: int | None = None


class PlaceReview(_ProviderModel):
    rating: float | None = None
    text: LocalizedText | None = None
    original_text: LocalizedText | None = None
    relative_publish_time_description: str | None = None

    @property
    def body(self) -> str:
        for source in (self.text, self.original_text):
            if source and source.text.strip():
                return source.text.strip()
        return ""


class OpeningHours(_ProviderModel):
    weekday_descriptions: list[str] = Field(default_factory=list)


class Place(_ProviderModel):
    id: str = Field(..., min_length=1)
    display_name: LocalizedText | None = None
    formatted_address: str | None = None
    types: list[str] = Field(default_factory=list)
    rating: float | None = None
    user_rating_count: int | None = None
    price_level: PriceLevel | None = None

    @field_validator("price_level", mode="before")
    @classmethod
    def _unknown_price_level(cls, value: Any) -> Any:
        # Provider may add enum members; treat unknown values as absent
        if value is None or value in {p.value for p in PriceLevel}:
            return value
        return None

    @property
    def name(self) -> str:
        if self.display_name and self.display_name.text:
            return self.display_name.text
        return "名前不明"


class PlaceDetails(Place):
    photos: list[PlacePhoto] = Field(default_factory=list)
    reviews: list[PlaceReview] = Field(default_factory=list)
    website_uri: str | None = None
    google_maps_uri: str | None = None
    international_phone_number: str | None = None
    regular_opening_hours: OpeningHours | None = None


class SearchTextRequest(_ProviderModel):
    text_query: str = Field(..., min_length=1)
    language_code: str = "ja"
    max_result_count: int = Field(default=20, ge=1, le=20)
    page_token: str | None = None


class SearchTextResponse(_ProviderModel):
    places: list[Place] = Field(default_factory=list)
    next_page_token: str | None = None
    status: SearchStatus = SearchStatus.OK
