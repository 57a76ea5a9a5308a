from __future__ import annotations

from typing import Any

import pytest

from groupdine.places.models import PlaceDetails, SearchTextResponse
from groupdine.recommendations.models import Candidate, Criteria
from groupdine.recommendations.retrieval import to_candidate

GOOD_REVIEW = "宴会コースが充実していて、20名で個室を利用できました。ドリンクの提供も早かったです。"


def _details(
    place_id: str,
    name: str,
    rating: float | None = 4.3,
    count: int | None = 150,
    reviews: tuple[str, ...] = (GOOD_REVIEW,),
    types: tuple[str, ...] = ("restaurant", "food"),
    price_level: str | None = "PRICE_LEVEL_MODERATE",
    photo: str | None = "photo-1",
) -> PlaceDetails:
    payload: dict[str, Any] = {
        "id": place_id,
        "displayName": {"text": name, "languageCode": "ja"},
        "formattedAddress": f"東京都渋谷区 {place_id}",
        "rating": rating,
        "userRatingCount": count,
        "types": list(types),
        "priceLevel": price_level,
        "reviews": [{"rating": 5, "text": {"text": r, "languageCode": "ja"}} for r in reviews],
        "photos": [{"name": f"places/{place_id}/photos/{photo}"}] if photo else [],
        "websiteUri": f"https://example.com/{place_id}",
        "googleMapsUri": f"https://maps.google.com/?cid={place_id}",
    }
    return PlaceDetails.model_validate(payload)


class FakePlaces:
    """In-memory stand-in for PlacesClient."""

    def __init__(
        self,
        details: dict[str, PlaceDetails],
        pages: list[SearchTextResponse] | None = None,
        detail_errors: dict[str, Exception] | None = None,
        search_error: Exception | None = None,
    ) -> None:
        self.details = details
        if pages is None:
            pages = [SearchTextResponse.model_validate(
                {"places": [d.model_dump(by_alias=True, mode="json") for d in details.values()]}
            )]
        self.pages = pages
        self.detail_errors = detail_errors or {}
        self.search_error = search_error
        self.search_requests: list = []
        self.detail_requests: list[str] = []

    async def search_text(self, request):
        self.search_requests.append(request)
        if self.search_error:
            raise self.search_error
        # Page 0 answers a fresh query; later pages answer the previous page's token
        if request.page_token is None:
            index = 0
        else:
            tokens = [page.next_page_token for page in self.pages]
            index = tokens.index(request.page_token) + 1 if request.page_token in tokens else len(self.pages)
        return self.pages[index] if index < len(self.pages) else SearchTextResponse()

    async def get_details(self, place_id, language_code=None, fields=()):
        self.detail_requests.append(place_id)
        if place_id in self.detail_errors:
            raise self.detail_errors[place_id]
        return self.details.get(place_id)

    def photo_url(self, photo_name):
        return f"https://photos.test/{photo_name}" if photo_name else None


class StubInference:
    """Deterministic InferenceClient keyed by prompt name."""

    def __init__(self, replies: dict[str, Any]) -> None:
        self.replies = replies
        self.calls: list = []

    async def infer(self, spec):
        self.calls.append(spec)
        reply = self.replies.get(spec.name)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = reply(spec)
        if reply is None:
            return None
        return spec.output_model.model_validate(reply)


@pytest.fixture
def criteria() -> Criteria:
    return Criteria(
        date="2026-11-20",
        time="19:00",
        budget="5,000円～8,000円",
        cuisine="焼肉",
        location="渋谷",
        purpose_of_use="送別会",
        private_room_requested=True,
    )


@pytest.fixture
def make_details():
    return _details


@pytest.fixture
def make_candidate():
    def _make(place_id: str, name: str | None = None, **kwargs: Any) -> Candidate:
        details = _details(place_id, name or f"店{place_id}", **kwargs)
        return to_candidate(details, details)
    return _make


@pytest.fixture
def fake_places():
    return FakePlaces


@pytest.fixture
def stub_llm():
    return StubInference


def analysis_payload(sentiment: str = "高評価") -> dict[str, Any]:
    return {
        "overallSentiment": sentiment,
        "keyAspects": {"food": "肉質が良い", "service": "丁寧", "ambiance": "落ち着いている"},
        "groupDiningExperience": "大人数の宴会に向いている",
    }


@pytest.fixture
def make_selection():
    def _make(name: str, place_id: str | None = None, rationale: str = "個室があり宴会に最適です。") -> dict[str, Any]:
        entry: dict[str, Any] = {
            "suggestion": {"restaurantName": name, "recommendationRationale": rationale},
            "analysis": analysis_payload(),
        }
        if place_id is not None:
            entry["placeId"] = place_id
        return entry
    return _make
