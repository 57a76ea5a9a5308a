from __future__ import annotations

import asyncio

import pytest

from groupdine.errors import APILimitError, CacheError, DataFetchError, SearchFailedError
from groupdine.places.config import PlacesConfig
from groupdine.places.models import SearchTextResponse
from groupdine.recommendations.cache import DetailCache
from groupdine.recommendations.retrieval import CandidateRetriever, build_search_query, summarize_reviews


class BrokenCache:
    def get(self, place_id):
        raise CacheError("cache down")

    def set(self, place_id, details):
        raise CacheError("cache down")


def _page(details, token=None):
    return SearchTextResponse.model_validate({
        "places": [d.model_dump(by_alias=True, mode="json") for d in details],
        "nextPageToken": token,
    })


def test_query_includes_group_terms_and_negative_keywords(criteria):
    query = build_search_query(criteria)
    assert query.startswith("渋谷 焼肉 団体 グループ 個室")
    assert "-カウンターのみ" in query
    assert "-ラーメン" in query


def test_query_without_private_room(criteria):
    query = build_search_query(criteria.model_copy(update={"private_room_requested": False}))
    assert "個室" not in query


def test_summarize_reviews_bounds_length_and_count(make_details):
    details = make_details("a", "店", reviews=("あ" * 500, "い", "う", "え"))
    summary = summarize_reviews(details, count=3, max_length=200)
    assert summary.split("\n") == ["あ" * 200, "い", "う"]


def test_summarize_reviews_without_reviews(make_details):
    assert summarize_reviews(make_details("a", "店", reviews=()), 3, 200) is None
    assert summarize_reviews(None, 3, 200) is None


def test_retrieve_builds_candidates_with_details(criteria, make_details, fake_places):
    details = {pid: make_details(pid, f"焼肉{pid}") for pid in ("a", "b", "c")}
    retriever = CandidateRetriever(fake_places(details))

    candidates = asyncio.run(retriever.retrieve(criteria))

    assert [c.id for c in candidates] == ["a", "b", "c"]
    assert candidates[0].details is details["a"]
    assert candidates[0].reviews_summary.startswith("宴会コース")
    assert candidates[0].rating == 4.3


def test_retrieve_zero_results_is_empty(criteria, fake_places):
    places = fake_places({}, pages=[SearchTextResponse(status="ZERO_RESULTS")])
    assert asyncio.run(CandidateRetriever(places).retrieve(criteria)) == []
    assert places.detail_requests == []


def test_retrieve_follows_pages_up_to_limit(criteria, make_details, fake_places):
    all_details = {str(i): make_details(str(i), f"焼肉{i}") for i in range(6)}
    ordered = list(all_details.values())
    places = fake_places(all_details, pages=[_page(ordered[:3], token="t1"), _page(ordered[3:], token="t2")])
    retriever = CandidateRetriever(places, config=PlacesConfig(max_search_results=5))

    candidates = asyncio.run(retriever.retrieve(criteria))

    assert [c.id for c in candidates] == ["0", "1", "2", "3", "4"]
    assert places.search_requests[1].page_token == "t1"
    assert places.search_requests[1].max_result_count == 2


def test_single_detail_failure_is_dropped(criteria, make_details, fake_places):
    details = {pid: make_details(pid, f"焼肉{pid}") for pid in ("a", "b", "c")}
    places = fake_places(details, detail_errors={"b": SearchFailedError("boom")})

    candidates = asyncio.run(CandidateRetriever(places).retrieve(criteria))

    assert [c.id for c in candidates] == ["a", "c"]


def test_all_detail_failures_abort(criteria, make_details, fake_places):
    details = {pid: make_details(pid, f"焼肉{pid}") for pid in ("a", "b")}
    errors = {pid: SearchFailedError("boom") for pid in details}
    places = fake_places(details, detail_errors=errors)

    with pytest.raises(DataFetchError):
        asyncio.run(CandidateRetriever(places).retrieve(criteria))


def test_rate_limited_detail_failures_keep_retry_hint(criteria, make_details, fake_places):
    details = {pid: make_details(pid, f"焼肉{pid}") for pid in ("p0", "p1", "p2")}
    errors = {pid: APILimitError("429", retry_after=30) for pid in details}
    errors["p1"] = SearchFailedError("boom")
    places = fake_places(details, detail_errors=errors)

    with pytest.raises(APILimitError) as info:
        asyncio.run(CandidateRetriever(places).retrieve(criteria))
    assert info.value.retry_after == 30


def test_search_failure_propagates(criteria, fake_places):
    places = fake_places({}, search_error=SearchFailedError("down"))
    with pytest.raises(SearchFailedError):
        asyncio.run(CandidateRetriever(places).retrieve(criteria))


def test_detail_cache_avoids_second_fetch(criteria, make_details, fake_places):
    details = {"a": make_details("a", "焼肉a")}
    places = fake_places(details)
    cache = DetailCache()
    retriever = CandidateRetriever(places, cache=cache)

    first = asyncio.run(retriever.retrieve(criteria))
    second = asyncio.run(retriever.retrieve(criteria))

    assert len(places.search_requests) == 2
    assert [c.id for c in second] == [c.id for c in first] == ["a"]
    assert second[0].details is details["a"]
    assert places.detail_requests == ["a"]
    assert cache.get_stats()["hits"] == 1


def test_broken_cache_falls_back_to_provider(criteria, make_details, fake_places):
    details = {"a": make_details("a", "焼肉a")}
    places = fake_places(details)

    candidates = asyncio.run(CandidateRetriever(places, cache=BrokenCache()).retrieve(criteria))

    assert [c.id for c in candidates] == ["a"]
    assert places.detail_requests == ["a"]
