from __future__ import annotations

import asyncio

import pytest

from groupdine.errors import AITimeoutError
from groupdine.recommendations.config import FilterConfig
from groupdine.recommendations.group_filter import build_group_filter_prompt, select_suitable


@pytest.fixture
def candidates(make_candidate):
    return [make_candidate(f"p{i}", name=f"焼肉{i}") for i in range(5)]


def test_returns_ids_in_model_order(candidates, criteria, stub_llm):
    llm = stub_llm({"group_filter": {"placeIds": ["p3", "p0", "p2"]}})
    assert asyncio.run(select_suitable(candidates, criteria, llm)) == ["p3", "p0", "p2"]


def test_invented_ids_are_removed(candidates, criteria, stub_llm):
    llm = stub_llm({"group_filter": {"placeIds": ["p1", "ghost", "p4", "", "P1"]}})
    result = asyncio.run(select_suitable(candidates, criteria, llm))
    assert result == ["p1", "p4"]
    assert set(result) <= {c.id for c in candidates}


def test_duplicates_collapse_and_cap_applies(candidates, criteria, stub_llm):
    llm = stub_llm({"group_filter": {"placeIds": ["p0", "p0", "p1", "p2", "p3", "p4"]}})
    config = FilterConfig(shortlist_size=3)
    assert asyncio.run(select_suitable(candidates, criteria, llm, config)) == ["p0", "p1", "p2"]


def test_no_output_is_empty_shortlist(candidates, criteria, stub_llm):
    llm = stub_llm({"group_filter": None})
    assert asyncio.run(select_suitable(candidates, criteria, llm)) == []


def test_empty_list_is_empty_shortlist(candidates, criteria, stub_llm):
    llm = stub_llm({"group_filter": {"placeIds": []}})
    assert asyncio.run(select_suitable(candidates, criteria, llm)) == []


def test_no_candidates_skips_llm(criteria, stub_llm):
    llm = stub_llm({})
    assert asyncio.run(select_suitable([], criteria, llm)) == []
    assert llm.calls == []


def test_llm_failure_propagates(candidates, criteria, stub_llm):
    llm = stub_llm({"group_filter": AITimeoutError("gave up")})
    with pytest.raises(AITimeoutError):
        asyncio.run(select_suitable(candidates, criteria, llm))


def test_prompt_embeds_ids_reviews_and_private_room(candidates, criteria):
    spec = build_group_filter_prompt(candidates, criteria)
    for c in candidates:
        assert f"ID: {c.id}" in spec.user
        assert c.name in spec.user
    assert "個室希望: はい" in spec.user
    assert "宴会コース" in spec.user
    assert spec.name == "group_filter"
