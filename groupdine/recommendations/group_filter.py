from __future__ import annotations

import logging
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..llm.groq_client import InferenceClient, PromptSpec
from .config import DEFAULT_FILTER_CONFIG, FilterConfig
from .models import Candidate, Criteria

logger = logging.getLogger(__name__)

GROUP_FILTER_PROMPT = """\
あなたは会社の宴会を何度も取り仕切ってきた経験豊富な幹事です。
ユーザーの希望条件と、各レストラン候補のレビュー概要を読み、団体での会食に向いている店を選んでください。

判断の手がかり:
- 大人数で座れる席、貸切、宴会コース、予約の取りやすさについての記述があるか。
- 個室希望がある場合、個室について肯定的な記述がある店を優先し、個室がないと読み取れる店は選ばない。
- 会話のしやすさ、落ち着いた雰囲気、団体客に慣れたスタッフやスムーズなドリンク提供の記述があるか。
- 「騒がしい」「席が分かれた」「提供が遅い」「店員の態度が悪い」などの記述がある店は避ける。

必ず候補リストに記載された ID だけを使ってください。新しい ID を作ってはいけません。
適した店がなければ空の配列を返してください。"""


class GroupFilterOutput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    place_ids: list[str] = Field(
        default_factory=list,
        description="Place IDs from the candidate list that suit a group dinner, best first, at most 5.",
    )


def _format_criteria(criteria: Criteria) -> list[str]:
    return [
        f"- 利用目的: {criteria.purpose_of_use.value}",
        f"- 料理: {criteria.cuisine}",
        f"- 場所: {criteria.location}",
        f"- 予算: {criteria.budget}",
        f"- 日時: {criteria.date} {criteria.time}",
        f"- 個室希望: {'はい' if criteria.private_room_requested else 'いいえ'}",
    ]


def build_group_filter_prompt(
    candidates: Sequence[Candidate],
    criteria: Criteria,
    config: FilterConfig = DEFAULT_FILTER_CONFIG,
) -> PromptSpec[GroupFilterOutput]:
    lines = ["## ユーザー希望条件", *_format_criteria(criteria), "", "## レストラン候補"]
    for c in candidates:
        lines.append(f"- ID: {c.id}")
        lines.append(f"  店名: {c.name}")
        lines.append(f"  レビュー概要: {c.reviews_summary or 'レビューなし'}")
    lines.append("")
    lines.append(f"団体利用に最も適した店の ID を最大{config.shortlist_size}件、placeIds として返してください。")

    return PromptSpec(
        name="group_filter",
        system=GROUP_FILTER_PROMPT,
        user="\n".join(lines),
        output_model=GroupFilterOutput,
    )


async def select_suitable(
    candidates: Sequence[Candidate],
    criteria: Criteria,
    llm: InferenceClient,
    config: FilterConfig = DEFAULT_FILTER_CONFIG,
) -> list[str]:
    """
    Ask the LLM for the ids most likely to host a group dinner.

    Ids the model invents are discarded, duplicates collapse to the first
    occurrence, and the result is capped at ``shortlist_size``. No output
    and an empty list both mean "nothing suitable" and yield ``[]``.
    """
    if not candidates:
        return []

    output = await llm.infer(build_group_filter_prompt(candidates, criteria, config))
    if output is None:
        logger.warning("Group filter returned no output")
        return []

    known = {c.id for c in candidates}
    shortlist: list[str] = []
    for place_id in output.place_ids:
        if place_id not in known:
            logger.warning("Group filter returned unknown place id %r, ignoring", place_id)
            continue
        if place_id not in shortlist:
            shortlist.append(place_id)

    shortlist = shortlist[: config.shortlist_size]
    logger.info("Group filter kept %d of %d candidates", len(shortlist), len(candidates))
    return shortlist
