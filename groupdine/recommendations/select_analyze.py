from __future__ import annotations

import json
import logging
from typing import Any, Sequence

import pydantic
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..llm.groq_client import InferenceClient, PromptSpec
from .config import DEFAULT_FILTER_CONFIG, FilterConfig
from .models import AnalyzedSelection, Candidate, Criteria, ReviewAnalysis, Suggestion

logger = logging.getLogger(__name__)

SELECT_AND_ANALYZE_PROMPT = """\
あなたは、団体での会食に最適なレストランを提案する経験豊富なレストランコンシェルジュです。
ユーザーの希望条件と、各候補の詳細情報およびレビュー本文を分析してください。

手順:
1. 候補を希望条件への適合度で順位付けする。
2. 上位から最大{top_n}件を選ぶ。
3. 選んだ各店について次を日本語で作成する。
   - suggestion.restaurantName: 候補リストの name をそのまま書き写す。
   - suggestion.recommendationRationale: レビューと希望条件に基づく具体的な推薦理由。
   - analysis.overallSentiment: レビュー全体の評価傾向（高評価、賛否両論、不評など）。
   - analysis.keyAspects.food / service / ambiance: 料理・サービス・雰囲気に関する具体的な言及。
   - analysis.groupDiningExperience: 団体利用への適性に関する言及。
   - analysis.kanjiChecklist: 幹事視点での個室の質 (privateRoomQuality)、静かさ (noiseLevel)、団体対応 (groupService)。
   レビューから読み取れない項目には「情報なし」と書く。
4. placeId には候補リストの id をそのまま書き写す。

レビューに書かれていないことを推測で補わないでください。
適した店がなければ recommendations を空の配列にしてください。"""


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SelectionItem(_CamelModel):
    place_id: str | None = None
    suggestion: Suggestion
    analysis: ReviewAnalysis


class SelectionBatch(_CamelModel):
    """Schema shown to the model."""

    recommendations: list[SelectionItem] = Field(default_factory=list)


class RawSelectionBatch(_CamelModel):
    """What the reply is parsed into; entries are validated one by one."""

    recommendations: list[Any] = Field(default_factory=list)


def _candidate_payload(candidate: Candidate) -> dict[str, Any]:
    details = candidate.details
    reviews = [r.body for r in details.reviews if r.body] if details else []
    payload: dict[str, Any] = {
        "id": candidate.id,
        "name": candidate.name,
        "address": candidate.address,
        "rating": candidate.rating,
        "userRatingCount": candidate.user_rating_count,
        "priceLevel": candidate.price_level.value if candidate.price_level else None,
        "types": list(candidate.types),
        "reviews": reviews or ([candidate.reviews_summary] if candidate.reviews_summary else []),
    }
    if details and details.regular_opening_hours:
        payload["openingHours"] = details.regular_opening_hours.weekday_descriptions
    return {k: v for k, v in payload.items() if v is not None}


def build_select_and_analyze_prompt(
    candidates: Sequence[Candidate],
    criteria: Criteria,
    config: FilterConfig = DEFAULT_FILTER_CONFIG,
) -> PromptSpec[RawSelectionBatch]:
    system = SELECT_AND_ANALYZE_PROMPT.format(top_n=config.top_n)
    if criteria.custom_prompt_persona:
        system = f"{criteria.custom_prompt_persona}\n\n{system}"
    if criteria.custom_prompt_priorities:
        system += f"\n\n評価の優先順位:\n{criteria.custom_prompt_priorities}"

    criteria_json = criteria.model_dump(
        mode="json",
        by_alias=True,
        exclude={"custom_prompt_persona", "custom_prompt_priorities"},
    )
    user = (
        "## ユーザー希望条件\n"
        f"{json.dumps(criteria_json, ensure_ascii=False, indent=2)}\n\n"
        "## レストラン候補\n"
        f"{json.dumps([_candidate_payload(c) for c in candidates], ensure_ascii=False, indent=2)}"
    )

    return PromptSpec(
        name="select_and_analyze",
        system=system,
        user=user,
        output_model=RawSelectionBatch,
        schema=SelectionBatch.model_json_schema(by_alias=True),
    )


def _resolve(item: SelectionItem, by_id: dict[str, Candidate], by_name: dict[str, Candidate]) -> Candidate | None:
    name = item.suggestion.restaurant_name.strip()
    if item.place_id and item.place_id in by_id and by_id[item.place_id].name.strip() == name:
        return by_id[item.place_id]
    return by_name.get(name)


async def select_and_analyze(
    candidates: Sequence[Candidate],
    criteria: Criteria,
    llm: InferenceClient,
    config: FilterConfig = DEFAULT_FILTER_CONFIG,
) -> list[AnalyzedSelection]:
    """
    Rank the shortlist, keep the best ``top_n`` and attach review analysis.

    Entries that fail validation or name a restaurant that is not among the
    candidates are logged and skipped; the remaining entries keep the
    model's order. Skipped entries are not backfilled.
    """
    if not candidates:
        return []

    output = await llm.infer(build_select_and_analyze_prompt(candidates, criteria, config))
    if output is None:
        logger.warning("Select-and-analyze returned no output")
        return []

    by_id = {c.id: c for c in candidates}
    by_name: dict[str, Candidate] = {}
    for c in candidates:
        by_name.setdefault(c.name.strip(), c)

    selections: list[AnalyzedSelection] = []
    chosen: set[str] = set()
    for raw in output.recommendations:
        if len(selections) >= config.top_n:
            break
        try:
            item = SelectionItem.model_validate(raw)
        except pydantic.ValidationError as exc:
            logger.warning("Discarding malformed selection entry: %s", exc.errors())
            continue

        candidate = _resolve(item, by_id, by_name)
        if candidate is None:
            logger.warning(
                "Discarding selection %r: name matches no candidate", item.suggestion.restaurant_name,
            )
            continue
        if candidate.id in chosen:
            continue

        chosen.add(candidate.id)
        selections.append(AnalyzedSelection(
            place_id=candidate.id,
            suggestion=item.suggestion,
            analysis=item.analysis,
        ))

    logger.info("Select-and-analyze produced %d selections", len(selections))
    return selections
