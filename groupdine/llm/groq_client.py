from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Protocol, TypeVar

import groq
import pydantic
from groq import AsyncGroq
from pydantic import BaseModel

from ..errors import AIAnalysisError, AITimeoutError
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_RETRYABLE = (
    groq.APITimeoutError,
    groq.APIConnectionError,
    groq.RateLimitError,
    groq.InternalServerError,
)


@dataclass(frozen=True)
class PromptSpec(Generic[T]):
    """A templated prompt plus the model its JSON reply must validate against."""

    name: str
    system: str
    user: str
    output_model: type[T]
    temperature: float | None = None
    # JSON schema shown to the model when it differs from output_model's own
    schema: dict[str, Any] | None = None


class InferenceClient(Protocol):
    async def infer(self, spec: PromptSpec[T]) -> T | None:
        """Return the validated reply, or None when the model gave nothing usable."""
        ...


def _schema_instruction(spec: PromptSpec) -> str:
    schema = spec.schema or spec.output_model.model_json_schema(by_alias=True)
    return (
        "\n\nReturn ONLY a valid JSON object that conforms to this JSON schema:\n"
        f"{json.dumps(schema, ensure_ascii=False)}"
    )


def parse_reply(content: str | None, output_model: type[T], prompt_name: str = "") -> T | None:
    """Validate a raw model reply. Empty, non-JSON or off-schema replies yield None."""
    if not content or not content.strip():
        logger.warning("LLM prompt %s returned empty output", prompt_name)
        return None
    try:
        return output_model.model_validate_json(content)
    except pydantic.ValidationError:
        logger.warning("LLM prompt %s returned output that failed validation", prompt_name, exc_info=True)
        return None


class GroqInference:
    """InferenceClient backed by Groq chat completions in JSON mode."""

    def __init__(
        self,
        config: LLMConfig = DEFAULT_LLM_CONFIG,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self._sleep = sleep

    async def infer(self, spec: PromptSpec[T]) -> T | None:
        config = self.config
        if not config.enabled or not config.api_key:
            raise AIAnalysisError("Groq LLM is not configured", context={"prompt": spec.name})

        messages = [
            {"role": "system", "content": spec.system + _schema_instruction(spec)},
            {"role": "user", "content": spec.user},
        ]
        # The SDK's own retries are off; the budget below is the only one
        async with AsyncGroq(api_key=config.api_key, timeout=config.timeout, max_retries=0) as client:
            return await self._complete(client, spec, messages)

    async def _complete(self, client: AsyncGroq, spec: PromptSpec[T], messages: list[dict[str, str]]) -> T | None:
        config = self.config
        temperature = config.temperature if spec.temperature is None else spec.temperature
        attempts = config.max_retries + 1

        for attempt in range(attempts):
            try:
                response = await client.chat.completions.create(
                    model=config.model,
                    messages=messages,
                    max_tokens=config.max_tokens,
                    temperature=temperature,
                    response_format={"type": "json_object"},
                )
            except _RETRYABLE as exc:
                logger.warning(
                    "Groq call for %s failed (attempt %d/%d): %s",
                    spec.name, attempt + 1, attempts, type(exc).__name__,
                )
                if attempt + 1 < attempts:
                    await self._sleep(config.retry_backoff * (2 ** attempt))
                continue
            except groq.APIStatusError as exc:
                raise AIAnalysisError(
                    f"Groq rejected prompt {spec.name} with status {exc.status_code}",
                    context={"prompt": spec.name},
                ) from exc

            content = response.choices[0].message.content if response.choices else None
            return parse_reply(content, spec.output_model, spec.name)

        raise AITimeoutError(
            f"Groq call for {spec.name} exhausted {attempts} attempts",
            context={"prompt": spec.name, "attempts": attempts},
        )
