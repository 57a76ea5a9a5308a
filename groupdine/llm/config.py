from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = "llama-3.3-70b-versatile"
    temperature: float = float(os.getenv("LLM_TEMPERATURE", "0.2"))
    timeout: float = float(os.getenv("LLM_TIMEOUT", "30"))
    max_retries: int = int(os.getenv("LLM_MAX_RETRIES", "3"))
    retry_backoff: float = 1.0  # seconds, doubled per attempt
    max_tokens: int = 2048
    enabled: bool = True


DEFAULT_LLM_CONFIG = LLMConfig()
