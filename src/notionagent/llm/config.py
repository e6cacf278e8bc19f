"""Runtime configuration for the completion collaborator."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENROUTER_CHAT_MODEL = "openai/gpt-4o"


@dataclass(frozen=True, slots=True)
class LlmSettings:
    """Validated OpenRouter settings used by parsing and formatting."""

    api_key: str
    model: str = DEFAULT_OPENROUTER_CHAT_MODEL
    base_url: str = DEFAULT_OPENROUTER_BASE_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LlmSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        api_key = source.get("OPENROUTER_API_KEY", "").strip()
        model = source.get("OPENROUTER_CHAT_MODEL", DEFAULT_OPENROUTER_CHAT_MODEL).strip()
        base_url = source.get("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL).strip()

        if not api_key:
            raise ValueError("Missing required completion environment variables: OPENROUTER_API_KEY")
        if not model:
            raise ValueError("OPENROUTER_CHAT_MODEL cannot be empty")
        if not base_url:
            raise ValueError("OPENROUTER_BASE_URL cannot be empty")
        if not (base_url.startswith("http://") or base_url.startswith("https://")):
            raise ValueError("OPENROUTER_BASE_URL must start with http:// or https://")

        return cls(api_key=api_key, model=model, base_url=base_url.rstrip("/"))
