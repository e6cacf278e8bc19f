"""Runtime configuration for the Telegram bot."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping


DEFAULT_DB_PATH = ".notionagent-sessions.db"
DEFAULT_SESSION_TTL_SECONDS = 1800
_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    value = int(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class BotSettings:
    """Validated Telegram bot runtime settings."""

    token: str
    db_path: Path
    session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    use_llm: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BotSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        token = source.get("TELEGRAM_BOT_TOKEN", "").strip()
        if not token:
            raise ValueError("Missing required bot environment variables: TELEGRAM_BOT_TOKEN")

        db_path_raw = source.get("NOTIONAGENT_DB_PATH", DEFAULT_DB_PATH).strip()
        if not db_path_raw:
            raise ValueError("NOTIONAGENT_DB_PATH cannot be empty")

        ttl_raw = source.get("NOTIONAGENT_SESSION_TTL_SECONDS", str(DEFAULT_SESSION_TTL_SECONDS)).strip()
        if not ttl_raw:
            raise ValueError("NOTIONAGENT_SESSION_TTL_SECONDS cannot be empty")
        session_ttl_seconds = _parse_positive_int(
            name="NOTIONAGENT_SESSION_TTL_SECONDS",
            raw_value=ttl_raw,
            minimum=1,
        )

        use_llm = source.get("NOTIONAGENT_USE_LLM", "").strip().lower() in _TRUE_VALUES

        return cls(
            token=token,
            db_path=Path(db_path_raw),
            session_ttl_seconds=session_ttl_seconds,
            use_llm=use_llm,
        )
