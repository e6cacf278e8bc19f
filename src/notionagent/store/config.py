"""Runtime configuration for the document store client."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_NOTION_API_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_TIMEOUT_SECONDS = 30.0


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.001) -> float:
    value = float(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class StoreSettings:
    """Validated Notion API settings."""

    token: str
    base_url: str = DEFAULT_NOTION_API_BASE_URL
    notion_version: str = DEFAULT_NOTION_VERSION
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "StoreSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        token = source.get("NOTION_API_TOKEN", "").strip()
        if not token:
            raise ValueError("Missing required store environment variable: NOTION_API_TOKEN")

        base_url = source.get("NOTION_API_BASE_URL", DEFAULT_NOTION_API_BASE_URL).strip()
        if not base_url:
            raise ValueError("NOTION_API_BASE_URL cannot be empty")
        if not (base_url.startswith("http://") or base_url.startswith("https://")):
            raise ValueError("NOTION_API_BASE_URL must start with http:// or https://")

        notion_version = source.get("NOTION_VERSION", DEFAULT_NOTION_VERSION).strip()
        if not notion_version:
            raise ValueError("NOTION_VERSION cannot be empty")

        timeout_raw = source.get("NOTION_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)).strip()
        if not timeout_raw:
            raise ValueError("NOTION_TIMEOUT_SECONDS cannot be empty")
        timeout_seconds = _parse_positive_float(name="NOTION_TIMEOUT_SECONDS", raw_value=timeout_raw, minimum=0.1)

        return cls(
            token=token,
            base_url=base_url.rstrip("/"),
            notion_version=notion_version,
            timeout_seconds=timeout_seconds,
        )
