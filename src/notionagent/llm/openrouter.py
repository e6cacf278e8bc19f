"""OpenRouter chat completion client returning parsed JSON objects."""

from __future__ import annotations

from dataclasses import dataclass
import json
import re
import time
from typing import Any, Callable

from notionagent.llm.config import LlmSettings


_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_JSON_FENCE_RE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)


@dataclass(slots=True)
class CompletionRequestError(RuntimeError):
    """Domain error raised for failed completion requests or unparseable responses."""

    model: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (model={self.model})"


def _build_default_client(settings: LlmSettings) -> Any:
    try:
        from openai import OpenAI
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise CompletionRequestError(
            model=settings.model,
            message=f"OpenAI SDK unavailable for OpenRouter client: {exc}",
        ) from exc

    return OpenAI(api_key=settings.api_key, base_url=settings.base_url)


def _is_retryable(exc: Exception) -> bool:
    status_code = getattr(exc, "status_code", None)
    if status_code in _RETRYABLE_STATUS_CODES:
        return True

    if isinstance(exc, (TimeoutError, ConnectionError)):
        return True

    return type(exc).__name__ in {
        "RateLimitError",
        "APITimeoutError",
        "APIConnectionError",
        "InternalServerError",
    }


def _message_content(response: Any, *, model: str) -> str:
    choices = getattr(response, "choices", None)
    if choices is None and isinstance(response, dict):
        choices = response.get("choices")
    if not isinstance(choices, list) or not choices:
        raise CompletionRequestError(model=model, message="Completion response missing choices")

    first = choices[0]
    message = getattr(first, "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if content is None and isinstance(first, dict):
        message_dict = first.get("message", {})
        if isinstance(message_dict, dict):
            content = message_dict.get("content")

    if isinstance(content, list):
        content = "".join(str(part.get("text", "")) for part in content if isinstance(part, dict))

    text = str(content or "").strip()
    if not text:
        raise CompletionRequestError(model=model, message="Completion response returned empty text")
    return text


def parse_json_payload(text: str, *, model: str) -> Any:
    cleaned = text.strip()
    fenced = _JSON_FENCE_RE.match(cleaned)
    if fenced is not None:
        cleaned = fenced.group(1)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise CompletionRequestError(model=model, message=f"Completion returned malformed JSON: {exc.msg}") from exc


class CompletionClient:
    """JSON-mode chat completions over OpenRouter with retry semantics."""

    def __init__(
        self,
        settings: LlmSettings,
        *,
        client: Any | None = None,
        max_retries: int = 2,
        retry_base_seconds: float = 0.25,
        sleep: Callable[[float], None] = time.sleep,
        temperature: float = 0.0,
        max_tokens: int = 1200,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if retry_base_seconds < 0:
            raise ValueError("retry_base_seconds cannot be negative")
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")

        self._settings = settings
        self._client = client or _build_default_client(settings)
        self._max_retries = max_retries
        self._retry_base_seconds = retry_base_seconds
        self._sleep = sleep
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def model(self) -> str:
        return self._settings.model

    def complete_json(self, system_prompt: str, user_text: str, schema_hint: str | None = None) -> Any:
        """Send one system/user exchange and return the decoded JSON body."""
        if not system_prompt.strip():
            raise ValueError("system_prompt cannot be empty")
        if not user_text.strip():
            raise ValueError("user_text cannot be empty")

        system_text = system_prompt.strip()
        if schema_hint:
            system_text = f"{system_text}\n\nRespond with JSON matching: {schema_hint.strip()}"

        response = self._request_completion(system_text=system_text, user_text=user_text.strip())
        return parse_json_payload(_message_content(response, model=self.model), model=self.model)

    def _request_completion(self, *, system_text: str, user_text: str) -> Any:
        attempts = self._max_retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                return self._client.chat.completions.create(
                    model=self._settings.model,
                    messages=[
                        {"role": "system", "content": system_text},
                        {"role": "user", "content": user_text},
                    ],
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                    response_format={"type": "json_object"},
                )
            except Exception as exc:  # pragma: no cover - covered via tests with stubs
                last_error = exc
                should_retry = attempt < self._max_retries and _is_retryable(exc)
                if not should_retry:
                    break
                delay = self._retry_base_seconds * (2**attempt)
                self._sleep(delay)

        detail = str(last_error) if last_error is not None else "unknown OpenRouter error"
        raise CompletionRequestError(
            model=self._settings.model,
            message=f"Completion request failed after {attempts} attempt(s): {detail}",
        ) from last_error
