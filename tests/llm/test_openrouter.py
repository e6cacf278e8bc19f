from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any

import pytest

from notionagent.llm.config import LlmSettings
from notionagent.llm.openrouter import CompletionClient, CompletionRequestError, parse_json_payload


def _response(content: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@dataclass
class _HttpError(Exception):
    status_code: int
    detail: str

    def __str__(self) -> str:
        return self.detail


class _FakeCompletionsAPI:
    def __init__(self, responses: list[object]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> object:
        self.calls.append(kwargs)
        if not self._responses:
            raise RuntimeError("No fake response configured")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class _FakeClient:
    def __init__(self, responses: list[object]) -> None:
        self.chat = SimpleNamespace(completions=_FakeCompletionsAPI(responses))


def _settings() -> LlmSettings:
    return LlmSettings(api_key="sk-or-v1-test", model="openai/gpt-4o", base_url="https://openrouter.ai/api/v1")


def test_complete_json_returns_decoded_object_and_sends_json_mode() -> None:
    client = _FakeClient([_response('{"action": "write", "content": "buy milk"}')])
    completion = CompletionClient(_settings(), client=client)

    payload = completion.complete_json("Parse commands.", " add buy milk ", '{"action": str}')

    assert payload == {"action": "write", "content": "buy milk"}
    call = client.chat.completions.calls[0]
    assert call["model"] == "openai/gpt-4o"
    assert call["response_format"] == {"type": "json_object"}
    assert call["messages"][0]["content"].endswith('Respond with JSON matching: {"action": str}')
    assert call["messages"][1] == {"role": "user", "content": "add buy milk"}


def test_complete_json_accepts_fenced_json() -> None:
    client = _FakeClient([_response('```json\n{"blocks": []}\n```')])

    assert CompletionClient(_settings(), client=client).complete_json("sys", "text") == {"blocks": []}


def test_complete_json_retries_on_transient_error_then_succeeds() -> None:
    delays: list[float] = []
    client = _FakeClient(
        [
            _HttpError(status_code=429, detail="rate limited"),
            _HttpError(status_code=503, detail="unavailable"),
            _response("[]"),
        ]
    )
    completion = CompletionClient(_settings(), client=client, max_retries=2, retry_base_seconds=0.5, sleep=delays.append)

    assert completion.complete_json("sys", "text") == []
    assert delays == [0.5, 1.0]


def test_complete_json_does_not_retry_client_errors() -> None:
    delays: list[float] = []
    client = _FakeClient([_HttpError(status_code=400, detail="bad request")])
    completion = CompletionClient(_settings(), client=client, sleep=delays.append)

    with pytest.raises(CompletionRequestError, match="after 3 attempt"):
        completion.complete_json("sys", "text")

    assert delays == []
    assert len(client.chat.completions.calls) == 1


def test_complete_json_rejects_malformed_json() -> None:
    client = _FakeClient([_response("not json at all")])

    with pytest.raises(CompletionRequestError, match="malformed JSON"):
        CompletionClient(_settings(), client=client).complete_json("sys", "text")


def test_complete_json_rejects_empty_content() -> None:
    client = _FakeClient([_response("   ")])

    with pytest.raises(CompletionRequestError, match="empty text"):
        CompletionClient(_settings(), client=client).complete_json("sys", "text")


@pytest.mark.parametrize(("system_prompt", "user_text"), [("", "text"), ("sys", "  ")])
def test_complete_json_rejects_blank_prompts(system_prompt: str, user_text: str) -> None:
    completion = CompletionClient(_settings(), client=_FakeClient([]))

    with pytest.raises(ValueError, match="cannot be empty"):
        completion.complete_json(system_prompt, user_text)


def test_parse_json_payload_plain_text() -> None:
    assert parse_json_payload('{"a": 1}', model="m") == {"a": 1}


def test_llm_settings_from_env() -> None:
    settings = LlmSettings.from_env({"OPENROUTER_API_KEY": "key", "OPENROUTER_CHAT_MODEL": "anthropic/x"})

    assert settings.api_key == "key"
    assert settings.model == "anthropic/x"
    assert settings.base_url == "https://openrouter.ai/api/v1"


def test_llm_settings_require_api_key() -> None:
    with pytest.raises(ValueError, match="OPENROUTER_API_KEY"):
        LlmSettings.from_env({})


def test_llm_settings_reject_non_http_base_url() -> None:
    with pytest.raises(ValueError, match="must start with"):
        LlmSettings.from_env({"OPENROUTER_API_KEY": "key", "OPENROUTER_BASE_URL": "ws://host"})
