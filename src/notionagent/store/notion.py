"""HTTP client for the Notion block store with typed errors and retries."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Sequence

import httpx

from notionagent.blocks.models import rich_text
from notionagent.store.config import StoreSettings
from notionagent.store.errors import (
    RateLimitedError,
    StoreError,
    TransportError,
    error_for_status,
)
from notionagent.store.models import Document, document_from_page


logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
MAX_CHILDREN_PER_REQUEST = 100
PAGE_SIZE = 100


def _error_detail(response: httpx.Response, max_len: int = 300) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:max_len] or f"HTTP {response.status_code}"
    if isinstance(payload, Mapping) and payload.get("message"):
        return str(payload["message"])[:max_len]
    return response.text[:max_len]


def _retry_after_seconds(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return max(float(raw), 0.0)
    except ValueError:
        return None


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, StoreError):
        return exc.status_code in _RETRYABLE_STATUS_CODES or (
            exc.status_code is None and isinstance(exc, TransportError)
        )
    return isinstance(exc, (TimeoutError, ConnectionError))


class NotionStore:
    """Document store client over the Notion REST API."""

    def __init__(
        self,
        settings: StoreSettings,
        *,
        client: httpx.Client | None = None,
        max_retries: int = 2,
        retry_base_seconds: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if retry_base_seconds < 0:
            raise ValueError("retry_base_seconds cannot be negative")

        self._settings = settings
        self._client = client or httpx.Client(base_url=settings.base_url, timeout=settings.timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {settings.token}",
            "Notion-Version": settings.notion_version,
            "Content-Type": "application/json",
        }
        self._max_retries = max_retries
        self._retry_base_seconds = retry_base_seconds
        self._sleep = sleep

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "NotionStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def search_by_title(self, query: str) -> list[Document]:
        payload = self._request(
            "POST",
            "/search",
            operation="search",
            json_body={
                "query": query,
                "filter": {"property": "object", "value": "page"},
                "page_size": PAGE_SIZE,
            },
        )
        return [document_from_page(page) for page in payload.get("results", []) if isinstance(page, Mapping)]

    def list_all(self) -> list[Document]:
        documents: list[Document] = []
        cursor: str | None = None
        while True:
            body: dict[str, Any] = {"filter": {"property": "object", "value": "page"}, "page_size": PAGE_SIZE}
            if cursor:
                body["start_cursor"] = cursor
            payload = self._request("POST", "/search", operation="list_all", json_body=body)
            documents.extend(
                document_from_page(page) for page in payload.get("results", []) if isinstance(page, Mapping)
            )
            cursor = payload.get("next_cursor")
            if not payload.get("has_more") or not cursor:
                return documents

    def get_children(self, document_id: str) -> list[dict[str, Any]]:
        blocks: list[dict[str, Any]] = []
        cursor: str | None = None
        while True:
            params: dict[str, Any] = {"page_size": PAGE_SIZE}
            if cursor:
                params["start_cursor"] = cursor
            payload = self._request(
                "GET",
                f"/blocks/{document_id}/children",
                operation="get_children",
                params=params,
            )
            blocks.extend(block for block in payload.get("results", []) if isinstance(block, dict))
            cursor = payload.get("next_cursor")
            if not payload.get("has_more") or not cursor:
                return blocks

    def append_children(
        self,
        document_id: str,
        blocks: Sequence[Mapping[str, Any]],
        *,
        after: str | None = None,
    ) -> list[dict[str, Any]]:
        """Append blocks in batches; each batch after the first follows the previous batch's last block."""
        created: list[dict[str, Any]] = []
        anchor = after
        for offset in range(0, len(blocks), MAX_CHILDREN_PER_REQUEST):
            batch = [dict(block) for block in blocks[offset : offset + MAX_CHILDREN_PER_REQUEST]]
            body: dict[str, Any] = {"children": batch}
            if anchor:
                body["after"] = anchor
            payload = self._request(
                "PATCH",
                f"/blocks/{document_id}/children",
                operation="append_children",
                json_body=body,
            )
            results = [block for block in payload.get("results", []) if isinstance(block, dict)]
            created.extend(results)
            if anchor and results:
                anchor = str(results[-1].get("id") or anchor)
        return created

    def get_block(self, block_id: str) -> dict[str, Any]:
        return self._request("GET", f"/blocks/{block_id}", operation="get_block")

    def update_block(self, block_id: str, content: str) -> dict[str, Any]:
        block = self.get_block(block_id)
        block_type = str(block.get("type") or "paragraph")
        return self._request(
            "PATCH",
            f"/blocks/{block_id}",
            operation="update_block",
            json_body={block_type: {"rich_text": rich_text(content)}},
        )

    def delete_block(self, block_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/blocks/{block_id}", operation="delete_block")

    def create_page(self, title: str, *, parent_id: str | None = None) -> Document:
        parent: dict[str, Any] = {"page_id": parent_id} if parent_id else {"type": "workspace", "workspace": True}
        payload = self._request(
            "POST",
            "/pages",
            operation="create_page",
            json_body={"parent": parent, "properties": {"title": {"title": rich_text(title)}}},
        )
        return document_from_page(payload)

    def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json_body: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        attempts = self._max_retries + 1
        last_error: StoreError | None = None

        for attempt in range(attempts):
            retry_after: float | None = None
            try:
                response = self._client.request(
                    method,
                    path,
                    headers=self._headers,
                    json=dict(json_body) if json_body is not None else None,
                    params=dict(params) if params is not None else None,
                )
            except httpx.TimeoutException as exc:
                last_error = TransportError(operation=operation, message=f"Request timed out: {exc}")
            except httpx.TransportError as exc:
                last_error = TransportError(operation=operation, message=f"Network error: {exc}")
            else:
                if response.is_success:
                    payload = response.json() if response.content else {}
                    return payload if isinstance(payload, dict) else {"results": payload}
                last_error = error_for_status(
                    response.status_code,
                    operation=operation,
                    message=_error_detail(response),
                )
                if isinstance(last_error, RateLimitedError):
                    retry_after = _retry_after_seconds(response)

            should_retry = attempt < self._max_retries and _is_retryable(last_error)
            if not should_retry:
                break
            delay = self._retry_base_seconds * (2**attempt)
            if retry_after is not None:
                delay = max(delay, retry_after)
            logger.warning(
                "Store %s failed (%s), retrying in %.2fs (attempt %s/%s)",
                operation,
                last_error,
                delay,
                attempt + 1,
                attempts,
            )
            self._sleep(delay)

        if last_error is None:
            raise TransportError(operation=operation, message="unknown store error")
        raise last_error
