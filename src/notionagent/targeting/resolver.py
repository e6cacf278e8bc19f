"""Resolve a free-text page name to a concrete document."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Protocol, Sequence, Union

from notionagent.store.models import Document


logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.5
MIN_SCORED_WORD_LENGTH = 2


class DocumentSearch(Protocol):
    def search_by_title(self, query: str) -> list[Document]: ...

    def list_all(self) -> list[Document]: ...


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    id: str
    name: str
    score: float
    low_confidence: bool = False


@dataclass(frozen=True, slots=True)
class TargetNotFound:
    query: str
    message: str
    had_results: bool


@dataclass(frozen=True, slots=True)
class AmbiguousTarget:
    query: str
    suggestions: tuple[Document, ...] = field(default_factory=tuple)
    score: float = 0.0

    @property
    def message(self) -> str:
        names = ", ".join(f'"{document.title}"' for document in self.suggestions)
        return f'Several pages match "{self.query}": {names}. Please name the page exactly.'


Resolution = Union[ResolvedTarget, TargetNotFound, AmbiguousTarget]


def score_title(query: str, title: str) -> float:
    """Similarity in [0, 1]: equality, containment, then shared-word fraction."""
    needle = query.strip().lower()
    candidate = title.strip().lower()
    if not needle or not candidate:
        return 0.0
    if needle == candidate:
        return 1.0
    if needle in candidate:
        return 0.9
    if candidate in needle:
        return 0.8

    query_words = needle.split()
    title_words = candidate.split()
    title_vocabulary = set(title_words)
    matches = sum(1 for word in query_words if len(word) > MIN_SCORED_WORD_LENGTH and word in title_vocabulary)
    return matches / max(len(query_words), len(title_words))


def rank_documents(query: str, documents: Sequence[Document]) -> list[tuple[float, Document]]:
    scored = [(score_title(query, document.title), document) for document in documents]
    return sorted(
        scored,
        key=lambda item: (-item[0], abs(len(item[1].title) - len(query)), item[1].title.lower(), item[1].id),
    )


def _dedupe(documents: Sequence[Document]) -> list[Document]:
    seen: set[str] = set()
    unique: list[Document] = []
    for document in documents:
        if document.id in seen:
            continue
        seen.add(document.id)
        unique.append(document)
    return unique


class TargetResolver:
    """Exact title lookup first, then scored fuzzy matching over a broad listing."""

    def __init__(
        self,
        store: DocumentSearch,
        *,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        lenient: bool = True,
    ) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be between 0.0 and 1.0")
        self._store = store
        self._threshold = threshold
        self._lenient = lenient

    def resolve(self, query: str) -> Resolution:
        name = query.strip()
        if not name:
            return TargetNotFound(query=query, message="No page name was given.", had_results=False)

        found = self._store.search_by_title(name)
        for document in found:
            if document.title.strip().lower() == name.lower():
                return ResolvedTarget(id=document.id, name=document.title, score=1.0)

        candidates = _dedupe([*found, *self._store.list_all()])
        if not candidates:
            return TargetNotFound(
                query=name,
                message=f'Could not find a page with name "{name}". Please check if this page exists in your workspace.',
                had_results=False,
            )

        ranked = rank_documents(name, candidates)
        best_score, best = ranked[0]
        if best_score >= self._threshold:
            tied = [document for score, document in ranked if score == best_score]
            if best_score < 1.0 and len({document.title.lower() for document in tied}) > 1:
                return AmbiguousTarget(query=name, suggestions=tuple(tied), score=best_score)
            return ResolvedTarget(id=best.id, name=best.title, score=best_score)

        if self._lenient:
            logger.info(
                "No page cleared %.2f for %r, using best match %r (score %.2f)",
                self._threshold,
                name,
                best.title,
                best_score,
            )
            return ResolvedTarget(id=best.id, name=best.title, score=best_score, low_confidence=True)

        return TargetNotFound(
            query=name,
            message=(
                f'Could not find a page matching "{name}". Pages exist, but none matched well enough; '
                f'the closest was "{best.title}".'
            ),
            had_results=True,
        )


def resolve(query: str, store: DocumentSearch, *, threshold: float = DEFAULT_MATCH_THRESHOLD) -> Resolution:
    return TargetResolver(store, threshold=threshold).resolve(query)
