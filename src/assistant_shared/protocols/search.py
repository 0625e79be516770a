"""Semantic search protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from assistant_shared.articles import Article


@dataclass
class SearchResult:
    """A single search hit. ``article.body`` is always empty."""

    id: str
    score: float
    article: Article


@runtime_checkable
class ISearchService(Protocol):
    """Interface for knowledge base search.

    Implementations: SemanticSearchService (embedding + vector index).
    """

    def search(self, query: str, top_k: int = 10) -> list[SearchResult]:
        """Run a search and return results ordered by descending score."""
        ...
