"""Shared fixtures for all test suites."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock

import pytest
from loguru import logger

from assistant_shared.articles import Article, to_index_metadata
from assistant_shared.protocols.vector_index import VectorMatch
from factories import make_article


@pytest.fixture()
def nextjs_article() -> Article:
    return make_article("a1", "Next.js Performance")


@pytest.fixture()
def react_article() -> Article:
    return make_article("a2", "React Server Components", category="React")


@pytest.fixture()
def fake_vector_index(nextjs_article: Article, react_article: Article) -> MagicMock:
    """A vector index double returning two matches, best first."""
    index = MagicMock()
    index.query.return_value = [
        VectorMatch(id="a1", score=0.91, metadata=to_index_metadata(nextjs_article)),
        VectorMatch(id="a2", score=0.84, metadata=to_index_metadata(react_article)),
    ]
    index.ensure_index.return_value = False
    return index


@pytest.fixture()
def fake_embedder() -> MagicMock:
    embedder = MagicMock()
    embedder.embed.return_value = [0.1] * 8
    embedder.dimension = 8
    return embedder


@pytest.fixture(autouse=True)
def _reset_loguru():
    """CLI commands re-configure loguru against CliRunner's streams; point it back at stderr."""
    yield
    logger.remove()
    logger.add(lambda message: sys.stderr.write(message), level="DEBUG")
