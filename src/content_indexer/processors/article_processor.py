"""Turns an article into the text that gets embedded and its index record."""

from __future__ import annotations

import html
import re

from assistant_shared.articles import Article, IndexedChunk, to_index_metadata
from assistant_shared.embedding import MAX_EMBEDDING_CHARS, truncate_for_embedding
from assistant_shared.protocols.embedding import EmbeddingMode, IEmbeddingProvider

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_markup(text: str) -> str:
    """Replace tags with spaces, decode entities and collapse whitespace."""
    plain = html.unescape(_TAG_RE.sub(" ", text))
    return _WHITESPACE_RE.sub(" ", plain).strip()


def build_embedding_text(article: Article, limit: int = MAX_EMBEDDING_CHARS) -> str:
    """``title``, ``summary`` and plain body separated by blank lines, cut to ``limit``."""
    text = f"{article.title}\n\n{article.summary}\n\n{strip_markup(article.body)}"
    return truncate_for_embedding(text, limit)


class ArticleProcessor:
    """Embeds articles (document mode) and builds their index records."""

    def __init__(self, embedding_provider: IEmbeddingProvider):
        self.embedding_provider = embedding_provider

    def to_chunk(self, article: Article) -> IndexedChunk:
        vector = self.embedding_provider.embed(build_embedding_text(article), EmbeddingMode.DOCUMENT)
        return IndexedChunk(id=article.id, vector=vector, metadata=to_index_metadata(article))
