"""Semantic search: query embedding + nearest-neighbour lookup."""

from __future__ import annotations

from loguru import logger

from assistant_shared.articles import article_from_metadata
from assistant_shared.exceptions import MalformedInputError
from assistant_shared.protocols.embedding import EmbeddingMode, IEmbeddingProvider
from assistant_shared.protocols.search import SearchResult
from assistant_shared.protocols.vector_index import IVectorIndex


class SemanticSearchService:
    """Embeds a query and returns the closest articles from the vector index.

    The index already ranks by cosine similarity, so results keep its order;
    this service never re-ranks. Articles are rebuilt from index metadata and
    therefore always have an empty body.
    """

    def __init__(self, embedding_provider: IEmbeddingProvider, vector_index: IVectorIndex):
        self.embedding_provider = embedding_provider
        self.vector_index = vector_index

    def search(self, query: str, top_k: int = 10) -> list[SearchResult]:
        """Run a semantic search.

        Args:
            query: Free-text query.
            top_k: Maximum number of results.

        Returns:
            At most ``top_k`` results, highest score first. Empty when nothing matches.

        Raises:
            MalformedInputError: If ``query`` is blank or ``top_k`` is below 1.
        """
        if not query or not query.strip():
            raise MalformedInputError("Search query must not be empty")
        if top_k < 1:
            raise MalformedInputError("top_k must be at least 1")

        vector = self.embedding_provider.embed(query, EmbeddingMode.QUERY)
        matches = self.vector_index.query(vector, top_k)

        results = [
            SearchResult(
                id=match.id,
                score=match.score,
                article=article_from_metadata(match.id, match.metadata),
            )
            for match in matches[:top_k]
        ]
        logger.info("Search | query={!r} top_k={} results={}", query[:60], top_k, len(results))
        return results
