"""Service protocols (interfaces) for dependency inversion.

All service consumers should type-hint against these protocols,
not the concrete implementations.
"""

from assistant_shared.protocols.embedding import EmbeddingMode, IEmbeddingProvider
from assistant_shared.protocols.search import ISearchService, SearchResult
from assistant_shared.protocols.vector_index import IVectorIndex, VectorMatch

__all__ = [
    "EmbeddingMode",
    "IEmbeddingProvider",
    "ISearchService",
    "IVectorIndex",
    "SearchResult",
    "VectorMatch",
]
