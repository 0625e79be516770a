"""Embedding provider protocol."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable


class EmbeddingMode(str, Enum):
    """Which side of an asymmetric retrieval pair a text belongs to."""

    DOCUMENT = "document"
    QUERY = "query"


@runtime_checkable
class IEmbeddingProvider(Protocol):
    """Interface for text embedding providers.

    Implementations: OpenAIEmbeddingProvider, PineconeInferenceEmbeddingProvider,
    MockEmbeddingProvider (local runs without API keys).
    """

    def embed(self, text: str, mode: EmbeddingMode = EmbeddingMode.DOCUMENT) -> list[float]:
        """Generate an embedding for a single text."""
        ...

    @property
    def dimension(self) -> int:
        """Get embedding dimension."""
        ...
