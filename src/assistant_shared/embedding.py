"""Embedding providers: OpenAI, Pinecone-hosted inference, and a local mock."""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger
from openai import OpenAI, OpenAIError

from assistant_shared.exceptions import (
    ConfigurationMissingError,
    ProviderUnavailableError,
    UpstreamUnavailableError,
)
from assistant_shared.protocols.embedding import EmbeddingMode

# ~8000 tokens; hard right-trim, never summarised
MAX_EMBEDDING_CHARS = 32_000

OPENAI_EMBEDDING_MODEL = "text-embedding-3-small"
OPENAI_EMBEDDING_DIMENSIONS = 1536

PINECONE_EMBEDDING_MODEL = "multilingual-e5-large"
PINECONE_EMBEDDING_DIMENSIONS = 1024


def truncate_for_embedding(text: str, limit: int = MAX_EMBEDDING_CHARS) -> str:
    """Cut ``text`` to at most ``limit`` characters."""
    return text[:limit]


class OpenAIEmbeddingProvider:
    """OpenAI embeddings (``text-embedding-3-*``).

    These models are symmetric: documents and queries share one encoder, so
    ``mode`` has no model-side parameter to route to.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = OPENAI_EMBEDDING_MODEL,
        dimensions: int = OPENAI_EMBEDDING_DIMENSIONS,
        base_url: str | None = None,
        client: OpenAI | None = None,
    ):
        if client is None and not api_key:
            raise ProviderUnavailableError("OPENAI_API_KEY environment variable is not set")

        self.client = client or OpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self._dimensions = dimensions

    def embed(self, text: str, mode: EmbeddingMode = EmbeddingMode.DOCUMENT) -> list[float]:
        """Generate an embedding for a single text."""
        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=truncate_for_embedding(text),
                dimensions=self._dimensions,
            )
        except OpenAIError as exc:
            logger.warning("OpenAI embedding request failed | mode={} error={}", mode.value, exc)
            raise UpstreamUnavailableError("Embedding request failed") from exc
        return [float(x) for x in response.data[0].embedding]

    @property
    def dimension(self) -> int:
        return self._dimensions


class PineconeInferenceEmbeddingProvider:
    """Embeddings from Pinecone's hosted inference API.

    ``multilingual-e5-large`` is trained for asymmetric retrieval and encodes
    passages and queries differently, selected through ``input_type``.
    """

    _INPUT_TYPES = {
        EmbeddingMode.DOCUMENT: "passage",
        EmbeddingMode.QUERY: "query",
    }

    def __init__(
        self,
        api_key: str | None,
        model: str = PINECONE_EMBEDDING_MODEL,
        dimensions: int = PINECONE_EMBEDDING_DIMENSIONS,
        client=None,
    ):
        if client is None:
            if not api_key:
                raise ProviderUnavailableError("PINECONE_API_KEY environment variable is not set")
            from pinecone import Pinecone

            client = Pinecone(api_key=api_key)

        self.client = client
        self.model = model
        self._dimensions = dimensions

    def embed(self, text: str, mode: EmbeddingMode = EmbeddingMode.DOCUMENT) -> list[float]:
        """Generate an embedding for a single text."""
        try:
            result = self.client.inference.embed(
                model=self.model,
                inputs=[truncate_for_embedding(text)],
                parameters={"input_type": self._INPUT_TYPES[mode], "truncate": "END"},
            )
        except Exception as exc:
            logger.warning("Pinecone embedding request failed | mode={} error={}", mode.value, exc)
            raise UpstreamUnavailableError("Embedding request failed") from exc

        item = result[0]
        values = item["values"] if isinstance(item, Mapping) else item.values
        return [float(x) for x in values]

    @property
    def dimension(self) -> int:
        return self._dimensions


class MockEmbeddingProvider:
    """Mock embedding provider for local dev (no API calls)."""

    def __init__(self, dimension: int = OPENAI_EMBEDDING_DIMENSIONS):
        self._dimension = dimension

    def embed(self, text: str, mode: EmbeddingMode = EmbeddingMode.DOCUMENT) -> list[float]:
        return [0.1] * self._dimension

    @property
    def dimension(self) -> int:
        return self._dimension


def build_embedding_provider(
    provider: str,
    *,
    openai_api_key: str | None = None,
    openai_base_url: str | None = None,
    openai_model: str = OPENAI_EMBEDDING_MODEL,
    openai_dimensions: int = OPENAI_EMBEDDING_DIMENSIONS,
    pinecone_api_key: str | None = None,
    pinecone_model: str = PINECONE_EMBEDDING_MODEL,
    pinecone_dimensions: int = PINECONE_EMBEDDING_DIMENSIONS,
):
    """Construct the provider named by configuration (``openai`` or ``pinecone``)."""
    name = provider.lower()
    if name == "openai":
        return OpenAIEmbeddingProvider(
            api_key=openai_api_key,
            model=openai_model,
            dimensions=openai_dimensions,
            base_url=openai_base_url,
        )
    if name == "pinecone":
        return PineconeInferenceEmbeddingProvider(
            api_key=pinecone_api_key,
            model=pinecone_model,
            dimensions=pinecone_dimensions,
        )
    raise ConfigurationMissingError(
        f"Unknown EMBEDDING_PROVIDER '{provider}'. Use 'openai' or 'pinecone'."
    )
