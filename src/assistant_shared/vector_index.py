"""Pinecone vector index client."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from pinecone import Pinecone, ServerlessSpec
from pinecone.exceptions import NotFoundException

from assistant_shared.exceptions import (
    IndexNotFoundError,
    IndexUnavailableError,
    UpstreamUnavailableError,
)
from assistant_shared.protocols.vector_index import VectorMatch

DEFAULT_INDEX_NAME = "decoupled-search"

T = TypeVar("T")


class PineconeVectorIndex:
    """Upsert / query / delete against one named Pinecone index.

    The data-plane handle is resolved lazily so that constructing the client
    never touches the network; a missing index surfaces as
    ``IndexNotFoundError`` on first use.
    """

    def __init__(
        self,
        api_key: str | None,
        index_name: str = DEFAULT_INDEX_NAME,
        *,
        cloud: str = "aws",
        region: str = "us-east-1",
        namespace: str | None = None,
        wait_timeout: float = 60.0,
        client: Pinecone | None = None,
    ):
        if client is None and not api_key:
            raise IndexUnavailableError("PINECONE_API_KEY environment variable is not set")

        self.index_name = index_name
        self.cloud = cloud
        self.region = region
        self.namespace = namespace
        self.wait_timeout = wait_timeout
        self.pc = client or Pinecone(api_key=api_key)
        self._index = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @property
    def index(self):
        if self._index is None:
            self._index = self._guard("open", lambda: self.pc.Index(self.index_name))
        return self._index

    def _guard(self, action: str, call: Callable[[], T]) -> T:
        """Run ``call`` and translate Pinecone failures into the error taxonomy."""
        try:
            return call()
        except NotFoundException as exc:
            raise IndexNotFoundError(
                f"Pinecone index '{self.index_name}' does not exist. Run the content indexer first."
            ) from exc
        except Exception as exc:
            logger.warning("Pinecone {} failed | index={} error={}", action, self.index_name, exc)
            raise UpstreamUnavailableError(f"Vector index {action} failed") from exc

    # ------------------------------------------------------------------
    # Data plane
    # ------------------------------------------------------------------

    def upsert(self, id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        """Insert or replace the record stored under ``id`` (last write wins)."""
        self._guard(
            "upsert",
            lambda: self.index.upsert(
                vectors=[{"id": id, "values": vector, "metadata": metadata}],
                namespace=self.namespace,
            ),
        )

    def query(self, vector: list[float], top_k: int) -> list[VectorMatch]:
        """Return at most ``top_k`` matches, best first. An empty index yields ``[]``."""
        response = self._guard(
            "query",
            lambda: self.index.query(
                vector=vector,
                top_k=top_k,
                namespace=self.namespace,
                include_metadata=True,
                include_values=False,
            ),
        )

        matches: list[VectorMatch] = []
        for match in (response.matches or [])[:top_k]:
            # Pinecone sometimes returns 1.00000036 due to float precision
            score = min(1.0, max(0.0, float(match.score or 0.0)))
            matches.append(VectorMatch(id=match.id, score=score, metadata=dict(match.metadata or {})))
        return matches

    def delete(self, id: str) -> None:
        self._guard("delete", lambda: self.index.delete(ids=[id], namespace=self.namespace))

    def clear_all(self) -> None:
        self._guard("clear", lambda: self.index.delete(delete_all=True, namespace=self.namespace))

    def stats(self) -> dict[str, Any]:
        """Return the total vector count and dimension of the index."""
        stats = self._guard("stats", lambda: self.index.describe_index_stats())
        return {
            "index_name": self.index_name,
            "total_vectors": getattr(stats, "total_vector_count", 0),
            "dimension": getattr(stats, "dimension", None),
        }

    # ------------------------------------------------------------------
    # Control plane
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        names = self._guard("list", lambda: self.pc.list_indexes().names())
        return self.index_name in names

    def ensure_index(
        self,
        dimension: int,
        *,
        metric: str = "cosine",
        wait_timeout: float | None = None,
        poll_interval: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> bool:
        """Create the index when it does not exist and wait until it is ready.

        The wait is bounded by ``wait_timeout`` (the constructor value by
        default). The run proceeds after the timeout and the first upsert
        reports any remaining problem.

        Returns:
            True when the index was created by this call.
        """
        if self.exists():
            return False

        logger.info(
            "Creating Pinecone index | name={} dimension={} metric={} cloud={} region={}",
            self.index_name,
            dimension,
            metric,
            self.cloud,
            self.region,
        )
        self._guard(
            "create",
            lambda: self.pc.create_index(
                name=self.index_name,
                dimension=dimension,
                metric=metric,
                spec=ServerlessSpec(cloud=self.cloud, region=self.region),
            ),
        )

        timeout = self.wait_timeout if wait_timeout is None else wait_timeout
        waited = 0.0
        while waited < timeout:
            description = self._guard("describe", lambda: self.pc.describe_index(self.index_name))
            status = getattr(description, "status", None) or {}
            ready = status.get("ready") if isinstance(status, dict) else getattr(status, "ready", False)
            if ready:
                logger.info("Pinecone index ready | name={} waited={}s", self.index_name, waited)
                return True
            sleep(poll_interval)
            waited += poll_interval

        logger.warning(
            "Pinecone index not ready after {}s, continuing | name={}", timeout, self.index_name
        )
        return True
