"""Vector index protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass
class VectorMatch:
    """A single nearest-neighbour hit as returned by the index."""

    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class IVectorIndex(Protocol):
    """Interface for the external vector index.

    Implementations: PineconeVectorIndex.
    """

    def upsert(self, id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        """Insert or replace the record stored under ``id``."""
        ...

    def query(self, vector: list[float], top_k: int) -> list[VectorMatch]:
        """Return at most ``top_k`` matches ranked by similarity, best first."""
        ...

    def delete(self, id: str) -> None: ...

    def clear_all(self) -> None: ...

    def ensure_index(self, dimension: int) -> bool:
        """Create the index when missing. Returns True if it was created."""
        ...

    def stats(self) -> dict[str, Any]: ...
