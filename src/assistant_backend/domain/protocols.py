"""Domain service interfaces (ports).

These protocols define the contracts that infrastructure implementations
must satisfy. The application layer depends on these abstractions,
not on concrete classes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pydantic_ai.messages import ModelMessage, ModelResponse
from pydantic_ai.tools import ToolDefinition

from assistant_shared.protocols.search import ISearchService

__all__ = ["ICompletionService", "ISearchService"]


@runtime_checkable
class ICompletionService(Protocol):
    """Interface for a single request to the text-completion service.

    Implementations: CompletionService (pydantic-ai model over an
    OpenAI-compatible endpoint).
    """

    async def request(
        self,
        messages: Sequence[ModelMessage],
        tools: Sequence[ToolDefinition] | None = None,
    ) -> ModelResponse:
        """Send ``messages`` (plus the tool catalog, if any) and return the reply."""
        ...
