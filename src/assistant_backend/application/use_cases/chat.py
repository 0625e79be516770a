"""Chat use case — one search-then-answer turn with the completion service.

This module contains all business logic for handling a chat turn: history
conversion, the two-phase tool-calling exchange, tool execution and source
collection. It has **no dependency on FastAPI** and can be invoked from any
transport layer (HTTP, CLI, tests).

A turn moves through a fixed set of states and never loops:

    AWAITING_FIRST_RESPONSE --(text only)--> DONE
    AWAITING_FIRST_RESPONSE --(tool calls)--> EXECUTING_TOOLS
        --> AWAITING_SECOND_RESPONSE --> DONE
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)

from assistant_backend.agent import SEARCH_TOOL, SEARCH_TOOL_NAME, SYSTEM_PROMPT
from assistant_backend.domain.models import ChatMessage, ToolCallRecord
from assistant_backend.domain.protocols import ICompletionService, ISearchService
from assistant_shared.articles import Article, dedupe_articles
from assistant_shared.exceptions import (
    ConfigurationMissingError,
    EmptyConversationError,
    MalformedToolArgumentsError,
    UpstreamUnavailableError,
)
from assistant_shared.protocols.search import SearchResult

NO_RESULTS_MESSAGE = "No relevant articles found."
SEARCH_UNAVAILABLE_MESSAGE = "Search is unavailable right now. Answer without knowledge base articles."
TURN_FAILED_MESSAGE = "Chat failed. Please try again."


class TurnState(str, Enum):
    AWAITING_FIRST_RESPONSE = "awaiting_first_response"
    EXECUTING_TOOLS = "executing_tools"
    AWAITING_SECOND_RESPONSE = "awaiting_second_response"
    DONE = "done"


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass
class ChatResult:
    """Outcome of a single chat turn."""

    answer: str
    sources: list[Article] = field(default_factory=list)
    tool_calls: list[ToolCallRecord] = field(default_factory=list)
    latency_ms: int = 0


@dataclass
class _ToolOutcome:
    call: ToolCallPart
    content: str
    articles: list[Article] = field(default_factory=list)
    query: str | None = None
    error: str | None = None

    def to_return_part(self) -> ToolReturnPart:
        return ToolReturnPart(
            tool_name=self.call.tool_name,
            content=self.content,
            tool_call_id=self.call.tool_call_id,
        )

    def to_record(self) -> ToolCallRecord:
        return ToolCallRecord(
            call_id=self.call.tool_call_id,
            name=self.call.tool_name,
            query=self.query,
            result_count=len(self.articles),
            error=self.error,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_search_query(raw_args: str | dict[str, Any] | None) -> str:
    """Extract the ``query`` argument from a tool call.

    Raises:
        MalformedToolArgumentsError: If the arguments are not a JSON object
            with a non-empty string ``query``.
    """
    if isinstance(raw_args, str):
        try:
            args = json.loads(raw_args) if raw_args.strip() else {}
        except json.JSONDecodeError as exc:
            raise MalformedToolArgumentsError(f"Tool arguments are not valid JSON: {exc.msg}") from exc
    else:
        args = raw_args or {}

    if not isinstance(args, dict):
        raise MalformedToolArgumentsError("Tool arguments must be a JSON object")

    query = args.get("query")
    if not isinstance(query, str) or not query.strip():
        raise MalformedToolArgumentsError("Tool arguments must include a non-empty 'query' string")
    return query.strip()


def format_search_results(results: list[SearchResult]) -> str:
    """Render a compact digest of search results for the model."""
    if not results:
        return NO_RESULTS_MESSAGE
    return "\n\n".join(
        f"**{r.article.title}** ({r.article.category})\n{r.article.summary}" for r in results
    )


def response_text(response: ModelResponse) -> str:
    """Concatenate the text parts of a model response."""
    return "".join(part.content for part in response.parts if isinstance(part, TextPart))


# ---------------------------------------------------------------------------
# Use case
# ---------------------------------------------------------------------------


class ChatUseCase:
    """Orchestrates a single chat turn with search exposed as a tool.

    Parameters
    ----------
    completion_service:
        Sends one request to the chat model per call.
    search_service:
        Backs the ``search_articles`` tool. ``None`` when the embedding
        provider or vector index is not configured; tool calls then degrade
        to an "unavailable" tool result instead of failing the turn.
    tool_result_limit:
        Maximum results per tool call.
    """

    def __init__(
        self,
        completion_service: ICompletionService,
        search_service: ISearchService | None,
        *,
        tool_result_limit: int = 5,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self.completion_service = completion_service
        self.search_service = search_service
        self.tool_result_limit = tool_result_limit
        self.system_prompt = system_prompt

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute(self, messages: list[ChatMessage]) -> ChatResult:
        """Run a single chat turn.

        Args:
            messages: Full conversation history. The last entry is the new
                user message. The list is only read, never modified.

        Returns:
            A ``ChatResult`` with the answer and the articles used.

        Raises:
            EmptyConversationError: If *messages* is empty.
            ConfigurationMissingError: If a required service is not configured.
            UpstreamUnavailableError: For any other completion or search failure.
        """
        if not messages:
            raise EmptyConversationError("messages list must not be empty")

        history = self._build_history(messages)
        state = TurnState.AWAITING_FIRST_RESPONSE
        t0 = time.perf_counter()

        try:
            first = await self.completion_service.request(history, tools=[SEARCH_TOOL])
            calls = [part for part in first.parts if isinstance(part, ToolCallPart)]

            if not calls:
                state = TurnState.DONE
                return self._finish(response_text(first), [], t0)

            state = TurnState.EXECUTING_TOOLS
            # gather keeps request order, so tool results line up with call ids
            outcomes: list[_ToolOutcome] = list(
                await asyncio.gather(*(self._run_tool_call(call) for call in calls))
            )

            state = TurnState.AWAITING_SECOND_RESPONSE
            followup: list[ModelMessage] = [
                *history,
                first,
                ModelRequest(parts=[outcome.to_return_part() for outcome in outcomes]),
            ]
            second = await self.completion_service.request(followup, tools=None)

            state = TurnState.DONE
            return self._finish(response_text(second), outcomes, t0)

        except (ConfigurationMissingError, UpstreamUnavailableError):
            raise
        except Exception as exc:
            logger.opt(exception=exc).error("Chat turn failed | state={}", state.value)
            raise UpstreamUnavailableError(TURN_FAILED_MESSAGE) from exc

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_history(self, messages: list[ChatMessage]) -> list[ModelMessage]:
        """Prefix the system prompt and convert messages to pydantic-ai objects."""
        history: list[ModelMessage] = [
            ModelRequest(parts=[SystemPromptPart(content=self.system_prompt)])
        ]
        for msg in messages:
            if msg.role == "user":
                history.append(ModelRequest(parts=[UserPromptPart(content=msg.content)]))
            else:
                history.append(ModelResponse(parts=[TextPart(content=msg.content)]))
        return history

    async def _run_tool_call(self, call: ToolCallPart) -> _ToolOutcome:
        """Execute one tool call. Bad arguments or unknown tools degrade the call, not the turn."""
        if call.tool_name != SEARCH_TOOL_NAME:
            logger.warning("Model requested unknown tool {}", call.tool_name)
            return _ToolOutcome(
                call=call,
                content=f"Error: unknown tool '{call.tool_name}'.",
                error="unknown_tool",
            )

        try:
            query = parse_search_query(call.args)
        except MalformedToolArgumentsError as exc:
            logger.warning("Malformed search arguments | call={} args={!r}", call.tool_call_id, call.args)
            return _ToolOutcome(call=call, content=f"Error: {exc}", error="malformed_arguments")

        if self.search_service is None:
            return _ToolOutcome(
                call=call, content=SEARCH_UNAVAILABLE_MESSAGE, query=query, error="search_unavailable"
            )

        try:
            results = await asyncio.to_thread(self.search_service.search, query, self.tool_result_limit)
        except ConfigurationMissingError as exc:
            logger.warning("Search not configured, degrading tool call | {}", exc)
            return _ToolOutcome(
                call=call, content=SEARCH_UNAVAILABLE_MESSAGE, query=query, error="search_unavailable"
            )

        results = results[: self.tool_result_limit]
        return _ToolOutcome(
            call=call,
            content=format_search_results(results),
            articles=[r.article for r in results],
            query=query,
        )

    @staticmethod
    def _finish(answer: str, outcomes: list[_ToolOutcome], t0: float) -> ChatResult:
        latency = int((time.perf_counter() - t0) * 1000)
        sources = dedupe_articles([a for outcome in outcomes for a in outcome.articles])
        records = [outcome.to_record() for outcome in outcomes]

        logger.info(
            "Chat completed | latency={}ms | tools={} | sources={}",
            latency,
            len(records),
            len(sources),
        )
        return ChatResult(answer=answer, sources=sources, tool_calls=records, latency_ms=latency)
