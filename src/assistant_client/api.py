"""Async HTTP client for the assistant API."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx
from loguru import logger

from assistant_client.models import ConversationMessage
from assistant_shared.articles import Article
from assistant_shared.exceptions import (
    ConfigurationMissingError,
    MalformedInputError,
    UpstreamUnavailableError,
)
from assistant_shared.protocols.search import SearchResult

DEFAULT_API_URL = "http://localhost:8000"


@dataclass
class ChatReply:
    message: str
    sources: list[Article] = field(default_factory=list)
    demo: bool = False


class ChatApiClient:
    """Talks to ``/api/chat``, ``/api/search`` and ``/api/config``.

    Error responses are mapped back onto the shared error taxonomy: 503 is a
    configuration problem, 400 a malformed request, anything else upstream.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ChatApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def chat(self, messages: Sequence[ConversationMessage]) -> ChatReply:
        payload = {"messages": [m.to_wire() for m in messages]}
        response = await self._send("POST", "/api/chat", json=payload)
        data = response.json()
        return ChatReply(
            message=data.get("message", ""),
            sources=[Article.from_dict(a) for a in data.get("sources") or []],
            demo=response.headers.get("X-Demo-Mode") == "true",
        )

    async def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        response = await self._send("GET", "/api/search", params={"q": query, "limit": limit})
        return [
            SearchResult(id=r["id"], score=float(r["score"]), article=Article.from_dict(r["article"]))
            for r in response.json().get("results", [])
        ]

    async def config(self, detailed: bool = True) -> dict[str, Any]:
        # 503 still carries a useful body here, so it is not treated as an error
        try:
            response = await self._client.get("/api/config", params={"detailed": str(detailed).lower()})
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"Assistant API unreachable: {exc}") from exc
        if response.status_code not in (200, 503):
            raise UpstreamUnavailableError(_error_message(response))
        return response.json()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("{} {} failed | {}", method, url, exc)
            raise UpstreamUnavailableError(f"Assistant API unreachable: {exc}") from exc

        if response.status_code == 503:
            raise ConfigurationMissingError(_error_message(response))
        if response.status_code == 400:
            raise MalformedInputError(_error_message(response))
        if response.is_error:
            raise UpstreamUnavailableError(_error_message(response))
        return response


def _error_message(response: httpx.Response) -> str:
    try:
        return str(response.json()["error"])
    except (ValueError, KeyError, TypeError):
        return f"HTTP {response.status_code}"
