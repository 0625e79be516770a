"""Tests for the client ChatSession and ChatApiClient (httpx.MockTransport)."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from assistant_client.api import ChatApiClient
from assistant_client.session import ChatSession
from assistant_client.store import ConversationStore
from assistant_shared.exceptions import (
    ConfigurationMissingError,
    MalformedInputError,
    UpstreamUnavailableError,
)
from factories import make_article


def _chat_reply(message: str, source_ids: tuple[str, ...] = ()) -> dict:
    return {
        "message": message,
        "sources": [make_article(i, f"Article {i}", body="").to_dict() for i in source_ids],
    }


class ScriptedApi:
    """Answers /api/chat with the last user message echoed back."""

    def __init__(self):
        self.requests: list[dict] = []
        self.gates: dict[str, asyncio.Event] = {}

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        question = body["messages"][-1]["content"]
        gate = self.gates.get(question)
        if gate:
            await gate.wait()
        return httpx.Response(200, json=_chat_reply(f"answer to {question}", ("a1",)))


@pytest.fixture()
def scripted() -> ScriptedApi:
    return ScriptedApi()


@pytest.fixture()
async def api(scripted: ScriptedApi):
    async with ChatApiClient("http://test", transport=httpx.MockTransport(scripted)) as client:
        yield client


class TestChatSession:
    async def test_send_appends_both_messages(self, api: ChatApiClient, scripted: ScriptedApi):
        session = ChatSession(api)

        reply = await session.send("What is ISR?")

        assert reply.content == "answer to What is ISR?"
        assert [m.role for m in session.messages] == ["user", "assistant"]
        assert [a.id for a in session.messages[1].sources] == ["a1"]
        assert scripted.requests[0] == {"messages": [{"role": "user", "content": "What is ISR?"}]}

    async def test_prior_turns_are_sent_without_client_fields(self, api: ChatApiClient, scripted: ScriptedApi):
        session = ChatSession(api)
        await session.send("first")
        await session.send("second")

        assert scripted.requests[1]["messages"] == [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "answer to first"},
            {"role": "user", "content": "second"},
        ]

    async def test_superseded_turn_never_reaches_conversation(self, api: ChatApiClient, scripted: ScriptedApi):
        scripted.gates["slow"] = asyncio.Event()
        session = ChatSession(api)

        stale = asyncio.create_task(session.send("slow"))
        await asyncio.sleep(0.01)
        fresh = await session.send("fast")

        assert await stale is None
        assert fresh.content == "answer to fast"
        assert [m.content for m in session.messages] == ["fast", "answer to fast"]

    async def test_cancel_drops_inflight_turn(self, api: ChatApiClient, scripted: ScriptedApi):
        scripted.gates["slow"] = asyncio.Event()
        session = ChatSession(api)

        pending = asyncio.create_task(session.send("slow"))
        await asyncio.sleep(0.01)
        session.cancel()

        assert await pending is None
        assert session.messages == []

    async def test_failed_turn_leaves_conversation_unchanged(self):
        def fail(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "Chat failed. Please try again."})

        async with ChatApiClient("http://test", transport=httpx.MockTransport(fail)) as api:
            session = ChatSession(api)
            with pytest.raises(UpstreamUnavailableError, match="Chat failed"):
                await session.send("hi")
        assert session.messages == []

    async def test_conversation_is_persisted(self, api: ChatApiClient, tmp_path: Path):
        db_path = tmp_path / "history.sqlite"
        with ConversationStore(db_path) as store:
            await ChatSession(api, store).send("remember me")

        with ConversationStore(db_path) as store:
            restored = ChatSession(api, store)
            assert [m.content for m in restored.messages] == ["remember me", "answer to remember me"]
            assert [a.id for a in restored.snapshot.sources] == ["a1"]

            restored.clear()
            assert store.load().messages == []


class TestChatApiClientErrors:
    @pytest.mark.parametrize(
        ("status", "error"),
        [(503, ConfigurationMissingError), (400, MalformedInputError), (500, UpstreamUnavailableError)],
    )
    async def test_status_mapping(self, status, error):
        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"error": "boom"})

        async with ChatApiClient("http://test", transport=httpx.MockTransport(respond)) as api:
            with pytest.raises(error, match="boom"):
                await api.search("react")

    async def test_connection_error(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with ChatApiClient("http://test", transport=httpx.MockTransport(refuse)) as api:
            with pytest.raises(UpstreamUnavailableError, match="unreachable"):
                await api.search("react")

    async def test_demo_header(self):
        def demo(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_chat_reply("demo"), headers={"X-Demo-Mode": "true"})

        async with ChatApiClient("http://test", transport=httpx.MockTransport(demo)) as api:
            from assistant_client.models import ConversationMessage

            reply = await api.chat([ConversationMessage(role="user", content="hi")])
        assert reply.demo is True

    async def test_config_503_is_returned_not_raised(self):
        def probe(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"configured": False, "demoMode": False, "status": "partial"})

        async with ChatApiClient("http://test", transport=httpx.MockTransport(probe)) as api:
            data = await api.config()
        assert data["status"] == "partial"
