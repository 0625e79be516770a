"""Conversation session with cancellation of superseded turns.

The session owns the conversation. Each ``send`` starts a new turn and
cancels the one still in flight; a cancelled or superseded turn never
touches the conversation, so a stale reply cannot be appended after a
newer question.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from assistant_client.api import ChatApiClient, ChatReply
from assistant_client.models import ConversationMessage, ConversationSnapshot
from assistant_client.store import ConversationStore
from assistant_shared.articles import dedupe_articles


class ChatSession:
    """One conversation, optionally persisted through a ``ConversationStore``."""

    def __init__(self, api: ChatApiClient, store: ConversationStore | None = None) -> None:
        self.api = api
        self.store = store
        self.snapshot = store.load() if store else ConversationSnapshot()
        self._turn = 0
        self._inflight: asyncio.Task[ChatReply] | None = None

    @property
    def messages(self) -> list[ConversationMessage]:
        return self.snapshot.messages

    async def send(self, text: str) -> ConversationMessage | None:
        """Ask a question and append the answer.

        Returns the assistant message, or ``None`` when this turn was
        superseded by a later ``send`` or ``cancel``. API errors propagate
        and leave the conversation unchanged.
        """
        self.cancel()
        self._turn += 1
        turn = self._turn

        user = ConversationMessage(role="user", content=text)
        outgoing = [*self.snapshot.messages, user]
        task = asyncio.ensure_future(self.api.chat(outgoing))
        self._inflight = task

        try:
            reply = await task
        except asyncio.CancelledError:
            if turn != self._turn:
                logger.debug("Turn {} superseded", turn)
                return None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

        if turn != self._turn:
            logger.debug("Turn {} superseded, dropping reply", turn)
            return None

        assistant = ConversationMessage(role="assistant", content=reply.message, sources=reply.sources)
        self.snapshot.messages.extend([user, assistant])
        self.snapshot.sources = dedupe_articles([*reply.sources, *self.snapshot.sources])
        self._persist()
        return assistant

    def cancel(self) -> None:
        """Abort the in-flight turn, if any."""
        self._turn += 1
        if self._inflight and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    def clear(self) -> None:
        self.cancel()
        self.snapshot = ConversationSnapshot()
        if self.store:
            self.store.clear()

    def _persist(self) -> None:
        if self.store:
            self.store.save(self.snapshot)
