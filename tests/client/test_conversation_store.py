"""Tests for the SQLite conversation snapshot store."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from assistant_client.models import ConversationMessage, ConversationSnapshot
from assistant_client.store import STORAGE_KEY, ConversationStore
from factories import make_article


@pytest.fixture()
def store(tmp_path: Path):
    with ConversationStore(tmp_path / "history.sqlite") as s:
        yield s


def _write_raw(db_path: Path, value: str) -> None:
    conn = sqlite3.connect(str(db_path))
    conn.execute("INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (STORAGE_KEY, value))
    conn.commit()
    conn.close()


class TestConversationStore:
    def test_empty_store_loads_empty_snapshot(self, store: ConversationStore):
        snapshot = store.load()
        assert snapshot.messages == []
        assert snapshot.sources == []

    def test_save_then_load(self, store: ConversationStore):
        article = make_article("a1", "Next.js Performance", body="")
        snapshot = ConversationSnapshot(
            messages=[
                ConversationMessage(role="user", content="How fast is ISR?"),
                ConversationMessage(role="assistant", content="Very.", sources=[article]),
            ],
            sources=[article],
        )

        store.save(snapshot)
        loaded = store.load()

        assert [m.content for m in loaded.messages] == ["How fast is ISR?", "Very."]
        assert loaded.messages[1].sources == [article]
        assert loaded.sources == [article]

    def test_save_overwrites_previous_snapshot(self, store: ConversationStore):
        store.save(ConversationSnapshot(messages=[ConversationMessage(role="user", content="one")]))
        store.save(ConversationSnapshot(messages=[ConversationMessage(role="user", content="two")]))

        assert [m.content for m in store.load().messages] == ["two"]

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            "[1, 2, 3]",
            '{"messages": [{"role": "robot", "content": "x"}]}',
            '{"messages": [{"role": "user"}]}',
            '{"messages": [{"role": "user", "content": "x", "sources": [{"id": "a"}]}]}',
            '{"messages": [], "sources": [["not", "an", "object"]]}',
            '{"messages": [{"role": "assistant", "content": "x", "sources": ["str"]}]}',
            '{"messages": ["just text"]}',
        ],
    )
    def test_corrupt_snapshot_is_empty_history(self, tmp_path: Path, raw: str):
        db_path = tmp_path / "history.sqlite"
        with ConversationStore(db_path) as store:
            _write_raw(db_path, raw)
            snapshot = store.load()

        assert snapshot.messages == []
        assert snapshot.sources == []

    def test_file_that_is_not_a_database_is_moved_aside(self, tmp_path: Path):
        db_path = tmp_path / "history.sqlite"
        db_path.write_bytes(b"this is not a sqlite database at all" * 4)

        with ConversationStore(db_path) as store:
            assert store.load().messages == []
            store.save(ConversationSnapshot(messages=[ConversationMessage(role="user", content="hi")]))
            assert [m.content for m in store.load().messages] == ["hi"]

        assert (tmp_path / "history.sqlite.corrupt").exists()

    def test_clear(self, store: ConversationStore):
        store.save(ConversationSnapshot(messages=[ConversationMessage(role="user", content="hi")]))
        store.clear()
        assert store.load().messages == []


class TestConversationMessage:
    def test_user_messages_cannot_carry_sources(self):
        with pytest.raises(ValueError, match="Only assistant messages"):
            ConversationMessage(role="user", content="hi", sources=[make_article("a1", "A")])

    def test_wire_form_is_role_and_content_only(self):
        message = ConversationMessage(role="assistant", content="answer", sources=[make_article("a1", "A")])
        assert message.to_wire() == {"role": "assistant", "content": "answer"}
