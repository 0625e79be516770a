"""Conversation snapshot persistence.

A tiny key/value table in a local SQLite file. The whole conversation is
stored as one JSON document under a fixed key, so a load either returns a
complete snapshot or nothing.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from assistant_client.models import ConversationSnapshot

STORAGE_KEY = "article-assistant-chat"

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


class ConversationStore:
    """Load, save and clear the persisted conversation snapshot.

    Unreadable or corrupt data is never fatal: it is logged and treated as
    an empty history.
    """

    def __init__(self, db_path: Path, key: str = STORAGE_KEY) -> None:
        self.db_path = db_path
        self.key = key
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open (or create) the database and ensure the table exists.

        A file that is not a SQLite database is moved aside to
        ``<name>.corrupt`` and a fresh store is created in its place.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._open()
        except sqlite3.DatabaseError as exc:
            logger.warning(
                "Conversation store unreadable, moving it aside | {} | {}", self.db_path, exc
            )
            self.close()
            self.db_path.replace(self.db_path.with_name(self.db_path.name + ".corrupt"))
            self._open()
        logger.debug("Conversation store ready at {}", self.db_path)

    def _open(self) -> None:
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.executescript(_SCHEMA_SQL)
        self.conn.commit()

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> ConversationStore:
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def load(self) -> ConversationSnapshot:
        assert self.conn
        try:
            row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (self.key,)).fetchone()
        except sqlite3.DatabaseError as exc:
            logger.warning("Conversation store unreadable, starting fresh | {}", exc)
            return ConversationSnapshot()
        if not row:
            return ConversationSnapshot()

        try:
            data = json.loads(row[0])
            if not isinstance(data, dict):
                raise ValueError("snapshot is not a JSON object")
            return ConversationSnapshot.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Corrupt conversation snapshot, starting fresh | {}", exc)
            return ConversationSnapshot()

    def save(self, snapshot: ConversationSnapshot) -> None:
        assert self.conn
        now = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
        self.conn.execute(
            "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
            (self.key, json.dumps(snapshot.to_dict()), now),
        )
        self.conn.commit()

    def clear(self) -> None:
        assert self.conn
        self.conn.execute("DELETE FROM kv WHERE key = ?", (self.key,))
        self.conn.commit()
