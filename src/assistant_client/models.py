"""Client-side conversation entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from assistant_shared.articles import Article


def _utcnow() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class ConversationMessage:
    """One message of the client-owned conversation.

    Only assistant messages carry ``sources``.
    """

    role: Literal["user", "assistant"]
    content: str
    sources: list[Article] = field(default_factory=list)
    created_at: str = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.role not in ("user", "assistant"):
            raise ValueError(f"Unknown role '{self.role}'")
        if self.role == "user" and self.sources:
            raise ValueError("Only assistant messages may carry sources")

    def to_wire(self) -> dict[str, str]:
        """The ``{role, content}`` pair sent to the API."""
        return {"role": self.role, "content": self.content}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "role": self.role,
            "content": self.content,
            "createdAt": self.created_at,
        }
        if self.sources:
            data["sources"] = [a.to_dict() for a in self.sources]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationMessage:
        return cls(
            role=data["role"],
            content=str(data["content"]),
            sources=[Article.from_dict(a) for a in data.get("sources") or []],
            created_at=str(data.get("createdAt") or _utcnow()),
        )


@dataclass
class ConversationSnapshot:
    """What the client persists between runs: the messages plus the sources panel."""

    messages: list[ConversationMessage] = field(default_factory=list)
    sources: list[Article] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "sources": [a.to_dict() for a in self.sources],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationSnapshot:
        return cls(
            messages=[ConversationMessage.from_dict(m) for m in data.get("messages") or []],
            sources=[Article.from_dict(a) for a in data.get("sources") or []],
        )
