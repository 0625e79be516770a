"""Domain entities and value objects.

These are the core data structures of the chat domain, independent of any
infrastructure or framework concerns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single prior or new message, reduced to what the model may see.

    Extra client-side fields (sources, timestamps, ids) are dropped on
    validation and never forwarded to the completion service.
    """

    role: Literal["user", "assistant"] = Field(description="Message role: 'user' or 'assistant'")
    content: str = Field(description="Message content")


@dataclass
class ToolCallRecord:
    """What one search tool call did during a turn (for logging and responses)."""

    call_id: str
    name: str
    query: str | None
    result_count: int
    error: str | None = None
