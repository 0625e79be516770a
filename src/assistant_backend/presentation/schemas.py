"""HTTP request/response schemas (Pydantic models) for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from assistant_backend.domain.models import ChatMessage
from assistant_shared.articles import Article
from assistant_shared.protocols.search import SearchResult

# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------


class ArticleImageSchema(BaseModel):
    url: str
    alt: str = ""


class ArticleSchema(BaseModel):
    """An article as returned to clients (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    slug: str
    body: str = ""
    summary: str = ""
    category: str
    tags: list[str] = Field(default_factory=list)
    image: ArticleImageSchema | None = None
    read_time: str = Field(alias="readTime")
    published_at: str = Field(alias="publishedAt")

    @classmethod
    def from_article(cls, article: Article) -> ArticleSchema:
        return cls.model_validate(article.to_dict())


class SearchResultSchema(BaseModel):
    id: str
    score: float
    article: ArticleSchema

    @classmethod
    def from_result(cls, result: SearchResult) -> SearchResultSchema:
        return cls(id=result.id, score=result.score, article=ArticleSchema.from_article(result.article))


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class SearchResponse(BaseModel):
    """Response body from GET /api/search."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    results: list[SearchResultSchema]
    total_results: int = Field(alias="totalResults")


# ---------------------------------------------------------------------------
# Chat (stateless — the client owns the history)
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    """Request body for POST /api/chat.

    Each message is reduced to ``{role, content}``; any other client-side
    fields are ignored.
    """

    messages: list[ChatMessage] = Field(description="Full conversation, newest user turn last")


class ChatResponse(BaseModel):
    """Response body from POST /api/chat."""

    message: str = Field(description="The assistant's answer (markdown)")
    sources: list[ArticleSchema] = Field(
        default_factory=list,
        description="Articles surfaced by search during this turn, deduplicated by id",
    )


# ---------------------------------------------------------------------------
# Config probe
# ---------------------------------------------------------------------------


class ConfigStatusResponse(BaseModel):
    """Response body from GET /api/config."""

    model_config = ConfigDict(populate_by_name=True)

    configured: bool
    demo_mode: bool = Field(alias="demoMode")
    status: str = Field(description="'ready', 'partial' or 'unconfigured'")
    services: dict[str, bool] | None = None


class ErrorResponse(BaseModel):
    error: str
