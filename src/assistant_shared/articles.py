"""Article entity and its projection into vector-index metadata.

The index never stores the article body. ``to_index_metadata`` and
``article_from_metadata`` are the only two places that know the metadata
layout, so the indexer (writer) and the search service (reader) stay in sync.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_CATEGORY = "General"
DEFAULT_READ_TIME = "5 min read"


@dataclass
class ArticleImage:
    url: str
    alt: str = ""


@dataclass
class Article:
    """A knowledge-base article as delivered by the content source."""

    id: str
    title: str
    slug: str
    body: str = ""
    summary: str = ""
    category: str = DEFAULT_CATEGORY
    tags: list[str] = field(default_factory=list)
    image: ArticleImage | None = None
    read_time: str = DEFAULT_READ_TIME
    published_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the camelCase keys used on the wire."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "body": self.body,
            "summary": self.summary,
            "category": self.category,
            "tags": list(self.tags),
            "readTime": self.read_time,
            "publishedAt": self.published_at,
        }
        if self.image:
            data["image"] = {"url": self.image.url, "alt": self.image.alt}
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Article:
        """Inverse of :meth:`to_dict`. Raises ``KeyError`` when ``id`` is absent."""
        image = data.get("image")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            slug=str(data.get("slug") or data["id"]),
            body=str(data.get("body") or ""),
            summary=str(data.get("summary") or ""),
            category=str(data.get("category") or DEFAULT_CATEGORY),
            tags=[str(t) for t in data.get("tags") or []],
            image=ArticleImage(url=image["url"], alt=image.get("alt") or "") if image else None,
            read_time=str(data.get("readTime") or DEFAULT_READ_TIME),
            published_at=str(data.get("publishedAt") or ""),
        )


@dataclass
class IndexedChunk:
    """The vector-index record for one article."""

    id: str
    vector: list[float]
    metadata: dict[str, Any]


# ---------------------------------------------------------------------------
# Metadata projection
# ---------------------------------------------------------------------------


def to_index_metadata(article: Article) -> dict[str, Any]:
    """Flatten an article into index metadata, leaving out the body."""
    return {
        "title": article.title,
        "slug": article.slug,
        "summary": article.summary,
        "category": article.category,
        "tags": list(article.tags),
        "readTime": article.read_time,
        "publishedAt": article.published_at,
        "imageUrl": article.image.url if article.image else "",
        "imageAlt": article.image.alt if article.image else "",
    }


def _parse_tags(raw: Any) -> list[str]:
    # Older records store tags as a single "a, b, c" string.
    if isinstance(raw, str):
        return [t.strip() for t in raw.split(",") if t.strip()]
    if isinstance(raw, (list, tuple)):
        return [str(t) for t in raw if str(t).strip()]
    return []


def article_from_metadata(article_id: str, metadata: Mapping[str, Any] | None) -> Article:
    """Rebuild an article from index metadata.

    Missing fields fall back to fixed defaults so partially indexed records
    never break a search. The body is always empty.
    """
    md = metadata or {}
    image_url = md.get("imageUrl") or ""
    return Article(
        id=article_id,
        title=str(md.get("title") or ""),
        slug=str(md.get("slug") or ""),
        body="",
        summary=str(md.get("summary") or ""),
        category=str(md.get("category") or DEFAULT_CATEGORY),
        tags=_parse_tags(md.get("tags")),
        image=ArticleImage(url=str(image_url), alt=str(md.get("imageAlt") or "")) if image_url else None,
        read_time=str(md.get("readTime") or DEFAULT_READ_TIME),
        published_at=str(md.get("publishedAt") or ""),
    )


def dedupe_articles(articles: list[Article]) -> list[Article]:
    """Drop repeated ids, keeping each article at its first-seen position."""
    seen: set[str] = set()
    unique: list[Article] = []
    for article in articles:
        if article.id in seen:
            continue
        seen.add(article.id)
        unique.append(article)
    return unique
