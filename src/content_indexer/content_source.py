"""Drupal content source: OAuth client credentials + GraphQL."""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

import httpx
from loguru import logger

from assistant_shared.articles import DEFAULT_CATEGORY, DEFAULT_READ_TIME, Article, ArticleImage
from assistant_shared.exceptions import ContentSourceError

ARTICLES_QUERY = """\
query GetArticles($first: Int!, $after: Cursor) {
  nodeArticles(first: $first, after: $after) {
    pageInfo {
      hasNextPage
      endCursor
    }
    nodes {
      id
      title
      path
      created {
        time
      }
      body {
        processed
      }
      summary
      category
      tags
      readTime
      image {
        url
        alt
      }
    }
  }
}
"""

_ARTICLE_PATH_PREFIX = re.compile(r"^/articles/")


def node_to_article(node: dict[str, Any]) -> Article:
    """Map one GraphQL article node to an :class:`Article`, filling defaults."""
    node_id = str(node["id"])
    title = node.get("title") or ""
    path = node.get("path") or ""
    raw_tags = node.get("tags") or []
    if isinstance(raw_tags, str):
        tags = [t.strip() for t in raw_tags.split(",") if t.strip()]
    else:
        tags = [str(t).strip() for t in raw_tags if str(t).strip()]
    image = node.get("image")

    return Article(
        id=node_id,
        title=title,
        slug=_ARTICLE_PATH_PREFIX.sub("", path) or node_id,
        body=(node.get("body") or {}).get("processed") or "",
        summary=node.get("summary") or "",
        category=node.get("category") or DEFAULT_CATEGORY,
        tags=tags,
        image=ArticleImage(url=image["url"], alt=image.get("alt") or title) if image and image.get("url") else None,
        read_time=node.get("readTime") or DEFAULT_READ_TIME,
        published_at=(node.get("created") or {}).get("time") or datetime.now(UTC).isoformat(),
    )


class DrupalContentSource:
    """Fetches articles from a Drupal site.

    Parameters
    ----------
    base_url:
        Site root, e.g. ``https://cms.example.com``.
    client_id / client_secret:
        OAuth client credentials.
    page_size:
        Articles per GraphQL request.
    max_pages:
        Upper bound on requests per run, so a cursor that never ends cannot
        loop forever.
    """

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        *,
        page_size: int = 100,
        max_pages: int = 50,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.page_size = page_size
        self.max_pages = max_pages
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> DrupalContentSource:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_access_token(self) -> str:
        """Exchange the client credentials for a bearer token."""
        try:
            response = self._client.post(
                "/oauth/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
            )
            response.raise_for_status()
            token = response.json()["access_token"]
        except httpx.HTTPStatusError as exc:
            raise ContentSourceError(
                f"Failed to get access token: HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            raise ContentSourceError(f"Failed to get access token: {exc}") from exc
        logger.debug("Obtained Drupal access token")
        return token

    def iter_articles(self) -> Iterator[Article]:
        """Yield every article, following the GraphQL cursor page by page."""
        token = self.get_access_token()
        cursor: str | None = None

        for page in range(1, self.max_pages + 1):
            connection = self._query_page(token, cursor)
            nodes = connection.get("nodes") or []
            logger.info("Fetched page {} | articles={}", page, len(nodes))
            for node in nodes:
                yield node_to_article(node)

            page_info = connection.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor:
                return

        logger.warning("Stopped after {} pages; more articles may remain", self.max_pages)

    def fetch_articles(self) -> list[Article]:
        return list(self.iter_articles())

    def _query_page(self, token: str, cursor: str | None) -> dict[str, Any]:
        try:
            response = self._client.post(
                "/graphql",
                json={"query": ARTICLES_QUERY, "variables": {"first": self.page_size, "after": cursor}},
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise ContentSourceError(f"GraphQL request failed: HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ContentSourceError(f"GraphQL request failed: {exc}") from exc

        if payload.get("errors"):
            raise ContentSourceError(f"GraphQL errors: {payload['errors']}")
        return ((payload.get("data") or {}).get("nodeArticles")) or {}
