"""Sequential indexing run: fetch, embed, upsert."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger

from assistant_shared.articles import Article
from assistant_shared.exceptions import UpstreamUnavailableError
from assistant_shared.protocols.vector_index import IVectorIndex
from content_indexer.processors.article_processor import ArticleProcessor


class IContentSource(Protocol):
    def fetch_articles(self) -> list[Article]: ...


@dataclass
class IndexingReport:
    total: int = 0
    indexed: int = 0
    failed: list[tuple[str, str]] = field(default_factory=list)
    index_created: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed


class ContentIndexer:
    """Indexes every article from a content source, one at a time.

    Re-running is safe: records are keyed by article id, so a second run
    overwrites instead of duplicating. A failing article is logged, counted
    and skipped; configuration and content-source errors abort the run.
    """

    def __init__(
        self,
        source: IContentSource,
        processor: ArticleProcessor,
        vector_index: IVectorIndex,
        *,
        item_delay: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self.processor = processor
        self.vector_index = vector_index
        self.item_delay = item_delay
        self.sleep = sleep

    def run(self) -> IndexingReport:
        report = IndexingReport()
        report.index_created = self.vector_index.ensure_index(
            self.processor.embedding_provider.dimension
        )

        logger.info("Fetching articles from content source")
        articles = self.source.fetch_articles()
        report.total = len(articles)
        logger.info("Found {} articles", report.total)

        if not articles:
            logger.warning("No articles to index. Make sure content is imported.")
            return report

        self.index_articles(articles, report)
        logger.info(
            "Indexing finished | indexed={} failed={} total={}",
            report.indexed,
            len(report.failed),
            report.total,
        )
        return report

    def index_articles(self, articles: Iterable[Article], report: IndexingReport) -> None:
        articles = list(articles)
        for i, article in enumerate(articles, 1):
            logger.info("[{}/{}] Processing: {}", i, len(articles), article.title[:50])
            try:
                chunk = self.processor.to_chunk(article)
                self.vector_index.upsert(chunk.id, chunk.vector, chunk.metadata)
            except UpstreamUnavailableError as exc:
                logger.error("[{}/{}] Failed: {} | {}", i, len(articles), article.id, exc)
                report.failed.append((article.id, str(exc)))
            else:
                report.indexed += 1

            if i < len(articles) and self.item_delay > 0:
                self.sleep(self.item_delay)
