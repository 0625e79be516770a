"""Main CLI for the content indexer (``content-indexer``)."""

import sys

import click

from assistant_backend.services.search_service import SemanticSearchService
from assistant_shared.embedding import MockEmbeddingProvider, build_embedding_provider
from assistant_shared.exceptions import AssistantError
from assistant_shared.logging_config import setup_logging
from assistant_shared.vector_index import PineconeVectorIndex
from content_indexer import config
from content_indexer.content_source import DrupalContentSource
from content_indexer.indexer import ContentIndexer
from content_indexer.processors.article_processor import ArticleProcessor


def build_embedder(mock_embeddings: bool = False):
    if mock_embeddings:
        return MockEmbeddingProvider(dimension=config.EMBEDDING_DIMENSIONS)
    return build_embedding_provider(
        config.EMBEDDING_PROVIDER,
        openai_api_key=config.OPENAI_API_KEY,
        openai_base_url=config.OPENAI_BASE_URL,
        openai_model=config.EMBEDDING_MODEL,
        openai_dimensions=config.EMBEDDING_DIMENSIONS,
        pinecone_api_key=config.PINECONE_API_KEY,
        pinecone_model=config.PINECONE_EMBEDDING_MODEL,
        pinecone_dimensions=config.PINECONE_EMBEDDING_DIMENSIONS,
    )


def build_vector_index() -> PineconeVectorIndex:
    return PineconeVectorIndex(
        api_key=config.PINECONE_API_KEY,
        index_name=config.PINECONE_INDEX,
        cloud=config.PINECONE_CLOUD,
        region=config.PINECONE_REGION,
        wait_timeout=config.INDEX_WAIT_TIMEOUT,
    )


def build_source() -> DrupalContentSource:
    return DrupalContentSource(
        config.DRUPAL_BASE_URL,
        config.DRUPAL_CLIENT_ID or "",
        config.DRUPAL_CLIENT_SECRET or "",
        page_size=config.PAGE_SIZE,
        max_pages=config.MAX_PAGES,
        timeout=config.DRUPAL_TIMEOUT_SECONDS,
    )


@click.group()
@click.option("--verbose", is_flag=True, help="Show debug logs.")
def cli(verbose: bool):
    """Index CMS articles into the vector index for semantic search."""
    setup_logging(level="DEBUG" if verbose else "INFO")


@cli.command()
@click.option(
    "--mock-embeddings",
    is_flag=True,
    help="Use mock embeddings (no embedding API). Use for wiring checks without API keys.",
)
def index(mock_embeddings: bool):
    """Fetch every article, embed it and upsert it into the index."""
    click.echo("=" * 60)
    click.echo("Content indexer")
    click.echo("=" * 60)

    try:
        config.validate_config(mock_embeddings=mock_embeddings)

        embedder = build_embedder(mock_embeddings)
        with build_source() as source:
            indexer = ContentIndexer(
                source,
                ArticleProcessor(embedder),
                build_vector_index(),
                item_delay=config.ITEM_DELAY_SECONDS,
            )
            report = indexer.run()
    except AssistantError as e:
        click.echo(f"\n✗ Indexing failed: {e}", err=True)
        sys.exit(1)

    if report.total == 0:
        click.echo("\nNo articles to index. Make sure content is imported.")
        return

    click.echo("\nIndex summary:")
    click.echo(f"  - Index name: {config.PINECONE_INDEX}")
    click.echo(f"  - Articles indexed: {report.indexed}/{report.total}")
    click.echo(f"  - Embedding provider: {'mock' if mock_embeddings else config.EMBEDDING_PROVIDER}")

    if not report.ok:
        click.echo(f"\n✗ {len(report.failed)} articles failed:", err=True)
        for article_id, error in report.failed:
            click.echo(f"  - {article_id}: {error}", err=True)
        sys.exit(1)

    click.echo(f"\n✓ Successfully indexed {report.indexed} articles")


@cli.command()
@click.argument("article_id")
def delete(article_id: str):
    """Remove one article from the index."""
    try:
        build_vector_index().delete(article_id)
    except AssistantError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"✓ Deleted {article_id}")


@cli.command()
def clear():
    """Remove every record from the index."""
    if not click.confirm(f"⚠ This will delete all vectors in '{config.PINECONE_INDEX}'. Continue?"):
        click.echo("Cancelled.")
        return

    try:
        build_vector_index().clear_all()
    except AssistantError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)
    click.echo("✓ Index cleared")


@cli.command()
def stats():
    """Show index statistics."""
    try:
        info = build_vector_index().stats()
    except AssistantError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Index: {info['index_name']}")
    click.echo(f"  Vectors: {info['total_vectors']}")
    click.echo(f"  Dimension: {info['dimension']}")


@cli.command()
@click.argument("query")
@click.option("--limit", default=5, help="Number of results to return")
def search(query: str, limit: int):
    """Search the index directly (bypasses the API)."""
    try:
        service = SemanticSearchService(build_embedder(), build_vector_index())
        results = service.search(query, limit)
    except AssistantError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"\nFound {len(results)} results for: '{query}'")
    for i, result in enumerate(results, 1):
        click.echo(f"\n{i}. {result.article.title} (/articles/{result.article.slug})")
        click.echo(f"   Category: {result.article.category}")
        click.echo(f"   Score: {result.score:.4f}")
        click.echo(f"   Summary: {result.article.summary[:200]}")


if __name__ == "__main__":
    cli()
