"""Terminal chat client (``assistant-chat``)."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from assistant_client.api import DEFAULT_API_URL, ChatApiClient
from assistant_client.session import ChatSession
from assistant_client.store import ConversationStore
from assistant_shared.articles import Article
from assistant_shared.exceptions import AssistantError
from assistant_shared.logging_config import setup_logging

DEFAULT_HISTORY_DB = Path.home() / ".article-assistant" / "history.sqlite"

_HELP = "Commands: /sources  /clear  /quit"


def _format_source(index: int, article: Article) -> str:
    return f"  {index}. {article.title} ({article.category}, {article.read_time}) /articles/{article.slug}"


@click.group()
@click.option("--api-url", envvar="ASSISTANT_API_URL", default=DEFAULT_API_URL, show_default=True)
@click.option("--verbose", is_flag=True, help="Show debug logs.")
@click.pass_context
def cli(ctx: click.Context, api_url: str, verbose: bool):
    """Chat with the article assistant from the terminal."""
    setup_logging(level="DEBUG" if verbose else "WARNING", compact=True)
    ctx.obj = {"api_url": api_url}


@cli.command()
@click.option(
    "--history-db",
    envvar="ASSISTANT_HISTORY_DB",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_HISTORY_DB,
    show_default=True,
    help="SQLite file holding the saved conversation.",
)
@click.option("--no-history", is_flag=True, help="Do not load or save the conversation.")
@click.pass_obj
def chat(obj: dict, history_db: Path, no_history: bool):
    """Interactive chat session."""
    store = None if no_history else ConversationStore(history_db)
    if store:
        store.connect()
    try:
        asyncio.run(_repl(obj["api_url"], store))
    finally:
        if store:
            store.close()


async def _repl(api_url: str, store: ConversationStore | None) -> None:
    async with ChatApiClient(api_url) as api:
        session = ChatSession(api, store)
        if session.messages:
            click.echo(f"Restored {len(session.messages)} messages. {_HELP}")
        else:
            click.echo(_HELP)

        while True:
            try:
                text = await asyncio.to_thread(click.prompt, "you", prompt_suffix="> ")
            except (EOFError, click.Abort):
                click.echo()
                return

            text = text.strip()
            if not text:
                continue
            if text == "/quit":
                return
            if text == "/clear":
                session.clear()
                click.echo("Conversation cleared.")
                continue
            if text == "/sources":
                if not session.snapshot.sources:
                    click.echo("No sources yet.")
                for i, article in enumerate(session.snapshot.sources, 1):
                    click.echo(_format_source(i, article))
                continue

            try:
                reply = await session.send(text)
            except AssistantError as exc:
                click.echo(f"✗ {exc}", err=True)
                continue

            if reply is None:
                continue
            click.echo(f"\n{reply.content}\n")
            for i, article in enumerate(reply.sources, 1):
                click.echo(_format_source(i, article))
            if reply.sources:
                click.echo()


@cli.command()
@click.argument("query")
@click.option("--limit", default=5, help="Number of results to return")
@click.pass_obj
def search(obj: dict, query: str, limit: int):
    """Semantic search through the API."""

    async def _run():
        async with ChatApiClient(obj["api_url"]) as api:
            return await api.search(query, limit)

    try:
        results = asyncio.run(_run())
    except AssistantError as exc:
        click.echo(f"✗ Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"\nFound {len(results)} results for: '{query}'")
    for i, result in enumerate(results, 1):
        click.echo(f"\n{i}. {result.article.title}")
        click.echo(f"   Category: {result.article.category}")
        click.echo(f"   Score: {result.score:.4f}")
        click.echo(f"   Summary: {result.article.summary[:200]}")


@cli.command()
@click.pass_obj
def status(obj: dict):
    """Show which backing services the API has configured."""

    async def _run():
        async with ChatApiClient(obj["api_url"]) as api:
            return await api.config(detailed=True)

    try:
        data = asyncio.run(_run())
    except AssistantError as exc:
        click.echo(f"✗ Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Status: {data.get('status', 'unknown')}")
    if data.get("demoMode"):
        click.echo("Demo mode: on")
    for name, ok in (data.get("services") or {}).items():
        click.echo(f"  {'✓' if ok else '✗'} {name}")
    if not data.get("configured"):
        sys.exit(1)


if __name__ == "__main__":
    cli()
