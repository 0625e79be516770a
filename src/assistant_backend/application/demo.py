"""Demo mode — canned answers over bundled mock articles.

Used when ``DEMO_MODE=true`` so the front end can be explored without a
CMS, vector index or completion service. Nothing in here calls a network
service.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources

from assistant_shared.articles import Article

DEMO_DISCLAIMER = (
    "\n\n---\n*This is a demo response. Connect your Drupal backend, Pinecone "
    "and Groq API to get real answers from your content.*"
)


@dataclass
class DemoReply:
    message: str
    sources: list[Article]


@lru_cache
def load_mock_articles() -> tuple[Article, ...]:
    """Read the bundled mock articles once."""
    raw = resources.files("assistant_backend.data").joinpath("mock_articles.json").read_text("utf-8")
    return tuple(Article.from_dict(item) for item in json.loads(raw)["articles"])


_TOPICS = """## Topics We Cover

The knowledge base has articles on:

- **Next.js & React** - modern frontend development
- **Drupal** - enterprise content management
- **GraphQL APIs** - efficient data fetching
- **TypeScript** - type-safe development
- **Performance** - building fast websites

Open the sources panel to explore a few of them."""

_GETTING_STARTED = """## Getting Started

1. **Set up the Drupal backend** and import your content
2. **Configure the environment** - `GROQ_API_KEY`, `PINECONE_API_KEY`, `OPENAI_API_KEY`
3. **Index the content** - run `content-indexer index`
4. **Start the API** - run `assistant-api`

The articles in the sources panel walk through each step."""

_LATEST = """## Latest Articles

Recent additions cover:

- **Decoupled Architecture** - flexible, scalable websites
- **GraphQL Best Practices** - efficient data fetching patterns
- **Performance Tips** - keeping a Next.js app fast

Browse the sources panel to read them."""

_CONCEPTS = """## Core Concepts

**Decoupled architecture** separates content management (Drupal) from the \
presentation layer (Next.js).

**Key Benefits:**
- **Flexibility** - any frontend framework
- **Performance** - static generation and edge caching
- **Security** - a smaller attack surface

**How it works:**
1. Editors manage content in Drupal
2. A GraphQL API exposes it
3. Next.js fetches and renders pages
4. Semantic search helps readers find what they need"""

_DEFAULT = """## How Can I Help?

I can help you explore the knowledge base. Try asking:

- "What topics do you cover?"
- "How do I get started?"
- "What are the latest articles?"
- "Explain the main concepts"
"""


def generate_demo_response(user_message: str) -> DemoReply:
    """Pick a canned answer by keyword, with a few mock articles as sources."""
    articles = list(load_mock_articles())
    text = user_message.lower()

    if any(word in text for word in ("topic", "cover", "about")):
        message, sources = _TOPICS, articles[:3]
    elif any(word in text for word in ("started", "begin", "start")):
        message, sources = _GETTING_STARTED, articles[:2]
    elif any(word in text for word in ("latest", "recent", "new")):
        message, sources = _LATEST, articles
    elif any(word in text for word in ("concept", "explain", "what is")):
        message, sources = _CONCEPTS, articles[1:4]
    else:
        message, sources = _DEFAULT, articles[:2]

    return DemoReply(message=message + DEMO_DISCLAIMER, sources=sources)
