"""System prompt, tool catalog and chat-model factory for the assistant."""

from __future__ import annotations

from openai import AsyncOpenAI
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.tools import ToolDefinition

from assistant_backend.config import Settings, get_settings
from assistant_shared.exceptions import ConfigurationMissingError

SEARCH_TOOL_NAME = "search_articles"

# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """\
You are the assistant for a technical knowledge base about web development: \
Next.js, React, TypeScript, Drupal, databases, APIs and related technologies.

## Rules

### Search First
- Before answering any question about these topics, call the \
`search_articles` tool with a specific query containing the key terms.
- Base your answer primarily on the articles the tool returns.
- If the search finds nothing relevant for an on-topic question, give a short \
answer and say that the knowledge base does not cover that topic yet.

### Stay On Topic
- If a question has nothing to do with web development, programming or the \
knowledge base, politely steer back: "I'm focused on web development topics. \
Is there something about Next.js, React, TypeScript, databases, or APIs I can \
help you with?"

### Response Format
- Use markdown: `##` headers to organise sections, **bold** for key terms and \
article titles, bullet points for lists.
- Use `inline code` for commands, filenames and identifiers, and fenced code \
blocks with a language tag for examples.
- Close with a short "Learn More" section naming the articles you relied on.
"""

# ---------------------------------------------------------------------------
# Tool catalog (exactly one tool)
# ---------------------------------------------------------------------------

SEARCH_TOOL = ToolDefinition(
    name=SEARCH_TOOL_NAME,
    description=(
        "Search the knowledge base for articles relevant to the user's question. "
        "Use this when the user asks about topics the articles might cover, wants "
        "to find information, or when you need sources to cite."
    ),
    parameters_json_schema={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "The search query. Be specific and include key terms.",
            },
        },
        "required": ["query"],
    },
)


# ---------------------------------------------------------------------------
# Model factory
# ---------------------------------------------------------------------------


def create_chat_model(settings: Settings | None = None) -> OpenAIChatModel:
    """Create the chat model used by the completion service.

    Args:
        settings: Optional Settings override (defaults to get_settings()).

    Raises:
        ConfigurationMissingError: If ``GROQ_API_KEY`` is not set.
    """
    s = settings or get_settings()
    if not s.groq_api_key:
        raise ConfigurationMissingError("Groq API is not configured. Set GROQ_API_KEY.")

    client = AsyncOpenAI(api_key=s.groq_api_key, base_url=s.groq_base_url)
    return OpenAIChatModel(s.chat_model, provider=OpenAIProvider(openai_client=client))
