"""Tests for Settings, the system prompt and demo-mode replies."""

import pytest
from fastapi import FastAPI

from assistant_backend.agent import SEARCH_TOOL, SEARCH_TOOL_NAME, SYSTEM_PROMPT
from assistant_backend.application.demo import DEMO_DISCLAIMER, generate_demo_response, load_mock_articles
from assistant_backend.config import Settings
from assistant_backend.telemetry import is_observability_active, setup_telemetry, tracing_mode


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("GROQ_API_KEY", "OPENAI_API_KEY", "PINECONE_API_KEY", "DRUPAL_BASE_URL", "DEMO_MODE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.chat_model == "meta-llama/llama-4-scout-17b-16e-instruct"
        assert settings.chat_max_tokens == 2048
        assert settings.pinecone_index == "decoupled-search"
        assert settings.search_default_limit == 10
        assert settings.tool_result_limit == 5
        assert settings.demo_mode is False
        assert settings.is_configured() is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-env")
        monkeypatch.setenv("DEMO_MODE", "true")
        monkeypatch.setenv("PINECONE_INDEX", "custom-index")

        settings = Settings(_env_file=None)

        assert settings.groq_api_key == "gsk-env"
        assert settings.demo_mode is True
        assert settings.pinecone_index == "custom-index"

    def test_pinecone_embeddings_need_only_pinecone_key(self):
        settings = Settings(_env_file=None, embedding_provider="pinecone", pinecone_api_key="pc", openai_api_key="")
        assert settings.service_status()["embeddings"] is True

    def test_openai_embeddings_need_openai_key(self):
        settings = Settings(_env_file=None, embedding_provider="openai", pinecone_api_key="pc", openai_api_key="")
        assert settings.service_status()["embeddings"] is False


class TestSystemPrompt:
    def test_mandates_search_first(self):
        assert "search_articles" in SYSTEM_PROMPT
        assert "Search First" in SYSTEM_PROMPT

    def test_contains_redirect_for_off_topic(self):
        assert "I'm focused on web development topics" in SYSTEM_PROMPT

    def test_requests_markdown(self):
        assert "markdown" in SYSTEM_PROMPT


class TestSearchTool:
    def test_single_required_query_parameter(self):
        assert SEARCH_TOOL.name == SEARCH_TOOL_NAME == "search_articles"
        schema = SEARCH_TOOL.parameters_json_schema
        assert schema["required"] == ["query"]
        assert schema["properties"]["query"]["type"] == "string"


class TestDemoReplies:
    def test_mock_articles_load(self):
        articles = load_mock_articles()
        assert len(articles) == 4
        assert len({a.id for a in articles}) == 4

    @pytest.mark.parametrize(
        ("message", "heading", "count"),
        [
            ("What topics do you cover?", "Topics We Cover", 3),
            ("How do I get started?", "Getting Started", 2),
            ("Show me the latest articles", "Latest Articles", 4),
            ("Explain decoupled architecture", "Core Concepts", 3),
            ("Hi!", "How Can I Help?", 2),
        ],
    )
    def test_keyword_routing(self, message, heading, count):
        reply = generate_demo_response(message)
        assert heading in reply.message
        assert reply.message.endswith(DEMO_DISCLAIMER)
        assert len(reply.sources) == count


class TestTelemetry:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("off", None), ("", None), ("OTEL", "otel"), (" logfire ", "logfire"), ("zipkin", None)],
    )
    def test_tracing_mode(self, value: str, expected):
        settings = Settings(_env_file=None, observability=value)
        assert tracing_mode(settings) == expected
        assert is_observability_active(settings) is (expected is not None)

    def test_off_leaves_app_uninstrumented(self):
        app = FastAPI()
        setup_telemetry(app, Settings(_env_file=None, observability="off"))
        assert app.user_middleware == []
