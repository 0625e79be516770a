"""Tests for the FastAPI presentation layer (routes, error mapping, settings)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from assistant_backend.application.use_cases.chat import ChatResult
from assistant_backend.config import Settings
from assistant_backend.main import ServiceContainer, build_services, create_app
from assistant_shared.exceptions import (
    ConfigurationMissingError,
    IndexNotFoundError,
    IndexUnavailableError,
    UpstreamUnavailableError,
)
from factories import make_article, make_result


def _test_settings(**overrides) -> Settings:
    """Settings that never read the real .env file."""
    values = {
        "groq_api_key": "gsk-test",
        "openai_api_key": "sk-test",
        "pinecone_api_key": "pc-test",
        "drupal_base_url": "https://cms.example.com",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def search_service() -> MagicMock:
    service = MagicMock()
    service.search.return_value = [
        make_result(make_article("a1", "Next.js Performance"), 0.91),
        make_result(make_article("a2", "React Server Components"), 0.84),
    ]
    return service


@pytest.fixture()
def chat_uc() -> AsyncMock:
    uc = AsyncMock()
    uc.execute.return_value = ChatResult(
        answer="## ISR\nUse **Incremental Static Regeneration**.",
        sources=[make_article("a1", "Next.js Performance", body="")],
    )
    return uc


def _client(settings: Settings, services: ServiceContainer):
    return TestClient(create_app(settings=settings, services=services))


@pytest.fixture()
def client(search_service, chat_uc):
    with _client(_test_settings(), ServiceContainer(search_service, chat_uc)) as c:
        yield c


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealthEndpoint:
    def test_health_returns_ok(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearchEndpoint:
    def test_returns_results(self, client: TestClient, search_service: MagicMock):
        response = client.get("/api/search", params={"q": "Next.js", "limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["query"] == "Next.js"
        assert body["totalResults"] == 2
        first = body["results"][0]
        assert first["id"] == "a1"
        assert first["score"] == 0.91
        assert first["article"]["readTime"] == "4 min read"
        assert first["article"]["body"] == ""
        search_service.search.assert_called_once_with("Next.js", 2)

    def test_default_limit(self, client: TestClient, search_service: MagicMock):
        client.get("/api/search", params={"q": "react"})
        search_service.search.assert_called_once_with("react", 10)

    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
    def test_missing_query_is_400(self, client: TestClient, params):
        response = client.get("/api/search", params=params)
        assert response.status_code == 400
        assert response.json() == {"error": 'Query parameter "q" is required'}

    def test_non_numeric_limit_is_400(self, client: TestClient):
        response = client.get("/api/search", params={"q": "react", "limit": "lots"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_limit_is_capped(self, client: TestClient, search_service: MagicMock):
        client.get("/api/search", params={"q": "react", "limit": 500})
        search_service.search.assert_called_once_with("react", 50)

    def test_not_configured_is_503(self, chat_uc):
        with _client(_test_settings(pinecone_api_key=""), ServiceContainer(None, chat_uc)) as c:
            response = c.get("/api/search", params={"q": "react"})
        assert response.status_code == 503
        assert "not configured" in response.json()["error"]

    def test_unconfigured_error_is_503(self, client: TestClient, search_service: MagicMock):
        search_service.search.side_effect = IndexUnavailableError("PINECONE_API_KEY environment variable is not set")
        assert client.get("/api/search", params={"q": "react"}).status_code == 503

    def test_missing_index_is_503(self, client: TestClient, search_service: MagicMock):
        search_service.search.side_effect = IndexNotFoundError("Pinecone index 'x' does not exist.")
        assert client.get("/api/search", params={"q": "react"}).status_code == 503

    def test_upstream_failure_is_generic_500(self, client: TestClient, search_service: MagicMock):
        search_service.search.side_effect = UpstreamUnavailableError("socket hang up at 10.0.0.3")

        response = client.get("/api/search", params={"q": "react"})

        assert response.status_code == 500
        assert response.json() == {"error": "Search failed. Please try again."}


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class TestChatEndpoint:
    def test_returns_answer_and_sources(self, client: TestClient, chat_uc: AsyncMock):
        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "ISR?"}]})

        assert response.status_code == 200
        body = response.json()
        assert body["message"].startswith("## ISR")
        assert [s["id"] for s in body["sources"]] == ["a1"]
        assert "X-Demo-Mode" not in response.headers
        chat_uc.execute.assert_awaited_once()

    def test_extra_client_fields_are_stripped(self, client: TestClient, chat_uc: AsyncMock):
        client.post(
            "/api/chat",
            json={
                "messages": [
                    {"role": "user", "content": "Q", "id": "m1", "createdAt": "now"},
                    {"role": "assistant", "content": "A", "sources": [{"id": "a1"}]},
                    {"role": "user", "content": "Q2"},
                ]
            },
        )

        messages = chat_uc.execute.call_args.args[0]
        assert [m.model_dump() for m in messages] == [
            {"role": "user", "content": "Q"},
            {"role": "assistant", "content": "A"},
            {"role": "user", "content": "Q2"},
        ]

    @pytest.mark.parametrize("payload", [{}, {"messages": "hello"}, {"messages": [{"role": "system", "content": "x"}]}])
    def test_malformed_body_is_400(self, client: TestClient, payload):
        response = client.post("/api/chat", json=payload)
        assert response.status_code == 400
        assert "error" in response.json()

    def test_empty_messages_is_400(self, client: TestClient, chat_uc: AsyncMock):
        response = client.post("/api/chat", json={"messages": []})

        assert response.status_code == 400
        assert response.json() == {"error": "messages list must not be empty"}
        chat_uc.execute.assert_not_called()

    def test_not_configured_is_503(self, search_service):
        with _client(_test_settings(groq_api_key=""), ServiceContainer(search_service, None)) as c:
            response = c.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})
        assert response.status_code == 503
        assert response.json() == {"error": "Groq API is not configured. Set GROQ_API_KEY."}

    def test_configuration_error_is_503(self, client: TestClient, chat_uc: AsyncMock):
        chat_uc.execute.side_effect = ConfigurationMissingError("Groq API is not configured.")
        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})
        assert response.status_code == 503

    def test_upstream_failure_is_generic_500(self, client: TestClient, chat_uc: AsyncMock):
        chat_uc.execute.side_effect = UpstreamUnavailableError("rate limited by provider")

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "Chat failed. Please try again."}

    def test_unexpected_error_is_500_without_details(self, search_service, chat_uc: AsyncMock):
        chat_uc.execute.side_effect = KeyError("secret internals")
        app = create_app(settings=_test_settings(), services=ServiceContainer(search_service, chat_uc))
        with TestClient(app, raise_server_exceptions=False) as c:
            response = c.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})
        assert response.status_code == 500
        assert "secret" not in response.text


class TestDemoMode:
    @pytest.fixture()
    def demo_client(self):
        settings = _test_settings(groq_api_key="", openai_api_key="", pinecone_api_key="", drupal_base_url="", demo_mode=True)
        with _client(settings, ServiceContainer()) as c:
            yield c

    def test_demo_answer_is_flagged(self, demo_client: TestClient):
        response = demo_client.post(
            "/api/chat", json={"messages": [{"role": "user", "content": "What topics do you cover?"}]}
        )

        assert response.status_code == 200
        assert response.headers["X-Demo-Mode"] == "true"
        body = response.json()
        assert "Topics We Cover" in body["message"]
        assert len(body["sources"]) == 3

    def test_default_demo_answer(self, demo_client: TestClient):
        response = demo_client.post("/api/chat", json={"messages": [{"role": "user", "content": "hello"}]})
        assert "How Can I Help?" in response.json()["message"]
        assert len(response.json()["sources"]) == 2

    def test_empty_messages_is_400_in_demo_mode(self, demo_client: TestClient):
        response = demo_client.post("/api/chat", json={"messages": []})

        assert response.status_code == 400
        assert response.json() == {"error": "messages list must not be empty"}
        assert "X-Demo-Mode" not in response.headers

    def test_config_probe_reports_configured(self, demo_client: TestClient):
        response = demo_client.get("/api/config")
        assert response.status_code == 200
        assert response.json() == {"configured": True, "demoMode": True, "status": "unconfigured"}


# ---------------------------------------------------------------------------
# Config probe
# ---------------------------------------------------------------------------


class TestConfigProbe:
    def test_ready(self, client: TestClient):
        response = client.get("/api/config")
        assert response.status_code == 200
        assert response.json() == {"configured": True, "demoMode": False, "status": "ready"}

    def test_partial_with_details(self):
        settings = _test_settings(drupal_base_url="", openai_api_key="")
        with _client(settings, ServiceContainer()) as c:
            response = c.get("/api/config", params={"detailed": "true"})

        assert response.status_code == 503
        body = response.json()
        assert body["configured"] is False
        assert body["status"] == "partial"
        assert body["services"] == {
            "completion": True,
            "embeddings": False,
            "vectorIndex": True,
            "contentSource": False,
        }

    def test_unconfigured(self):
        settings = _test_settings(groq_api_key="", openai_api_key="", pinecone_api_key="", drupal_base_url="")
        with _client(settings, ServiceContainer()) as c:
            response = c.get("/api/config")
        assert response.status_code == 503
        assert response.json()["status"] == "unconfigured"


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


class TestBuildServices:
    def test_nothing_configured(self):
        services = build_services(_test_settings(groq_api_key="", openai_api_key="", pinecone_api_key=""))
        assert services.search_service is None
        assert services.chat_uc is None

    def test_chat_without_search(self):
        services = build_services(_test_settings(pinecone_api_key=""))
        assert services.search_service is None
        assert services.chat_uc is not None
        assert services.chat_uc.search_service is None

    def test_everything_configured(self):
        services = build_services(_test_settings())
        assert services.search_service is not None
        assert services.chat_uc.search_service is services.search_service
        assert services.chat_uc.tool_result_limit == 5

    def test_services_built_at_startup(self):
        app = create_app(settings=_test_settings(groq_api_key="", openai_api_key="", pinecone_api_key=""))
        with TestClient(app):
            assert isinstance(app.state.services, ServiceContainer)
