"""FastAPI application for the article assistant.

This module is a thin **presentation layer**: it wires services together
and mounts the routes. All business logic lives in ``application`` and
``services`` so it can be tested and reused without an HTTP server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from assistant_backend import __version__
from assistant_backend.agent import create_chat_model
from assistant_backend.application.use_cases.chat import ChatUseCase
from assistant_backend.config import Settings, get_settings
from assistant_backend.presentation.errors import register_error_handlers
from assistant_backend.presentation.routes import chat, config_probe, search
from assistant_backend.services.completion_service import CompletionService
from assistant_backend.services.search_service import SemanticSearchService
from assistant_backend.telemetry import is_observability_active, setup_telemetry
from assistant_shared.embedding import build_embedding_provider
from assistant_shared.exceptions import ConfigurationMissingError
from assistant_shared.logging_config import setup_logging
from assistant_shared.vector_index import PineconeVectorIndex


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


@dataclass
class ServiceContainer:
    """Services shared by all requests. ``None`` means not configured."""

    search_service: SemanticSearchService | None = None
    chat_uc: ChatUseCase | None = None


def build_services(settings: Settings) -> ServiceContainer:
    """Create every service the configuration allows.

    A missing credential disables only the services that depend on it:
    without search the chat still answers (its tool calls degrade), without
    a completion key only search is served.
    """
    search_service: SemanticSearchService | None = None
    try:
        embedder = build_embedding_provider(
            settings.embedding_provider,
            openai_api_key=settings.openai_api_key,
            openai_base_url=settings.openai_base_url,
            openai_model=settings.embedding_model,
            openai_dimensions=settings.embedding_dimensions,
            pinecone_api_key=settings.pinecone_api_key,
            pinecone_model=settings.pinecone_embedding_model,
            pinecone_dimensions=settings.pinecone_embedding_dimensions,
        )
        index = PineconeVectorIndex(
            api_key=settings.pinecone_api_key,
            index_name=settings.pinecone_index,
            cloud=settings.pinecone_cloud,
            region=settings.pinecone_region,
        )
        search_service = SemanticSearchService(embedder, index)
    except ConfigurationMissingError as exc:
        logger.warning("Search disabled | {}", exc)

    chat_uc: ChatUseCase | None = None
    try:
        completion = CompletionService(
            create_chat_model(settings),
            max_tokens=settings.chat_max_tokens,
            instrument=is_observability_active(settings),
        )
        chat_uc = ChatUseCase(completion, search_service, tool_result_limit=settings.tool_result_limit)
    except ConfigurationMissingError as exc:
        logger.warning("Chat disabled | {}", exc)

    return ServiceContainer(search_service=search_service, chat_uc=chat_uc)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None, services: ServiceContainer | None = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Optional Settings override (defaults to get_settings()).
        services: Pre-built services; when omitted they are built from
            ``settings`` at startup.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.services is None:
            app.state.services = build_services(settings)
        status = settings.service_status()
        logger.info(
            "Application startup complete | demo={} | services={}",
            settings.demo_mode,
            ", ".join(f"{name}={'on' if ok else 'off'}" for name, ok in status.items()),
        )
        yield
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Article Assistant",
        description="Semantic search and grounded chat over published articles.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Demo-Mode"],
    )
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        """Simple liveness check."""
        return {"status": "ok"}

    app.include_router(search.router)
    app.include_router(chat.router)
    app.include_router(config_probe.router)

    setup_telemetry(app, settings)
    return app


def run() -> None:
    """Console entry point: ``assistant-api``."""
    import uvicorn

    settings = get_settings()
    setup_logging(level=settings.log_level, json=settings.log_json)
    uvicorn.run(
        "assistant_backend.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
