"""Chat route — one grounded answer per request (non-streaming)."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from loguru import logger

from assistant_backend.application.demo import generate_demo_response
from assistant_backend.application.use_cases.chat import ChatResult, ChatUseCase
from assistant_backend.presentation.errors import error_response
from assistant_backend.presentation.schemas import (
    ArticleSchema,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
)
from assistant_shared.exceptions import (
    ConfigurationMissingError,
    MalformedInputError,
    UpstreamUnavailableError,
)

router = APIRouter(tags=["chat"])

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}


@router.post("/api/chat", response_model=ChatResponse, responses=_ERRORS)
async def chat(request: ChatRequest, raw_request: Request, response: Response):
    """Answer the newest user message, searching the knowledge base when the model asks to."""
    settings = raw_request.app.state.settings

    if not request.messages:
        return error_response(400, "messages list must not be empty")
    last = request.messages[-1].content

    if settings.demo_mode:
        demo = generate_demo_response(last)
        response.headers["X-Demo-Mode"] = "true"
        return ChatResponse(
            message=demo.message,
            sources=[ArticleSchema.from_article(a) for a in demo.sources],
        )

    uc: ChatUseCase | None = raw_request.app.state.services.chat_uc
    if uc is None:
        return error_response(503, "Groq API is not configured. Set GROQ_API_KEY.")

    logger.info("POST /api/chat | messages={} msg={!r}", len(request.messages), last[:60])

    try:
        result: ChatResult = await uc.execute(request.messages)
    except MalformedInputError as exc:
        return error_response(400, str(exc))
    except ConfigurationMissingError as exc:
        return error_response(503, str(exc))
    except UpstreamUnavailableError:
        return error_response(500, "Chat failed. Please try again.")

    return ChatResponse(
        message=result.answer,
        sources=[ArticleSchema.from_article(a) for a in result.sources],
    )
