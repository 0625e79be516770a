"""Search route — semantic search over the indexed articles."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from loguru import logger

from assistant_backend.presentation.errors import error_response
from assistant_backend.presentation.schemas import ErrorResponse, SearchResponse, SearchResultSchema
from assistant_shared.exceptions import (
    ConfigurationMissingError,
    IndexNotFoundError,
    MalformedInputError,
    UpstreamUnavailableError,
)

router = APIRouter(tags=["search"])

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}


@router.get("/api/search", response_model=SearchResponse, responses=_ERRORS)
def search(
    raw_request: Request,
    q: str | None = Query(default=None, description="Free-text query"),
    limit: int | None = Query(default=None, ge=1, description="Maximum number of results"),
):
    """Search the knowledge base. Runs in the threadpool (blocking I/O)."""
    settings = raw_request.app.state.settings
    query = (q or "").strip()
    if not query:
        return error_response(400, 'Query parameter "q" is required')

    top_k = min(limit or settings.search_default_limit, settings.search_max_limit)

    service = raw_request.app.state.services.search_service
    if service is None:
        return error_response(503, "Search is not configured. Set PINECONE_API_KEY and the embedding credentials.")

    logger.info("GET /api/search | q={!r} limit={}", query[:60], top_k)

    try:
        results = service.search(query, top_k)
    except MalformedInputError as exc:
        return error_response(400, str(exc))
    except ConfigurationMissingError as exc:
        return error_response(503, str(exc))
    except IndexNotFoundError as exc:
        return error_response(503, str(exc))
    except UpstreamUnavailableError:
        logger.exception("Search failed | q={!r}", query[:60])
        return error_response(500, "Search failed. Please try again.")

    return SearchResponse(
        query=query,
        results=[SearchResultSchema.from_result(r) for r in results],
        total_results=len(results),
    )
