"""Config probe — tells a front end whether to show a setup guide."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from assistant_backend.presentation.schemas import ConfigStatusResponse

router = APIRouter(tags=["config"])


@router.get("/api/config", response_model=ConfigStatusResponse, response_model_exclude_none=True)
def config_status(
    raw_request: Request,
    detailed: bool = Query(default=False, description="Include the per-service breakdown"),
):
    """Report whether every backing service is configured.

    ``status`` is ``ready`` when all are, ``partial`` when some are and
    ``unconfigured`` when none are. Demo mode counts as configured. The
    status code is 503 unless the app can run.
    """
    settings = raw_request.app.state.settings
    services = settings.service_status()

    if all(services.values()):
        status = "ready"
    elif any(services.values()):
        status = "partial"
    else:
        status = "unconfigured"

    configured = settings.is_configured() or settings.demo_mode
    body = ConfigStatusResponse(
        configured=configured,
        demo_mode=settings.demo_mode,
        status=status,
        services=services if detailed else None,
    )
    return JSONResponse(
        status_code=200 if configured else 503,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )
