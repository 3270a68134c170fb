"""
Health check endpoint.

GET /health - checks the document store and captcha configuration.
Rules:
- Store failure → "unhealthy" (503) - submissions cannot be saved.
- Captcha site key missing → "degraded" (200) - pages render, every
  submission fails verification.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.dto.responses.common import HealthResponse
from shared.logging import get_logger

router = APIRouter(tags=["health"])
log = get_logger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        await request.app.state.store.ping()
        checks["store"] = "ok"
    except Exception as e:
        log.warning("store_ping_failed", error=str(e), error_type=type(e).__name__)
        checks["store"] = "error"
        overall = "unhealthy"

    if request.app.state.settings.captcha.is_configured:
        checks["captcha"] = "ok"
    else:
        checks["captcha"] = "not_configured"
        if overall == "healthy":
            overall = "degraded"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content={"status": overall, "checks": checks},
    )
