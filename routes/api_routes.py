"""
JSON endpoints.

POST /api/verify-captcha  - captcha verification proxy
POST /api/registrations   - registration submission
POST /api/interest        - interest-email submission
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config import CaptchaSettings
from dependencies import get_captcha_settings, get_captcha_verifier, get_store
from infrastructure.captcha.capycap import CapyCapWidget
from infrastructure.captcha.protocol import CaptchaVerifier
from infrastructure.store.protocol import DocumentStore
from schemas.dto.requests.submission import (
    InterestRequest,
    RegistrationRequest,
    VerifyCaptchaRequest,
)
from schemas.dto.responses.common import ErrorResponse, SubmissionResponse
from services.submission_flow import InterestFlow, RegistrationFlow
from shared.logging import get_logger

router = APIRouter(prefix="/api", tags=["api"])
log = get_logger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post("/verify-captcha")
async def verify_captcha(
    body: VerifyCaptchaRequest,
    verifier: CaptchaVerifier = Depends(get_captcha_verifier),
) -> JSONResponse:
    """Forward a widget token to the captcha service and relay its answer.

    The service's JSON is returned as-is. Any failure reaching or reading the
    service yields ``500 {"success": false}`` so callers always get a
    boolean to branch on.
    """
    try:
        result = await verifier.verify(body.token)
    except Exception as e:
        log.error("captcha_proxy_failed", error=str(e), error_type=type(e).__name__)
        return JSONResponse(status_code=500, content={"success": False})
    return JSONResponse(content=result.payload)


@router.post(
    "/registrations",
    status_code=201,
    response_model=SubmissionResponse,
    responses=_ERROR_RESPONSES,
)
async def create_registration(
    body: RegistrationRequest,
    captcha: CaptchaSettings = Depends(get_captcha_settings),
    verifier: CaptchaVerifier = Depends(get_captcha_verifier),
    store: DocumentStore = Depends(get_store),
) -> SubmissionResponse:
    record = body.to_record()
    widget = CapyCapWidget(captcha, {"token": body.token}, token_field="token")
    flow = RegistrationFlow(widget, verifier, store)
    await flow.submit(record)
    flow.raise_for_status()
    return SubmissionResponse(
        success=True,
        status=flow.status.value,
        email=record.email,
        message="You're registered!",
    )


@router.post(
    "/interest",
    status_code=201,
    response_model=SubmissionResponse,
    responses=_ERROR_RESPONSES,
)
async def create_interest(
    body: InterestRequest,
    captcha: CaptchaSettings = Depends(get_captcha_settings),
    verifier: CaptchaVerifier = Depends(get_captcha_verifier),
    store: DocumentStore = Depends(get_store),
) -> SubmissionResponse:
    record = body.to_record()
    widget = CapyCapWidget(captcha, {"token": body.token}, token_field="token")
    flow = InterestFlow(widget, verifier, store)
    await flow.submit(record)
    flow.raise_for_status()
    return SubmissionResponse(
        success=True,
        status=flow.status.value,
        email=record.email,
        message="Thanks! We'll keep you posted.",
    )
