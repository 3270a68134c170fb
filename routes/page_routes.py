"""
Server-rendered pages and their HTML form posts.

GET  /          - landing page with the interest dialog
POST /interest  - interest dialog submission (303 back to / on success)
GET  /register  - registration form
POST /register  - registration submission

Failed submissions re-render the same page with the entered values and the
flow's message.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError as PydanticValidationError

from config import CaptchaSettings
from dependencies import get_captcha_settings, get_captcha_verifier, get_store
from infrastructure.captcha.capycap import CapyCapWidget
from infrastructure.captcha.protocol import CaptchaVerifier
from infrastructure.store.protocol import DocumentStore
from schemas.models.registration import (
    EXPERIENCE_LABELS,
    GRADUATION_YEAR_LABELS,
    InterestRecord,
    RegistrationRecord,
)
from services.submission_flow import (
    FailureKind,
    FlowStatus,
    InterestFlow,
    RegistrationFlow,
    SubmissionFlow,
)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["pages"], include_in_schema=False)

INTEREST_CONTAINER = "interest-captcha"
REGISTER_CONTAINER = "register-captcha"

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"


def _validation_message(exc: PydanticValidationError) -> tuple[str, Optional[str]]:
    """Turn the first pydantic error into a user-facing message and field name."""
    err = exc.errors()[0]
    field = str(err["loc"][0]) if err.get("loc") else None
    if err["type"] in ("missing", "string_too_short"):
        return REQUIRED_FIELDS_MESSAGE, field
    if field == "email":
        return INVALID_EMAIL_MESSAGE, field
    return "Please check the highlighted fields", field


def _status_code(flow: SubmissionFlow) -> int:
    if flow.status is FlowStatus.ERROR and flow.failure in (
        FailureKind.VALIDATION,
        FailureKind.CAPTCHA_REJECTED,
    ):
        return 400
    return 200


async def _form_fields(request: Request) -> dict[str, str]:
    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


def _render_index(
    request: Request,
    widget: CapyCapWidget,
    flow: Optional[InterestFlow] = None,
    email: str = "",
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "captcha": widget.render(INTEREST_CONTAINER),
            "flow": flow,
            "email": email,
        },
        status_code=status_code,
    )


def _render_register(
    request: Request,
    widget: CapyCapWidget,
    flow: Optional[RegistrationFlow] = None,
    values: Optional[dict[str, Any]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "register.html",
        {
            "captcha": widget.render(REGISTER_CONTAINER),
            "flow": flow,
            "values": values or {},
            "graduation_years": GRADUATION_YEAR_LABELS,
            "experience_levels": EXPERIENCE_LABELS,
        },
        status_code=status_code,
    )


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    captcha: CaptchaSettings = Depends(get_captcha_settings),
) -> HTMLResponse:
    return _render_index(request, CapyCapWidget(captcha))


@router.post("/interest", response_class=HTMLResponse)
async def submit_interest(
    request: Request,
    captcha: CaptchaSettings = Depends(get_captcha_settings),
    verifier: CaptchaVerifier = Depends(get_captcha_verifier),
    store: DocumentStore = Depends(get_store),
):
    fields = await _form_fields(request)
    widget = CapyCapWidget(captcha, fields, container=INTEREST_CONTAINER)
    flow = InterestFlow(widget, verifier, store)

    try:
        record = InterestRecord.model_validate(fields)
    except PydanticValidationError as exc:
        message, field = _validation_message(exc)
        flow.fail(FailureKind.VALIDATION, message, field=field)
    else:
        await flow.submit(record)

    if not flow.dialog_open:
        return RedirectResponse("/", status_code=303)
    return _render_index(
        request,
        widget,
        flow=flow,
        email=fields.get("email", ""),
        status_code=_status_code(flow),
    )


@router.get("/register", response_class=HTMLResponse)
async def register_page(
    request: Request,
    captcha: CaptchaSettings = Depends(get_captcha_settings),
) -> HTMLResponse:
    return _render_register(request, CapyCapWidget(captcha))


@router.post("/register", response_class=HTMLResponse)
async def submit_registration(
    request: Request,
    captcha: CaptchaSettings = Depends(get_captcha_settings),
    verifier: CaptchaVerifier = Depends(get_captcha_verifier),
    store: DocumentStore = Depends(get_store),
) -> HTMLResponse:
    fields = await _form_fields(request)
    widget = CapyCapWidget(captcha, fields, container=REGISTER_CONTAINER)
    flow = RegistrationFlow(widget, verifier, store)

    try:
        record = RegistrationRecord.model_validate(fields)
    except PydanticValidationError as exc:
        message, field = _validation_message(exc)
        flow.fail(FailureKind.VALIDATION, message, field=field)
    else:
        await flow.submit(record)

    return _render_register(
        request,
        widget,
        flow=flow,
        values=fields,
        status_code=_status_code(flow),
    )
