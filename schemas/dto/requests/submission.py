"""
Request DTOs for the JSON endpoints.

VerifyCaptchaRequest    - POST /api/verify-captcha
RegistrationRequest     - POST /api/registrations
InterestRequest         - POST /api/interest

The submission DTOs are the stored record plus the captcha ``token``; the
token is stripped before anything is written.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.models.registration import InterestRecord, RegistrationRecord


class VerifyCaptchaRequest(BaseModel):
    """Request body for POST /api/verify-captcha."""

    model_config = ConfigDict(populate_by_name=True)

    token: str


class RegistrationRequest(RegistrationRecord):
    """Request body for POST /api/registrations."""

    token: Optional[str] = None

    def to_record(self) -> RegistrationRecord:
        return RegistrationRecord.model_validate(self.model_dump(exclude={"token"}))


class InterestRequest(InterestRecord):
    """Request body for POST /api/interest."""

    token: Optional[str] = None

    def to_record(self) -> InterestRecord:
        return InterestRecord.model_validate(self.model_dump(exclude={"token"}))
