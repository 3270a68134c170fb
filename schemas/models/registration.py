"""
Document models for the two write-only collections.

registrations     - RegistrationRecord, keyed by email
interest_emails   - InterestRecord, keyed by email

Field names on the wire are camelCase (``fullName``, ``graduationYear`` ...)
to stay compatible with records already written by the earlier site.
``createdAt`` is never part of the model; the store assigns it server-side.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.validators import normalize_email, validate_email_key

REGISTRATIONS_COLLECTION = "registrations"
INTEREST_EMAILS_COLLECTION = "interest_emails"


class GraduationYear(str, Enum):
    Y2025 = "2025"
    Y2026 = "2026"
    Y2027 = "2027"
    Y2028 = "2028"
    Y2029 = "2029"
    GRADUATED = "graduated"


class ExperienceLevel(str, Enum):
    NONE = "none"
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


GRADUATION_YEAR_LABELS: dict[GraduationYear, str] = {
    year: "Already graduated" if year is GraduationYear.GRADUATED else year.value
    for year in GraduationYear
}

EXPERIENCE_LABELS: dict[ExperienceLevel, str] = {
    ExperienceLevel.NONE: "No experience - excited to learn!",
    ExperienceLevel.BEGINNER: "Beginner - some exposure",
    ExperienceLevel.INTERMEDIATE: "Intermediate - built projects before",
    ExperienceLevel.ADVANCED: "Advanced - extensive experience",
}


class EmailKeyedRecord(BaseModel):
    """Base for records whose document id is the submitter's email."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    collection: ClassVar[str]

    email: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        v = normalize_email(v)
        if not validate_email_key(v):
            raise ValueError("Please enter a valid email address")
        return v

    @property
    def key(self) -> str:
        return self.email

    def to_document(self) -> dict[str, Any]:
        """Fields to merge into the stored document.

        Unset optional fields are dropped so a merge write leaves whatever
        value an earlier submission stored.
        """
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class RegistrationRecord(EmailKeyedRecord):
    collection: ClassVar[str] = REGISTRATIONS_COLLECTION

    full_name: str = Field(alias="fullName", min_length=1)
    school: Optional[str] = None
    graduation_year: Optional[GraduationYear] = Field(
        default=None, alias="graduationYear"
    )
    traveling_from: Optional[str] = Field(default=None, alias="travelingFrom")
    experience: Optional[ExperienceLevel] = None

    @field_validator(
        "school", "graduation_year", "traveling_from", "experience", mode="before"
    )
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class InterestRecord(EmailKeyedRecord):
    collection: ClassVar[str] = INTEREST_EMAILS_COLLECTION
