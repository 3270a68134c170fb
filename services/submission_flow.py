"""
Submission flows for the registration form and the interest dialog.

Both flows run the same state machine per submission:

    idle -> loading -> success | error

1. No captcha token from the widget: error, no network call.
2. Verify the token with the captcha provider.
3. Merge-write the record into ``<collection>/<email>`` with a server
   timestamp, so a second submission for the same email updates the one
   document instead of adding another.

Any failure leaves the flow resubmittable. The widget is reset after every
verification attempt, whatever the outcome, so each attempt needs a freshly
solved challenge.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from errors import (
    AppError,
    CaptchaRejectedError,
    ServiceUnavailableError,
    ValidationError,
)
from infrastructure.captcha.protocol import CaptchaVerifier, CaptchaWidget
from infrastructure.store.protocol import DocumentStore
from schemas.models.registration import EmailKeyedRecord
from shared.logging import email_domain, get_logger

log = get_logger(__name__)

CAPTCHA_MISSING_MESSAGE = "Please complete the captcha"
CAPTCHA_FAILED_MESSAGE = "Captcha verification failed. Please try again."
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class FlowStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class FailureKind(str, Enum):
    VALIDATION = "validation"
    CAPTCHA_REJECTED = "captcha_rejected"
    UNAVAILABLE = "unavailable"


_FAILURE_ERRORS: dict[FailureKind, type[AppError]] = {
    FailureKind.VALIDATION: ValidationError,
    FailureKind.CAPTCHA_REJECTED: CaptchaRejectedError,
    FailureKind.UNAVAILABLE: ServiceUnavailableError,
}


class SubmissionFlow:
    """One form's submission state machine.

    Subclasses pick the event name used in logs and what happens once the
    write succeeds (``_complete``).
    """

    event: str = "submission"

    def __init__(
        self,
        widget: CaptchaWidget,
        verifier: CaptchaVerifier,
        store: DocumentStore,
    ) -> None:
        self._widget = widget
        self._verifier = verifier
        self._store = store
        self.status = FlowStatus.IDLE
        self.history: list[FlowStatus] = [FlowStatus.IDLE]
        self.error_message: Optional[str] = None
        self.failure: Optional[FailureKind] = None
        self.error_field: Optional[str] = None

    @property
    def busy(self) -> bool:
        """True while a submission is in flight; the submit control renders disabled."""
        return self.status is FlowStatus.LOADING

    def _enter(self, status: FlowStatus) -> None:
        self.status = status
        self.history.append(status)

    def fail(
        self, kind: FailureKind, message: str, *, field: Optional[str] = None
    ) -> FlowStatus:
        """Move to ``error``; also used by the input layer for field validation."""
        self.failure = kind
        self.error_message = message
        self.error_field = field
        self._enter(FlowStatus.ERROR)
        return self.status

    def _complete(self) -> None:
        self._enter(FlowStatus.SUCCESS)

    async def submit(self, record: EmailKeyedRecord) -> FlowStatus:
        token = self._widget.get_token()
        if not token:
            return self.fail(
                FailureKind.VALIDATION, CAPTCHA_MISSING_MESSAGE, field="token"
            )

        self.error_message = None
        self.failure = None
        self.error_field = None
        self._enter(FlowStatus.LOADING)

        domain = email_domain(record.key)
        try:
            verification = await self._verifier.verify(token)
            if not verification.success:
                log.warning(f"{self.event}_captcha_rejected", email_domain=domain)
                return self.fail(FailureKind.CAPTCHA_REJECTED, CAPTCHA_FAILED_MESSAGE)

            await self._store.merge(record.collection, record.key, record.to_document())
        except Exception as e:
            log.error(
                f"{self.event}_failed",
                email_domain=domain,
                error=str(e),
                error_type=type(e).__name__,
            )
            return self.fail(FailureKind.UNAVAILABLE, GENERIC_ERROR_MESSAGE)
        finally:
            self._widget.reset()

        log.info(f"{self.event}_saved", email_domain=domain)
        self._complete()
        return self.status

    def raise_for_status(self) -> None:
        """Raise the AppError matching the current failure, if any."""
        if self.status is not FlowStatus.ERROR or self.failure is None:
            return
        error_cls = _FAILURE_ERRORS[self.failure]
        raise error_cls(
            self.error_message or GENERIC_ERROR_MESSAGE, field=self.error_field
        )


class RegistrationFlow(SubmissionFlow):
    """Full registration form; success is a terminal "You're Registered!" view."""

    event = "registration"


class InterestFlow(SubmissionFlow):
    """Email-only capture behind the landing-page dialog.

    Success does not end in a ``success`` view: the dialog closes, its field
    clears and the flow is back to ``idle``.
    """

    event = "interest"

    def __init__(
        self,
        widget: CaptchaWidget,
        verifier: CaptchaVerifier,
        store: DocumentStore,
    ) -> None:
        super().__init__(widget, verifier, store)
        self.dialog_open = True

    def _complete(self) -> None:
        self.dialog_open = False
        self._enter(FlowStatus.IDLE)
