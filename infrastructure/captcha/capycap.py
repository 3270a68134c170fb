"""CapyCap implementation of CaptchaVerifier, plus the form-side widget adapter.

Verification posts ``{token, sitekey}`` as JSON to the CapyCap verify
endpoint and hands back the service's JSON untouched inside a
CaptchaVerification. Transport failures propagate as ``httpx.HTTPError``;
bodies that are not JSON objects with a boolean ``success`` raise
CaptchaServiceError. Callers decide what a failure means for them.
"""

from collections.abc import Mapping
from typing import Any, Optional

from config import CaptchaSettings
from errors import CaptchaServiceError
from infrastructure.captcha.protocol import CaptchaMount, CaptchaVerification
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

TOKEN_FIELD = "capycap-token"
DEFAULT_CONTAINER = "capycap-captcha"


class CapyCapProvider:
    def __init__(self, settings: CaptchaSettings, http_client: HttpClient) -> None:
        self._sitekey = settings.capycap_sitekey
        self._verify_url = settings.capycap_verify_url
        self._http = http_client

    async def verify(self, token: str) -> CaptchaVerification:
        if not self._sitekey:
            log.warning("capycap_sitekey_not_configured")
            raise CaptchaServiceError("Captcha site key is not configured")

        response = await self._http.post_json(
            self._verify_url, {"token": token, "sitekey": self._sitekey}
        )
        try:
            data = response.json()
        except ValueError as e:
            log.error(
                "capycap_invalid_response",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise CaptchaServiceError("Captcha service returned invalid JSON") from e

        if not isinstance(data, dict) or not isinstance(data.get("success"), bool):
            log.error("capycap_malformed_response", status_code=response.status_code)
            raise CaptchaServiceError("Captcha service response has no success flag")

        if not data["success"]:
            log.warning(
                "capycap_verification_failed",
                status_code=response.status_code,
                error_codes=data.get("error-codes", data.get("errors", [])),
            )
        return CaptchaVerification(success=data["success"], payload=data)


class CapyCapWidget:
    """Server-side view of the CapyCap browser widget.

    The browser script mounts the challenge and, once solved, fills a hidden
    ``capycap-token`` input inside the container. On the server that input is
    just a submitted field, so this adapter reads the token from the submitted
    fields and treats ``reset`` as discarding it: the next response renders a
    fresh, unsolved widget. ``container`` arguments are accepted for interface
    parity with the browser API; one adapter serves one container.
    """

    def __init__(
        self,
        settings: CaptchaSettings,
        fields: Optional[Mapping[str, Any]] = None,
        *,
        token_field: str = TOKEN_FIELD,
        container: str = DEFAULT_CONTAINER,
    ) -> None:
        self._settings = settings
        self._fields = dict(fields or {})
        self._token_field = token_field
        self._container = container
        self.reset_count = 0

    def render(self, container: Optional[str] = None) -> CaptchaMount:
        if container:
            self._container = container
        return CaptchaMount(
            container=self._container,
            sitekey=self._settings.capycap_sitekey,
            script_url=self._settings.capycap_widget_url,
            token_field=TOKEN_FIELD,
        )

    def reset(self, container: Optional[str] = None) -> None:
        self._fields.pop(self._token_field, None)
        self.reset_count += 1

    def get_token(self, container: Optional[str] = None) -> Optional[str]:
        value = self._fields.get(self._token_field)
        if not isinstance(value, str):
            return None
        return value.strip() or None
