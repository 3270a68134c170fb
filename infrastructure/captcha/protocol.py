"""Captcha protocols - flows depend on these, not on CapyCap specifics.

CaptchaVerifier  - server-side check of a solved challenge
CaptchaWidget    - the three widget operations a form flow consumes
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol


@dataclass(frozen=True)
class CaptchaVerification:
    """Outcome of one verification call; never persisted."""

    success: bool
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CaptchaMount:
    """Everything a template needs to mount the widget into a container."""

    container: str
    sitekey: str
    script_url: str
    token_field: str
    render_delay_ms: int = 100


class CaptchaVerifier(Protocol):
    async def verify(self, token: str) -> CaptchaVerification: ...


class CaptchaWidget(Protocol):
    def render(self, container: Optional[str] = None) -> CaptchaMount: ...

    def reset(self, container: Optional[str] = None) -> None: ...

    def get_token(self, container: Optional[str] = None) -> Optional[str]: ...
