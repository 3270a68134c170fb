"""
Shared test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during tests; config comes only from monkeypatch.setenv() or explicit
constructor arguments. Also provides an in-memory DocumentStore and a
captcha verifier mock.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from config import CaptchaSettings
from infrastructure.captcha.protocol import CaptchaVerification


class InMemoryStore:
    """DocumentStore double with real merge semantics."""

    def __init__(self) -> None:
        self.documents: dict[tuple[str, str], dict[str, Any]] = {}
        self.writes: list[tuple[str, str, dict[str, Any]]] = []

    async def merge(
        self,
        collection: str,
        key: str,
        fields: dict[str, Any],
        *,
        timestamp_field: Optional[str] = "createdAt",
    ) -> None:
        self.writes.append((collection, key, dict(fields)))
        doc = self.documents.setdefault((collection, key), {})
        doc.update(fields)
        if timestamp_field:
            doc[timestamp_field] = datetime.now(timezone.utc)

    async def ping(self) -> None:
        return None

    async def aclose(self) -> None:
        return None

    def collection(self, name: str) -> dict[str, dict[str, Any]]:
        return {key: doc for (coll, key), doc in self.documents.items() if coll == name}


def make_verifier(success: bool = True, **payload: Any) -> AsyncMock:
    verifier = AsyncMock()
    verifier.verify.return_value = CaptchaVerification(
        success=success, payload={"success": success, **payload}
    )
    return verifier


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def verifier_factory():
    """Build a CaptchaVerifier mock answering ``success``."""
    return make_verifier


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def captcha_settings() -> CaptchaSettings:
    return CaptchaSettings(
        capycap_sitekey="test-sitekey",
        capycap_verify_url="https://capycap.test/api/captcha/verify",
        capycap_widget_url="https://capycap.test/widget.js",
    )
