"""
Integration test helpers.

Apps are assembled from the real routers and error handlers, with the
collaborators create_app() would build (captcha verifier, document store)
replaced through the lifespan. No network connections are made.
"""

from contextlib import asynccontextmanager
from typing import Optional

import pytest
from fastapi import FastAPI

from config import AppSettings, CaptchaSettings
from errors import register_error_handlers
from routes.api_routes import router as api_router
from routes.health_routes import router as health_router
from routes.page_routes import router as page_router


def _build_test_app(verifier, store, captcha: Optional[CaptchaSettings] = None) -> FastAPI:
    settings = AppSettings(captcha=captcha or CaptchaSettings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.captcha = verifier
        app.state.store = store
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(api_router)
    app.include_router(page_router)
    return app


@pytest.fixture
def app_factory(captcha_settings):
    """Build a test app; captcha settings default to a configured site key."""

    def factory(verifier, store, captcha: Optional[CaptchaSettings] = None) -> FastAPI:
        return _build_test_app(verifier, store, captcha or captcha_settings)

    return factory
