"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.captcha.capycap import CapyCapProvider
from infrastructure.http_client import HttpClient
from infrastructure.store.firestore import FirestoreDocumentStore
from infrastructure.store.mongo import MongoDocumentStore
from infrastructure.store.protocol import DocumentStore
from routes.api_routes import router as api_router
from routes.health_routes import router as health_router
from routes.page_routes import router as page_router
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def build_document_store(settings: AppSettings) -> DocumentStore:
    """Return the store selected by STORE_BACKEND."""
    if settings.store_backend == "mongodb":
        return MongoDocumentStore.from_settings(settings.mongo)
    return FirestoreDocumentStore.from_settings(settings.firebase)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging, env=settings.env)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        app.state.settings = settings

        http_client = HttpClient(timeout=settings.captcha.captcha_timeout_seconds)
        app.state.http_client = http_client
        app.state.captcha = CapyCapProvider(settings.captcha, http_client)
        if not settings.captcha.is_configured:
            log.warning("capycap_sitekey_not_configured")

        store = build_document_store(settings)
        app.state.store = store
        log.info("document_store_ready", backend=settings.store_backend)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await http_client.aclose()
        await store.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(api_router)
    app.include_router(page_router)

    return app
