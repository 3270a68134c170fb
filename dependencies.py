"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Each reads a collaborator the lifespan stored on
app.state, so tests swap collaborators by building an app whose lifespan
stores mocks instead.
"""

from __future__ import annotations

from fastapi import Request

from config import AppSettings, CaptchaSettings
from infrastructure.captcha.protocol import CaptchaVerifier
from infrastructure.store.protocol import DocumentStore


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_captcha_settings(request: Request) -> CaptchaSettings:
    return request.app.state.settings.captcha


def get_captcha_verifier(request: Request) -> CaptchaVerifier:
    return request.app.state.captcha


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store
