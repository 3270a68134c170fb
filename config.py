"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

The Firebase values mirror the public web-app config the earlier site
shipped to the browser; none of them are secrets. Server-side access to
Firestore additionally needs credentials, taken from a service-account file
when FIREBASE_CREDENTIALS_FILE is set and from application default
credentials otherwise.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    firebase_api_key: str = ""
    firebase_auth_domain: str = ""
    firebase_project_id: str = ""
    firebase_storage_bucket: str = ""
    firebase_messaging_sender_id: str = ""
    firebase_app_id: str = ""
    firebase_measurement_id: str = ""

    # Service-account JSON; empty means application default credentials
    firebase_credentials_file: str = ""
    firebase_app_name: str = "horizons"

    @property
    def app_options(self) -> dict[str, str]:
        """Options passed to firebase_admin.initialize_app (empty values dropped)."""
        options = {
            "projectId": self.firebase_project_id,
            "storageBucket": self.firebase_storage_bucket,
        }
        return {k: v for k, v in options.items() if v}


class MongoSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Only required when STORE_BACKEND=mongodb
    mongodb_uri: str = ""
    db_name: str = "horizons"


class CaptchaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    capycap_sitekey: str = ""
    capycap_verify_url: str = "https://capycap.ai/api/captcha/verify"
    capycap_widget_url: str = "https://capycap.ai/widget.js"
    captcha_timeout_seconds: float = 5.0

    @property
    def is_configured(self) -> bool:
        return bool(self.capycap_sitekey)


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_url: str = "https://www.stanfordhorizons.com"
    app_name: str = "Horizons"

    store_backend: Literal["firestore", "mongodb"] = "firestore"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    firebase: Optional[FirebaseSettings] = None
    mongo: Optional[MongoSettings] = None
    captcha: Optional[CaptchaSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.firebase is None:
            self.firebase = FirebaseSettings()
        if self.mongo is None:
            self.mongo = MongoSettings()
        if self.captcha is None:
            self.captcha = CaptchaSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        if self.store_backend == "mongodb" and not self.mongo.mongodb_uri:
            raise ValueError("MONGODB_URI is required when STORE_BACKEND=mongodb")

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
