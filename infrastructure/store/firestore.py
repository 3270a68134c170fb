"""Firestore implementation of DocumentStore.

The Firebase app is a process-wide handle: get_firebase_app() creates it on
first use and returns the same App on every later call, including when
another module already registered an app under the same name with
firebase_admin.
"""

from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.cloud import firestore

from config import FirebaseSettings
from infrastructure.store.protocol import CREATED_AT_FIELD
from shared.logging import get_logger

log = get_logger(__name__)

_app: Optional[firebase_admin.App] = None


def get_firebase_app(settings: FirebaseSettings) -> firebase_admin.App:
    """Return the process-wide Firebase app, initialising it once."""
    global _app
    if _app is not None:
        return _app

    try:
        _app = firebase_admin.get_app(settings.firebase_app_name)
    except ValueError:
        if settings.firebase_credentials_file:
            cred = credentials.Certificate(settings.firebase_credentials_file)
        else:
            cred = credentials.ApplicationDefault()
        _app = firebase_admin.initialize_app(
            cred, options=settings.app_options, name=settings.firebase_app_name
        )
        log.info(
            "firebase_app_initialized",
            project_id=settings.firebase_project_id or None,
            app_name=settings.firebase_app_name,
        )
    return _app


def reset_firebase_app() -> None:
    """Forget the cached app and unregister it from firebase_admin."""
    global _app
    if _app is not None:
        firebase_admin.delete_app(_app)
    _app = None


class FirestoreDocumentStore:
    def __init__(self, client: firestore.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: FirebaseSettings) -> "FirestoreDocumentStore":
        return cls(firestore_async.client(app=get_firebase_app(settings)))

    async def merge(
        self,
        collection: str,
        key: str,
        fields: dict[str, Any],
        *,
        timestamp_field: Optional[str] = CREATED_AT_FIELD,
    ) -> None:
        data = dict(fields)
        if timestamp_field:
            data[timestamp_field] = firestore.SERVER_TIMESTAMP
        await self._client.collection(collection).document(key).set(data, merge=True)

    async def ping(self) -> None:
        async for _ in self._client.collections():
            break

    async def aclose(self) -> None:
        # The client belongs to the process-wide app; nothing to release here.
        return None
