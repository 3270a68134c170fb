"""MongoDB implementation of DocumentStore for self-hosted deployments.

Documents use the email key as ``_id``; a merge write is an upserting
``$set`` so fields missing from the payload keep their stored values.
"""

from typing import Any, Optional

from pymongo import AsyncMongoClient

from config import MongoSettings
from infrastructure.store.protocol import CREATED_AT_FIELD


class MongoDocumentStore:
    def __init__(self, client: AsyncMongoClient, db_name: str) -> None:
        self._client = client
        self._db = client[db_name]

    @classmethod
    def from_settings(cls, settings: MongoSettings) -> "MongoDocumentStore":
        return cls(AsyncMongoClient(settings.mongodb_uri), settings.db_name)

    async def merge(
        self,
        collection: str,
        key: str,
        fields: dict[str, Any],
        *,
        timestamp_field: Optional[str] = CREATED_AT_FIELD,
    ) -> None:
        update: dict[str, Any] = {"$set": dict(fields)}
        if timestamp_field:
            update["$currentDate"] = {timestamp_field: True}
        await self._db[collection].update_one({"_id": key}, update, upsert=True)

    async def ping(self) -> None:
        await self._client.admin.command("ping")

    async def aclose(self) -> None:
        await self._client.close()
