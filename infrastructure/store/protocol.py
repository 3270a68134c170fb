"""DocumentStore protocol - flows depend on this, not on a concrete database."""

from typing import Any, Optional, Protocol

CREATED_AT_FIELD = "createdAt"


class DocumentStore(Protocol):
    async def merge(
        self,
        collection: str,
        key: str,
        fields: dict[str, Any],
        *,
        timestamp_field: Optional[str] = CREATED_AT_FIELD,
    ) -> None:
        """Overlay *fields* onto ``collection/key``, creating it if absent.

        When *timestamp_field* is set the store writes its own server-side
        timestamp there.
        """
        ...

    async def ping(self) -> None: ...

    async def aclose(self) -> None: ...
