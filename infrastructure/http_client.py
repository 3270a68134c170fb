"""Shared async HTTP client for outbound calls to third-party services."""

from typing import Any, Optional

import httpx

DEFAULT_USER_AGENT = "horizons-site/1.0"


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient.

    One instance per external service keeps timeouts independently configurable.
    Transport errors (``httpx.HTTPError`` and subclasses, timeouts included)
    propagate to the caller.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            transport=transport,
        )

    async def post_json(self, url: str, payload: Any, **kwargs: Any) -> httpx.Response:
        return await self._client.post(url, json=payload, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
