from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

DEFAULT_TIMEOUT_SECONDS = 15.0


class AsyncHttpClient:
    """Thin asynchronous HTTP client wrapper around httpx.AsyncClient.

    - Normalizes base URLs and paths.
    - Applies one timeout to connect, read and write.
    - Raises for non-successful responses.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def post(
        self,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        resp = await self._client.post(self._url(path), json=json, **kwargs)
        resp.raise_for_status()
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()

