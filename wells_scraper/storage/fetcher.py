"""HTTP fetcher used to download PDF documents."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import httpx


class Fetcher(ABC):
    """Fetch the raw bytes behind a URL."""

    @abstractmethod
    async def get(self, url: str) -> bytes:
        """Return the body of ``url``; raise on any transport or HTTP error."""

    async def aclose(self) -> None:
        """Release network resources."""


class HttpxFetcher(Fetcher):
    """``httpx`` based fetcher.

    Parameters
    ----------
    client : Optional[httpx.AsyncClient], default=None
        Client to reuse. A new client is created (and owned) when omitted.
    timeout_s : float, default=60.0
        Timeout of the owned client.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout_s: float = 60.0) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_s,
            follow_redirects=True,
            headers={"User-Agent": "Mozilla/5.0"},
        )

    async def get(self, url: str) -> bytes:
        response = await self._client.get(url)
        response.raise_for_status()
        return response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
