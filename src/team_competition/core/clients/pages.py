"""Remote content-store client for named pages.

The surrounding application keeps free-text pages (the roster, the
competition document) behind a small REST service:

    GET {base}/pages/{slug}   -> {"slug": ..., "content": "..."}  (404 if absent)
    PUT {base}/pages/{slug}   <- {"content": "..."}
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..exceptions import PersistenceFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(20.0, connect=10.0)


class HttpContentStore:
    """Loads and saves page content over HTTP."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            timeout=DEFAULT_TIMEOUT,
            transport=self._transport,
        )

    async def load(self, page_id: str) -> Optional[str]:
        """Fetch page content, or None if the page does not exist."""
        try:
            async with self._client() as client:
                response = await client.get(f"/pages/{page_id}")
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError, RecursionError) as exc:
            logger.warning("Failed to load page %s: %s", page_id, exc)
            raise PersistenceFailure(page_id, str(exc)) from exc

        content = data.get("content") if isinstance(data, dict) else None
        return content if isinstance(content, str) else None

    async def save(self, page_id: str, content: str) -> bool:
        """Overwrite page content. Returns False if the service refused or failed."""
        try:
            async with self._client() as client:
                response = await client.put(f"/pages/{page_id}", json={"content": content})
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Failed to save page %s: %s", page_id, exc)
            return False
        return True
