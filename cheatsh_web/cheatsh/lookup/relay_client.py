from __future__ import annotations

import httpx

from ..config import settings
from .errors import TransportError


class RelayClient:
    """Talks to the same-origin relay: `GET <endpoint>?q=<query>` -> raw text."""

    def __init__(
        self,
        base_url: str | None = None,
        endpoint: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.relay_url
        self.endpoint = endpoint or settings.api_endpoint
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, query: str) -> str:
        """Return the relay's body for query; any non-2xx status is a TransportError."""
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            try:
                response = await client.get(self.endpoint, params={"q": query})
            except httpx.HTTPError as exc:
                raise TransportError(str(exc) or exc.__class__.__name__, query=query) from exc

        if not response.is_success:
            raise TransportError(f"HTTP {response.status_code}", query=query)
        return response.text
