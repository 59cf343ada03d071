from __future__ import annotations

from urllib.parse import quote

import httpx

from .config import settings
from .models import UpstreamResponse

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


class UpstreamError(RuntimeError):
    """The remote text provider could not be reached or did not answer."""


def sheet_url(base_url: str, query: str) -> str:
    """Build the provider URL for a query; the whole query is a single path segment."""
    return f"{base_url.rstrip('/')}/{quote(query, safe=_URI_COMPONENT_SAFE)}"


def path_url(base_url: str, path: str) -> str:
    """Provider URL for a path-style query; slashes stay path separators.

    `?T` asks the provider for text without ANSI colouring.
    """
    return f"{base_url.rstrip('/')}/{quote(path, safe='/:+' + _URI_COMPONENT_SAFE)}?T"


class CheatShUpstream:
    """Fetches plain text sheets from the remote provider.

    The provider colours its output with ANSI sequences when it believes it
    is talking to curl, so the relay identifies itself that way.
    """

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.upstream_url
        self.user_agent = user_agent or settings.upstream_user_agent
        self.timeout = timeout if timeout is not None else settings.upstream_timeout
        self._transport = transport

    async def fetch(self, query: str) -> UpstreamResponse:
        return await self._get(sheet_url(self.base_url, query))

    async def fetch_path(self, path: str) -> UpstreamResponse:
        return await self._get(path_url(self.base_url, path))

    async def _get(self, url: str) -> UpstreamResponse:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/plain",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(url, headers=headers)
            except httpx.HTTPError as exc:
                raise UpstreamError(str(exc) or exc.__class__.__name__) from exc

        # Status is passed through untouched; only transport failures are errors here
        return UpstreamResponse(status_code=response.status_code, text=response.text)
