from __future__ import annotations

from typing import Optional


class LookupClientError(Exception):
    """Base class for lookup client failures."""


class SearchError(LookupClientError):
    """A submitted query did not produce a sheet.

    `token` identifies the submission that failed so callers can ignore
    failures of superseded requests.
    """

    def __init__(self, message: str, query: str = "", token: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.query = query
        self.token = token


class NotFound(SearchError):
    """The relay answered successfully with an empty body."""

    def __init__(self, query: str = "", token: Optional[int] = None):
        super().__init__("No results found", query=query, token=token)


class TransportError(SearchError):
    """Non-2xx status from the relay, or the relay could not be reached."""


class CacheRefreshFailed(LookupClientError):
    """The command listing could not be fetched; the old listing stays in use."""
