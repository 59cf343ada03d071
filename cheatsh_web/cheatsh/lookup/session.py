from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Optional

from ..logging_utils import setup_logger
from .errors import NotFound, TransportError
from .history import History
from .relay_client import RelayClient

logger = setup_logger("cheatsh.session")


@dataclass(frozen=True)
class SearchResult:
    query: str
    text: str
    token: int


class SearchSession:
    """Submits committed queries to the relay and records the ones that succeed.

    Submissions are not deduplicated. Each one gets a monotonically increasing
    token; only the most recently issued token is current, so a slow response
    to an older query can be recognised and left unrendered.
    """

    def __init__(self, relay: RelayClient, history: History):
        self.relay = relay
        self.history = history
        self._tokens = itertools.count(1)
        self.latest_token = 0

    def is_current(self, token: Optional[int]) -> bool:
        return token is not None and token == self.latest_token

    async def submit(self, query: str) -> Optional[SearchResult]:
        """Fetch the sheet for query. Blank queries are ignored and return None.

        Raises NotFound for an empty body and TransportError for any relay or
        network failure; both carry the submission token.
        """
        query = (query or "").strip()
        if not query:
            return None

        token = next(self._tokens)
        self.latest_token = token

        try:
            text = await self.relay.fetch(query)
        except TransportError as e:
            logger.warning(f"Search failed for '{query}': {e.message}")
            raise TransportError(e.message, query=query, token=token) from e

        if not text.strip():
            logger.info(f"No results for '{query}'")
            raise NotFound(query=query, token=token)

        self.history.add(query)
        return SearchResult(query=query, text=text, token=token)
