from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Optional

from ..config import CACHE_TTL_MS, LIST_QUERY, STORAGE_KEY_COMMANDS, STORAGE_KEY_COMMANDS_TS
from ..logging_utils import setup_logger
from .errors import CacheRefreshFailed, LookupClientError
from .relay_client import RelayClient
from .storage import LocalStore, load_json

logger = setup_logger("cheatsh.commands")


@dataclass(frozen=True)
class CacheEntry:
    commands: tuple[str, ...]
    fetched_at_ms: int


def parse_listing(text: str) -> tuple[str, ...]:
    """Split the `:list` response into commands, dropping blank lines."""
    return tuple(line for line in (text or "").split("\n") if line.strip())


class CommandCache:
    """Time-boxed copy of every known command, refreshed in the background.

    Reads are always served from memory. A stale entry keeps being served
    while a refresh runs; a failed refresh leaves it in place.
    """

    def __init__(self, store: LocalStore, relay: RelayClient, ttl_ms: int = CACHE_TTL_MS):
        self.store = store
        self.relay = relay
        self.ttl_ms = ttl_ms
        self._entry: Optional[CacheEntry] = self._load()
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    def get(self) -> tuple[str, ...]:
        entry = self._entry
        return entry.commands if entry else ()

    def is_stale(self, now_ms: int) -> bool:
        entry = self._entry
        return entry is None or now_ms - entry.fetched_at_ms >= self.ttl_ms

    @property
    def refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def refresh_if_stale(self, now_ms: int) -> Optional[asyncio.Task]:
        """Start a background refresh when stale. Must be called from a running event loop.

        Returns the in-flight task (new or already running), or None when the
        entry is fresh.
        """
        if self.refreshing:
            return self._refresh_task
        if not self.is_stale(now_ms):
            return None
        self._refresh_task = asyncio.get_running_loop().create_task(self._refresh(now_ms))
        return self._refresh_task

    async def _refresh(self, now_ms: int) -> None:
        try:
            commands = await self._fetch_listing()
        except CacheRefreshFailed as e:
            logger.warning(f"Autocomplete load failed: {e}")
            return

        previous = self._entry
        fetched_at = now_ms if previous is None else max(now_ms, previous.fetched_at_ms)
        # Swap the whole entry; readers never see a half-updated one
        self._entry = CacheEntry(commands=commands, fetched_at_ms=fetched_at)
        logger.info(f"Loaded {len(commands)} commands")
        try:
            self._save(self._entry)
        except OSError as e:
            logger.warning(f"Could not persist command cache: {e}")

    async def _fetch_listing(self) -> tuple[str, ...]:
        try:
            text = await self.relay.fetch(LIST_QUERY)
        except LookupClientError as e:
            raise CacheRefreshFailed(str(e)) from e
        return parse_listing(text)

    def _load(self) -> Optional[CacheEntry]:
        commands = load_json(self.store, STORAGE_KEY_COMMANDS, None)
        raw_ts = self.store.get_item(STORAGE_KEY_COMMANDS_TS)
        if not isinstance(commands, list) or raw_ts is None:
            return None
        try:
            fetched_at = int(raw_ts)
        except ValueError:
            return None
        return CacheEntry(
            commands=tuple(c for c in commands if isinstance(c, str) and c.strip()),
            fetched_at_ms=fetched_at,
        )

    def _save(self, entry: CacheEntry) -> None:
        self.store.set_items({
            STORAGE_KEY_COMMANDS: json.dumps(list(entry.commands), ensure_ascii=False),
            STORAGE_KEY_COMMANDS_TS: str(entry.fetched_at_ms),
        })
