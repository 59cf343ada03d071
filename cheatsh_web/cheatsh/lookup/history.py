from __future__ import annotations

import json

from ..config import MAX_HISTORY, STORAGE_KEY_HISTORY
from .storage import LocalStore, load_json


class History:
    """Recently committed queries, most recent first, without duplicates."""

    def __init__(self, store: LocalStore, capacity: int = MAX_HISTORY):
        self.store = store
        self.capacity = capacity
        self._entries: tuple[str, ...] = self._load()

    def _load(self) -> tuple[str, ...]:
        data = load_json(self.store, STORAGE_KEY_HISTORY, [])
        if not isinstance(data, list):
            return ()
        entries = [q for q in data if isinstance(q, str) and q]
        return tuple(entries[:self.capacity])

    def _save(self) -> None:
        self.store.set_item(STORAGE_KEY_HISTORY, json.dumps(list(self._entries), ensure_ascii=False))

    @property
    def entries(self) -> tuple[str, ...]:
        return self._entries

    def add(self, query: str) -> None:
        """Move query to the front, dropping any older copy and anything past capacity."""
        entries = [query] + [q for q in self._entries if q != query]
        self._entries = tuple(entries[:self.capacity])
        self._save()

    def clear(self) -> None:
        self._entries = ()
        self._save()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)
