"""
Local key/value store for the lookup client.

Behaves like browser local storage: string keys, string values, one JSON
object on disk. Reads never raise; a missing or corrupt file is an empty
store.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..config import settings
from ..logging_utils import setup_logger

logger = setup_logger("cheatsh.storage")


class LocalStore:
    def __init__(self, path: str | Path | None = None):
        self.path = Path(os.path.expanduser(str(path or settings.storage_path)))

    def _load(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling file and swap it in so readers never see half a file
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def set_items(self, items: dict[str, str]) -> None:
        """Set several keys in one write."""
        data = self._load()
        data.update(items)
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class MemoryStore(LocalStore):
    """In-process store with the same interface, for one-shot sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.path = None
        self._data = dict(initial or {})

    def _load(self) -> dict[str, str]:
        return dict(self._data)

    def _save(self, data: dict[str, str]) -> None:
        self._data = dict(data)


def load_json(store: LocalStore, key: str, default):
    """Decode a JSON value from the store, or return default on any problem."""
    raw = store.get_item(key)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except ValueError:
        logger.debug(f"Discarding undecodable value for {key}")
        return default
    return default if value is None else value
