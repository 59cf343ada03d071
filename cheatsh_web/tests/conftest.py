import asyncio
import json

import pytest

from cheatsh.config import STORAGE_KEY_COMMANDS, STORAGE_KEY_COMMANDS_TS
from cheatsh.lookup.storage import LocalStore


class FakeRelay:
    """Stands in for RelayClient. Values that are exceptions are raised."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.gates = {}

    def hold(self, query):
        """Make fetch(query) wait until the returned event is set."""
        gate = asyncio.Event()
        self.gates[query] = gate
        return gate

    async def fetch(self, query):
        self.calls.append(query)
        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()
        value = self.responses.get(query, "")
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def fake_relay():
    return FakeRelay()


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "storage.json")


@pytest.fixture
def seed_commands(store):
    def _seed(commands, fetched_at_ms):
        store.set_items({
            STORAGE_KEY_COMMANDS: json.dumps(commands),
            STORAGE_KEY_COMMANDS_TS: str(fetched_at_ms),
        })
    return _seed
