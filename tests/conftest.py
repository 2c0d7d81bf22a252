"""Pytest fixtures for arthub tests."""
from unittest.mock import MagicMock

import pytest

from arthub.core.errors import RemoteError
from arthub.offline.queue import SyncQueue
from arthub.offline.remote import InsertResult
from arthub.offline.storage import FileStoragePort, LocalStore, MemoryStoragePort


class FakeClock:
    """Deterministic clock advancing 1ms per call."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        self.now += 0.001
        return self.now


@pytest.fixture
def memory_store():
    """LocalStore on an in-memory port."""
    return LocalStore(MemoryStoragePort())


@pytest.fixture
def file_store(tmp_path):
    """LocalStore on a temporary JSON file."""
    return LocalStore(FileStoragePort(tmp_path / "offline_storage.json"))


@pytest.fixture
def queue(memory_store):
    """SyncQueue sharing memory_store."""
    return SyncQueue(memory_store)


@pytest.fixture
def clock():
    """Fresh FakeClock."""
    return FakeClock()


@pytest.fixture
def mock_remote() -> MagicMock:
    """Remote data service accepting every insert."""
    remote = MagicMock()
    remote.insert.return_value = InsertResult(data=[])
    return remote


def failing_for(sale_ids: set[str]):
    """insert() side effect rejecting rows whose id is in sale_ids."""
    def insert(table, rows, on_conflict=None):
        if any(row.get("id") in sale_ids for row in rows):
            return InsertResult(error=RemoteError("rejected", status=400, table=table))
        return InsertResult(data=rows)
    return insert


@pytest.fixture
def gift_sale() -> dict:
    """Gift sale fields as entered at the till."""
    return {"item": "Mug", "quantity": 2, "bpx": 1000, "spx": 1500}


@pytest.fixture
def stationery_sale() -> dict:
    return {
        "item_id": "item-42",
        "quantity": 3,
        "selling_price": 500,
        "total_amount": 1500,
        "profit": 300,
        "sold_by": None,
    }


@pytest.fixture
def daily_sale() -> dict:
    return {
        "category": "Pens",
        "item": "Bic Blue",
        "description": None,
        "quantity": 10,
        "rate": 100,
        "selling_price": 1000,
        "sold_by": "user-1",
    }


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Keep tests away from the real home directory and credentials."""
    for name in (
        "ARTHUB_SUPABASE_URL",
        "ARTHUB_SUPABASE_KEY",
        "ARTHUB_REQUEST_TIMEOUT",
        "ARTHUB_SYNC_CLEAR_POLICY",
        "ARTHUB_IDEMPOTENT_REPLAY",
        "ARTHUB_CACHE_VERSION",
        "ARTHUB_TENANT_ID",
        "ARTHUB_PROBE_PORT",
        "ARTHUB_RECEIPTS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ARTHUB_STORAGE_PATH", str(tmp_path / "home" / "offline_storage.json"))
