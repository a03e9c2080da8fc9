"""
Pytest configuration and shared fixtures for inspection sync tests.
"""

import copy
import tempfile
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeClient:
    """
    In-memory stand-in for RemoteClient.

    Implements the same async methods and records every call so tests can
    assert on what would have gone over the wire.
    """

    def __init__(self):
        self.details: dict[str, dict] = {}
        self.detail_error: Exception | None = None
        self.detail_errors: dict[str, Exception] = {}
        self.slots: list[dict] = []
        self.total: int | None = None
        self.page_error: Exception | None = None
        self.page_error_offset = 0
        self.evaluators: list[dict] = []
        self.submit_response: dict = {"success": True, "data": {"id": "remote-1"}}
        self.submit_error: Exception | None = None
        self.before_submit_returns = None
        self.calls: list[tuple] = []
        self.submissions: list[tuple] = []

    async def fetch_detail(self, path, entity_id):
        self.calls.append(("detail", path, entity_id))
        if self.detail_error is not None:
            raise self.detail_error
        if path in self.detail_errors:
            raise self.detail_errors[path]
        return copy.deepcopy(self.details.get(path, {}))

    async def fetch_page(self, path, filters, limit, offset, items_key="allSlots"):
        from inspection_sync.client import Page

        self.calls.append(("page", path, dict(filters), limit, offset))
        if self.page_error is not None and offset >= self.page_error_offset:
            raise self.page_error
        return Page(items=copy.deepcopy(self.slots[offset : offset + limit]), total=self.total)

    def page_fetcher(self, path, items_key="allSlots"):
        async def fetch(filters, limit, offset):
            return await self.fetch_page(path, filters, limit, offset, items_key=items_key)

        return fetch

    async def fetch_json(self, path, params=None):
        self.calls.append(("json", path, dict(params or {})))
        return {"evaluators": copy.deepcopy(self.evaluators)}

    async def submit(self, path, fields, uploads):
        self.calls.append(("submit", path))
        self.submissions.append((path, dict(fields), list(uploads)))
        if self.before_submit_returns is not None:
            await self.before_submit_returns()
        if self.submit_error is not None:
            raise self.submit_error
        return copy.deepcopy(self.submit_response)

    async def submit_json(self, path, body):
        self.calls.append(("submit", path))
        self.submissions.append((path, copy.deepcopy(dict(body)), []))
        if self.submit_error is not None:
            raise self.submit_error
        return copy.deepcopy(self.submit_response)

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


async def fake_read_asset(ref) -> bytes:
    return f"bytes:{ref.uri}".encode()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dict_store():
    """Create a DictStore instance for testing."""
    from inspection_sync.storage import DictStore

    return DictStore()


@pytest.fixture
async def sqlite_store(temp_dir: Path) -> AsyncGenerator:
    """Create a SQLiteStore instance for testing."""
    from inspection_sync.storage import SQLiteStore

    store = SQLiteStore(temp_dir / "test.sqlite")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def drafts(dict_store):
    from inspection_sync.storage import DraftStore

    return DraftStore(dict_store)


@pytest.fixture
def list_cache(dict_store, clock):
    from inspection_sync.storage import ListCache

    return ListCache(dict_store, clock=clock)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def settings(temp_dir: Path):
    from inspection_sync.config import Settings

    return Settings(base_url="https://api.test", token="t0k3n", data_dir=temp_dir)


@pytest.fixture
def engine(fake_client, drafts, list_cache, settings):
    """SyncEngine wired to in-memory fakes."""
    from inspection_sync.sync import SyncEngine

    return SyncEngine(
        client=fake_client,
        drafts=drafts,
        list_cache=list_cache,
        settings=settings,
        read_asset=fake_read_asset,
    )


@pytest.fixture
def engine_payload() -> dict:
    """A detail record in the newest shape, engine section filled."""
    return {
        "id": "car-record-1",
        "allInspections": [
            {
                "id": "insp-9",
                "engine": {
                    "working ": {
                        "Engine": "yes",
                        "Radiator": "No",
                        "Silencer": "Yes",
                        "Starter Motor": "Yes",
                        "Engine Oil Level": "Yes",
                        "Coolant Availability": "Yes",
                        "Engine Mounting": "Yes",
                        "Battery": "Yes",
                        "Refurbishment Cost": 1200,
                        "Engine image": "https://cdn.test/engine-old.jpg",
                    },
                    "noiseLeakage": {
                        "Engine Oil Leakage": "No",
                        "Coolant Oil Leakage": "No",
                        "Abnormal Noise": "No",
                        "Black Smoke / White Smoke": "no",
                        "Defective Belts": "No",
                    },
                },
            }
        ],
    }


@pytest.fixture
def defects_payload() -> dict:
    """A defects record holding two populated entries."""
    return {
        "id": "defect-record-3",
        "DefectsReport": {
            "Reports": {
                "Report": [
                    {"Defect image": "https://cdn.test/d1.jpg", "Remark": "Dent on door"},
                    {"defectImage": "https://cdn.test/d2.jpg", "remark": "Scratch"},
                ]
            }
        },
    }


def raw_slot(i: int, **overrides) -> dict:
    slot = {
        "id": f"slot-{i}",
        "sellCarId": f"car-{i}",
        "time": "10:00 - 11:00",
        "date": "2026-10-19",
        "currentStatus": "BOOKED",
        "inspector": "NOT ASSIGNED",
        "vehicleDetails": {"brand": "Maruti", "model": "Swift", "variant": "VXi"},
    }
    slot.update(overrides)
    return slot


@pytest.fixture
def make_slot():
    return raw_slot


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "integration: exercises the SQLite-backed engine end to end")
