import os
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Keep pytest output high-signal by disabling outbound Sentry capture in tests.
os.environ["SENTRY_DSN"] = ""

from booking_analytics.db.mongo import get_event_collection  # noqa: E402
from booking_analytics.main import app  # noqa: E402


class FakeCursor:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        rows = [dict(row) for row in self._rows]
        return rows if length is None else rows[:length]


class FakeCollection:
    """Stands in for an AsyncCollection: records pipelines and replays canned rows."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, error: Exception | None = None) -> None:
        self.rows = list(rows or [])
        self.error = error
        self.pipelines: list[list[dict[str, Any]]] = []

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> FakeCursor:
        self.pipelines.append(pipeline)
        if self.error is not None:
            raise self.error
        return FakeCursor(self.rows)


@pytest.fixture(scope="module")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def client(fake_collection: FakeCollection) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_event_collection] = lambda: fake_collection
    test_client = TestClient(app)
    yield test_client
    test_client.close()
    app.dependency_overrides.clear()
