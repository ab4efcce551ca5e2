"""
Pytest configuration and fixtures for the HARKA admin test suite.

Provides:
- Supabase mock client for repository tests
- Container and FastAPI test client fixtures
- A controllable clock for age and schedule tests

Note: Tests never talk to a real Supabase project; the API fixtures use the
in-memory repository seeded with demo records.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient

# Set test environment before imports
os.environ["HARKA_ENV"] = "test"
os.environ.pop("HARKA_ADMIN_TOKEN", None)

from harka.adapters.memory import InMemoryEntityRepository, demo_records
from harka.config import HarkaConfig
from harka.core.container import Container
from harka.main import create_app


# ============== Supabase Mock Fixtures ==============

class MockSupabaseResponse:
    """Mock response from Supabase operations."""
    def __init__(self, data: List[Dict] = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseTable:
    """Mock Supabase table with chainable methods."""

    def __init__(self, table_name: str, data_store: Dict[str, List[Dict]], calls: List[tuple]):
        self.table_name = table_name
        self._data_store = data_store
        self._calls = calls
        self._filters: Dict[str, Any] = {}
        self._limit = None
        self._select_cols = "*"

    def select(self, columns: str = "*"):
        self._select_cols = columns
        self._calls.append(("select", self.table_name, columns))
        return self

    def upsert(self, data: Dict | List[Dict]):
        rows = [data] if isinstance(data, dict) else data
        table = self._data_store.setdefault(self.table_name, [])
        for row in rows:
            identity = "id" if "id" in row else "key"
            table[:] = [r for r in table if r.get(identity) != row.get(identity)]
            table.append(dict(row))
        self._calls.append(("upsert", self.table_name, rows))
        return self

    def eq(self, column: str, value: Any):
        self._filters[column] = value
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        """Execute the query and return results."""
        data = self._data_store.get(self.table_name, [])

        for col, val in self._filters.items():
            data = [d for d in data if d.get(col) == val]

        if self._limit:
            data = data[:self._limit]

        if self._select_cols != "*":
            columns = [c.strip() for c in self._select_cols.split(",")]
            data = [{c: d.get(c) for c in columns} for d in data]

        self._filters = {}
        self._limit = None

        return MockSupabaseResponse(data=[dict(d) for d in data])


class MockSupabaseClient:
    """Mock Supabase client for testing."""

    def __init__(self):
        self._data_store: Dict[str, List[Dict]] = {}
        self.calls: List[tuple] = []

    def table(self, name: str) -> MockSupabaseTable:
        return MockSupabaseTable(name, self._data_store, self.calls)

    def seed_data(self, table_name: str, data: List[Dict]):
        """Seed test data into a table."""
        self._data_store[table_name] = [dict(d) for d in data]

    def rows(self, table_name: str) -> List[Dict]:
        return self._data_store.get(table_name, [])

    def clear(self):
        """Clear all test data."""
        self._data_store.clear()
        self.calls.clear()


@pytest.fixture(scope="function")
def mock_supabase() -> MockSupabaseClient:
    """In-memory stand-in for a supabase.Client."""
    return MockSupabaseClient()


@pytest.fixture(scope="function")
def mock_supabase_with_data(mock_supabase) -> MockSupabaseClient:
    """Supabase mock with sample data pre-loaded."""
    mock_supabase.seed_data("users", [
        {"id": "u-1", "name": "Ada Admin", "email": "ada@example.com", "role": "admin"},
        {"id": "u-2", "name": "Sam Student", "email": "sam@example.com", "role": "student"},
    ])
    mock_supabase.seed_data("courses", [
        {"id": "c-1", "title": "Intro to Testing", "difficulty": "beginner"},
    ])
    mock_supabase.seed_data("settings", [
        {"key": "site_name", "value": "HARKA"},
    ])
    return mock_supabase


# ============== Clock Fixtures ==============

class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc))


# ============== Container / App Fixtures ==============

@pytest.fixture
def test_config() -> HarkaConfig:
    return HarkaConfig(environment="test", log_level="DEBUG")


@pytest.fixture
def repository() -> InMemoryEntityRepository:
    """In-memory repository seeded with the demo records."""
    return InMemoryEntityRepository(seed=demo_records())


@pytest.fixture
def container(test_config, repository) -> Container:
    return Container(test_config, repository=repository)


@pytest.fixture(scope="function")
def client(container) -> Generator[TestClient, None, None]:
    """FastAPI test client around a fresh container (no admin token)."""
    with TestClient(create_app(container=container)) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def secured_client(repository) -> Generator[TestClient, None, None]:
    """FastAPI test client whose admin routes require the token "s3cret"."""
    config = HarkaConfig(environment="test", admin_token="s3cret")
    with TestClient(create_app(container=Container(config, repository=repository))) as test_client:
        yield test_client


# ============== Sample Data Factories ==============

@pytest.fixture
def backup_options_factory():
    """Factory for create-backup request bodies."""
    def _create(
        name: str = "Nightly",
        entities: List[str] = None,
        description: str = None,
    ) -> Dict[str, Any]:
        body = {
            "name": name,
            "includedEntities": entities or ["users", "courses"],
        }
        if description:
            body["description"] = description
        return body
    return _create


# ============== Assertion Helpers ==============

@pytest.fixture
def assert_response_success():
    """Helper to assert successful API responses."""
    def _assert(response, status_code: int = 200):
        assert response.status_code == status_code, f"Expected {status_code}, got {response.status_code}: {response.text}"
        return response.json()
    return _assert


@pytest.fixture
def assert_response_error():
    """Helper to assert error envelopes."""
    def _assert(response, status_code: int = 400, code: str = None):
        assert response.status_code == status_code, f"Expected {status_code}, got {response.status_code}: {response.text}"
        body = response.json()
        assert body["success"] is False
        if code:
            assert body["error"]["code"] == code
        return body
    return _assert
