"""Shared fixtures for cancellation flow tests.

Provides:
- fake_db: patches supabase_client with an in-memory fake
- client: FastAPI TestClient wired to the app with the fake DB
- state factories for building flow states at a given step
"""

import os
import uuid
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
from unittest.mock import patch, MagicMock

import pytest
from postgrest.exceptions import APIError

# Set env vars before any app imports
os.environ.setdefault("SUPABASE_URL", "https://fake.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "fake-key")
os.environ.setdefault("RATE_LIMIT", "1000")

from cancellation_flow.flow import FlowState, RetentionAnswers, Step, SurveyAnswers  # noqa: E402


# ---------------------------------------------------------------------------
# In-memory fake Supabase
# ---------------------------------------------------------------------------

UNIQUE_KEYS = {
    "cancellations": ("user_id", "subscription_id"),
}


class FakeQueryResult:
    def __init__(self, data=None):
        self.data = data or []


class FakeQueryBuilder:
    """Mimics the supabase-py query builder chain."""

    def __init__(self, store, table_name):
        self._store = store
        self._table = table_name
        self._filters = []
        self._null_filters = []
        self._limit_val = None
        self._columns = "*"
        self._update_data = None
        self._insert_data = None

    def select(self, columns="*"):
        self._columns = columns
        return self

    def insert(self, data):
        self._insert_data = data
        return self

    def update(self, data):
        self._update_data = data
        return self

    def eq(self, col, val):
        self._filters.append((col, val))
        return self

    def is_(self, col, val):
        # Only IS NULL is used by the client
        assert val == "null"
        self._null_filters.append(col)
        return self

    def limit(self, n):
        self._limit_val = n
        return self

    def _match(self, row):
        return (all(row.get(col) == val for col, val in self._filters)
                and all(row.get(col) is None for col in self._null_filters))

    def execute(self):
        table = self._store[self._table]

        if self._insert_data is not None:
            row = dict(self._insert_data)
            key = UNIQUE_KEYS.get(self._table)
            if key and any(all(r.get(c) == row.get(c) for c in key) for r in table):
                raise APIError({
                    "code": "23505",
                    "message": f'duplicate key value violates unique constraint "{self._table}_key"',
                })
            if "id" not in row:
                row["id"] = str(uuid.uuid4())
            table.append(row)
            return FakeQueryResult(data=[row])

        if self._update_data is not None:
            updated = []
            for row in table:
                if self._match(row):
                    row.update(self._update_data)
                    updated.append(row)
            return FakeQueryResult(data=updated)

        # SELECT
        rows = [r for r in table if self._match(r)]
        if self._limit_val is not None:
            rows = rows[:self._limit_val]
        return FakeQueryResult(data=rows)


class FakeDB:
    """In-memory store keyed by table name."""

    def __init__(self):
        self.store = defaultdict(list)

    def table(self, name):
        return FakeQueryBuilder(self.store, name)


@pytest.fixture
def fake_db():
    """Provides a clean in-memory DB and patches supabase_client._table."""
    db = FakeDB()

    def fake_table(name):
        return FakeQueryBuilder(db.store, name)

    with patch("cancellation_flow.supabase_client._table", side_effect=fake_table):
        with patch("cancellation_flow.supabase_client.get_client", return_value=MagicMock()):
            yield db


@pytest.fixture
def client(fake_db):
    """Sync test client for the FastAPI app with mocked DB."""
    from fastapi.testclient import TestClient
    from cancellation_flow.app import create_app
    from cancellation_flow.routers import cancellation

    cancellation._rate_buckets.clear()
    with TestClient(create_app()) as c:
        yield c


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------

LONG_TEXT = "This is definitely more than twenty-five characters."


def make_subscription(**overrides):
    defaults = {
        "id": "sub-1",
        "user_id": "user-1",
        "monthly_price": 2500,
        "status": "active",
        "created_at": datetime.now(timezone.utc).isoformat(),
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    defaults.update(overrides)
    return defaults


def make_state(step: Step, **overrides) -> FlowState:
    """FlowState at step with the given top-level fields."""
    return replace(FlowState(step=step), **overrides)


def complete_survey(**overrides) -> SurveyAnswers:
    defaults = {
        "found_job_via_platform": True,
        "roles_applied": "1-5",
        "companies_emailed": "6-20",
        "companies_interviewed": "1-2",
    }
    defaults.update(overrides)
    return SurveyAnswers(**defaults)


def retention(**overrides) -> RetentionAnswers:
    return RetentionAnswers(**overrides)
