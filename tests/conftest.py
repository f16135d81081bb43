"""
Pytest configuration and shared fixtures for querywrapper tests.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from querywrapper.adapters.base import AdapterResult, BaseAdapter, QueryError
from querywrapper.adapters.sqlite_adapter import SQLiteAdapter
from querywrapper.core.config import reset_settings


class RecordingAdapter(BaseAdapter):
    """
    In-memory adapter that records every statement it is given.

    COUNT(*) statements answer with `total`; every other statement answers
    with `rows`. Statements containing `fail_on` raise QueryError.
    """

    ENGINE = "recording"

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        total: int = 0,
        rows_affected: int = 0,
        fail_on: Optional[str] = None,
    ):
        super().__init__({})
        self.rows = rows or []
        self.total = total
        self.rows_affected = rows_affected
        self.fail_on = fail_on
        self.calls: List[Tuple[str, List[Any]]] = []

    def _open(self):
        return None

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> AdapterResult:
        if not self._connected:
            raise QueryError("Not connected to recording", engine=self.ENGINE)
        self.calls.append((sql, list(params or [])))
        if self.fail_on and self.fail_on in sql:
            raise QueryError(f"boom: {sql}", engine=self.ENGINE)

        if sql.startswith("SELECT COUNT(*)"):
            rows = [{"COUNT(*)": self.total}]
        else:
            rows = list(self.rows)

        return AdapterResult(
            rows=rows,
            columns=list(rows[0].keys()) if rows else [],
            rows_affected=self.rows_affected,
            engine=self.ENGINE,
            sql=sql,
        )

    @property
    def statements(self) -> List[str]:
        return [sql for sql, _ in self.calls]


USERS_SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT,
    age INTEGER NOT NULL,
    status INTEGER NOT NULL,
    team_id INTEGER
);
CREATE TABLE teams (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL
);
INSERT INTO teams (id, title) VALUES (1, 'core'), (2, 'infra');
INSERT INTO users (id, name, email, age, status, team_id) VALUES
    (1, 'alice', 'alice@example.com', 31, 1, 1),
    (2, 'bob', 'bob@example.com', 25, 1, 2),
    (3, 'carol', NULL, 42, 0, 1),
    (4, 'dave', 'dave@example.org', 25, 1, NULL),
    (5, 'erin', 'erin@example.com', 37, 1, 2);
"""


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate every test from QUERYWRAPPER_* variables and cached settings."""
    for name in ("LOG_SQL", "LOG_LEVEL", "MAX_PAGE_SIZE", "SQL_DIALECT"):
        monkeypatch.delenv(f"QUERYWRAPPER_{name}", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def recording_adapter():
    """Return a connected RecordingAdapter with no canned rows."""
    adapter = RecordingAdapter()
    adapter.connect()
    return adapter


@pytest.fixture
def make_recording_adapter():
    """Return a factory for connected RecordingAdapters with canned results."""
    def _make(**kwargs) -> RecordingAdapter:
        adapter = RecordingAdapter(**kwargs)
        adapter.connect()
        return adapter
    return _make


@pytest.fixture
def sqlite_adapter():
    """Return an in-memory SQLite adapter seeded with users and teams."""
    adapter = SQLiteAdapter({"database": ":memory:"})
    adapter.connect()
    adapter.execute_script(USERS_SCHEMA)
    yield adapter
    adapter.disconnect()
