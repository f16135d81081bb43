"""
Tests for the adapter base class, the concrete adapters and the factory.
"""

import pytest

from querywrapper import QueryWrapper
from querywrapper.adapters import (
    DatabaseConnectionError,
    PostgresAdapter,
    QueryError,
    SQLiteAdapter,
    create_adapter,
    list_adapters,
    register_adapter,
)
from querywrapper.adapters import factory


class FakeCursor:
    """DB-API cursor double that answers every statement with canned rows."""

    def __init__(self, connection):
        self.connection = connection
        self.description = None
        self.rowcount = -1
        self._rows = []

    def execute(self, sql, params=None):
        self.connection.statements.append((sql, params))
        if self.connection.columns:
            self.description = [(name, None) for name in self.connection.columns]
            self._rows = list(self.connection.rows)
        self.rowcount = self.connection.rowcount

    def fetchall(self):
        return self._rows

    def close(self):
        self.connection.cursors_closed += 1


class FakeConnection:
    """DB-API connection double recording statements and transaction calls."""

    def __init__(self, columns=(), rows=(), rowcount=-1):
        self.columns = list(columns)
        self.rows = list(rows)
        self.rowcount = rowcount
        self.statements = []
        self.commits = 0
        self.cursors_closed = 0
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        pass

    def close(self):
        self.closed = True


class TestBaseAdapterHelpers:
    """execute_query / execute_scalar_count / execute_update on top of execute()."""

    def test_scalar_count_reads_first_column(self, make_recording_adapter):
        adapter = make_recording_adapter(total=9)
        assert adapter.execute_scalar_count("SELECT COUNT(*) FROM t", []) == 9

    def test_scalar_count_without_rows_is_zero(self, recording_adapter):
        assert recording_adapter.execute_scalar_count("SELECT n FROM t", []) == 0

    def test_scalar_count_rejects_non_integer(self, make_recording_adapter):
        adapter = make_recording_adapter(rows=[{"n": "many"}])
        with pytest.raises(QueryError):
            adapter.execute_scalar_count("SELECT n FROM t", [])

    def test_execute_update(self, make_recording_adapter):
        adapter = make_recording_adapter(rows_affected=4)
        assert adapter.execute_update("DELETE FROM t", []) == 4

    def test_health_check_when_disconnected(self, recording_adapter):
        recording_adapter.disconnect()
        assert recording_adapter.health_check() is False
        assert recording_adapter.calls == []


class TestSQLiteAdapter:
    """SQLite adapter behaviour outside the query builder."""

    def test_requires_database(self):
        with pytest.raises(DatabaseConnectionError):
            SQLiteAdapter({})

    def test_missing_file(self, tmp_path):
        with pytest.raises(DatabaseConnectionError):
            SQLiteAdapter({"database": str(tmp_path / "missing.db")})

    def test_execute_requires_connection(self):
        adapter = SQLiteAdapter({"database": ":memory:"})
        with pytest.raises(QueryError):
            adapter.execute("SELECT 1")

    def test_bad_sql_is_query_error(self, sqlite_adapter):
        with pytest.raises(QueryError) as exc:
            sqlite_adapter.execute("SELECT * FROM nope")
        assert exc.value.engine == "sqlite"
        assert exc.value.original_error is not None

    def test_rows_are_dicts_in_column_order(self, sqlite_adapter):
        result = sqlite_adapter.execute("SELECT id, name FROM users WHERE id = ?", [2])
        assert result.columns == ["id", "name"]
        assert result.rows == [{"id": 2, "name": "bob"}]

    def test_execute_update_counts_rows(self, sqlite_adapter):
        assert sqlite_adapter.execute_update("UPDATE users SET status = ? WHERE age = ?", [0, 25]) == 2

    def test_context_manager(self, tmp_path):
        path = str(tmp_path / "app.db")
        with SQLiteAdapter({"database": path, "create": True}) as adapter:
            assert adapter.health_check()
            adapter.execute_script("CREATE TABLE t (id INTEGER);")
            names = adapter.execute_query("SELECT name FROM sqlite_master WHERE type = ?", ["table"])
            assert names == [{"name": "t"}]
        assert not adapter.is_connected()

    def test_read_only_file_rejects_writes(self, tmp_path):
        path = str(tmp_path / "ro.db")
        with SQLiteAdapter({"database": path, "create": True}) as adapter:
            adapter.execute_script("CREATE TABLE t (id INTEGER);")

        with SQLiteAdapter({"database": path, "read_only": True}) as adapter:
            with pytest.raises(QueryError):
                adapter.execute("INSERT INTO t (id) VALUES (?)", [1])

    def test_committed_with_isolation_level(self, tmp_path):
        path = str(tmp_path / "tx.db")
        config = {"database": path, "create": True, "isolation_level": "DEFERRED"}
        with SQLiteAdapter(config) as adapter:
            adapter.execute_script("CREATE TABLE t (id INTEGER);")
            adapter.execute("INSERT INTO t (id) VALUES (?)", [1])

        with SQLiteAdapter({"database": path}) as adapter:
            assert QueryWrapper().count(adapter, "t") == 1


class TestPostgresAdapter:
    """psycopg2 adapter, driven through a connection double."""

    CONFIG = {"host": "db", "database": "app", "user": "reader"}

    def test_convert_placeholders(self):
        adapter = PostgresAdapter(self.CONFIG)
        sql, params = adapter.convert_placeholders(
            "SELECT * FROM t WHERE a = ? AND b LIKE '10%' AND c = ?", [1, 2]
        )
        assert sql == "SELECT * FROM t WHERE a = %s AND b LIKE '10%%' AND c = %s"
        assert params == [1, 2]

    def test_without_params_sql_is_untouched(self):
        adapter = PostgresAdapter(self.CONFIG)
        assert adapter.convert_placeholders("SELECT '50%'", []) == ("SELECT '50%'", [])

    def test_requires_host_database_user_or_dsn(self):
        with pytest.raises(DatabaseConnectionError) as exc:
            PostgresAdapter({"host": "db"})
        assert "database, user" in str(exc.value)

        assert PostgresAdapter({"dsn": "postgresql://reader@db/app"}).describe() == "dsn"

    def test_query_runs_with_format_placeholders(self, monkeypatch):
        connection = FakeConnection(columns=["id", "name"], rows=[(7, "ann")])
        adapter = PostgresAdapter(self.CONFIG)
        monkeypatch.setattr(adapter, "_open", lambda: connection)
        adapter.connect()

        rows = QueryWrapper().eq("id", 7).like("name", "a%").query(adapter, "member")

        assert rows == [{"id": 7, "name": "ann"}]
        assert connection.statements == [
            ("SELECT * FROM member WHERE id = %s AND name LIKE %s", [7, "a%"])
        ]
        assert connection.commits == 1
        assert connection.cursors_closed == 1

    def test_delete_reports_rowcount(self, monkeypatch):
        connection = FakeConnection(rowcount=3)
        adapter = PostgresAdapter(self.CONFIG)
        monkeypatch.setattr(adapter, "_open", lambda: connection)

        with adapter:
            assert QueryWrapper().lt("age", 18).delete(adapter, "member") == 3
        assert connection.closed


class TestFactory:
    """Adapter registry and construction."""

    def test_builtin_engines_registered(self):
        assert list_adapters() == ["duckdb", "postgres", "sqlite"]

    def test_unsupported_engine(self):
        with pytest.raises(DatabaseConnectionError) as exc:
            create_adapter("nosuchdb", {})
        assert "Unsupported engine" in str(exc.value)

    def test_creates_connected_adapter(self):
        adapter = create_adapter("SQLite", {"database": ":memory:"})
        try:
            assert isinstance(adapter, SQLiteAdapter)
            assert adapter.is_connected()
        finally:
            adapter.disconnect()

    def test_each_call_builds_a_new_adapter(self):
        first = create_adapter("sqlite", {"database": ":memory:"}, connect=False)
        second = create_adapter("sqlite", {"database": ":memory:"}, connect=False)
        assert first is not second
        assert not first.is_connected()

    def test_register_adapter(self, monkeypatch):
        monkeypatch.setattr(factory, "_ADAPTER_REGISTRY", dict(factory._ADAPTER_REGISTRY))

        class InMemoryAdapter(SQLiteAdapter):
            ENGINE = "memory"

            def __init__(self, config):
                super().__init__({"database": ":memory:"})

        register_adapter("Memory", InMemoryAdapter)

        assert "memory" in list_adapters()
        with create_adapter("memory", {}) as adapter:
            assert adapter.execute_query("SELECT 1 AS one") == [{"one": 1}]
