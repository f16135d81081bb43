"""
DuckDB Adapter for querywrapper

DuckDB is embedded, so an in-memory database needs no infrastructure.
It binds ? placeholders natively.

Requirements:
    pip install querywrapper[duckdb]
"""

import logging
from typing import Any, Dict, Optional, Sequence

try:
    import duckdb
    DUCKDB_AVAILABLE = True
except ImportError:
    DUCKDB_AVAILABLE = False
    duckdb = None

from querywrapper.adapters.base import BaseAdapter, DatabaseConnectionError, QueryError

logger = logging.getLogger(__name__)


class DuckDBAdapter(BaseAdapter):
    """
    Adapter for DuckDB.

    Config options:
        database: Path to database file, or ":memory:" (default)
        read_only: Open in read-only mode (default: False)
    """

    ENGINE = "duckdb"
    DRIVER_ERRORS = (duckdb.Error,) if DUCKDB_AVAILABLE else ()

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self.database = self.config.get("database", ":memory:")
        self.read_only = self.config.get("read_only", False)

    def describe(self) -> str:
        return self.database

    def _open(self):
        if not DUCKDB_AVAILABLE:
            raise DatabaseConnectionError(
                "DuckDB not installed. Run: pip install querywrapper[duckdb]",
                engine=self.ENGINE
            )
        return duckdb.connect(database=self.database, read_only=self.read_only)

    # A DuckDB connection executes statements itself; closing it as a
    # cursor would end the session.
    def _cursor(self):
        return self._connection

    def _release(self, cursor) -> None:
        pass

    def execute_update(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """DuckDB answers DML with a single `Count` row instead of rowcount."""
        result = self.execute(sql, params)
        if not result.rows:
            return 0
        return int(next(iter(result.rows[0].values())))

    def execute_script(self, script: str) -> None:
        """Run several `;`-separated statements, e.g. to seed a test database."""
        if not self._connected:
            raise QueryError("Not connected to duckdb", engine=self.ENGINE)

        try:
            self._connection.execute(script)
        except duckdb.Error as e:
            raise QueryError(
                f"duckdb script failed: {e}",
                engine=self.ENGINE,
                original_error=e
            )
