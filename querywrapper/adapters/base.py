"""
Base Adapter Interface for querywrapper

Adapters are the execution side of a QueryWrapper: the builder compiles
SQL with ? placeholders and an ordered parameter list, and an adapter runs
it against one DB-API connection.

DESIGN PRINCIPLES:
-----------------
1. Statements arrive with ? placeholders (adapter converts as needed)
2. Rows come back as plain dicts keyed by column name
3. Driver errors are wrapped in DatabaseExecutionError and never retried
4. One adapter owns at most one connection; callers decide its lifetime
"""

import time
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

logger = logging.getLogger(__name__)


class DatabaseExecutionError(Exception):
    """Base exception for adapter errors."""

    def __init__(self, message: str, engine: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.engine = engine
        self.original_error = original_error


class DatabaseConnectionError(DatabaseExecutionError):
    """Failed to connect to database."""
    pass


class QueryError(DatabaseExecutionError):
    """Statement execution failed."""
    pass


@dataclass
class AdapterResult:
    """
    Rows and counters from one executed statement.

    Attributes:
        rows: Result rows as dicts (empty for DML)
        columns: Column names in select order
        rows_affected: Rows changed by a DML statement (-1 if unknown)
        execution_time_ms: Wall time spent in the driver
        engine: Engine identifier of the adapter that ran it
        sql: Statement as sent to the driver
    """
    rows: List[Dict[str, Any]]
    columns: List[str]
    rows_affected: int = -1
    execution_time_ms: float = 0.0
    engine: str = ""
    sql: str = ""


class BaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Subclasses provide `_open()` (return a new DB-API connection) and list
    their driver's exception classes in DRIVER_ERRORS. Engines whose
    connections behave differently can override the `_cursor`, `_release`,
    `_commit` and `_rollback` hooks.

    The QueryWrapper terminal operations only call execute_query(),
    execute_scalar_count() and execute_update().

    Usage:
        with SQLiteAdapter({"database": ":memory:"}) as adapter:
            rows = adapter.execute_query(
                "SELECT * FROM users WHERE status = ?", [1]
            )
    """

    # Engine identifier (e.g., "sqlite", "postgres", "duckdb")
    ENGINE: str = "base"

    # Placeholder format the driver expects
    PLACEHOLDER: str = "?"

    # Exceptions raised by the driver that should become adapter errors
    DRIVER_ERRORS: Tuple[Type[BaseException], ...] = ()

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self._connection = None
        self._connected = False

    @abstractmethod
    def _open(self):
        """
        Open and return a new driver connection.

        Raises:
            DatabaseConnectionError: If the driver is missing
        """

    def connect(self) -> None:
        """Open the connection. A second call is a no-op."""
        if self._connected:
            return
        try:
            self._connection = self._open()
        except self.DRIVER_ERRORS as e:
            raise DatabaseConnectionError(
                f"Failed to connect to {self.ENGINE}: {e}",
                engine=self.ENGINE,
                original_error=e
            )
        self._connected = True
        logger.info(f"{self.ENGINE} connected: {self.describe()}")

    def disconnect(self) -> None:
        """Close the connection. Safe to call when not connected."""
        connection, self._connection = self._connection, None
        self._connected = False
        if connection is None:
            return
        try:
            connection.close()
        except self.DRIVER_ERRORS as e:
            logger.warning(f"Error closing {self.ENGINE} connection: {e}")

    def describe(self) -> str:
        """Short, password-free description of the target for log lines."""
        return str(self.config.get("database", ""))

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> AdapterResult:
        """
        Run one statement and collect its rows.

        Args:
            sql: SQL with ? placeholders for parameters
            params: Parameter values (order matches ? positions)

        Raises:
            QueryError: If not connected or the driver rejects the statement
        """
        if not self._connected:
            raise QueryError(f"Not connected to {self.ENGINE}", engine=self.ENGINE)

        driver_sql, driver_params = self.convert_placeholders(sql, params)
        start_time = time.perf_counter()
        cursor = None

        try:
            cursor = self._cursor()
            if driver_params:
                cursor.execute(driver_sql, driver_params)
            else:
                cursor.execute(driver_sql)

            columns = [desc[0] for desc in cursor.description] if cursor.description else []
            rows = [dict(zip(columns, row)) for row in cursor.fetchall()] if columns else []
            rows_affected = getattr(cursor, "rowcount", -1)
            self._commit()

        except self.DRIVER_ERRORS as e:
            self._rollback()
            raise QueryError(
                f"{self.ENGINE} statement failed: {e}",
                engine=self.ENGINE,
                original_error=e
            )
        finally:
            if cursor is not None:
                self._release(cursor)

        return AdapterResult(
            rows=rows,
            columns=columns,
            rows_affected=rows_affected,
            execution_time_ms=(time.perf_counter() - start_time) * 1000,
            engine=self.ENGINE,
            sql=driver_sql,
        )

    def health_check(self) -> bool:
        """Whether a trivial statement still runs on the connection."""
        if not self._connected:
            return False
        try:
            self.execute("SELECT 1")
        except DatabaseExecutionError:
            return False
        return True

    def execute_query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Run a SELECT and return its rows."""
        return self.execute(sql, params).rows

    def execute_scalar_count(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """
        Run a COUNT statement and return the first column of the first row.

        Returns 0 when the statement yields no rows.

        Raises:
            QueryError: If execution fails or the value is not an integer
        """
        result = self.execute(sql, params)
        if not result.rows:
            return 0

        value = next(iter(result.rows[0].values()), None)
        if value is None:
            return 0
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise QueryError(
                f"Count statement returned a non-integer value: {value!r}",
                engine=self.ENGINE,
                original_error=e
            )

    def execute_update(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Run a DML statement and return the number of affected rows."""
        return self.execute(sql, params).rows_affected

    def convert_placeholders(self, sql: str, params: Optional[Sequence[Any]] = None) -> Tuple[str, List[Any]]:
        """Rewrite ? placeholders for the driver. Qmark drivers keep them."""
        return sql, list(params or [])

    def is_connected(self) -> bool:
        return self._connected

    # Driver hooks

    def _cursor(self):
        return self._connection.cursor()

    def _release(self, cursor) -> None:
        cursor.close()

    def _commit(self) -> None:
        pass

    def _rollback(self) -> None:
        pass

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
