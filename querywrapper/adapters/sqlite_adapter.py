"""
SQLite Adapter for querywrapper

Runs compiled statements on a file-based or in-memory SQLite database.
sqlite3 ships with Python and understands ? placeholders natively.
"""

import os
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict

from querywrapper.adapters.base import BaseAdapter, DatabaseConnectionError, QueryError

logger = logging.getLogger(__name__)


class SQLiteAdapter(BaseAdapter):
    """
    Adapter for SQLite databases.

    Config options:
        database: Path to SQLite file or ':memory:' (required)
        create: Allow creating a missing database file (default: False)
        read_only: Open a file in read-only mode (default: False)
        timeout: Seconds to wait on a locked database (default: 30)
        isolation_level: sqlite3 isolation level (default: None, autocommit)

    Example:
        with SQLiteAdapter({"database": "app.db", "read_only": True}) as db:
            users = QueryWrapper().eq("status", 1).query(db, "users")
    """

    ENGINE = "sqlite"
    DRIVER_ERRORS = (sqlite3.Error,)

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)

        if "database" not in config:
            raise DatabaseConnectionError(
                "Missing required config: database",
                engine=self.ENGINE
            )

        self.database = config["database"]
        self.is_memory = self.database == ":memory:"

        if not self.is_memory and not config.get("create", False) and not os.path.exists(self.database):
            raise DatabaseConnectionError(
                f"Database file not found: {self.database}",
                engine=self.ENGINE
            )

        self.read_only = config.get("read_only", False)
        self.timeout = config.get("timeout", 30.0)
        self.isolation_level = config.get("isolation_level", None)

    def _open(self):
        target, uri = self.database, False
        if self.read_only and not self.is_memory:
            target, uri = f"file:{Path(self.database).absolute()}?mode=ro", True

        return sqlite3.connect(
            target,
            uri=uri,
            timeout=self.timeout,
            isolation_level=self.isolation_level,
            check_same_thread=False,
        )

    def _commit(self) -> None:
        if self._connection.in_transaction:
            self._connection.commit()

    def _rollback(self) -> None:
        if self._connection.in_transaction:
            self._connection.rollback()

    def execute_script(self, script: str) -> None:
        """Run several `;`-separated statements, e.g. to seed a test database."""
        if not self._connected:
            raise QueryError("Not connected to sqlite", engine=self.ENGINE)

        try:
            self._connection.executescript(script)
        except sqlite3.Error as e:
            raise QueryError(
                f"sqlite script failed: {e}",
                engine=self.ENGINE,
                original_error=e
            )
