"""
Database Adapters for querywrapper

The execution side of a QueryWrapper. An adapter wraps one DB-API
connection, converts ? placeholders where the driver needs another style,
and returns rows as dicts.

Supported Engines:
- SQLite (standard library)
- DuckDB (optional extra)
- PostgreSQL (optional extra)
"""

from querywrapper.adapters.base import (
    BaseAdapter,
    AdapterResult,
    DatabaseExecutionError,
    DatabaseConnectionError,
    QueryError,
)
from querywrapper.adapters.sqlite_adapter import SQLiteAdapter
from querywrapper.adapters.duckdb_adapter import DuckDBAdapter
from querywrapper.adapters.postgres_adapter import PostgresAdapter
from querywrapper.adapters.factory import create_adapter, register_adapter, list_adapters

__all__ = [
    "BaseAdapter",
    "AdapterResult",
    "DatabaseExecutionError",
    "DatabaseConnectionError",
    "QueryError",
    "SQLiteAdapter",
    "DuckDBAdapter",
    "PostgresAdapter",
    "create_adapter",
    "register_adapter",
    "list_adapters",
]
