"""
Adapter Factory for querywrapper

Maps engine names to adapter classes. The factory builds and connects an
adapter; the caller owns it from then on and closes it when done.

Usage:
    from querywrapper.adapters import create_adapter

    with create_adapter("sqlite", {"database": "app.db"}) as db:
        rows = QueryWrapper().eq("status", 1).query(db, "users")
"""

import logging
from typing import Any, Dict, List, Type

from querywrapper.adapters.base import BaseAdapter, DatabaseConnectionError
from querywrapper.adapters.duckdb_adapter import DuckDBAdapter
from querywrapper.adapters.postgres_adapter import PostgresAdapter
from querywrapper.adapters.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

_ADAPTER_REGISTRY: Dict[str, Type[BaseAdapter]] = {
    SQLiteAdapter.ENGINE: SQLiteAdapter,
    DuckDBAdapter.ENGINE: DuckDBAdapter,
    PostgresAdapter.ENGINE: PostgresAdapter,
}


def register_adapter(engine: str, adapter_class: Type[BaseAdapter]) -> None:
    """Register (or replace) the adapter class used for an engine name."""
    _ADAPTER_REGISTRY[engine.lower()] = adapter_class
    logger.debug(f"Registered adapter for engine: {engine}")


def list_adapters() -> List[str]:
    """Registered engine names, sorted."""
    return sorted(_ADAPTER_REGISTRY)


def create_adapter(engine: str, config: Dict[str, Any], connect: bool = True) -> BaseAdapter:
    """
    Build an adapter for `engine`, connected unless `connect` is False.

    Raises:
        DatabaseConnectionError: If the engine is unknown or connecting fails
    """
    adapter_class = _ADAPTER_REGISTRY.get(engine.lower())
    if adapter_class is None:
        raise DatabaseConnectionError(
            f"Unsupported engine: {engine}. Available: {', '.join(list_adapters())}",
            engine=engine
        )

    adapter = adapter_class(config)
    if connect:
        adapter.connect()
    return adapter
