"""
querywrapper - fluent SQL query construction over pluggable adapters.

    from querywrapper import QueryWrapper
    from querywrapper.adapters import SQLiteAdapter

    with SQLiteAdapter({"database": ":memory:"}) as adapter:
        rows = QueryWrapper().eq("status", 1).order_by("age").query(adapter, "users")
"""

from querywrapper.domain.query import CompiledQuery, QueryCompiler, Page, QueryWrapper
from querywrapper.errors import (
    ErrorCode,
    QueryWrapperError,
    BuilderConfigurationError,
    DeserializationError,
)
from querywrapper.adapters.base import DatabaseExecutionError

__version__ = "0.1.0"

__all__ = [
    "QueryWrapper",
    "QueryCompiler",
    "CompiledQuery",
    "Page",
    "ErrorCode",
    "QueryWrapperError",
    "BuilderConfigurationError",
    "DeserializationError",
    "DatabaseExecutionError",
]
