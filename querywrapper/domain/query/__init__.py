"""
Query Domain

Fluent query building, SQL compilation and pagination.
"""

from querywrapper.domain.query.compiler import CompiledQuery, QueryCompiler
from querywrapper.domain.query.page import Page
from querywrapper.domain.query.records import decode_row, decode_rows
from querywrapper.domain.query.wrapper import QueryWrapper

__all__ = [
    "CompiledQuery",
    "QueryCompiler",
    "Page",
    "QueryWrapper",
    "decode_row",
    "decode_rows",
]
