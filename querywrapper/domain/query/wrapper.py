"""
QueryWrapper

Fluent SELECT builder in the style of MyBatis-Plus' QueryWrapper.

Usage:
    from querywrapper import QueryWrapper
    from querywrapper.adapters import SQLiteAdapter

    class Member(BaseModel):
        id: int
        email: Optional[str] = None

    with SQLiteAdapter({"database": "app.db"}) as adapter:
        count = (
            QueryWrapper()
            .custom_sql("SELECT COUNT(*) FROM member")
            .get_one(adapter, "", int)
        )

        member = QueryWrapper().eq("id", 7386).get_one(adapter, "member", Member)

        page = (
            QueryWrapper()
            .like("email", "%@example.com")
            .order_by("id", ascending=False)
            .page(adapter, "member", page_no=2, page_size=20, record_type=Member)
        )

Every clause method mutates the wrapper in place and returns it, so calls
chain. Terminal methods (query, get_one, page, count, delete) compile the
current state and hand the statement to an adapter; they never change the
wrapper, so it can be reused.
"""

import logging
from typing import Any, Iterable, List, Optional, Union, TYPE_CHECKING

from querywrapper.core.config import get_settings
from querywrapper.domain.query.compiler import CompiledQuery, QueryCompiler
from querywrapper.domain.query.page import Page
from querywrapper.domain.query.records import decode_row, decode_rows
from querywrapper.errors import (
    invalid_argument,
    invalid_bound,
    invalid_pagination,
    page_size_exceeded,
    unsafe_delete,
)
from querywrapper.shared.types.models import (
    Condition,
    Join,
    JoinKind,
    Operator,
    OrderItem,
    QueryState,
)

if TYPE_CHECKING:
    from querywrapper.adapters.base import BaseAdapter

logger = logging.getLogger(__name__)


def _is_count(value: Any) -> bool:
    """True for ints (not bools) >= 0."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class QueryWrapper:
    """
    Mutable, single-owner builder for one SELECT statement.

    Not thread-safe: build and run a wrapper from one thread or task.
    """

    def __init__(self, compiler: Optional[QueryCompiler] = None):
        self._state = QueryState()
        self._compiler = compiler or QueryCompiler()

    @property
    def state(self) -> QueryState:
        """The accumulated clauses. Treat as read-only."""
        return self._state

    def copy(self) -> "QueryWrapper":
        """Return an independent wrapper with the same clauses."""
        clone = QueryWrapper(self._compiler)
        clone._state = self._state.copy()
        return clone

    def __repr__(self) -> str:
        return f"QueryWrapper({self._state!r})"

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def _add_condition(self, column: str, operator: Operator, value: Any) -> "QueryWrapper":
        if not _is_text(column):
            raise invalid_argument("column", column)
        self._state.conditions.append(Condition(column=column, operator=operator, value=value))
        return self

    def eq(self, column: str, value: Any) -> "QueryWrapper":
        """column = value"""
        return self._add_condition(column, Operator.EQ, value)

    def ne(self, column: str, value: Any) -> "QueryWrapper":
        """column <> value"""
        return self._add_condition(column, Operator.NE, value)

    def gt(self, column: str, value: Any) -> "QueryWrapper":
        """column > value"""
        return self._add_condition(column, Operator.GT, value)

    def lt(self, column: str, value: Any) -> "QueryWrapper":
        """column < value"""
        return self._add_condition(column, Operator.LT, value)

    def like(self, column: str, value: Any) -> "QueryWrapper":
        """
        column LIKE value

        The pattern is bound as given; include the % / _ wildcards yourself.
        """
        return self._add_condition(column, Operator.LIKE, value)

    # ------------------------------------------------------------------
    # Projection, ordering, bounds
    # ------------------------------------------------------------------

    def select(self, *columns: Union[str, Iterable[str]]) -> "QueryWrapper":
        """
        Replace the projection.

        Accepts either select("id", "name") or select(["id", "name"]).
        The last call wins; an empty call goes back to SELECT *.
        """
        if len(columns) == 1 and isinstance(columns[0], (list, tuple)):
            columns = tuple(columns[0])
        for column in columns:
            if not _is_text(column):
                raise invalid_argument("column", column)
        self._state.selected_columns = list(columns)
        return self

    def order_by(self, column: str, ascending: bool = True) -> "QueryWrapper":
        """Append a sort key. The first call is the primary key."""
        if not _is_text(column):
            raise invalid_argument("column", column)
        self._state.order_by.append(OrderItem(column=column, ascending=ascending))
        return self

    def limit(self, limit: int) -> "QueryWrapper":
        """
        Set LIMIT (last call wins).

        Raises:
            BuilderConfigurationError: If limit is not a non-negative int
        """
        if not _is_count(limit):
            raise invalid_bound("limit", limit)
        self._state.limit = limit
        return self

    def offset(self, offset: int) -> "QueryWrapper":
        """
        Set OFFSET (last call wins).

        Raises:
            BuilderConfigurationError: If offset is not a non-negative int
        """
        if not _is_count(offset):
            raise invalid_bound("offset", offset)
        self._state.offset = offset
        return self

    # ------------------------------------------------------------------
    # Joins and raw SQL
    # ------------------------------------------------------------------

    def _add_join(self, kind: JoinKind, table: str, on: str) -> "QueryWrapper":
        if not _is_text(table):
            raise invalid_argument("join table", table)
        if not _is_text(on):
            raise invalid_argument("join condition", on)
        self._state.joins.append(Join(kind=kind, table=table, on=on))
        return self

    def inner_join(self, table: str, on: str) -> "QueryWrapper":
        return self._add_join(JoinKind.INNER, table, on)

    def left_join(self, table: str, on: str) -> "QueryWrapper":
        return self._add_join(JoinKind.LEFT, table, on)

    def right_join(self, table: str, on: str) -> "QueryWrapper":
        return self._add_join(JoinKind.RIGHT, table, on)

    def custom_sql(self, sql: str) -> "QueryWrapper":
        """
        Use sql verbatim as the statement head instead of SELECT ... FROM.

        Conditions, ORDER BY, LIMIT and OFFSET are still appended. If sql
        already has a top-level WHERE, conditions are joined to it with AND.
        sql must not carry its own ORDER BY / LIMIT when those are also set
        on the wrapper.
        """
        self._state.custom_sql = sql
        return self

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def build(self, table: Optional[str] = None) -> CompiledQuery:
        """
        Compile without executing.

        Raises:
            BuilderConfigurationError: If there is no table and no custom SQL
        """
        return self._compiler.compile(self._state, table)

    to_sql = build

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def query(
        self,
        executor: "BaseAdapter",
        table: Optional[str] = None,
        record_type: Optional[Any] = None,
    ) -> List[Any]:
        """
        Run the SELECT and decode every row.

        Raises:
            BuilderConfigurationError: Before any I/O, on invalid state
            DatabaseExecutionError: From the adapter, unchanged
            DeserializationError: If a row does not fit record_type
        """
        compiled = self.build(table)
        rows = executor.execute_query(compiled.sql, compiled.params)
        logger.debug(f"query on {table or '<custom sql>'} returned {len(rows)} row(s)")
        return decode_rows(rows, record_type)

    def get_one(
        self,
        executor: "BaseAdapter",
        table: Optional[str] = None,
        record_type: Optional[Any] = None,
    ) -> Optional[Any]:
        """
        Run the SELECT with LIMIT 1 and decode the row, or return None.

        Any explicit limit is overridden; an explicit offset is kept.
        """
        compiled = self._compiler.compile(self._state, table, limit=1)
        rows = executor.execute_query(compiled.sql, compiled.params)
        if not rows:
            logger.debug(f"get_one on {table or '<custom sql>'} found no row")
            return None
        return decode_row(rows[0], record_type)

    def count(self, executor: "BaseAdapter", table: Optional[str] = None) -> int:
        """Count matching rows, ignoring ORDER BY / LIMIT / OFFSET."""
        compiled = self._compiler.compile_count(self._state, table)
        return executor.execute_scalar_count(compiled.sql, compiled.params)

    def page(
        self,
        executor: "BaseAdapter",
        table: Optional[str],
        page_no: int,
        page_size: int,
        record_type: Optional[Any] = None,
    ) -> Page:
        """
        Fetch one page plus the total row count.

        Both statements are compiled from the same snapshot of the wrapper
        before either runs. The count runs first; when it is zero the data
        statement is skipped. A failure in either statement fails the call.

        Raises:
            BuilderConfigurationError: If page_no or page_size is invalid
        """
        self._check_page(page_no, page_size)

        state = self._state.copy()
        offset = (page_no - 1) * page_size
        count_query = self._compiler.compile_count(state, table)
        data_query = self._compiler.compile(state, table, limit=page_size, offset=offset)

        total = executor.execute_scalar_count(count_query.sql, count_query.params)
        if total == 0:
            logger.debug(f"page {page_no} of {table or '<custom sql>'}: no matching rows")
            return Page.empty(page_no, page_size)

        rows = executor.execute_query(data_query.sql, data_query.params)
        records = decode_rows(rows, record_type)
        logger.debug(
            f"page {page_no} of {table or '<custom sql>'}: {len(records)} of {total} row(s)"
        )
        return Page.build(records, total, page_no, page_size)

    def delete(
        self,
        executor: "BaseAdapter",
        table: str,
        allow_full_table: bool = False,
    ) -> int:
        """
        Delete the rows matching the conditions and return how many went.

        ORDER BY, LIMIT and OFFSET are not applied.

        Raises:
            BuilderConfigurationError: If there are no conditions (unless
                allow_full_table), or custom SQL, joins or a projection are set
        """
        if self._state.custom_sql:
            raise unsafe_delete("custom SQL cannot be combined with delete()")
        if self._state.joins:
            raise unsafe_delete("joins cannot be combined with delete()")
        if self._state.selected_columns:
            raise unsafe_delete("a column projection has no meaning in a DELETE")
        if not self._state.conditions and not allow_full_table:
            raise unsafe_delete("no conditions given")

        compiled = self._compiler.compile_delete(self._state, table)
        affected = executor.execute_update(compiled.sql, compiled.params)
        logger.info(f"Deleted {affected} row(s) from {table}")
        return affected

    @staticmethod
    def _check_page(page_no: Any, page_size: Any) -> None:
        if not _is_count(page_no) or not _is_count(page_size) or page_no < 1 or page_size < 1:
            raise invalid_pagination(page_no, page_size)

        max_page_size = get_settings().max_page_size
        if max_page_size is not None and page_size > max_page_size:
            raise page_size_exceeded(page_size, max_page_size)
