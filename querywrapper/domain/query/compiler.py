"""
Query Compiler

Turns the clause state accumulated by a QueryWrapper into SQL text with ?
placeholders plus the ordered list of values to bind.

Rendering order:
    SELECT <cols|*> FROM <table>       (or the custom SQL head, verbatim)
    <KIND> JOIN <table> ON <expr> ...  (call order)
    WHERE c1 op ? AND c2 op ? ...      (call order, one param per predicate)
    ORDER BY c1 ASC, c2 DESC ...       (call order)
    LIMIT n OFFSET m                   (literal integers)

A custom head that is a set operation is wrapped as
`SELECT * FROM (<head>) AS t` before joins or conditions are added.

Condition values are only ever bound, never formatted into the SQL text.
Join and custom SQL fragments are trusted caller SQL and emitted as-is.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from querywrapper.core.config import get_settings, is_known_dialect
from querywrapper.errors import table_missing, unknown_dialect
from querywrapper.shared.types.models import QueryState

logger = logging.getLogger(__name__)

_WHERE_WORD = re.compile(r"\bWHERE\b", re.IGNORECASE)

# Intersect and Except subclass Union in older sqlglot releases
_SET_OPERATIONS = (exp.Union, exp.Intersect, exp.Except)


@dataclass(frozen=True)
class CompiledQuery:
    """Final SQL text plus positional bound parameters."""
    sql: str
    params: List[Any] = field(default_factory=list)

    def __iter__(self):
        # Allows `sql, params = wrapper.build("users")`
        return iter((self.sql, self.params))


class QueryCompiler:
    """
    Stateless compiler from QueryState to CompiledQuery.

    Compiling never mutates the state, so compiling an unchanged state twice
    yields identical results.
    """

    def __init__(self, dialect: Optional[str] = None):
        """
        Args:
            dialect: sqlglot read dialect used to inspect custom SQL heads.
                     Defaults to the sql_dialect setting.

        Raises:
            BuilderConfigurationError: If sqlglot does not know the dialect
        """
        if dialect is not None and not is_known_dialect(dialect):
            raise unknown_dialect(dialect)
        self.dialect = dialect if dialect is not None else get_settings().sql_dialect

    def compile(
        self,
        state: QueryState,
        table: Optional[str],
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        include_order: bool = True,
    ) -> CompiledQuery:
        """
        Compile a SELECT statement.

        Args:
            state: Accumulated builder state
            table: Table expression for the FROM clause (ignored with custom SQL)
            limit: Overrides the state's limit when given
            offset: Overrides the state's offset when given
            include_order: Render ORDER BY (False for sub-statements)

        Raises:
            BuilderConfigurationError: If there is no table and no custom SQL
        """
        if state.custom_sql:
            head, extends_where = self._custom_head(state)
        else:
            head = f"SELECT {self._projection(state)} FROM {self._require_table(table)}"
            extends_where = False

        parts = [head]
        parts.extend(self._joins(state))

        where_sql, params = self._where(state, extends_where)
        if where_sql:
            parts.append(where_sql)

        if include_order and state.order_by:
            parts.append("ORDER BY " + ", ".join(item.to_sql() for item in state.order_by))

        effective_limit = limit if limit is not None else state.limit
        effective_offset = offset if offset is not None else state.offset
        if effective_limit is not None:
            parts.append(f"LIMIT {int(effective_limit)}")
        if effective_offset is not None:
            parts.append(f"OFFSET {int(effective_offset)}")

        return self._finish(" ".join(parts), params)

    def compile_count(self, state: QueryState, table: Optional[str]) -> CompiledQuery:
        """
        Compile the COUNT(*) statement used for pagination.

        Joins and filters are kept; ORDER BY, LIMIT and OFFSET are dropped.
        A custom SQL head cannot have its projection swapped, so the filtered
        head is wrapped in a derived table instead.
        """
        if state.custom_sql:
            inner = self.compile(
                _without_paging(state), None, include_order=False
            )
            return self._finish(f"SELECT COUNT(*) FROM ({inner.sql}) AS t", inner.params)

        head = f"SELECT COUNT(*) FROM {self._require_table(table)}"
        parts = [head]
        parts.extend(self._joins(state))

        where_sql, params = self._where(state, False)
        if where_sql:
            parts.append(where_sql)

        return self._finish(" ".join(parts), params)

    def compile_delete(self, state: QueryState, table: Optional[str]) -> CompiledQuery:
        """Compile `DELETE FROM <table>` filtered by the state's conditions."""
        head = f"DELETE FROM {self._require_table(table)}"
        where_sql, params = self._where(state, False)
        sql = f"{head} {where_sql}" if where_sql else head
        return self._finish(sql, params)

    # ------------------------------------------------------------------
    # Clause rendering
    # ------------------------------------------------------------------

    @staticmethod
    def _require_table(table: Optional[str]) -> str:
        if not table or not table.strip():
            raise table_missing()
        return table

    @staticmethod
    def _projection(state: QueryState) -> str:
        if not state.selected_columns:
            return "*"
        return ", ".join(state.selected_columns)

    @staticmethod
    def _joins(state: QueryState) -> List[str]:
        return [join.to_sql() for join in state.joins]

    @staticmethod
    def _where(state: QueryState, extends_where: bool) -> Tuple[str, List[Any]]:
        """Render the filter clause and its parameters, in condition order."""
        if not state.conditions:
            return "", []

        predicates = " AND ".join(condition.to_sql() for condition in state.conditions)
        params = [condition.value for condition in state.conditions]

        if extends_where:
            return f"AND {predicates}", params
        return f"WHERE {predicates}", params

    def _custom_head(self, state: QueryState) -> Tuple[str, bool]:
        """
        Return the head to render for custom SQL, and whether conditions
        must extend a top-level WHERE it already has.

        A UNION / INTERSECT / EXCEPT head takes no trailing JOIN or WHERE,
        so when either follows it the head becomes a derived table `t`.
        """
        sql = state.custom_sql
        try:
            ast = sqlglot.parse_one(sql, read=self.dialect)
        except (ParseError, TokenError) as e:
            logger.debug(f"Could not parse custom SQL, falling back to keyword match: {e}")
            return sql, bool(_WHERE_WORD.search(sql))

        if isinstance(ast, _SET_OPERATIONS):
            if state.conditions or state.joins:
                return f"SELECT * FROM ({sql}) AS t", False
            return sql, False
        return sql, ast.args.get("where") is not None

    def _finish(self, sql: str, params: List[Any]) -> CompiledQuery:
        if get_settings().log_sql:
            logger.debug(f"Compiled SQL: {sql} | {len(params)} bound param(s)")
        return CompiledQuery(sql=sql, params=params)


def _without_paging(state: QueryState) -> QueryState:
    stripped = state.copy()
    stripped.order_by = []
    stripped.limit = None
    stripped.offset = None
    return stripped
