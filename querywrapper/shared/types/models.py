from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict

# Scalars the builder forwards to the adapter as bound parameters.
BoundValue = Union[bool, int, float, Decimal, str, date, datetime, None]


class Operator(str, Enum):
    """Comparison operators; the value is the SQL text emitted."""
    EQ = "="
    NE = "<>"
    GT = ">"
    LT = "<"
    LIKE = "LIKE"


class JoinKind(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class Condition(BaseModel):
    """One WHERE predicate: `<column> <operator> ?` bound to value."""
    model_config = ConfigDict(frozen=True)

    column: str
    operator: Operator
    value: Any = None

    def to_sql(self) -> str:
        return f"{self.column} {self.operator.value} ?"


class Join(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: JoinKind
    table: str
    on: str

    def to_sql(self) -> str:
        return f"{self.kind.value} JOIN {self.table} ON {self.on}"


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    ascending: bool = True

    def to_sql(self) -> str:
        return f"{self.column} {'ASC' if self.ascending else 'DESC'}"


@dataclass
class QueryState:
    """Everything a QueryWrapper has accumulated, in call order."""
    conditions: List[Condition] = field(default_factory=list)
    selected_columns: List[str] = field(default_factory=list)
    joins: List[Join] = field(default_factory=list)
    order_by: List[OrderItem] = field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None
    custom_sql: Optional[str] = None

    def copy(self) -> "QueryState":
        # Clause entries are frozen, so copying the lists is enough.
        return QueryState(
            conditions=list(self.conditions),
            selected_columns=list(self.selected_columns),
            joins=list(self.joins),
            order_by=list(self.order_by),
            limit=self.limit,
            offset=self.offset,
            custom_sql=self.custom_sql,
        )
