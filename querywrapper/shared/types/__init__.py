"""
Shared Types

Value types for the clauses a QueryWrapper accumulates.
"""

from querywrapper.shared.types.models import (
    BoundValue,
    Operator,
    JoinKind,
    Condition,
    Join,
    OrderItem,
    QueryState,
)

__all__ = ["BoundValue", "Operator", "JoinKind", "Condition", "Join", "OrderItem", "QueryState"]
