"""
Row Deserialization

Adapters return rows as dicts; terminal operations hand them to
decode_rows() together with the record type the caller asked for.

Supported record types:
    None                        rows are returned as plain dicts
    pydantic models, dataclasses, TypedDicts, Dict[...]
                                validated from the row mapping
    int, float, str, bool, Decimal, date, datetime
                                the value of a single-column row, e.g.
                                custom_sql("SELECT COUNT(*) FROM member")
"""

from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from querywrapper.errors import deserialization_failed

_SCALAR_TYPES = (bool, int, float, str, Decimal, date, datetime)


def is_scalar_type(record_type: Any) -> bool:
    return isinstance(record_type, type) and issubclass(record_type, _SCALAR_TYPES)


@lru_cache(maxsize=256)
def _type_adapter(record_type: Any) -> TypeAdapter:
    return TypeAdapter(record_type)


def decode_row(row: Mapping[str, Any], record_type: Optional[Any] = None, index: int = 0) -> Any:
    """
    Decode one row into record_type.

    Raises:
        DeserializationError: If the row does not fit record_type
    """
    if record_type is None:
        return dict(row)

    value: Any = row
    if is_scalar_type(record_type):
        if len(row) != 1:
            raise deserialization_failed(
                record_type, index, f"expected a single column, got {len(row)}"
            )
        value = next(iter(row.values()))

    try:
        return _type_adapter(record_type).validate_python(value)
    except ValidationError as e:
        raise deserialization_failed(record_type, index, _summarize(e)) from e


def decode_rows(rows: Sequence[Mapping[str, Any]], record_type: Optional[Any] = None) -> List[Any]:
    """Decode every row, preserving order."""
    return [decode_row(row, record_type, index) for index, row in enumerate(rows)]


def _summarize(error: ValidationError) -> str:
    first: Dict[str, Any] = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<row>"
    summary = f"{location}: {first.get('msg', 'invalid value')}"
    if error.error_count() > 1:
        summary += f" (+{error.error_count() - 1} more)"
    return summary
