"""
querywrapper - Structured Error Handling

ERROR TAXONOMY:
---------------
1. BuilderConfigurationError - the builder was asked to compile something
   it cannot (no table, bad pagination, negative limit). Raised before any
   statement reaches the database.
2. DatabaseExecutionError - raised by an adapter (see adapters.base) and
   propagated unchanged. The core never retries.
3. DeserializationError - the statement ran, but a row could not be turned
   into the requested record type.

Every error carries a unique code for log searching and, where possible,
a suggestion on how to fix the call site.
"""

import logging
from typing import Optional, Dict, Any
from enum import Enum
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR CODES
# =============================================================================

class ErrorCode(str, Enum):
    """Unique error codes for every error type."""

    # Builder configuration (1xxx)
    ERR_TABLE_MISSING = "ERR_1001"
    ERR_INVALID_BOUND = "ERR_1002"
    ERR_INVALID_PAGINATION = "ERR_1003"
    ERR_PAGE_SIZE_EXCEEDED = "ERR_1004"
    ERR_UNSAFE_DELETE = "ERR_1005"
    ERR_INVALID_ARGUMENT = "ERR_1006"
    ERR_UNKNOWN_DIALECT = "ERR_1007"

    # Deserialization (2xxx)
    ERR_DESERIALIZATION_FAILED = "ERR_2001"


# =============================================================================
# ERROR TYPES
# =============================================================================

@dataclass(eq=False)
class QueryWrapperError(Exception):
    """
    Structured error with the context needed for debugging.

    Attributes:
        code: Unique error code for searching logs
        message: Human-readable error message
        details: Additional context (dict)
        suggestion: How to fix the issue
    """
    code: ErrorCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    suggestion: Optional[str] = None

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict (for structured logs or API payloads)."""
        error_dict = {
            "code": self.code.value,
            "message": self.message,
        }

        if self.details:
            error_dict["details"] = self.details

        if self.suggestion:
            error_dict["suggestion"] = self.suggestion

        return {"error": error_dict}

    def log(self, level: str = "error"):
        """Log the error with context."""
        log_msg = f"[{self.code.value}] {self.message}"
        if self.details:
            log_msg += f" | details={self.details}"

        getattr(logger, level)(log_msg)


class BuilderConfigurationError(QueryWrapperError):
    """The builder state or call arguments cannot produce a statement."""
    pass


class DeserializationError(QueryWrapperError):
    """A result row does not match the requested record type."""
    pass


# =============================================================================
# ERROR FACTORY FUNCTIONS
# =============================================================================

def table_missing() -> BuilderConfigurationError:
    """Create error for compiling with neither a table nor custom SQL."""
    return BuilderConfigurationError(
        code=ErrorCode.ERR_TABLE_MISSING,
        message="No table name given and no custom SQL set",
        suggestion="Pass a table name to the terminal call or use custom_sql()",
    )


def invalid_bound(name: str, value: Any) -> BuilderConfigurationError:
    """Create error for a limit/offset that is not a non-negative integer."""
    return BuilderConfigurationError(
        code=ErrorCode.ERR_INVALID_BOUND,
        message=f"{name} must be a non-negative integer, got {value!r}",
        details={name: repr(value)},
    )


def invalid_argument(name: str, value: Any) -> BuilderConfigurationError:
    """Create error for a column, table or ON fragment that is not usable text."""
    return BuilderConfigurationError(
        code=ErrorCode.ERR_INVALID_ARGUMENT,
        message=f"{name} must be a non-empty string, got {value!r}",
        details={name: repr(value)},
    )


def unknown_dialect(dialect: str) -> BuilderConfigurationError:
    """Create error for a SQL dialect name sqlglot does not know."""
    return BuilderConfigurationError(
        code=ErrorCode.ERR_UNKNOWN_DIALECT,
        message=f"Unknown SQL dialect: {dialect!r}",
        details={"dialect": dialect},
        suggestion="Use a sqlglot dialect name such as 'postgres', 'duckdb' or 'sqlite'",
    )


def invalid_pagination(page_no: Any, page_size: Any) -> BuilderConfigurationError:
    """Create error for page_no/page_size outside their valid range."""
    return BuilderConfigurationError(
        code=ErrorCode.ERR_INVALID_PAGINATION,
        message=f"Invalid pagination: page_no={page_no!r}, page_size={page_size!r}",
        details={"page_no": repr(page_no), "page_size": repr(page_size)},
        suggestion="page_no and page_size must both be integers >= 1",
    )


def page_size_exceeded(page_size: int, max_page_size: int) -> BuilderConfigurationError:
    """Create error for a page size above the configured maximum."""
    return BuilderConfigurationError(
        code=ErrorCode.ERR_PAGE_SIZE_EXCEEDED,
        message=f"page_size {page_size} exceeds the configured maximum of {max_page_size}",
        details={"page_size": page_size, "max_page_size": max_page_size},
        suggestion="Request smaller pages or raise QUERYWRAPPER_MAX_PAGE_SIZE",
    )


def unsafe_delete(reason: str) -> BuilderConfigurationError:
    """Create error for a DELETE the builder refuses to compile."""
    return BuilderConfigurationError(
        code=ErrorCode.ERR_UNSAFE_DELETE,
        message=f"Refusing to build DELETE: {reason}",
        suggestion="Add a condition, or pass allow_full_table=True to delete every row",
    )


def deserialization_failed(
    record_type: Any,
    index: int,
    reason: str,
) -> DeserializationError:
    """Create error for a row that cannot be decoded into record_type."""
    type_name = getattr(record_type, "__name__", repr(record_type))
    return DeserializationError(
        code=ErrorCode.ERR_DESERIALIZATION_FAILED,
        message=f"Row {index} cannot be decoded as {type_name}: {reason}",
        details={"record_type": type_name, "row_index": index},
    )
