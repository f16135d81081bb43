"""
Page

One bounded slice of a result set plus the metadata derived from the
total row count.
"""

from typing import Generic, List, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """
    Immutable pagination result.

    pages is ceil(total / page_size); has_next is page_no * page_size < total.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    records: List[T] = Field(default_factory=list)
    total: int = Field(ge=0)
    page_no: int = Field(ge=1)
    page_size: int = Field(ge=1)
    pages: int = Field(ge=0)
    has_next: bool

    @classmethod
    def build(cls, records: Sequence[T], total: int, page_no: int, page_size: int) -> "Page[T]":
        """Create a page, deriving pages and has_next from total."""
        pages = (total + page_size - 1) // page_size
        return cls(
            records=list(records),
            total=total,
            page_no=page_no,
            page_size=page_size,
            pages=pages,
            has_next=page_no * page_size < total,
        )

    @classmethod
    def empty(cls, page_no: int, page_size: int) -> "Page[T]":
        return cls.build([], 0, page_no, page_size)
