"""Pydantic schemas for books and the lending workflow."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field, field_validator

from ..common.constants import DEFAULT_LOAN_DAYS, MAX_LOAN_DAYS, MAX_SQL_INTEGER
from ..common.schemas import CamelModel, TimestampSchema
from ..students.schemas import StudentRead

RecordId = Annotated[int, Field(ge=1, le=MAX_SQL_INTEGER)]


class BookBase(CamelModel):
    """Fields supplied when cataloguing a book."""

    title: Annotated[str, Field(min_length=1, max_length=255)]
    author: Annotated[str, Field(min_length=1, max_length=255)]
    isbn: Optional[Annotated[str, Field(min_length=10, max_length=20, pattern=r"^[0-9Xx-]+$")]] = None
    category: Optional[Annotated[str, Field(min_length=1, max_length=100)]] = None

    @field_validator("title", "author")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class BookCreate(BookBase):
    """Schema for adding a book; new books are always available."""

    pass


class BookRead(TimestampSchema, BookBase):
    """A book with its lending state and, when out on loan, the borrower."""

    id: int
    isbn: Optional[str] = None
    category: Optional[str] = None
    available: bool
    borrowed_by: Optional[int] = None
    borrow_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    borrower: Optional[StudentRead] = Field(default=None, description="The borrowing student, resolved at read time")


class BorrowRequest(CamelModel):
    """Request body of ``POST /library/borrow``."""

    book_id: RecordId
    student_id: RecordId
    days: int = Field(default=DEFAULT_LOAN_DAYS, ge=1, le=MAX_LOAN_DAYS, description="Loan length in days")


class ReturnRequest(CamelModel):
    """Request body of ``POST /library/return``."""

    book_id: RecordId
