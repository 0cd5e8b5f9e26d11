"""Pydantic schemas for student records."""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Dict, Optional

from pydantic import Field, field_validator

from ..common.constants import DEFAULT_STUDENT_STATUS
from ..common.schemas import CamelModel, TimestampSchema

Name = Annotated[str, Field(min_length=1, max_length=100)]
Age = Annotated[int, Field(ge=0, le=150)]
Course = Annotated[str, Field(min_length=1, max_length=100)]
Status = Annotated[str, Field(min_length=1, max_length=20)]
Email = Annotated[str, Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")]
Phone = Annotated[str, Field(min_length=3, max_length=30)]


class StudentBase(CamelModel):
    """Fields shared by every student representation."""

    name: Name
    age: Age
    course: Course
    status: Status = DEFAULT_STUDENT_STATUS
    email: Optional[Email] = None
    phone: Optional[Phone] = None

    @field_validator("name", "course")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class StudentCreate(StudentBase):
    """Schema for inserting a student."""

    enrollment_date: datetime = Field(default_factory=lambda: datetime.now(UTC))


class StudentUpdate(CamelModel):
    """Partial update: only the fields present in the payload are written."""

    name: Optional[Name] = None
    age: Optional[Age] = None
    course: Optional[Course] = None
    status: Optional[Status] = None
    email: Optional[Email] = None
    phone: Optional[Phone] = None
    enrollment_date: Optional[datetime] = None

    @field_validator("name", "age", "course", "status", "enrollment_date")
    @classmethod
    def reject_null_for_required(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("cannot be null")
        return v


class StudentRead(TimestampSchema, StudentBase):
    """Schema for reading a student record."""

    id: int
    status: str
    enrollment_date: datetime
    email: Optional[str] = None
    phone: Optional[str] = None


class StudentBulkUpdate(CamelModel):
    """Request body of ``PUT /students/bulk``."""

    filter: Dict[str, Any] = Field(description="Filter selecting the students to modify")
    update: StudentUpdate = Field(description="Fields to set on every matching student")


class StudentDeleteCondition(CamelModel):
    """Request body of ``DELETE /students/by-condition``."""

    condition: Dict[str, Any] = Field(description="Filter selecting the students to delete")


class ComplexQueryType(str, Enum):
    """Predefined operator demonstrations served by ``GET /students/complex``."""

    AND = "and"
    OR = "or"
    EXISTS = "exists"


class OptionalField(str, Enum):
    """Optional student fields whose presence can be queried."""

    EMAIL = "email"
    PHONE = "phone"


class StudentSearch(CamelModel):
    """Criteria of ``GET /students/search``; every given criterion must hold."""

    name: Optional[str] = None
    course: Optional[str] = None
    status: Optional[str] = None
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    has_email: Optional[bool] = None
