"""SQLAlchemy models for student records."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin, utc_now
from ...infrastructure.database.session import Base
from ..common.constants import DEFAULT_STUDENT_STATUS


class Student(Base, TimestampMixin):
    """A student enrolled on a course.

    Students may be referenced by books they have borrowed; that reference is
    not owned by the student, so deleting a student leaves those books alone.
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    name: Mapped[str] = mapped_column(String(100), index=True)
    age: Mapped[int] = mapped_column(Integer, index=True)
    course: Mapped[str] = mapped_column(String(100), index=True)
    status: Mapped[str] = mapped_column(String(20), default=DEFAULT_STUDENT_STATUS)
    enrollment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default_factory=utc_now)
    email: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    phone: Mapped[Optional[str]] = mapped_column(String(30), default=None)
