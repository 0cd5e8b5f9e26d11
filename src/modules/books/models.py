"""SQLAlchemy models for the library catalogue."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Book(Base, TimestampMixin):
    """A book on the library shelf.

    ``borrowed_by`` holds the id of the student who has the book out. It is a
    plain column rather than a foreign key: the student is resolved with an
    outer join at read time, and removing a student never touches books.
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    title: Mapped[str] = mapped_column(String(255), index=True)
    author: Mapped[str] = mapped_column(String(255))
    isbn: Mapped[Optional[str]] = mapped_column(String(20), unique=True, default=None)
    category: Mapped[Optional[str]] = mapped_column(String(100), index=True, default=None)
    available: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    borrowed_by: Mapped[Optional[int]] = mapped_column(Integer, index=True, default=None)
    borrow_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=None)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=None)
