"""Library catalogue and lending service."""

from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import Select, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from ...infrastructure.database.models import utc_now
from ...infrastructure.logging import get_logger
from ..common.exceptions import BookNotFoundError, BookUnavailableError, DuplicateIsbnError, StudentNotFoundError
from ..common.filters import fits_integer_column
from ..students.crud import student_crud
from ..students.models import Student
from ..students.schemas import StudentRead
from .crud import book_crud
from .models import Book
from .schemas import BookCreate, BookRead, BorrowRequest, ReturnRequest

logger = get_logger(__name__)

SAMPLE_BOOKS: List[Dict[str, Any]] = [
    {"title": "Structure and Interpretation of Computer Programs", "author": "Harold Abelson", "isbn": "978-0262510875", "category": "Computer Science"},
    {"title": "Introduction to Algorithms", "author": "Thomas H. Cormen", "isbn": "978-0262046305", "category": "Computer Science"},
    {"title": "Calculus", "author": "Michael Spivak", "isbn": "978-0914098911", "category": "Mathematics"},
    {"title": "The Feynman Lectures on Physics", "author": "Richard Feynman", "isbn": "978-0465023820", "category": "Physics"},
    {"title": "The Selfish Gene", "author": "Richard Dawkins", "isbn": "978-0198788607", "category": "Biology"},
]


class LibraryService:
    """Service for the library shelf and its borrow/return workflow.

    Book reads always resolve ``borrowed_by`` into the borrowing student
    with an outer join, so a dangling reference simply yields no borrower.

    Borrowing is a single conditional UPDATE (``WHERE id = ? AND available``)
    and its row count decides the outcome, so two concurrent borrows of the
    same book can never both succeed.
    """

    async def add_book(self, book_data: BookCreate, db: AsyncSession) -> BookRead:
        """Add a book to the catalogue.

        Raises:
            DuplicateIsbnError: when another book already has the same ISBN
        """
        if book_data.isbn and await book_crud.exists(db=db, isbn=book_data.isbn):
            raise DuplicateIsbnError(f"A book with ISBN {book_data.isbn} already exists")

        book = Book(**book_data.model_dump())
        db.add(book)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise DuplicateIsbnError(f"A book with ISBN {book_data.isbn} already exists") from e

        logger.info("Book added", extra={"book_id": book.id, "isbn": book.isbn})
        return BookRead.model_validate(book)

    async def add_sample_books(self, db: AsyncSession) -> List[BookRead]:
        """Add the built-in sample catalogue, skipping ISBNs already on the shelf."""
        added = []
        for sample in SAMPLE_BOOKS:
            if await book_crud.exists(db=db, isbn=sample["isbn"]):
                continue
            added.append(await self.add_book(BookCreate(**sample), db))
        return added

    async def get_book(self, book_id: int, db: AsyncSession) -> Optional[BookRead]:
        """Get one book with its borrower, or None when the id does not exist."""
        if not fits_integer_column(book_id):
            return None
        books = await self._fetch(db, Book.id == book_id)
        return books[0] if books else None

    async def get_books(self, db: AsyncSession) -> List[BookRead]:
        """Get every book."""
        return await self._fetch(db)

    async def get_available_books(self, db: AsyncSession) -> List[BookRead]:
        """Get books currently on the shelf."""
        return await self._fetch(db, Book.available.is_(True))

    async def get_borrowed_books(self, db: AsyncSession) -> List[BookRead]:
        """Get books currently out on loan."""
        return await self._fetch(db, Book.available.is_(False))

    async def get_books_by_category(self, category: str, db: AsyncSession) -> List[BookRead]:
        """Get books whose category equals ``category``."""
        return await self._fetch(db, Book.category == category)

    async def borrow_book(self, request: BorrowRequest, db: AsyncSession) -> BookRead:
        """Lend a book to a student.

        Raises:
            BookNotFoundError: the book does not exist
            StudentNotFoundError: the student does not exist
            BookUnavailableError: the book is already out on loan; nothing is changed
        """
        if not await book_crud.exists(db=db, id=request.book_id):
            raise BookNotFoundError(f"Book {request.book_id} not found")
        if not await student_crud.exists(db=db, id=request.student_id):
            raise StudentNotFoundError(f"Student {request.student_id} not found")

        borrow_date = utc_now()
        stmt = (
            update(Book)
            .where(Book.id == request.book_id, Book.available.is_(True))
            .values(
                available=False,
                borrowed_by=request.student_id,
                borrow_date=borrow_date,
                due_date=borrow_date + timedelta(days=request.days),
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()

        if result.rowcount == 0:
            logger.info("Borrow refused, book unavailable", extra={"book_id": request.book_id})
            raise BookUnavailableError(f"Book {request.book_id} is already borrowed")

        logger.info(
            "Book borrowed",
            extra={"book_id": request.book_id, "student_id": request.student_id, "loan_days": request.days},
        )
        return await self._require_book(request.book_id, db)

    async def return_book(self, request: ReturnRequest, db: AsyncSession) -> BookRead:
        """Put a book back on the shelf.

        The loan fields are cleared unconditionally; who returns the book is
        not checked, and returning a book that is not on loan is a no-op.

        Raises:
            BookNotFoundError: the book does not exist
        """
        stmt = (
            update(Book)
            .where(Book.id == request.book_id)
            .values(available=True, borrowed_by=None, borrow_date=None, due_date=None)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()

        if result.rowcount == 0:
            raise BookNotFoundError(f"Book {request.book_id} not found")

        logger.info("Book returned", extra={"book_id": request.book_id})
        return await self._require_book(request.book_id, db)

    async def count_books(self, db: AsyncSession, available: Optional[bool] = None) -> int:
        """Count books, optionally only those with the given availability."""
        if available is None:
            return await book_crud.count(db=db)
        return await book_crud.count(db=db, available=available)

    async def _require_book(self, book_id: int, db: AsyncSession) -> BookRead:
        book = await self.get_book(book_id, db)
        if book is None:
            raise BookNotFoundError(f"Book {book_id} not found")
        return book

    def _populated_select(self) -> Select:
        return (
            select(Book, Student)
            .outerjoin(Student, Book.borrowed_by == Student.id)
            .order_by(Book.id)
            .execution_options(populate_existing=True)
        )

    async def _fetch(self, db: AsyncSession, *conditions: ColumnElement[bool]) -> List[BookRead]:
        stmt = self._populated_select()
        if conditions:
            stmt = stmt.where(*conditions)

        result = await db.execute(stmt)
        return [
            BookRead.model_validate(book).model_copy(
                update={"borrower": StudentRead.model_validate(student) if student is not None else None}
            )
            for book, student in result.all()
        ]
