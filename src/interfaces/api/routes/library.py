"""Library API endpoints: the book shelf and the borrow/return workflow."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from ....modules.books.schemas import BookCreate, BookRead, BorrowRequest, ReturnRequest
from ....modules.common.utils.error_handler import handle_exception
from ..dependencies import DbSession, LibraryServiceDep

router = APIRouter(prefix="/library", tags=["Library"])


@router.get(
    "/books",
    summary="List Books",
    description="Returns every book; borrowed books include the borrowing student as `borrower`.",
)
async def get_books(db: DbSession, service: LibraryServiceDep) -> List[BookRead]:
    """List all books."""
    try:
        return await service.get_books(db)
    except Exception as e:
        raise handle_exception(e) from e


@router.post(
    "/books",
    status_code=status.HTTP_201_CREATED,
    summary="Add Book",
    description="""
    Adds a book to the shelf. New books are always available.

    - **title**, **author**: required
    - **isbn**: optional, unique across the catalogue
    - **category**: optional
    """,
    responses={
        201: {"description": "Book added"},
        409: {"description": "ISBN already catalogued"},
        422: {"description": "Missing or invalid field"},
    },
)
async def add_book(book: BookCreate, db: DbSession, service: LibraryServiceDep) -> BookRead:
    """Add a book."""
    try:
        return await service.add_book(book, db)
    except Exception as e:
        raise handle_exception(e) from e


@router.post(
    "/books/sample",
    status_code=status.HTTP_201_CREATED,
    summary="Insert Sample Books",
    description="Adds a small fixed catalogue; books whose ISBN is already on the shelf are skipped.",
)
async def add_sample_books(db: DbSession, service: LibraryServiceDep) -> List[BookRead]:
    """Insert the sample catalogue."""
    try:
        return await service.add_sample_books(db)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/books/{book_id}",
    summary="Get Book",
    responses={404: {"description": "Book not found"}},
)
async def get_book(book_id: int, db: DbSession, service: LibraryServiceDep) -> BookRead:
    """Get one book by id."""
    try:
        result = await service.get_book(book_id, db)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
        return result
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/available",
    summary="Available Books",
    description="Returns the books currently on the shelf.",
)
async def get_available_books(db: DbSession, service: LibraryServiceDep) -> List[BookRead]:
    """List available books."""
    try:
        return await service.get_available_books(db)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/borrowed",
    summary="Borrowed Books",
    description="Returns the books currently out on loan together with their borrowers.",
)
async def get_borrowed_books(db: DbSession, service: LibraryServiceDep) -> List[BookRead]:
    """List borrowed books."""
    try:
        return await service.get_borrowed_books(db)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/category/{name}",
    summary="Books By Category",
    description="Returns books whose category equals `name` exactly.",
)
async def get_books_by_category(name: str, db: DbSession, service: LibraryServiceDep) -> List[BookRead]:
    """List books in a category."""
    try:
        return await service.get_books_by_category(name, db)
    except Exception as e:
        raise handle_exception(e) from e


@router.post(
    "/borrow",
    summary="Borrow Book",
    description="""
    Lends a book to a student for `days` days (default 14, at most 90).

    The availability check and the write are one conditional update, so of
    two simultaneous requests for the same book exactly one succeeds.
    """,
    responses={
        200: {"description": "The book, now unavailable, with its borrower and dates"},
        404: {"description": "Book or student not found"},
        409: {"description": "Book is already borrowed"},
    },
)
async def borrow_book(request: BorrowRequest, db: DbSession, service: LibraryServiceDep) -> BookRead:
    """Borrow a book."""
    try:
        return await service.borrow_book(request, db)
    except Exception as e:
        raise handle_exception(e) from e


@router.post(
    "/return",
    summary="Return Book",
    description="""
    Puts a book back on the shelf and clears its borrower and dates. The
    returning student is not checked.
    """,
    responses={
        200: {"description": "The book, available again"},
        404: {"description": "Book not found"},
    },
)
async def return_book(request: ReturnRequest, db: DbSession, service: LibraryServiceDep) -> BookRead:
    """Return a book."""
    try:
        return await service.return_book(request, db)
    except Exception as e:
        raise handle_exception(e) from e
