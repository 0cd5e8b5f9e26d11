"""Test configuration and fixtures for the campus records API."""

from typing import Any, Dict, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.app_factory import create_application
from src.infrastructure.database import Database
from src.infrastructure.logging import configure_testing_logging
from src.interfaces.api import router as api_router
from src.modules.books.models import Book
from src.modules.students.models import Student

configure_testing_logging()


@pytest.fixture
def database_url(tmp_path) -> str:
    """A throwaway SQLite file per test, so separate sessions really are separate connections."""
    return f"sqlite+aiosqlite:///{tmp_path / 'campus-test.db'}"


@pytest_asyncio.fixture(scope="function")
async def test_database(database_url: str):
    """Create a database handle with every table in place."""
    database = Database(database_url)
    await database.create_tables()
    yield database
    await database.drop_tables()
    await database.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_database: Database):
    """Create a test database session."""
    async with test_database.session_factory() as session:
        yield session


@pytest.fixture
def app(test_database: Database):
    """Application wired to the test database instead of the configured one."""
    return create_application(
        router=api_router,
        database=test_database,
        create_tables_on_startup=False,
        enable_gzip=False,
    )


@pytest_asyncio.fixture(scope="function")
async def client(app):
    """Create a test client; every request opens its own session on the test database."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def _student_dict(student: Student) -> Dict[str, Any]:
    return {
        "id": student.id,
        "name": student.name,
        "age": student.age,
        "course": student.course,
        "status": student.status,
        "email": student.email,
        "phone": student.phone,
    }


def _book_dict(book: Book) -> Dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "category": book.category,
        "available": book.available,
    }


@pytest_asyncio.fixture
async def test_student(db_session: AsyncSession) -> Dict[str, Any]:
    """Create a single enrolled student."""
    student = Student(name="Test Student", age=20, course="Computer Science", email="test.student@example.edu")
    db_session.add(student)
    await db_session.commit()
    return _student_dict(student)


@pytest_asyncio.fixture
async def test_students(db_session: AsyncSession) -> List[Dict[str, Any]]:
    """Create a small, varied set of students.

    | name  | age | course           | status    | email | phone |
    |-------|-----|------------------|-----------|-------|-------|
    | Alice | 19  | Computer Science | enrolled  | yes   | no    |
    | Bruno | 21  | Mathematics      | enrolled  | no    | yes   |
    | Carla | 23  | Physics          | completed | yes   | no    |
    | Diego | 20  | Computer Science | completed | no    | no    |
    | Erin  | 26  | Biology          | enrolled  | yes   | yes   |
    """
    students = [
        Student(name="Alice Walker", age=19, course="Computer Science", email="alice@example.edu"),
        Student(name="Bruno Costa", age=21, course="Mathematics", phone="+1-555-0001"),
        Student(name="Carla Mendes", age=23, course="Physics", status="completed", email="carla@example.edu"),
        Student(name="Diego Ramos", age=20, course="Computer Science", status="completed"),
        Student(name="Erin Hale", age=26, course="Biology", email="erin@example.edu", phone="+1-555-0005"),
    ]
    db_session.add_all(students)
    await db_session.commit()
    return [_student_dict(student) for student in students]


@pytest_asyncio.fixture
async def test_book(db_session: AsyncSession) -> Dict[str, Any]:
    """Create a single available book."""
    book = Book(title="Test Book", author="Test Author", isbn="978-0000000001", category="Computer Science")
    db_session.add(book)
    await db_session.commit()
    return _book_dict(book)


@pytest_asyncio.fixture
async def test_books(db_session: AsyncSession) -> List[Dict[str, Any]]:
    """Create three available books across two categories."""
    books = [
        Book(title="Clean Code", author="Robert C. Martin", isbn="978-0132350884", category="Computer Science"),
        Book(title="Linear Algebra Done Right", author="Sheldon Axler", isbn="978-3319110790", category="Mathematics"),
        Book(title="The Pragmatic Programmer", author="Andrew Hunt", isbn="978-0135957059", category="Computer Science"),
    ]
    db_session.add_all(books)
    await db_session.commit()
    return [_book_dict(book) for book in books]
