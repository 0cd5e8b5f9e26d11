"""Tests for the statistics service."""

from typing import Any, Dict, List

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.books.schemas import BorrowRequest
from src.modules.books.services import LibraryService
from src.modules.stats.services import StatsService


@pytest.mark.asyncio
async def test_stats_empty(db_session: AsyncSession):
    """Empty collections report zeros."""
    stats = await StatsService().get_stats(db_session)

    assert stats.students.total == 0
    assert stats.students.by_status == {}
    assert stats.books.total == 0
    assert stats.books.available == 0
    assert stats.books.borrowed == 0


@pytest.mark.asyncio
async def test_stats_counts(
    db_session: AsyncSession, test_students: List[Dict[str, Any]], test_books: List[Dict[str, Any]]
):
    """Students are counted per status and books by availability."""
    await LibraryService().borrow_book(
        BorrowRequest(book_id=test_books[0]["id"], student_id=test_students[0]["id"]), db=db_session
    )

    stats = await StatsService().get_stats(db_session)

    assert stats.students.total == 5
    assert stats.students.by_status == {"enrolled": 3, "completed": 2}
    assert stats.books.total == 3
    assert stats.books.available == 2
    assert stats.books.borrowed == 1
