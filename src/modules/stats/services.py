"""Aggregate counts across the student and book collections."""

from sqlalchemy.ext.asyncio import AsyncSession

from ..books.services import LibraryService
from ..students.services import StudentService
from .schemas import BookStats, StatsRead, StudentStats


class StatsService:
    """Collects per-collection counts for ``GET /stats``."""

    def __init__(self, student_service: StudentService | None = None, library_service: LibraryService | None = None):
        self.student_service = student_service or StudentService()
        self.library_service = library_service or LibraryService()

    async def get_stats(self, db: AsyncSession) -> StatsRead:
        by_status = await self.student_service.count_by_status(db)
        total_books = await self.library_service.count_books(db)
        available_books = await self.library_service.count_books(db, available=True)

        return StatsRead(
            students=StudentStats(total=sum(by_status.values()), by_status=by_status),
            books=BookStats(total=total_books, available=available_books, borrowed=total_books - available_books),
        )
