"""FastAPI dependencies for use in API endpoints."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database import Database, async_session, get_database
from ...modules.books.services import LibraryService
from ...modules.stats.services import StatsService
from ...modules.students.services import StudentService

DbSession = Annotated[AsyncSession, Depends(async_session)]
DbHandle = Annotated[Database, Depends(get_database)]


def get_student_service() -> StudentService:
    """Dependency for providing a StudentService instance."""
    return StudentService()


def get_library_service() -> LibraryService:
    """Dependency for providing a LibraryService instance."""
    return LibraryService()


def get_stats_service() -> StatsService:
    """Dependency for providing a StatsService instance."""
    return StatsService()


StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]
LibraryServiceDep = Annotated[LibraryService, Depends(get_library_service)]
StatsServiceDep = Annotated[StatsService, Depends(get_stats_service)]
