"""Health and statistics endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ....modules.common.utils.error_handler import handle_exception
from ....modules.stats.schemas import StatsRead
from ..dependencies import DbHandle, DbSession, StatsServiceDep

router = APIRouter(tags=["System"])


@router.get(
    "/health",
    summary="API Health Check",
    description="Reports whether the process is up and the database answers a trivial query.",
    responses={
        200: {"description": "API and database are healthy"},
        503: {"description": "The database cannot be reached"},
    },
)
async def health_check(database: DbHandle) -> JSONResponse:
    """Health check endpoint for container orchestration."""
    if await database.ping():
        return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "healthy", "database": "connected"})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "unhealthy", "database": "disconnected"},
    )


@router.get(
    "/stats",
    summary="Collection Statistics",
    description="Counts students (in total and per status) and books (total, available, borrowed).",
)
async def get_stats(db: DbSession, service: StatsServiceDep) -> StatsRead:
    """Per-collection counts."""
    try:
        return await service.get_stats(db)
    except Exception as e:
        raise handle_exception(e) from e
