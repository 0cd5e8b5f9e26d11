"""Utility functions for mapping domain exceptions to HTTP exceptions."""

from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ....infrastructure.logging import get_logger
from ..constants import EXCEPTION_MAPPING
from ..exceptions import DomainError

logger = get_logger(__name__)


def map_exception(error: DomainError) -> HTTPException:
    """Map a domain exception to a corresponding HTTP exception."""
    for exception_class, mapper in EXCEPTION_MAPPING.items():
        if isinstance(error, exception_class):
            return mapper(str(error))

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected error occurred: {str(error)}"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for domain exceptions."""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        """Convert domain exceptions to appropriate HTTP responses."""
        http_exception = map_exception(exc)
        return JSONResponse(
            status_code=http_exception.status_code,
            content={"detail": http_exception.detail},
        )


def handle_exception(error: Exception) -> HTTPException:
    """
    Translate any exception raised inside a route handler into an HTTPException.

    Domain errors map through EXCEPTION_MAPPING and HTTPExceptions pass through
    untouched. Anything else is logged with its traceback and reported as a
    generic 500 so driver internals never leak to the client.

    Args:
        error: The exception to handle

    Returns:
        The HTTPException the route should raise
    """
    mapped = _map_known(error)
    if mapped is not None:
        return mapped

    logger.error(f"Unhandled error: {error!r}", exc_info=error)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


def _map_known(error: Exception) -> Optional[HTTPException]:
    if isinstance(error, DomainError):
        return map_exception(error)
    elif isinstance(error, HTTPException):
        return error
    return None
