"""Common constants used across the application."""

from typing import Callable, Dict, Type

from fastapi import HTTPException, status

from .exceptions import (
    ConflictError,
    DomainError,
    ResourceExistsError,
    ResourceNotFoundError,
    ValidationError,
)

EXCEPTION_MAPPING: Dict[Type[DomainError], Callable[[str], HTTPException]] = {
    ResourceNotFoundError: lambda message: HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message),
    ResourceExistsError: lambda message: HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message),
    ConflictError: lambda message: HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message),
    ValidationError: lambda message: HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message),
}

DEFAULT_STUDENT_STATUS = "enrolled"
COMPLETED_STUDENT_STATUS = "completed"

DEFAULT_LOAN_DAYS = 14
MAX_LOAN_DAYS = 90

# Signed 64-bit range of the integer columns; ids and operands outside it never match a row.
MIN_SQL_INTEGER = -(2**63)
MAX_SQL_INTEGER = 2**63 - 1
