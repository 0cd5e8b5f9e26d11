"""Pydantic schemas for the aggregate statistics endpoint."""

from typing import Dict

from ..common.schemas import CamelModel


class StudentStats(CamelModel):
    total: int
    by_status: Dict[str, int]


class BookStats(CamelModel):
    total: int
    available: int
    borrowed: int


class StatsRead(CamelModel):
    """Per-collection counts."""

    students: StudentStats
    books: BookStats
