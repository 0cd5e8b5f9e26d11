"""Tests for the client filter language."""

from typing import Any, Dict, List

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.common.exceptions import InvalidFilterError
from src.modules.common.filters import FilterBuilder, escape_like
from src.modules.books.models import Book
from src.modules.students.models import Student
from src.modules.students.services import student_filters


async def matching_names(criteria: Dict[str, Any], db: AsyncSession) -> List[str]:
    stmt = select(Student.name).where(student_filters.build(criteria)).order_by(Student.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


def test_escape_like():
    """Wildcards and the escape character itself are escaped."""
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


def test_camel_case_field_names_accepted():
    """Fields may be given in snake_case or camelCase."""
    assert "enrollment_date" in student_filters.fields
    assert "enrollmentDate" in student_filters.fields


@pytest.mark.parametrize(
    "criteria",
    [
        {},
        {"grade": "A"},
        {"age": {"between": [1, 2]}},
        {"age": {}},
        {"age": "twenty"},
        {"age": {"gte": [20]}},
        {"age": {"in": []}},
        {"age": {"in": 20}},
        {"email": {"exists": "yes"}},
        {"age": {"contains": "2"}},
        {"age": {"gt": None}},
        {"and": []},
        {"or": {"age": 20}},
        {"and": [{}]},
        {"$where": "this.age > 20"},
        {"age": 2**70},
        {"id": {"in": [1, 2**63]}},
        {"age": {"gte": -(2**63) - 1}},
    ],
)
def test_rejected_filters(criteria: Dict[str, Any]):
    """Empty filters, unknown fields or operators and ill-typed operands are rejected."""
    with pytest.raises(InvalidFilterError):
        student_filters.build(criteria)


def test_ordering_rejected_on_boolean():
    """Booleans only support equality-style operators."""
    book_filters = FilterBuilder(Book, ["available"])

    with pytest.raises(InvalidFilterError):
        book_filters.build({"available": {"gt": False}})

    book_filters.build({"available": {"ne": True}})


def test_nesting_depth_is_limited():
    """Deeply nested logical operators are rejected."""
    criteria: Dict[str, Any] = {"age": 20}
    for _ in range(6):
        criteria = {"and": [criteria]}

    with pytest.raises(InvalidFilterError):
        student_filters.build(criteria)


@pytest.mark.asyncio
async def test_equality_and_comparison(db_session: AsyncSession, test_students: List[Dict[str, Any]]):
    """Literals mean equality; operator objects on one field combine with AND."""
    assert await matching_names({"course": "Physics"}, db_session) == ["Carla Mendes"]
    assert await matching_names({"age": {"gt": 20, "lt": 26}}, db_session) == ["Bruno Costa", "Carla Mendes"]
    assert await matching_names({"status": {"ne": "enrolled"}}, db_session) == ["Carla Mendes", "Diego Ramos"]


@pytest.mark.asyncio
async def test_operands_are_coerced(db_session: AsyncSession, test_students: List[Dict[str, Any]]):
    """Numeric strings are accepted for integer columns."""
    assert await matching_names({"age": {"lte": "19"}}, db_session) == ["Alice Walker"]


@pytest.mark.asyncio
async def test_set_membership(db_session: AsyncSession, test_students: List[Dict[str, Any]]):
    """``in`` and ``nin`` test membership in a list."""
    assert await matching_names({"age": {"in": [19, 26]}}, db_session) == ["Alice Walker", "Erin Hale"]
    assert await matching_names(
        {"course": {"nin": ["Computer Science", "Mathematics"]}}, db_session
    ) == ["Carla Mendes", "Erin Hale"]


@pytest.mark.asyncio
async def test_exists_and_null_equality(db_session: AsyncSession, test_students: List[Dict[str, Any]]):
    """``exists`` and equality with null test for presence."""
    assert await matching_names({"phone": {"exists": True}}, db_session) == ["Bruno Costa", "Erin Hale"]
    assert await matching_names({"email": None}, db_session) == ["Bruno Costa", "Diego Ramos"]


@pytest.mark.asyncio
async def test_contains_is_case_insensitive(db_session: AsyncSession, test_students: List[Dict[str, Any]]):
    """``contains`` is a case-insensitive substring match."""
    assert await matching_names({"name": {"contains": "RA"}}, db_session) == ["Diego Ramos"]


@pytest.mark.asyncio
async def test_logical_operators(db_session: AsyncSession, test_students: List[Dict[str, Any]]):
    """``and``/``or`` combine nested filters, with or without a ``$`` prefix."""
    either = {"or": [{"course": "Biology"}, {"age": {"lt": 20}}]}
    assert await matching_names(either, db_session) == ["Alice Walker", "Erin Hale"]

    mongo_style = {"$and": [{"status": "enrolled"}, {"age": {"$gte": 21}}]}
    assert await matching_names(mongo_style, db_session) == ["Bruno Costa", "Erin Hale"]
