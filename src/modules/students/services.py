"""Student record service."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from ...infrastructure.logging import get_logger
from ..common.constants import COMPLETED_STUDENT_STATUS
from ..common.exceptions import ResourceExistsError, ValidationError
from ..common.filters import FilterBuilder, fits_integer_column
from .crud import student_crud
from .models import Student
from .schemas import (
    ComplexQueryType,
    OptionalField,
    StudentCreate,
    StudentRead,
    StudentSearch,
    StudentUpdate,
)

logger = get_logger(__name__)

FILTERABLE_FIELDS = ("id", "name", "age", "course", "status", "email", "phone", "enrollment_date")

student_filters = FilterBuilder(Student, FILTERABLE_FIELDS)

SAMPLE_STUDENTS: List[Dict[str, Any]] = [
    {"name": "Ana Souza", "age": 19, "course": "Computer Science", "email": "ana.souza@example.edu"},
    {"name": "Ben Carter", "age": 22, "course": "Mathematics", "phone": "+1-555-0102"},
    {"name": "Chloe Martin", "age": 24, "course": "Physics", "email": "chloe.martin@example.edu"},
    {"name": "Dev Patel", "age": 21, "course": "Computer Science", "status": "completed"},
    {"name": "Elif Yilmaz", "age": 27, "course": "Biology", "email": "elif.yilmaz@example.edu", "phone": "+90-555-0105"},
]


class StudentService:
    """Service for managing student records.

    Every public method performs one logical storage operation. Reads return
    students in storage (id) order; updates and deletes that match nothing
    are successes with a zero count rather than errors.
    """

    async def create_student(self, student_data: StudentCreate, db: AsyncSession) -> StudentRead:
        """Insert one student.

        Args:
            student_data: Validated student fields
            db: Database session

        Returns:
            The stored student with its generated id
        """
        student = Student(**student_data.model_dump())
        db.add(student)
        await db.commit()

        logger.info("Student created", extra={"student_id": student.id})
        return StudentRead.model_validate(student)

    async def create_students(self, students: Sequence[StudentCreate], db: AsyncSession) -> List[StudentRead]:
        """Insert several students in one transaction.

        The batch is all-or-nothing: if any row fails to insert, the
        transaction is rolled back and no student from the batch is stored.

        Args:
            students: Validated student payloads, at least one
            db: Database session

        Returns:
            The stored students in input order
        """
        if not students:
            raise ValidationError("At least one student is required")

        rows = [Student(**student.model_dump()) for student in students]
        db.add_all(rows)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ResourceExistsError(f"Batch insert rejected, nothing was stored: {e.orig}") from e

        logger.info("Students created", extra={"inserted_count": len(rows)})
        return [StudentRead.model_validate(row) for row in rows]

    async def create_sample_students(self, db: AsyncSession) -> List[StudentRead]:
        """Insert the built-in sample students."""
        return await self.create_students([StudentCreate(**sample) for sample in SAMPLE_STUDENTS], db)

    async def get_student(self, student_id: int, db: AsyncSession) -> Optional[StudentRead]:
        """Get a single student, or None when the id does not exist."""
        if not fits_integer_column(student_id):
            return None

        student = await student_crud.get(db=db, id=student_id)
        if student is None:
            return None
        return StudentRead.model_validate(student)

    async def get_students(self, db: AsyncSession) -> List[StudentRead]:
        """Get every student."""
        stmt = await student_crud.select(sort_columns="id")
        result = await db.execute(stmt)
        return [StudentRead.model_validate(dict(row)) for row in result.mappings().all()]

    async def filter_students(
        self, db: AsyncSession, course: Optional[str] = None, status: Optional[str] = None
    ) -> List[StudentRead]:
        """Get students whose course and/or status equal the given values."""
        equals: Dict[str, Any] = {}
        if course is not None:
            equals["course"] = course
        if status is not None:
            equals["status"] = status

        stmt = await student_crud.select(sort_columns="id", **equals)
        result = await db.execute(stmt)
        return [StudentRead.model_validate(dict(row)) for row in result.mappings().all()]

    async def get_students_by_age_range(
        self, db: AsyncSession, min_age: Optional[int] = None, max_age: Optional[int] = None
    ) -> List[StudentRead]:
        """Get students with ``min_age <= age <= max_age``; either bound may be omitted."""
        if min_age is not None and max_age is not None and min_age > max_age:
            raise ValidationError("minAge must not be greater than maxAge")

        bounds: Dict[str, int] = {}
        if min_age is not None:
            bounds["gte"] = min_age
        if max_age is not None:
            bounds["lte"] = max_age

        if not bounds:
            return await self.get_students(db)
        return await self.find_students({"age": bounds}, db)

    async def get_students_by_courses(self, courses: Sequence[str], db: AsyncSession) -> List[StudentRead]:
        """Get students enrolled on any of ``courses``."""
        if not courses:
            raise ValidationError("At least one course is required")
        return await self.find_students({"course": {"in": list(courses)}}, db)

    async def complex_query(
        self,
        query_type: ComplexQueryType,
        db: AsyncSession,
        min_age: int = 20,
        max_age: int = 20,
        status: str = "enrolled",
        course: str = "Computer Science",
        field: OptionalField = OptionalField.EMAIL,
    ) -> List[StudentRead]:
        """Run one of the predefined logical-operator queries.

        - ``and``: ``age >= min_age`` and ``status == status``
        - ``or``: ``course == course`` or ``age <= max_age``
        - ``exists``: ``field`` is set
        """
        criteria: Dict[str, Any]
        if query_type == ComplexQueryType.AND:
            criteria = {"and": [{"age": {"gte": min_age}}, {"status": status}]}
        elif query_type == ComplexQueryType.OR:
            criteria = {"or": [{"course": course}, {"age": {"lte": max_age}}]}
        else:
            criteria = {field.value: {"exists": True}}

        return await self.find_students(criteria, db)

    async def search_students(self, search: StudentSearch, db: AsyncSession) -> List[StudentRead]:
        """Advanced search combining every given criterion with AND."""
        if search.min_age is not None and search.max_age is not None and search.min_age > search.max_age:
            raise ValidationError("minAge must not be greater than maxAge")

        criteria: Dict[str, Any] = {}
        if search.name:
            criteria["name"] = {"contains": search.name}
        if search.course is not None:
            criteria["course"] = search.course
        if search.status is not None:
            criteria["status"] = search.status

        age: Dict[str, int] = {}
        if search.min_age is not None:
            age["gte"] = search.min_age
        if search.max_age is not None:
            age["lte"] = search.max_age
        if age:
            criteria["age"] = age

        if search.has_email is not None:
            criteria["email"] = {"exists": search.has_email}

        if not criteria:
            return await self.get_students(db)
        return await self.find_students(criteria, db)

    async def find_students(self, criteria: Mapping[str, Any], db: AsyncSession) -> List[StudentRead]:
        """Get students matching a filter object (see :mod:`..common.filters`)."""
        stmt = (
            select(Student)
            .where(student_filters.build(criteria))
            .order_by(Student.id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return [StudentRead.model_validate(student) for student in result.scalars().all()]

    async def update_student(self, student_id: int, update_data: StudentUpdate, db: AsyncSession) -> Optional[StudentRead]:
        """Apply a partial update to one student.

        Returns:
            The updated student, or None when the id does not exist
        """
        if not fits_integer_column(student_id):
            return None
        if not await student_crud.exists(db=db, id=student_id):
            return None

        values = update_data.model_dump(exclude_unset=True)
        if values:
            await student_crud.update(db=db, object=values, id=student_id)
            logger.info("Student updated", extra={"student_id": student_id, "fields": sorted(values)})

        return await self.get_student(student_id, db)

    async def complete_student(self, student_id: int, db: AsyncSession) -> Optional[StudentRead]:
        """Mark a student's course as completed."""
        return await self.update_student(student_id, StudentUpdate(status=COMPLETED_STUDENT_STATUS), db)

    async def bulk_update(self, criteria: Mapping[str, Any], update_data: StudentUpdate, db: AsyncSession) -> int:
        """Set the same fields on every student matching ``criteria``.

        Returns:
            Number of students modified (0 when nothing matched)
        """
        values = update_data.model_dump(exclude_unset=True)
        if not values:
            raise ValidationError("Update must set at least one field")

        stmt = (
            update(Student)
            .where(student_filters.build(criteria))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()

        logger.info("Students bulk updated", extra={"modified_count": result.rowcount, "fields": sorted(values)})
        return result.rowcount

    async def delete_student(self, student_id: int, db: AsyncSession) -> int:
        """Delete one student; deleting an unknown id removes nothing and returns 0."""
        if not fits_integer_column(student_id):
            return 0
        return await self._delete_where(Student.id == student_id, db)

    async def delete_by_condition(self, criteria: Mapping[str, Any], db: AsyncSession) -> int:
        """Delete every student matching a non-empty filter object."""
        return await self._delete_where(student_filters.build(criteria), db)

    async def delete_all_students(self, db: AsyncSession) -> int:
        """Delete every student. Irreversible and unguarded."""
        deleted = await self._delete_where(None, db)
        logger.warning("All students deleted", extra={"deleted_count": deleted})
        return deleted

    async def count_by_status(self, db: AsyncSession) -> Dict[str, int]:
        """Number of students per status value."""
        stmt = select(Student.status, func.count(Student.id)).group_by(Student.status).order_by(Student.status)
        result = await db.execute(stmt)
        return {status: count for status, count in result.all()}

    async def _delete_where(self, predicate: Optional[ColumnElement[bool]], db: AsyncSession) -> int:
        stmt = delete(Student)
        if predicate is not None:
            stmt = stmt.where(predicate)

        result = await db.execute(stmt.execution_options(synchronize_session=False))
        await db.commit()

        if predicate is not None:
            logger.info("Students deleted", extra={"deleted_count": result.rowcount})
        return result.rowcount
