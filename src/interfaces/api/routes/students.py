"""Student API endpoints."""

from typing import Annotated, List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from ....modules.common.schemas import DeletedCount, ModifiedCount
from ....modules.common.utils.error_handler import handle_exception
from ....modules.students.schemas import (
    ComplexQueryType,
    OptionalField,
    StudentBulkUpdate,
    StudentCreate,
    StudentDeleteCondition,
    StudentRead,
    StudentSearch,
    StudentUpdate,
)
from ..dependencies import DbSession, StudentServiceDep

router = APIRouter(prefix="/students", tags=["Students"])

STUDENT_NOT_FOUND = "Student not found"


@router.post(
    "/single",
    status_code=status.HTTP_201_CREATED,
    summary="Create Student",
    description="""
    Inserts one student.

    - **name**, **age**, **course**: required
    - **status**: defaults to `enrolled`
    - **enrollmentDate**: defaults to the time of insertion
    - **email**, **phone**: optional
    """,
    responses={
        201: {"description": "Student created"},
        422: {"description": "Missing or invalid field"},
    },
)
async def create_student(student: StudentCreate, db: DbSession, service: StudentServiceDep) -> StudentRead:
    """Create a single student."""
    try:
        return await service.create_student(student, db)
    except Exception as e:
        raise handle_exception(e) from e


@router.post(
    "/multiple",
    status_code=status.HTTP_201_CREATED,
    summary="Create Students",
    description="""
    Inserts an array of students in one transaction.

    The whole array is validated before anything is written, and the insert
    is all-or-nothing: a failure stores none of the students.
    """,
    responses={
        201: {"description": "Students created"},
        409: {"description": "Batch rejected by the database, nothing stored"},
        422: {"description": "Empty array or an invalid student"},
    },
)
async def create_students(students: List[StudentCreate], db: DbSession, service: StudentServiceDep) -> List[StudentRead]:
    """Create several students at once."""
    try:
        return await service.create_students(students, db)
    except Exception as e:
        raise handle_exception(e) from e


@router.post(
    "/sample",
    status_code=status.HTTP_201_CREATED,
    summary="Insert Sample Students",
    description="Inserts a small fixed set of students to practise queries against.",
)
async def create_sample_students(db: DbSession, service: StudentServiceDep) -> List[StudentRead]:
    """Insert the sample students."""
    try:
        return await service.create_sample_students(db)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "",
    summary="List Students",
    description="Returns every student in storage order.",
)
async def get_students(db: DbSession, service: StudentServiceDep) -> List[StudentRead]:
    """List all students."""
    try:
        return await service.get_students(db)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/filter",
    summary="Filter Students",
    description="""
    Returns students whose fields equal the given values.

    - **course**: exact course name
    - **status**: exact status

    With no parameters every student is returned.
    """,
)
async def filter_students(
    db: DbSession,
    service: StudentServiceDep,
    course: Annotated[Optional[str], Query(description="Course to match")] = None,
    student_status: Annotated[Optional[str], Query(alias="status", description="Status to match")] = None,
) -> List[StudentRead]:
    """Filter students by equality."""
    try:
        return await service.filter_students(db, course=course, status=student_status)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/age-range",
    summary="Students In Age Range",
    description="""
    Returns students with `minAge <= age <= maxAge`. Both bounds are inclusive
    and either may be omitted.
    """,
    responses={422: {"description": "minAge is greater than maxAge"}},
)
async def get_students_by_age_range(
    db: DbSession,
    service: StudentServiceDep,
    min_age: Annotated[Optional[int], Query(alias="minAge", ge=0, description="Lowest age, inclusive")] = None,
    max_age: Annotated[Optional[int], Query(alias="maxAge", ge=0, description="Highest age, inclusive")] = None,
) -> List[StudentRead]:
    """Students in an inclusive age range."""
    try:
        return await service.get_students_by_age_range(db, min_age=min_age, max_age=max_age)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/courses",
    summary="Students In Courses",
    description="Returns students enrolled on any course of the comma-separated `courses` list.",
    responses={422: {"description": "No course given"}},
)
async def get_students_by_courses(
    db: DbSession,
    service: StudentServiceDep,
    courses: Annotated[str, Query(description="Comma-separated course names, e.g. `Physics,Biology`")],
) -> List[StudentRead]:
    """Students whose course is in a set."""
    course_list = [course.strip() for course in courses.split(",") if course.strip()]
    try:
        return await service.get_students_by_courses(course_list, db)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/complex",
    summary="Logical Operator Queries",
    description="""
    Runs a predefined query built from logical operators.

    - **and**: `age >= minAge` AND `status == status`
    - **or**: `course == course` OR `age <= maxAge`
    - **exists**: the optional `field` (`email` or `phone`) is set
    """,
    responses={422: {"description": "Unknown queryType"}},
)
async def complex_query(
    db: DbSession,
    service: StudentServiceDep,
    query_type: Annotated[ComplexQueryType, Query(alias="queryType")],
    min_age: Annotated[int, Query(alias="minAge", ge=0)] = 20,
    max_age: Annotated[int, Query(alias="maxAge", ge=0)] = 20,
    student_status: Annotated[str, Query(alias="status")] = "enrolled",
    course: str = "Computer Science",
    field: OptionalField = OptionalField.EMAIL,
) -> List[StudentRead]:
    """Run an and/or/exists demonstration query."""
    try:
        return await service.complex_query(
            query_type,
            db,
            min_age=min_age,
            max_age=max_age,
            status=student_status,
            course=course,
            field=field,
        )
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/search",
    summary="Advanced Student Search",
    description="""
    Combines any of the criteria below with AND.

    - **name**: case-insensitive substring of the name
    - **course**, **status**: exact match
    - **minAge**, **maxAge**: inclusive age bounds
    - **hasEmail**: whether an email is on record
    """,
)
async def search_students(
    db: DbSession,
    service: StudentServiceDep,
    name: Optional[str] = None,
    course: Optional[str] = None,
    student_status: Annotated[Optional[str], Query(alias="status")] = None,
    min_age: Annotated[Optional[int], Query(alias="minAge", ge=0)] = None,
    max_age: Annotated[Optional[int], Query(alias="maxAge", ge=0)] = None,
    has_email: Annotated[Optional[bool], Query(alias="hasEmail")] = None,
) -> List[StudentRead]:
    """Search students with several optional criteria."""
    search = StudentSearch(
        name=name,
        course=course,
        status=student_status,
        min_age=min_age,
        max_age=max_age,
        has_email=has_email,
    )
    try:
        return await service.search_students(search, db)
    except Exception as e:
        raise handle_exception(e) from e


@router.get(
    "/{student_id}",
    summary="Get Student",
    responses={
        200: {"description": "The student"},
        404: {"description": "Student not found"},
    },
)
async def get_student(student_id: int, db: DbSession, service: StudentServiceDep) -> StudentRead:
    """Get one student by id."""
    try:
        result = await service.get_student(student_id, db)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STUDENT_NOT_FOUND)
        return result
    except Exception as e:
        raise handle_exception(e) from e


@router.put(
    "/bulk",
    summary="Bulk Update Students",
    description="""
    Sets the same fields on every student matching `filter`.

    `filter` maps a field to a value (equality) or to an object of operators:
    `eq`, `ne`, `gt`, `gte`, `lt`, `lte`, `in`, `nin`, `exists`, `contains`.
    Top-level `and` / `or` take lists of nested filters. `update` is a partial
    student. Matching nothing is not an error.

    ```json
    {"filter": {"course": "Physics", "age": {"gte": 21}}, "update": {"status": "completed"}}
    ```
    """,
    responses={
        200: {"description": "Number of students modified"},
        422: {"description": "Empty, unknown or malformed filter, or empty update"},
    },
)
async def bulk_update_students(body: StudentBulkUpdate, db: DbSession, service: StudentServiceDep) -> ModifiedCount:
    """Update many students with one filter."""
    try:
        modified = await service.bulk_update(body.filter, body.update, db)
        return ModifiedCount(modified_count=modified)
    except Exception as e:
        raise handle_exception(e) from e


@router.put(
    "/{student_id}",
    summary="Update Student",
    description="Writes only the fields present in the body.",
    responses={
        200: {"description": "The updated student"},
        404: {"description": "Student not found"},
        422: {"description": "Invalid field"},
    },
)
async def update_student(
    student_id: int, update_data: StudentUpdate, db: DbSession, service: StudentServiceDep
) -> StudentRead:
    """Partially update a student."""
    try:
        result = await service.update_student(student_id, update_data, db)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STUDENT_NOT_FOUND)
        return result
    except Exception as e:
        raise handle_exception(e) from e


@router.put(
    "/{student_id}/complete",
    summary="Complete Student",
    description="Shortcut that sets the student's status to `completed`.",
    responses={404: {"description": "Student not found"}},
)
async def complete_student(student_id: int, db: DbSession, service: StudentServiceDep) -> StudentRead:
    """Mark a student as completed."""
    try:
        result = await service.complete_student(student_id, db)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STUDENT_NOT_FOUND)
        return result
    except Exception as e:
        raise handle_exception(e) from e


@router.delete(
    "/by-condition",
    summary="Delete Students By Condition",
    description="""
    Deletes every student matching `condition` (same filter syntax as the bulk
    update). An empty condition is rejected; use `DELETE /students/all`.
    """,
    responses={422: {"description": "Empty, unknown or malformed condition"}},
)
async def delete_students_by_condition(
    body: StudentDeleteCondition, db: DbSession, service: StudentServiceDep
) -> DeletedCount:
    """Delete students matching a filter."""
    try:
        deleted = await service.delete_by_condition(body.condition, db)
        return DeletedCount(deleted_count=deleted)
    except Exception as e:
        raise handle_exception(e) from e


@router.delete(
    "/all",
    summary="Delete All Students",
    description="""
    Removes every student. This cannot be undone and is not guarded in any
    way; it exists for practice databases only.
    """,
)
async def delete_all_students(db: DbSession, service: StudentServiceDep) -> DeletedCount:
    """Delete every student."""
    try:
        deleted = await service.delete_all_students(db)
        return DeletedCount(deleted_count=deleted)
    except Exception as e:
        raise handle_exception(e) from e


@router.delete(
    "/{student_id}",
    summary="Delete Student",
    description="Deletes one student. An unknown id deletes nothing and reports `deletedCount: 0`.",
)
async def delete_student(student_id: int, db: DbSession, service: StudentServiceDep) -> DeletedCount:
    """Delete a student by id."""
    try:
        deleted = await service.delete_student(student_id, db)
        return DeletedCount(deleted_count=deleted)
    except Exception as e:
        raise handle_exception(e) from e
