from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from lectern.core import di
from lectern.lib import NotSet
from lectern.lib.util import compact
from lectern.model import Course, CourseID, EnrollmentStatus, UserID

from . import Session
from .table import courses, enrollments


def get(
    course_id: CourseID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Course | None:
    """Get a course by ID."""
    stmt = sqla.select(courses.__table__).where(courses.course_id == course_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Course(**row) if row else None


def find(
    *,
    professor_id: UserID | None = None,
    student_id: UserID | None = None,
    enrollment_status: t.Collection[EnrollmentStatus] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Course, ...]:
    """Find courses taught by a professor, or in which a student is enrolled."""
    stmt = sqla.select(courses.__table__).order_by(courses.prefix, courses.number)
    if professor_id is not None:
        stmt = stmt.where(courses.professor_id == professor_id)
    if student_id is not None:
        stmt = stmt.join(enrollments, enrollments.course_id == courses.course_id).where(
            enrollments.student_id == student_id
        )
        if enrollment_status:
            stmt = stmt.where(enrollments.status.in_([s.value for s in enrollment_status]))
    rows = session.execute(stmt).mappings().all()
    return tuple(Course(**row) for row in rows)


def create(
    *,
    professor_id: UserID,
    name: str,
    prefix: str,
    number: str,
    room: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    days: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Course:
    """Create a new course."""
    course_id = CourseID()
    stmt = sqla.insert(courses).values(
        course_id=course_id,
        professor_id=professor_id,
        name=name,
        prefix=prefix,
        number=number,
        room=room,
        start_time=start_time,
        end_time=end_time,
        days=days,
    )
    session.execute(stmt)
    session.flush()
    result = get(course_id, session=session)
    assert result is not None
    return result


def update(
    course_id: CourseID,
    *,
    name: str | NotSet = NotSet(),
    prefix: str | NotSet = NotSet(),
    number: str | NotSet = NotSet(),
    room: str | None | NotSet = NotSet(),
    start_time: str | None | NotSet = NotSet(),
    end_time: str | None | NotSet = NotSet(),
    days: str | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> Course:
    """Update a course.

    Raises:
        KeyError: If course_id does not correspond to a course
    """
    values = compact(
        {
            "name": name,
            "prefix": prefix,
            "number": number,
            "room": room,
            "start_time": start_time,
            "end_time": end_time,
            "days": days,
        },
        NotSet,
    )
    if not values:
        # No-op update to verify course exists
        values = {"course_id": course_id}

    result = session.execute(sqla.update(courses).where(courses.course_id == course_id).values(**values))
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Course {course_id} not found")

    session.flush()
    course = get(course_id, session=session)
    assert course is not None
    return course


def delete(
    course_id: CourseID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Delete a course; items, enrollments and everything under them go with it.

    Returns:
        True if a course was deleted, False if not found
    """
    stmt = sqla.delete(courses).where(courses.course_id == course_id)
    result = session.execute(stmt)
    return bool(result.rowcount)  # pyright: ignore[reportUnknownArgumentType, reportAttributeAccessIssue]
