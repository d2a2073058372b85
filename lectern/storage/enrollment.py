from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from lectern.core import di
from lectern.lib.sql import insert
from lectern.model import Course, CourseID, Enrollment, EnrollmentID, EnrollmentStatus, EnrollmentWithCourse, \
    EnrollmentWithStudent, UserID

from . import Session
from .table import courses, enrollments, profiles, users
from .user import person_columns, person_from_row


def get(
    enrollment_id: EnrollmentID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment | None:
    """Get an enrollment by ID."""
    stmt = sqla.select(enrollments.__table__).where(enrollments.enrollment_id == enrollment_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Enrollment(**row) if row else None


def get_for(
    *,
    course_id: CourseID,
    student_id: UserID,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment | None:
    """Get the enrollment, in any status, of a student in a course."""
    stmt = sqla.select(enrollments.__table__).where(
        enrollments.course_id == course_id,
        enrollments.student_id == student_id,
    )
    row = session.execute(stmt).mappings().one_or_none()
    return Enrollment(**row) if row else None


def find(
    *,
    course_id: CourseID | None = None,
    student_id: UserID | None = None,
    status: EnrollmentStatus | t.Collection[EnrollmentStatus] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Enrollment, ...]:
    """Find enrollments matching criteria."""
    stmt = sqla.select(enrollments.__table__).order_by(enrollments.enrollment_date)
    if course_id is not None:
        stmt = stmt.where(enrollments.course_id == course_id)
    if student_id is not None:
        stmt = stmt.where(enrollments.student_id == student_id)
    if status is not None:
        stmt = stmt.where(enrollments.status.in_(_status_values(status)))
    rows = session.execute(stmt).mappings().all()
    return tuple(Enrollment(**row) for row in rows)


def find_with_student(
    *,
    course_id: CourseID,
    status: EnrollmentStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[EnrollmentWithStudent, ...]:
    """Enrollments of a course, each joined with the student's name and email."""
    stmt = (
        sqla
        .select(enrollments.__table__, *person_columns())
        .join(users, users.user_id == enrollments.student_id)
        .join(profiles, profiles.profile_id == users.profile_id)
        .where(enrollments.course_id == course_id)
        .order_by(profiles.last_name, profiles.first_name)
    )
    if status is not None:
        stmt = stmt.where(enrollments.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(
        EnrollmentWithStudent(**{k: row[k] for k in enrollments.__table__.columns.keys()}, student=person_from_row(row))
        for row in rows
    )


def find_with_course(
    *,
    student_id: UserID,
    status: EnrollmentStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[EnrollmentWithCourse, ...]:
    """Enrollments of a student, each joined with its course and the course's professor."""
    course_columns = [c.label(f"course_{c.key}") for c in courses.__table__.columns]
    stmt = (
        sqla
        .select(enrollments.__table__, *course_columns, *person_columns())
        .join(courses, courses.course_id == enrollments.course_id)
        .join(users, users.user_id == courses.professor_id)
        .join(profiles, profiles.profile_id == users.profile_id)
        .where(enrollments.student_id == student_id)
        .order_by(courses.prefix, courses.number)
    )
    if status is not None:
        stmt = stmt.where(enrollments.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(
        EnrollmentWithCourse(
            **{k: row[k] for k in enrollments.__table__.columns.keys()},
            course=Course(**{c.key: row[f"course_{c.key}"] for c in courses.__table__.columns}),
            professor=person_from_row(row),
        )
        for row in rows
    )


def create(
    *,
    course_id: CourseID,
    student_id: UserID,
    status: EnrollmentStatus,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment | None:
    """Insert an enrollment unless the (course, student) pair already has one.

    The insert is guarded by the table's unique constraint, so of two
    concurrent calls for the same pair exactly one creates the row.

    Returns:
        The new enrollment, or None if one already existed
    """
    enrollment_id = EnrollmentID()
    stmt = (
        insert(enrollments.__table__, session)
        .values(
            enrollment_id=enrollment_id,
            course_id=course_id,
            student_id=student_id,
            status=status.value,
        )
        .on_conflict_do_nothing(index_elements=["course_id", "student_id"])
    )
    session.execute(stmt)
    session.flush()
    enrollment = get_for(course_id=course_id, student_id=student_id, session=session)
    if enrollment is None or enrollment.enrollment_id != enrollment_id:
        return None
    return enrollment


def transition(
    enrollment_id: EnrollmentID,
    to: EnrollmentStatus,
    *,
    from_: EnrollmentStatus,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment | None:
    """Move an enrollment from one status to another.

    The update only applies while the row is still in `from_`, so a
    transition that lost a race to another writer has no effect.

    Returns:
        The updated enrollment, or None if no row in `from_` matched
    """
    stmt = (
        sqla
        .update(enrollments)
        .where(enrollments.enrollment_id == enrollment_id, enrollments.status == from_.value)
        .values(status=to.value)
    )
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        return None
    session.flush()
    return get(enrollment_id, session=session)


def delete(
    enrollment_id: EnrollmentID,
    *,
    status: EnrollmentStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Delete an enrollment, optionally only while it is in the given status.

    Returns:
        True if an enrollment was deleted, False if not found
    """
    stmt = sqla.delete(enrollments).where(enrollments.enrollment_id == enrollment_id)
    if status is not None:
        stmt = stmt.where(enrollments.status == status.value)
    result = session.execute(stmt)
    return bool(result.rowcount)  # pyright: ignore[reportUnknownArgumentType, reportAttributeAccessIssue]


def _status_values(status: EnrollmentStatus | t.Collection[EnrollmentStatus]) -> list[str]:
    if isinstance(status, EnrollmentStatus):
        return [status.value]
    return [s.value for s in status]
