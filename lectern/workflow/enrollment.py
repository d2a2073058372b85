"""Enrollment lifecycle.

    (none) --invite--> pending --accept--> active --drop--> dropped
                         |                    |
                       decline (row deleted)  complete--> completed

At most one enrollment exists per (course, student), whatever its status: a
dropped student cannot be invited back into the same course.
"""

from __future__ import annotations

import logging

from lectern.core import di
from lectern.model import CourseID, Enrollment, EnrollmentID, EnrollmentStatus, EnrollmentWithCourse, \
    EnrollmentWithStudent, User, UserID, UserRole
from lectern.storage import enrollment as enrollment_storage
from lectern.storage import Session
from lectern.storage import user as user_storage

from .catalog import load_course
from .errors import Conflict, Forbidden, NotFound, ValidationError
from .policy import any_of, authorize, Caller, is_admin, is_owner, is_self
from .transaction import unit_of_work

logger = logging.getLogger(__name__)

AlreadyEnrolled = "That student already has an enrollment in this course"


def _create(course_id: CourseID, student: User, status: EnrollmentStatus, session: Session) -> Enrollment:
    if student.role is not UserRole.Student:
        raise ValidationError("Only students can be enrolled in a course")
    # the pre-check gives the usual case a readable error, the unique
    # constraint settles the race
    if enrollment_storage.get_for(course_id=course_id, student_id=student.user_id, session=session) is not None:
        raise Conflict(AlreadyEnrolled)
    enrollment = enrollment_storage.create(
        course_id=course_id, student_id=student.user_id, status=status, session=session
    )
    if enrollment is None:
        raise Conflict(AlreadyEnrolled)
    return enrollment


def invite(
    caller: Caller,
    course_id: CourseID,
    email: str,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment:
    """Invite the student with `email` into a course the caller teaches.

    Raises:
        NotFound: no such course among the caller's, or no user with that email
        Conflict: the student already has an enrollment here, in any status
    """
    authorize(caller, roles=[UserRole.Professor], message="Only professors may invite students")
    with unit_of_work(session, conflict=AlreadyEnrolled):
        course = load_course(course_id, session)
        if course.professor_id != caller.user_id:
            raise NotFound("Course not found")
        student = user_storage.get(email=email.strip(), session=session)
        if student is None:
            raise NotFound("No user has that email address")
        enrollment = _create(course_id, student, EnrollmentStatus.Pending, session)

    logger.info(
        "invited student",
        extra={
            "enrollment_id": enrollment.enrollment_id,
            "course_id": course_id,
            "student_id": student.user_id,
        },
    )
    return enrollment


def direct_enroll(
    caller: Caller,
    course_id: CourseID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment:
    """Enroll a student as active without an invitation, for administrative seeding."""
    authorize(caller, roles=[UserRole.Professor, UserRole.Admin], message="Only staff may enroll students")
    with unit_of_work(session, conflict=AlreadyEnrolled):
        course = load_course(course_id, session)
        authorize(
            caller,
            when=any_of(is_owner(course.professor_id), is_admin),
            message="Only the course's professor may enroll students",
        )
        student = user_storage.get(user_id=student_id, session=session)
        if student is None:
            raise NotFound("Student not found")
        enrollment = _create(course_id, student, EnrollmentStatus.Active, session)

    logger.info(
        "enrolled student",
        extra={
            "enrollment_id": enrollment.enrollment_id,
            "course_id": course_id,
            "student_id": student_id,
        },
    )
    return enrollment


def _pending_for(caller: Caller, invitation_id: EnrollmentID, session: Session) -> Enrollment:
    enrollment = enrollment_storage.get(invitation_id, session=session)
    if enrollment is None or enrollment.status is not EnrollmentStatus.Pending:
        raise NotFound("Invitation not found")
    authorize(caller, when=is_self(enrollment.student_id), message="That invitation is for another student")
    return enrollment


def accept(
    caller: Caller,
    invitation_id: EnrollmentID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment:
    """Accept a pending invitation, making the enrollment active.

    Raises:
        NotFound: there is no pending invitation with that id
        Forbidden: the invitation belongs to another student
    """
    with unit_of_work(session):
        _pending_for(caller, invitation_id, session)
        enrollment = enrollment_storage.transition(
            invitation_id, EnrollmentStatus.Active, from_=EnrollmentStatus.Pending, session=session
        )
        if enrollment is None:
            raise NotFound("Invitation not found")

    logger.info("accepted invitation", extra={"enrollment_id": invitation_id, "student_id": caller.user_id})
    return enrollment


def decline(
    caller: Caller,
    invitation_id: EnrollmentID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Decline a pending invitation; the row is deleted and leaves no trace."""
    with unit_of_work(session):
        _pending_for(caller, invitation_id, session)
        if not enrollment_storage.delete(invitation_id, status=EnrollmentStatus.Pending, session=session):
            raise NotFound("Invitation not found")

    logger.info("declined invitation", extra={"enrollment_id": invitation_id, "student_id": caller.user_id})


def _finish(
    caller: Caller, enrollment_id: EnrollmentID, to: EnrollmentStatus, session: Session
) -> Enrollment:
    with unit_of_work(session):
        enrollment = enrollment_storage.get(enrollment_id, session=session)
        if enrollment is None:
            raise NotFound("Enrollment not found")
        course = load_course(enrollment.course_id, session)
        authorize(
            caller,
            when=any_of(is_owner(course.professor_id), is_admin),
            message="Only the course's professor may change enrollments",
        )
        updated = enrollment_storage.transition(
            enrollment_id, to, from_=EnrollmentStatus.Active, session=session
        )
        if updated is None:
            raise Conflict(f"Only an active enrollment can become {to.value}")

    logger.info(
        "changed enrollment status",
        extra={"enrollment_id": enrollment_id, "from": EnrollmentStatus.Active.value, "to": to.value},
    )
    return updated


def drop(
    caller: Caller,
    enrollment_id: EnrollmentID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment:
    return _finish(caller, enrollment_id, EnrollmentStatus.Dropped, session)


def complete(
    caller: Caller,
    enrollment_id: EnrollmentID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Enrollment:
    return _finish(caller, enrollment_id, EnrollmentStatus.Completed, session)


def list_for_course(
    caller: Caller,
    course_id: CourseID,
    *,
    status: EnrollmentStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[EnrollmentWithStudent, ...]:
    """The course's roster, each row with the student's name and email."""
    with unit_of_work(session):
        course = load_course(course_id, session)
        authorize(
            caller,
            when=any_of(is_owner(course.professor_id), is_admin),
            message="Only the course's professor may view its roster",
        )
        return enrollment_storage.find_with_student(course_id=course_id, status=status, session=session)


def list_for_student(
    caller: Caller,
    student_id: UserID,
    *,
    status: EnrollmentStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[EnrollmentWithCourse, ...]:
    """A student's enrollments, each row with its course and the course's professor."""
    authorize(caller, when=any_of(is_self(student_id), is_admin), message="You may only view your own enrollments")
    with unit_of_work(session):
        return enrollment_storage.find_with_course(student_id=student_id, status=status, session=session)


def list_invitations(
    caller: Caller,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[EnrollmentWithCourse, ...]:
    """The caller's pending invitations."""
    if not caller.is_student:
        raise Forbidden("Only students receive invitations")
    return list_for_student(caller, caller.user_id, status=EnrollmentStatus.Pending, session=session)
