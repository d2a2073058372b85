"""Submission lifecycle: one submission per (enrollment, item), draft until submitted."""

from __future__ import annotations

import logging
import typing as t

from lectern.core import di
from lectern.core.provider import TimestampProvider
from lectern.lib import NotSet
from lectern.model import Course, CourseID, CourseItemID, Enrollment, EnrollmentID, EnrollmentStatus, Submission, \
    SubmissionID, SubmissionStatus, SubmissionWithStudent, UserRole
from lectern.storage import enrollment as enrollment_storage
from lectern.storage import Session
from lectern.storage import submission as submission_storage

from .catalog import load_course, load_item
from .errors import Conflict, Forbidden, NotFound
from .policy import any_of, authorize, Caller, is_admin, is_owner, is_self
from .transaction import unit_of_work

logger = logging.getLogger(__name__)


class SubmissionContext(t.NamedTuple):
    submission: Submission
    enrollment: Enrollment
    course: Course


def load_context(submission_id: SubmissionID, session: Session) -> SubmissionContext:
    submission = submission_storage.get(submission_id, session=session)
    if submission is None:
        raise NotFound("Submission not found")
    enrollment = enrollment_storage.get(submission.enrollment_id, session=session)
    assert enrollment is not None
    return SubmissionContext(submission, enrollment, load_course(enrollment.course_id, session))


def authorize_read(caller: Caller, ctx: SubmissionContext) -> None:
    """The submitting student, the course's professor, or an admin."""
    authorize(
        caller,
        when=any_of(is_self(ctx.enrollment.student_id), is_owner(ctx.course.professor_id), is_admin),
        message="You may not view that submission",
    )


def get_or_create(
    caller: Caller,
    enrollment_id: EnrollmentID,
    item_id: CourseItemID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission:
    """The caller's submission for an item, created as an empty draft on first touch.

    Safe to call repeatedly and concurrently: every call for the same pair
    returns the same submission.
    """
    with unit_of_work(session):
        enrollment = enrollment_storage.get(enrollment_id, session=session)
        if enrollment is None:
            raise NotFound("Enrollment not found")
        authorize(caller, when=is_self(enrollment.student_id), message="That enrollment belongs to another student")
        if enrollment.status is not EnrollmentStatus.Active:
            raise Conflict("Your enrollment in this course is not active")
        item = load_item(item_id, session)
        if item.course_id != enrollment.course_id:
            raise NotFound("Course item not found")
        submission, created = submission_storage.get_or_create(
            enrollment_id=enrollment_id, item_id=item_id, session=session
        )

    if created:
        logger.info(
            "started submission",
            extra={"submission_id": submission.submission_id, "item_id": item_id, "student_id": caller.user_id},
        )
    return submission


def get(
    caller: Caller,
    submission_id: SubmissionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission:
    with unit_of_work(session):
        ctx = load_context(submission_id, session)
        authorize_read(caller, ctx)
    return ctx.submission


@di.inject
def update(
    caller: Caller,
    submission_id: SubmissionID,
    *,
    content: str | NotSet = NotSet(),
    status: SubmissionStatus | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> Submission:
    """Edit a submission's content and optionally submit it.

    A student may change only their own draft; submitting is final. The
    course's professor may correct the content at any time but cannot change
    the status.

    Raises:
        Forbidden: the caller neither owns the submission nor teaches the course
        Conflict: the submission is already submitted, or a move back to draft
    """
    with unit_of_work(session):
        submission, enrollment, course = load_context(submission_id, session)
        authorize(
            caller,
            when=any_of(is_self(enrollment.student_id), is_owner(course.professor_id)),
            message="You may not change that submission",
        )

        if status is SubmissionStatus.Draft and submission.status is SubmissionStatus.Submitted:
            raise Conflict("A submitted submission cannot return to draft")
        if caller.role is UserRole.Professor:
            if not isinstance(status, NotSet) and status is not submission.status:
                raise Forbidden("Only the student may submit their work")
        elif submission.status is SubmissionStatus.Submitted:
            raise Conflict("This has already been submitted and can no longer be changed")

        submission = submission_storage.update(submission_id, content=content, session=session)
        if status is SubmissionStatus.Submitted and submission.status is SubmissionStatus.Draft:
            submitted = submission_storage.transition_to_submitted(submission_id, submit_time=utcnow(), session=session)
            if submitted is None:
                raise Conflict("This has already been submitted and can no longer be changed")
            submission = submitted
            logger.info(
                "submitted",
                extra={"submission_id": submission_id, "item_id": submission.item_id, "student_id": caller.user_id},
            )

    return submission


def list_by_item(
    caller: Caller,
    item_id: CourseItemID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[SubmissionWithStudent, ...]:
    """Every submission for an item, with the submitting student."""
    with unit_of_work(session):
        item = load_item(item_id, session)
        course = load_course(item.course_id, session)
        authorize(caller, when=is_owner(course.professor_id), message="Only the course's professor may do that")
        return submission_storage.find_with_student(item_id=item_id, session=session)


def list_mine_by_course(
    caller: Caller,
    course_id: CourseID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Submission, ...]:
    """The caller's own submissions across the course's items."""
    authorize(caller, roles=[UserRole.Student], message="Only students have submissions")
    with unit_of_work(session):
        load_course(course_id, session)
        return submission_storage.find_for_student(course_id=course_id, student_id=caller.user_id, session=session)
