from __future__ import annotations

import datetime

import sqlalchemy as sqla

from lectern.core import di
from lectern.lib import NotSet
from lectern.lib.sql import insert
from lectern.lib.util import compact
from lectern.model import CourseID, CourseItemID, EnrollmentID, Submission, SubmissionID, SubmissionStatus, \
    SubmissionWithStudent, UserID

from . import Session
from .table import course_items, enrollments, profiles, submissions, users
from .user import person_columns, person_from_row


def get(
    submission_id: SubmissionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission | None:
    """Get a submission by ID."""
    stmt = sqla.select(submissions.__table__).where(submissions.submission_id == submission_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Submission(**row) if row else None


def find(
    *,
    enrollment_id: EnrollmentID | None = None,
    item_id: CourseItemID | None = None,
    status: SubmissionStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Submission, ...]:
    """Find submissions matching criteria."""
    stmt = sqla.select(submissions.__table__).order_by(submissions.create_time)
    if enrollment_id is not None:
        stmt = stmt.where(submissions.enrollment_id == enrollment_id)
    if item_id is not None:
        stmt = stmt.where(submissions.item_id == item_id)
    if status is not None:
        stmt = stmt.where(submissions.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(Submission(**row) for row in rows)


def find_with_student(
    *,
    item_id: CourseItemID,
    status: SubmissionStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[SubmissionWithStudent, ...]:
    """Submissions for an item, each joined with the submitting student."""
    stmt = (
        sqla
        .select(submissions.__table__, *person_columns())
        .join(enrollments, enrollments.enrollment_id == submissions.enrollment_id)
        .join(users, users.user_id == enrollments.student_id)
        .join(profiles, profiles.profile_id == users.profile_id)
        .where(submissions.item_id == item_id)
        .order_by(profiles.last_name, profiles.first_name)
    )
    if status is not None:
        stmt = stmt.where(submissions.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(
        SubmissionWithStudent(**{k: row[k] for k in submissions.__table__.columns.keys()}, student=person_from_row(row))
        for row in rows
    )


def find_for_student(
    *,
    course_id: CourseID,
    student_id: UserID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Submission, ...]:
    """A student's submissions across all items of a course."""
    stmt = (
        sqla
        .select(submissions.__table__)
        .join(enrollments, enrollments.enrollment_id == submissions.enrollment_id)
        .join(course_items, course_items.item_id == submissions.item_id)
        .where(enrollments.course_id == course_id, enrollments.student_id == student_id)
        .order_by(course_items.due_date, course_items.title)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(Submission(**row) for row in rows)


def get_or_create(
    *,
    enrollment_id: EnrollmentID,
    item_id: CourseItemID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Submission, bool]:
    """Get the submission for an (enrollment, item) pair, creating a draft if there is none.

    The insert yields to the table's unique constraint, so concurrent callers
    for the same pair all end up with the one row.

    Returns:
        The submission, and whether this call created it
    """
    submission_id = SubmissionID()
    stmt = (
        insert(submissions.__table__, session)
        .values(
            submission_id=submission_id,
            enrollment_id=enrollment_id,
            item_id=item_id,
            content="",
            status=SubmissionStatus.Draft.value,
        )
        .on_conflict_do_nothing(index_elements=["enrollment_id", "item_id"])
    )
    session.execute(stmt)
    session.flush()

    select = sqla.select(submissions.__table__).where(
        submissions.enrollment_id == enrollment_id,
        submissions.item_id == item_id,
    )
    submission = Submission(**session.execute(select).mappings().one())
    return submission, submission.submission_id == submission_id


def update(
    submission_id: SubmissionID,
    *,
    content: str | NotSet = NotSet(),
    auto_score: float | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission:
    """Update a submission's content or automatic score.

    Status changes go through transition_to_submitted().

    Raises:
        KeyError: If submission_id does not correspond to a submission
    """
    values = compact({"content": content, "auto_score": auto_score}, NotSet)
    if not values:
        values = {"submission_id": submission_id}

    stmt = sqla.update(submissions).where(submissions.submission_id == submission_id).values(**values)
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Submission {submission_id} not found")

    session.flush()
    submission = get(submission_id, session=session)
    assert submission is not None
    return submission


def transition_to_submitted(
    submission_id: SubmissionID,
    *,
    submit_time: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission | None:
    """Mark a draft as submitted.

    Returns:
        The submitted submission, or None if it was no longer a draft
    """
    stmt = (
        sqla
        .update(submissions)
        .where(
            submissions.submission_id == submission_id,
            submissions.status == SubmissionStatus.Draft.value,
        )
        .values(status=SubmissionStatus.Submitted.value, submit_time=submit_time)
    )
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        return None
    session.flush()
    return get(submission_id, session=session)
