"""Item grades and final course grades.

A final grade is points earned over points possible across the items a
student has been graded on. Items without a grade are left out of the
denominator rather than counted as zero.
"""

from __future__ import annotations

import logging
import typing as t

from lectern.core import di
from lectern.lib import NotSet
from lectern.model import Course, CourseID, CourseItemID, EnrollmentStatus, FinalGrade, Grade, ItemKind, \
    SubmissionStatus, UserID
from lectern.storage import enrollment as enrollment_storage
from lectern.storage import grade as grade_storage
from lectern.storage import item as item_storage
from lectern.storage import Session
from lectern.storage import submission as submission_storage
from lectern.storage.grade import FinalGradeParams

from . import scoring
from .catalog import load_course, load_item
from .errors import NotFound, ValidationError
from .policy import any_of, authorize, Caller, is_admin, is_owner, is_self
from .submission import SubmissionContext
from .transaction import unit_of_work

logger = logging.getLogger(__name__)

# lower bound of each letter, checked top down
LetterScale: t.Final[tuple[tuple[float, str], ...]] = (
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
)

# enrollments that receive a final grade
GradedStatuses: t.Final = (EnrollmentStatus.Active, EnrollmentStatus.Completed)


def letter_for(percentage: float | None) -> str | None:
    if percentage is None:
        return None
    for bound, letter in LetterScale:
        if percentage >= bound:
            return letter
    return "F"


def compute_final(
    student_id: UserID, grades: t.Iterable[Grade], max_points: t.Mapping[CourseItemID, float]
) -> FinalGradeParams:
    earned = possible = 0.0
    for grade in grades:
        earned += grade.score
        possible += max_points[grade.item_id]
    percentage = round(earned / possible * 100, 2) if possible > 0 else None
    return {
        "student_id": student_id,
        "points_earned": earned,
        "points_possible": possible,
        "percentage": percentage,
        "letter": letter_for(percentage),
    }


def _require_owner(caller: Caller, course: Course) -> None:
    authorize(caller, when=is_owner(course.professor_id), message="Only the course's professor may do that")


def grade_item(
    caller: Caller,
    item_id: CourseItemID,
    student_id: UserID,
    score: float,
    *,
    feedback: str | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> Grade:
    """Record a student's score on an item, replacing any earlier one.

    On a quiz this score stands in for the automatic one: later scoring and
    finalizing keep it, until a short answer is graded by hand.

    Raises:
        Forbidden: the caller is not the course's professor
        NotFound: the student has no submission for the item
        ValidationError: the score is negative or above the item's max points
    """
    with unit_of_work(session):
        item = load_item(item_id, session)
        _require_owner(caller, load_course(item.course_id, session))
        if not 0 <= score <= item.max_points:
            raise ValidationError(f"Score must be between 0 and {item.max_points:g}")

        enrollment = enrollment_storage.get_for(course_id=item.course_id, student_id=student_id, session=session)
        if enrollment is None or not submission_storage.find(
            enrollment_id=enrollment.enrollment_id, item_id=item_id, session=session
        ):
            raise NotFound("That student has no submission for this item")
        grade = grade_storage.upsert(
            item_id, student_id, score=score, feedback=feedback, manual=True, session=session
        )

    logger.info("graded item", extra={"item_id": item_id, "student_id": student_id, "score": score})
    return grade


def student_grades(
    caller: Caller,
    course_id: CourseID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Grade, ...]:
    """A student's item grades in a course, for the student or the course's professor."""
    with unit_of_work(session):
        course = load_course(course_id, session)
        authorize(
            caller,
            when=any_of(is_self(student_id), is_owner(course.professor_id), is_admin),
            message="You may only view your own grades",
        )
        return grade_storage.find(course_id=course_id, student_id=student_id, session=session)


def item_grades(
    caller: Caller,
    item_id: CourseItemID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Grade, ...]:
    with unit_of_work(session):
        item = load_item(item_id, session)
        _require_owner(caller, load_course(item.course_id, session))
        return grade_storage.find(item_id=item_id, session=session)


def _score_pending_quizzes(course: Course, session: Session) -> int:
    """Score every submitted quiz in the course that has never been scored."""
    scored = 0
    for item in item_storage.find(course_id=course.course_id, kind=ItemKind.Quiz, session=session):
        submitted = submission_storage.find(item_id=item.item_id, status=SubmissionStatus.Submitted, session=session)
        for submission in submitted:
            if submission.auto_score is not None:
                continue
            enrollment = enrollment_storage.get(submission.enrollment_id, session=session)
            assert enrollment is not None
            scoring.apply_score(SubmissionContext(submission, enrollment, course), item, session)
            scored += 1
    return scored


def finalize(
    caller: Caller,
    course_id: CourseID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[FinalGrade, ...]:
    """Recompute every final grade in the course from its item grades.

    Submitted quizzes that were never scored are scored first, without touching
    a grade the professor entered by hand. Each run starts from the item grades
    alone, so running it again without grade changes writes the same rows.
    """
    with unit_of_work(session):
        course = load_course(course_id, session)
        _require_owner(caller, course)
        scored = _score_pending_quizzes(course, session)

        max_points = {i.item_id: i.max_points for i in item_storage.find(course_id=course_id, session=session)}
        by_student: dict[UserID, list[Grade]] = {}
        for grade in grade_storage.find(course_id=course_id, session=session):
            by_student.setdefault(grade.student_id, []).append(grade)

        enrollments = enrollment_storage.find(course_id=course_id, status=GradedStatuses, session=session)
        rows = [
            compute_final(e.student_id, by_student.get(e.student_id, ()), max_points)
            for e in sorted(enrollments, key=lambda e: e.student_id)
        ]
        finals = grade_storage.replace_final(course_id, rows, session=session)

    logger.info(
        "finalized course",
        extra={"course_id": course_id, "students": len(rows), "quizzes_scored": scored},
    )
    return finals


def final_grades(
    caller: Caller,
    course_id: CourseID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[FinalGrade, ...]:
    """Final grades of a course; a student only sees their own."""
    with unit_of_work(session):
        course = load_course(course_id, session)
        if caller.is_student:
            return grade_storage.find_final(course_id=course_id, student_id=caller.user_id, session=session)
        authorize(
            caller,
            when=any_of(is_owner(course.professor_id), is_admin),
            message="Only the course's professor may view final grades",
        )
        return grade_storage.find_final(course_id=course_id, session=session)
