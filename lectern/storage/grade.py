from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from lectern.core import di
from lectern.lib import NotSet
from lectern.lib.sql import insert
from lectern.lib.util import compact
from lectern.model import CourseID, CourseItemID, FinalGrade, Grade, UserID

from . import Session
from .table import course_items, final_grades, grades


class FinalGradeParams(t.TypedDict):
    student_id: UserID
    points_earned: float
    points_possible: float
    percentage: float | None
    letter: str | None


def get(
    item_id: CourseItemID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Grade | None:
    """Get the grade a student received on an item."""
    stmt = sqla.select(grades.__table__).where(grades.item_id == item_id, grades.student_id == student_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Grade(**row) if row else None


def find(
    *,
    item_id: CourseItemID | None = None,
    student_id: UserID | None = None,
    course_id: CourseID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Grade, ...]:
    """Find grades by item, student, or course (through the graded items)."""
    stmt = sqla.select(grades.__table__)
    if course_id is not None:
        stmt = stmt.join(course_items, course_items.item_id == grades.item_id).where(
            course_items.course_id == course_id
        )
    if item_id is not None:
        stmt = stmt.where(grades.item_id == item_id)
    if student_id is not None:
        stmt = stmt.where(grades.student_id == student_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(Grade(**row) for row in rows)


def upsert(
    item_id: CourseItemID,
    student_id: UserID,
    *,
    score: float,
    feedback: str | None | NotSet = NotSet(),
    manual: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> Grade:
    """Write a student's grade on an item, replacing the score of any earlier grade.

    Feedback is only overwritten when given, so regrading a quiz keeps what
    the professor wrote. `manual` marks a score the professor entered directly.
    """
    values = compact({"score": score, "feedback": feedback, "manual": manual}, NotSet)
    stmt = insert(grades.__table__, session).values(
        item_id=item_id,
        student_id=student_id,
        score=score,
        feedback=values.get("feedback"),
        manual=manual,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["item_id", "student_id"],
        set_={**values, "update_time": sqla.func.now()},
    )
    session.execute(stmt)
    session.flush()
    grade = get(item_id, student_id, session=session)
    assert grade is not None
    return grade


def find_final(
    *,
    course_id: CourseID,
    student_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[FinalGrade, ...]:
    stmt = (
        sqla
        .select(final_grades.__table__)
        .where(final_grades.course_id == course_id)
        .order_by(final_grades.student_id)
    )
    if student_id is not None:
        stmt = stmt.where(final_grades.student_id == student_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(FinalGrade(**row) for row in rows)


def replace_final(
    course_id: CourseID,
    rows: t.Iterable[FinalGradeParams],
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[FinalGrade, ...]:
    """Replace the final grades of a course with the given rows."""
    session.execute(sqla.delete(final_grades).where(final_grades.course_id == course_id))
    values = [{"course_id": course_id, **row} for row in rows]
    if values:
        session.execute(sqla.insert(final_grades.__table__), values)
    session.flush()
    return find_final(course_id=course_id, session=session)
