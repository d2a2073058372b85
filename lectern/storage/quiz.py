from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from lectern.core import di
from lectern.lib import NotSet
from lectern.lib.sql import insert
from lectern.lib.util import compact
from lectern.model import CourseItemID, OptionID, QuestionID, QuestionKind, QuizOption, QuizQuestion, QuizResponse, \
    SubmissionID

from . import Session
from .table import quiz_options, quiz_questions, quiz_responses


class OptionCreateParams(t.TypedDict):
    text: str
    is_correct: bool


def _options(question_ids: t.Sequence[QuestionID], session: Session) -> dict[QuestionID, list[QuizOption]]:
    by_question: dict[QuestionID, list[QuizOption]] = {q: [] for q in question_ids}
    if not question_ids:
        return by_question
    stmt = (
        sqla
        .select(quiz_options.__table__)
        .where(quiz_options.question_id.in_(question_ids))
        .order_by(quiz_options.position)
    )
    for row in session.execute(stmt).mappings().all():
        option = QuizOption(**row)
        by_question[option.question_id].append(option)
    return by_question


def get_question(
    question_id: QuestionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizQuestion | None:
    """Get a question with its ordered options."""
    stmt = sqla.select(quiz_questions.__table__).where(quiz_questions.question_id == question_id)
    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None
    return QuizQuestion(**row, options=_options([question_id], session)[question_id])


def find_questions(
    *,
    item_id: CourseItemID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[QuizQuestion, ...]:
    """Find the questions of a quiz item in order, each with its options."""
    stmt = (
        sqla
        .select(quiz_questions.__table__)
        .where(quiz_questions.item_id == item_id)
        .order_by(quiz_questions.position, quiz_questions.create_time)
    )
    rows = session.execute(stmt).mappings().all()
    options = _options([row["question_id"] for row in rows], session)
    return tuple(QuizQuestion(**row, options=options[row["question_id"]]) for row in rows)


def create_question(
    *,
    item_id: CourseItemID,
    kind: QuestionKind,
    text: str,
    points: float,
    options: t.Sequence[OptionCreateParams] = (),
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizQuestion:
    """Append a question, and its options in the given order, to a quiz item."""
    count = session.execute(
        sqla.select(sqla.func.count()).select_from(quiz_questions).where(quiz_questions.item_id == item_id)
    ).scalar_one()

    question_id = QuestionID()
    session.execute(
        sqla.insert(quiz_questions).values(
            question_id=question_id,
            item_id=item_id,
            kind=kind.value,
            text=text,
            points=points,
            position=count,
        )
    )
    for position, option in enumerate(options):
        session.execute(
            sqla.insert(quiz_options).values(
                option_id=OptionID(),
                question_id=question_id,
                text=option["text"],
                is_correct=option["is_correct"],
                position=position,
            )
        )
    session.flush()
    result = get_question(question_id, session=session)
    assert result is not None
    return result


def delete_question(
    question_id: QuestionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    result = session.execute(sqla.delete(quiz_questions).where(quiz_questions.question_id == question_id))
    return bool(result.rowcount)  # pyright: ignore[reportUnknownArgumentType, reportAttributeAccessIssue]


def get_response(
    submission_id: SubmissionID,
    question_id: QuestionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizResponse | None:
    stmt = sqla.select(quiz_responses.__table__).where(
        quiz_responses.submission_id == submission_id,
        quiz_responses.question_id == question_id,
    )
    row = session.execute(stmt).mappings().one_or_none()
    return QuizResponse(**row) if row else None


def find_responses(
    *,
    submission_id: SubmissionID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[QuizResponse, ...]:
    stmt = sqla.select(quiz_responses.__table__).where(quiz_responses.submission_id == submission_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(QuizResponse(**row) for row in rows)


def upsert_response(
    submission_id: SubmissionID,
    question_id: QuestionID,
    *,
    response: str | NotSet = NotSet(),
    manual_points: float | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizResponse:
    """Write the response to a question, overwriting any earlier one.

    Only the given fields are overwritten on conflict; a response created
    solely to hold manual points starts out blank.
    """
    values = compact({"response": response, "manual_points": manual_points}, NotSet)
    stmt = insert(quiz_responses.__table__, session).values(
        submission_id=submission_id,
        question_id=question_id,
        response=values.get("response", ""),
        manual_points=values.get("manual_points"),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["submission_id", "question_id"],
        set_={**values, "update_time": sqla.func.now()},
    )
    session.execute(stmt)
    session.flush()
    result = get_response(submission_id, question_id, session=session)
    assert result is not None
    return result
