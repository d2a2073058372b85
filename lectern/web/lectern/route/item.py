"""Course item routes: assignments, quizzes and their questions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lectern.auth import get_caller
from lectern.core import di
from lectern.lib import NotSet
from lectern.model import CourseItem, CourseItemID, Grade, QuizQuestion, SubmissionWithStudent
from lectern.storage.quiz import OptionCreateParams
from lectern.workflow import Caller, catalog, grading, submission

from ..view import GradeRequest, ItemUpdateRequest, Ok, ok, QuestionCreateRequest, updates

router = APIRouter(prefix="/api/items", tags=["items"])


@router.get("/{item_id}", operation_id="get_item")
@di.inject
def get_item(
    item_id: CourseItemID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[CourseItem]:
    return ok(catalog.get_item(caller, item_id, session=session))


@router.patch("/{item_id}", operation_id="update_item")
@di.inject
def update_item(
    item_id: CourseItemID,
    request: ItemUpdateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[CourseItem]:
    fields = updates(request, nullable=("due_date",))
    return ok(catalog.update_item(caller, item_id, **fields, session=session))


@router.delete("/{item_id}", operation_id="delete_item")
@di.inject
def delete_item(
    item_id: CourseItemID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[None]:
    catalog.delete_item(caller, item_id, session=session)
    return ok(None)


# Questions


@router.get("/{item_id}/questions", operation_id="list_questions")
@di.inject
def list_questions(
    item_id: CourseItemID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[QuizQuestion]]:
    """List a quiz's questions; answers are hidden from students."""
    return ok(list(catalog.list_questions(caller, item_id, session=session)))


@router.post("/{item_id}/questions", operation_id="add_question", status_code=status.HTTP_201_CREATED)
@di.inject
def add_question(
    item_id: CourseItemID,
    request: QuestionCreateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[QuizQuestion]:
    options = [OptionCreateParams(text=o.text, is_correct=o.is_correct) for o in request.options]
    question = catalog.add_question(
        caller,
        item_id,
        kind=request.kind,
        text=request.text,
        points=request.points,
        options=options,
        session=session,
    )
    return ok(question)


# Submissions and grades


@router.get("/{item_id}/submissions", operation_id="list_item_submissions")
@di.inject
def list_submissions(
    item_id: CourseItemID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[SubmissionWithStudent]]:
    return ok(list(submission.list_by_item(caller, item_id, session=session)))


@router.get("/{item_id}/grades", operation_id="list_item_grades")
@di.inject
def list_grades(
    item_id: CourseItemID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[Grade]]:
    return ok(list(grading.item_grades(caller, item_id, session=session)))


@router.post("/{item_id}/grades", operation_id="grade_item")
@di.inject
def grade_item(
    item_id: CourseItemID,
    request: GradeRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Grade]:
    """Record or replace a student's grade on this item."""
    fields = updates(request, nullable=("feedback",))
    feedback = fields.get("feedback", NotSet())
    grade = grading.grade_item(caller, item_id, request.student_id, request.score, feedback=feedback, session=session)
    return ok(grade)
