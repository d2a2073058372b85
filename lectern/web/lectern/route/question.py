"""Quiz question routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lectern.auth import get_caller
from lectern.core import di
from lectern.model import QuestionID
from lectern.workflow import Caller, catalog

from ..view import Ok, ok

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.delete("/{question_id}", operation_id="delete_question")
@di.inject
def delete_question(
    question_id: QuestionID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[None]:
    catalog.delete_question(caller, question_id, session=session)
    return ok(None)
