"""Submission routes: drafting, submitting and scoring work."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lectern.auth import get_caller
from lectern.core import di
from lectern.model import QuestionID, QuizResponse, Submission, SubmissionID
from lectern.workflow import Caller, scoring, submission

from ..view import FinishRequest, Ok, ok, ResponseGradeRequest, ResponseRequest, ScoreResponse, \
    SubmissionStartRequest, SubmissionUpdateRequest, updates

router = APIRouter(prefix="/api/submissions", tags=["submissions"])


def _score_response(result: scoring.ScoreResult) -> ScoreResponse:
    return ScoreResponse(
        submission=result.submission,
        auto_score=result.auto_score,
        manual_points=result.manual_points,
        score=result.score,
    )


@router.post("", operation_id="start_submission")
@di.inject
def start_submission(
    request: SubmissionStartRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Submission]:
    """Get the caller's submission for an item, creating a draft if there is none."""
    return ok(submission.get_or_create(caller, request.enrollment_id, request.item_id, session=session))


@router.get("/{submission_id}", operation_id="get_submission")
@di.inject
def get_submission(
    submission_id: SubmissionID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Submission]:
    return ok(submission.get(caller, submission_id, session=session))


@router.patch("/{submission_id}", operation_id="update_submission")
@di.inject
def update_submission(
    submission_id: SubmissionID,
    request: SubmissionUpdateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Submission]:
    """Edit a draft, or submit it by setting its status."""
    return ok(submission.update(caller, submission_id, **updates(request), session=session))


# Quiz answers


@router.get("/{submission_id}/responses", operation_id="list_responses")
@di.inject
def list_responses(
    submission_id: SubmissionID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[QuizResponse]]:
    return ok(list(scoring.list_responses(caller, submission_id, session=session)))


@router.put("/{submission_id}/responses/{question_id}", operation_id="record_response")
@di.inject
def record_response(
    submission_id: SubmissionID,
    question_id: QuestionID,
    request: ResponseRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[QuizResponse]:
    return ok(scoring.record_response(caller, submission_id, question_id, request.response, session=session))


@router.post("/{submission_id}/finish", operation_id="finish_quiz")
@di.inject
def finish_quiz(
    submission_id: SubmissionID,
    request: FinishRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Submission]:
    """Record the final answers and submit the quiz in one step."""
    return ok(scoring.finish(caller, submission_id, request.responses, session=session))


@router.post("/{submission_id}/score", operation_id="score_submission")
@di.inject
def score_submission(
    submission_id: SubmissionID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[ScoreResponse]:
    return ok(_score_response(scoring.score(caller, submission_id, session=session)))


@router.put("/{submission_id}/responses/{question_id}/points", operation_id="grade_response")
@di.inject
def grade_response(
    submission_id: SubmissionID,
    question_id: QuestionID,
    request: ResponseGradeRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[ScoreResponse]:
    """Award points to a short answer and rescore the quiz."""
    result = scoring.grade_response(caller, submission_id, question_id, request.points, session=session)
    return ok(_score_response(result))
