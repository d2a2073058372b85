"""Quiz responses and automatic scoring.

Only multiple choice questions are scored automatically: the response names
an option, and the question's full points are earned when that option is the
correct one. Short answer questions earn whatever points the professor
assigns by hand. A quiz's item grade is the automatic total plus those manual
points.
"""

from __future__ import annotations

import logging
import typing as t

from lectern.core import di
from lectern.core.provider import TimestampProvider
from lectern.model import CourseItem, CourseItemID, ItemKind, QuestionID, QuestionKind, QuizQuestion, QuizResponse, \
    Submission, SubmissionID, SubmissionStatus
from lectern.storage import grade as grade_storage
from lectern.storage import quiz as quiz_storage
from lectern.storage import Session
from lectern.storage import submission as submission_storage

from .catalog import load_item
from .errors import Conflict, Forbidden, NotFound, ValidationError
from .policy import authorize, Caller, is_owner, is_self
from .submission import authorize_read, load_context, SubmissionContext
from .transaction import unit_of_work

logger = logging.getLogger(__name__)


class ScoreResult(t.NamedTuple):
    submission: Submission
    auto_score: float
    manual_points: float
    # the item grade: auto_score + manual_points capped at the item's max points,
    # or the professor's own score when it was entered by hand
    score: float


def auto_score(questions: t.Iterable[QuizQuestion], responses: t.Mapping[QuestionID, QuizResponse]) -> float:
    """Points earned on multiple choice questions; short answers never count."""
    total = 0.0
    for question in questions:
        if question.kind is not QuestionKind.MultipleChoice:
            continue
        response = responses.get(question.question_id)
        correct = next((o for o in question.options if o.is_correct), None)
        if response is not None and correct is not None and response.response == str(correct.option_id):
            total += question.points
    return total


def manual_points(questions: t.Iterable[QuizQuestion], responses: t.Mapping[QuestionID, QuizResponse]) -> float:
    total = 0.0
    for question in questions:
        response = responses.get(question.question_id)
        if question.kind is QuestionKind.ShortAnswer and response is not None and response.manual_points is not None:
            total += response.manual_points
    return total


def _question_in(item_id: CourseItemID, question_id: QuestionID, session: Session) -> QuizQuestion:
    question = quiz_storage.get_question(question_id, session=session)
    if question is None or question.item_id != item_id:
        raise NotFound("Question not found")
    return question


def _check_response(question: QuizQuestion, response: str) -> None:
    if question.kind is QuestionKind.MultipleChoice and response:
        if response not in {str(o.option_id) for o in question.options}:
            raise ValidationError("Choose one of the question's options")


def _authorize_answer(caller: Caller, ctx: SubmissionContext) -> None:
    authorize(caller, when=is_self(ctx.enrollment.student_id), message="That submission belongs to another student")
    if ctx.submission.status is SubmissionStatus.Submitted:
        raise Forbidden("This quiz has already been submitted")


def record_response(
    caller: Caller,
    submission_id: SubmissionID,
    question_id: QuestionID,
    response: str,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizResponse:
    """Save the caller's answer to one question, replacing any earlier answer.

    Raises:
        Forbidden: the submission is someone else's, or already submitted
        NotFound: the question is not part of the submission's quiz
    """
    with unit_of_work(session):
        ctx = load_context(submission_id, session)
        _authorize_answer(caller, ctx)
        question = _question_in(ctx.submission.item_id, question_id, session)
        _check_response(question, response)
        return quiz_storage.upsert_response(submission_id, question_id, response=response, session=session)


@di.inject
def finish(
    caller: Caller,
    submission_id: SubmissionID,
    responses: t.Mapping[QuestionID, str],
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> Submission:
    """Save the final answers and submit the quiz, all in one transaction.

    Every answer is written before the status changes, and nothing is written
    if any answer is rejected.
    """
    with unit_of_work(session):
        ctx = load_context(submission_id, session)
        _authorize_answer(caller, ctx)
        if load_item(ctx.submission.item_id, session).kind is not ItemKind.Quiz:
            raise ValidationError("Only quizzes can be finished")
        for question_id, response in responses.items():
            question = _question_in(ctx.submission.item_id, question_id, session)
            _check_response(question, response)
            quiz_storage.upsert_response(submission_id, question_id, response=response, session=session)

        submission = submission_storage.transition_to_submitted(submission_id, submit_time=utcnow(), session=session)
        if submission is None:
            raise Forbidden("This quiz has already been submitted")

    logger.info(
        "finished quiz",
        extra={"submission_id": submission_id, "answered": len(responses), "student_id": caller.user_id},
    )
    return submission


def apply_score(
    ctx: SubmissionContext, item: CourseItem, session: Session, *, replace_manual: bool = False
) -> ScoreResult:
    """Score a submitted quiz and write its item grade; no authorization, no transaction.

    A grade the professor entered by hand is kept unless `replace_manual` is
    set; the automatic total is still recorded on the submission.
    """
    if item.kind is not ItemKind.Quiz:
        raise ValidationError("Only quizzes can be scored automatically")
    if ctx.submission.status is not SubmissionStatus.Submitted:
        raise Conflict("Only a submitted quiz can be scored")

    questions = quiz_storage.find_questions(item_id=item.item_id, session=session)
    found = quiz_storage.find_responses(submission_id=ctx.submission.submission_id, session=session)
    responses = {r.question_id: r for r in found}
    automatic = auto_score(questions, responses)
    manual = manual_points(questions, responses)
    score = min(automatic + manual, item.max_points)

    submission = submission_storage.update(ctx.submission.submission_id, auto_score=automatic, session=session)
    grade = grade_storage.get(item.item_id, ctx.enrollment.student_id, session=session)
    kept = False
    if grade is not None and grade.manual and not replace_manual:
        score, kept = grade.score, True
    else:
        grade_storage.upsert(item.item_id, ctx.enrollment.student_id, score=score, session=session)

    logger.info(
        "scored quiz",
        extra={
            "submission_id": submission.submission_id,
            "auto_score": automatic,
            "manual_points": manual,
            "score": score,
            "kept_manual": kept,
        },
    )
    return ScoreResult(submission, automatic, manual, score)


def score(
    caller: Caller,
    submission_id: SubmissionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> ScoreResult:
    """Score a submitted quiz and record the result as the student's grade for it.

    A score the professor entered with `grade_item` is left as it is.

    Raises:
        Forbidden: the caller is not the course's professor
        Conflict: the quiz has not been submitted
        ValidationError: the item is not a quiz
    """
    with unit_of_work(session):
        ctx = load_context(submission_id, session)
        authorize(caller, when=is_owner(ctx.course.professor_id), message="Only the course's professor may do that")
        return apply_score(ctx, load_item(ctx.submission.item_id, session), session)


def grade_response(
    caller: Caller,
    submission_id: SubmissionID,
    question_id: QuestionID,
    points: float,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> ScoreResult:
    """Award points by hand for a short answer, then rescore the quiz.

    An unanswered question can be graded too; it gets a blank response.
    """
    with unit_of_work(session):
        ctx = load_context(submission_id, session)
        authorize(caller, when=is_owner(ctx.course.professor_id), message="Only the course's professor may do that")
        question = _question_in(ctx.submission.item_id, question_id, session)
        if question.kind is not QuestionKind.ShortAnswer:
            raise ValidationError("Only short answer questions are graded by hand")
        if not 0 <= points <= question.points:
            raise ValidationError(f"Points must be between 0 and {question.points:g}")
        if ctx.submission.status is not SubmissionStatus.Submitted:
            raise Conflict("Only a submitted quiz can be graded")

        quiz_storage.upsert_response(submission_id, question_id, manual_points=points, session=session)
        return apply_score(ctx, load_item(ctx.submission.item_id, session), session, replace_manual=True)


def list_responses(
    caller: Caller,
    submission_id: SubmissionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[QuizResponse, ...]:
    with unit_of_work(session):
        authorize_read(caller, load_context(submission_id, session))
        return quiz_storage.find_responses(submission_id=submission_id, session=session)
