"""A term in one course, from invitation to final grade."""

from __future__ import annotations

import typing as t

from sqlalchemy.orm import Session

from lectern.model import EnrollmentStatus, ItemKind, QuestionKind, SubmissionStatus, UserWithProfile
from lectern.storage.quiz import OptionCreateParams
from lectern.workflow import Caller, catalog, enrollment, grading, scoring, submission


def test_quiz_from_invitation_to_final_grade(
    db_session: Session,
    professor: UserWithProfile,
    student: UserWithProfile,
    user_factory: t.Callable[..., UserWithProfile],
) -> None:
    prof = Caller(professor.user_id, professor.role)
    sam = Caller(student.user_id, student.role)

    course = catalog.create_course(prof, name="Data Structures", prefix="CSI", number="281", session=db_session)
    quiz = catalog.create_item(
        prof, course.course_id, kind=ItemKind.Quiz, title="Stacks and queues", max_points=10, session=db_session
    )
    mc = catalog.add_question(
        prof,
        quiz.item_id,
        kind=QuestionKind.MultipleChoice,
        text="Which structure is LIFO?",
        points=6,
        options=[
            OptionCreateParams(text="Queue", is_correct=False),
            OptionCreateParams(text="Stack", is_correct=True),
        ],
        session=db_session,
    )
    sa = catalog.add_question(
        prof, quiz.item_id, kind=QuestionKind.ShortAnswer, text="When is a deque useful?", points=4, session=db_session
    )

    # a classmate who drops out gets no final grade
    dropout = user_factory()
    gone = enrollment.direct_enroll(prof, course.course_id, dropout.user_id, session=db_session)
    enrollment.drop(prof, gone.enrollment_id, session=db_session)

    invitation = enrollment.invite(prof, course.course_id, student.email, session=db_session)
    assert catalog.list_courses(sam, session=db_session) == ()
    active = enrollment.accept(sam, invitation.enrollment_id, session=db_session)
    assert active.status is EnrollmentStatus.Active
    assert [c.course_id for c in catalog.list_courses(sam, session=db_session)] == [course.course_id]

    # the student only sees the options, not which one is right
    questions = catalog.list_questions(sam, quiz.item_id, session=db_session)
    stack = next(o for o in questions[0].options if o.text == "Stack")
    assert stack.is_correct is None

    draft = submission.get_or_create(sam, active.enrollment_id, quiz.item_id, session=db_session)
    scoring.record_response(sam, draft.submission_id, mc.question_id, str(stack.option_id), session=db_session)
    submitted = scoring.finish(
        sam, draft.submission_id, {sa.question_id: "For sliding window problems."}, session=db_session
    )
    assert submitted.status is SubmissionStatus.Submitted

    scored = scoring.score(prof, draft.submission_id, session=db_session)
    assert (scored.auto_score, scored.score) == (6, 6)

    graded = scoring.grade_response(prof, draft.submission_id, sa.question_id, 3, session=db_session)
    assert (graded.auto_score, graded.manual_points, graded.score) == (6, 3, 9)

    finals = grading.finalize(prof, course.course_id, session=db_session)
    assert [(f.student_id, f.points_earned, f.points_possible, f.percentage, f.letter) for f in finals] == [
        (student.user_id, 9, 10, 90.0, "A-")
    ]

    mine = grading.final_grades(sam, course.course_id, session=db_session)
    assert [f.letter for f in mine] == ["A-"]
