"""Tests for lectern.storage.quiz module."""

from __future__ import annotations

import typing as t

from sqlalchemy.orm import Session

from conftest import Quiz
from lectern.model import Course, CourseItem, Enrollment, ItemKind, QuestionKind
from lectern.storage import quiz as quiz_storage
from lectern.storage import submission as submission_storage
from lectern.storage.quiz import OptionCreateParams


class TestQuestions(object):
    def test_options_keep_their_order(self, quiz: Quiz) -> None:
        options = quiz.multiple_choice.options

        assert [o.text for o in options] == ["Queue", "Stack", "Heap"]
        assert [o.position for o in options] == [0, 1, 2]
        assert [o.is_correct for o in options] == [False, True, False]

    def test_questions_are_appended(self, db_session: Session, quiz: Quiz) -> None:
        with db_session.begin():
            questions = quiz_storage.find_questions(item_id=quiz.item.item_id, session=db_session)

        assert [q.question_id for q in questions] == [
            quiz.multiple_choice.question_id,
            quiz.short_answer.question_id,
        ]
        assert [q.position for q in questions] == [0, 1]
        assert questions[1].kind is QuestionKind.ShortAnswer
        assert questions[1].options == []

    def test_delete_question_removes_options(self, db_session: Session, quiz: Quiz) -> None:
        with db_session.begin():
            assert quiz_storage.delete_question(quiz.multiple_choice.question_id, session=db_session)
            remaining = quiz_storage.find_questions(item_id=quiz.item.item_id, session=db_session)

        assert [q.question_id for q in remaining] == [quiz.short_answer.question_id]

    def test_questions_are_per_item(
        self, db_session: Session, course: Course, item_factory: t.Callable[..., CourseItem], quiz: Quiz
    ) -> None:
        other = item_factory(course, kind=ItemKind.Quiz, title="Quiz 2")
        with db_session.begin():
            quiz_storage.create_question(
                item_id=other.item_id,
                kind=QuestionKind.MultipleChoice,
                text="Is 2 prime?",
                points=1,
                options=[
                    OptionCreateParams(text="Yes", is_correct=True),
                    OptionCreateParams(text="No", is_correct=False),
                ],
                session=db_session,
            )
            questions = quiz_storage.find_questions(item_id=other.item_id, session=db_session)

        assert len(questions) == 1
        assert questions[0].position == 0


class TestResponses(object):
    def test_upsert_replaces_response_and_keeps_manual_points(
        self, db_session: Session, quiz: Quiz, enrollment: Enrollment
    ) -> None:
        with db_session.begin():
            submission, _ = submission_storage.get_or_create(
                enrollment_id=enrollment.enrollment_id, item_id=quiz.item.item_id, session=db_session
            )
            sid, qid = submission.submission_id, quiz.short_answer.question_id

            quiz_storage.upsert_response(sid, qid, response="first try", session=db_session)
            quiz_storage.upsert_response(sid, qid, manual_points=3, session=db_session)
            result = quiz_storage.upsert_response(sid, qid, response="second try", session=db_session)

        assert result.response == "second try"
        assert result.manual_points == 3

    def test_manual_points_alone_start_blank(self, db_session: Session, quiz: Quiz, enrollment: Enrollment) -> None:
        with db_session.begin():
            submission, _ = submission_storage.get_or_create(
                enrollment_id=enrollment.enrollment_id, item_id=quiz.item.item_id, session=db_session
            )
            result = quiz_storage.upsert_response(
                submission.submission_id, quiz.short_answer.question_id, manual_points=2, session=db_session
            )
            everything = quiz_storage.find_responses(submission_id=submission.submission_id, session=db_session)

        assert result.response == ""
        assert result.manual_points == 2
        assert len(everything) == 1
