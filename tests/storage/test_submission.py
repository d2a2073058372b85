"""Tests for lectern.storage.submission module."""

from __future__ import annotations

import datetime
import typing as t

import pytest
from sqlalchemy.orm import Session

from lectern.model import Course, CourseItem, Enrollment, SubmissionID, SubmissionStatus
from lectern.storage import submission as submission_storage


class TestGetOrCreate(object):
    def test_first_call_creates_draft(
        self,
        db_session: Session,
        enrollment: Enrollment,
        item_factory: t.Callable[..., CourseItem],
        course: Course,
    ) -> None:
        item = item_factory(course)

        with db_session.begin():
            submission, created = submission_storage.get_or_create(
                enrollment_id=enrollment.enrollment_id, item_id=item.item_id, session=db_session
            )

        assert created
        assert submission.status is SubmissionStatus.Draft
        assert submission.content == ""
        assert submission.submit_time is None
        assert submission.auto_score is None

    def test_second_call_returns_same_row(
        self,
        db_session: Session,
        enrollment: Enrollment,
        item_factory: t.Callable[..., CourseItem],
        course: Course,
    ) -> None:
        item = item_factory(course)

        with db_session.begin():
            first, _ = submission_storage.get_or_create(
                enrollment_id=enrollment.enrollment_id, item_id=item.item_id, session=db_session
            )
        with db_session.begin():
            second, created = submission_storage.get_or_create(
                enrollment_id=enrollment.enrollment_id, item_id=item.item_id, session=db_session
            )
            everything = submission_storage.find(item_id=item.item_id, session=db_session)

        assert not created
        assert second.submission_id == first.submission_id
        assert len(everything) == 1


class TestTransition(object):
    def test_draft_becomes_submitted_once(
        self,
        db_session: Session,
        enrollment: Enrollment,
        item_factory: t.Callable[..., CourseItem],
        course: Course,
    ) -> None:
        item = item_factory(course)
        now = datetime.datetime(2026, 10, 1, 12, 0, tzinfo=datetime.UTC)

        with db_session.begin():
            draft, _ = submission_storage.get_or_create(
                enrollment_id=enrollment.enrollment_id, item_id=item.item_id, session=db_session
            )
            submitted = submission_storage.transition_to_submitted(
                draft.submission_id, submit_time=now, session=db_session
            )
            again = submission_storage.transition_to_submitted(
                draft.submission_id, submit_time=now + datetime.timedelta(hours=1), session=db_session
            )

        assert submitted is not None
        assert submitted.status is SubmissionStatus.Submitted
        assert submitted.submit_time is not None
        assert submitted.submit_time.replace(tzinfo=datetime.UTC) == now
        assert again is None


class TestUpdate(object):
    def test_update_content_and_score(
        self,
        db_session: Session,
        enrollment: Enrollment,
        item_factory: t.Callable[..., CourseItem],
        course: Course,
    ) -> None:
        item = item_factory(course)

        with db_session.begin():
            draft, _ = submission_storage.get_or_create(
                enrollment_id=enrollment.enrollment_id, item_id=item.item_id, session=db_session
            )
            updated = submission_storage.update(draft.submission_id, content="my essay", session=db_session)
            scored = submission_storage.update(draft.submission_id, auto_score=4.5, session=db_session)

        assert updated.content == "my essay"
        assert scored.content == "my essay"
        assert scored.auto_score == 4.5

    def test_update_nonexistent_raises(self, db_session: Session) -> None:
        with db_session.begin():
            with pytest.raises(KeyError):
                submission_storage.update(SubmissionID(), content="x", session=db_session)


class TestFind(object):
    def test_find_with_student_and_for_student(
        self,
        db_session: Session,
        enrollment: Enrollment,
        item_factory: t.Callable[..., CourseItem],
        course: Course,
    ) -> None:
        first = item_factory(course, title="Homework 1")
        second = item_factory(course, title="Homework 2")

        with db_session.begin():
            for item in (first, second):
                submission_storage.get_or_create(
                    enrollment_id=enrollment.enrollment_id, item_id=item.item_id, session=db_session
                )
            by_item = submission_storage.find_with_student(item_id=first.item_id, session=db_session)
            mine = submission_storage.find_for_student(
                course_id=course.course_id, student_id=enrollment.student_id, session=db_session
            )

        assert len(by_item) == 1
        assert by_item[0].student.user_id == enrollment.student_id
        assert [s.item_id for s in mine] == [first.item_id, second.item_id]
