"""Tests for lectern.workflow.submission."""

from __future__ import annotations

import typing as t

import pytest
from sqlalchemy.orm import Session

from lectern.model import Course, CourseItem, Enrollment, EnrollmentStatus, ItemKind, SubmissionStatus, UserRole, \
    UserWithProfile
from lectern.workflow import Caller, Conflict, Forbidden, NotFound
from lectern.workflow import submission as submission_flow


class TestGetOrCreate(object):
    def test_repeated_calls_return_one_draft(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        student: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        item = item_factory(course)
        caller = Caller(student.user_id, student.role)

        first = submission_flow.get_or_create(caller, enrollment.enrollment_id, item.item_id, session=db_session)
        second = submission_flow.get_or_create(caller, enrollment.enrollment_id, item.item_id, session=db_session)

        assert first.submission_id == second.submission_id
        assert first.status is SubmissionStatus.Draft

    def test_requires_active_enrollment(
        self,
        db_session: Session,
        course: Course,
        student: UserWithProfile,
        enrollment_factory: t.Callable[..., Enrollment],
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        invitation = enrollment_factory(course, student, status=EnrollmentStatus.Pending)
        item = item_factory(course)

        with pytest.raises(Conflict):
            submission_flow.get_or_create(
                Caller(student.user_id, student.role), invitation.enrollment_id, item.item_id, session=db_session
            )

    def test_not_for_another_students_enrollment(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        user_factory: t.Callable[..., UserWithProfile],
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        other = user_factory()
        item = item_factory(course)

        with pytest.raises(Forbidden):
            submission_flow.get_or_create(
                Caller(other.user_id, other.role), enrollment.enrollment_id, item.item_id, session=db_session
            )

    def test_item_must_belong_to_the_course(
        self,
        db_session: Session,
        enrollment: Enrollment,
        student: UserWithProfile,
        course_factory: t.Callable[..., Course],
        user_factory: t.Callable[..., UserWithProfile],
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        elsewhere = item_factory(course_factory(user_factory(role=UserRole.Professor)))

        with pytest.raises(NotFound):
            submission_flow.get_or_create(
                Caller(student.user_id, student.role), enrollment.enrollment_id, elsewhere.item_id, session=db_session
            )


class TestUpdate(object):
    def test_submitting_is_final_for_the_student(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        student: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        item = item_factory(course)
        caller = Caller(student.user_id, student.role)
        draft = submission_flow.get_or_create(caller, enrollment.enrollment_id, item.item_id, session=db_session)

        edited = submission_flow.update(caller, draft.submission_id, content="first draft", session=db_session)
        assert edited.status is SubmissionStatus.Draft
        assert edited.content == "first draft"

        submitted = submission_flow.update(
            caller, draft.submission_id, content="final", status=SubmissionStatus.Submitted, session=db_session
        )
        assert submitted.status is SubmissionStatus.Submitted
        assert submitted.content == "final"
        assert submitted.submit_time is not None

        with pytest.raises(Conflict):
            submission_flow.update(caller, draft.submission_id, content="one more thing", session=db_session)
        with pytest.raises(Conflict):
            submission_flow.update(caller, draft.submission_id, status=SubmissionStatus.Draft, session=db_session)

        current = submission_flow.get(caller, draft.submission_id, session=db_session)
        assert current.content == "final"

    def test_professor_corrects_content_but_not_status(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        student: UserWithProfile,
        professor: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        item = item_factory(course)
        draft = submission_flow.get_or_create(
            Caller(student.user_id, student.role), enrollment.enrollment_id, item.item_id, session=db_session
        )
        caller = Caller(professor.user_id, professor.role)

        with pytest.raises(Forbidden):
            submission_flow.update(caller, draft.submission_id, status=SubmissionStatus.Submitted, session=db_session)

        corrected = submission_flow.update(caller, draft.submission_id, content="fixed typo", session=db_session)
        assert corrected.content == "fixed typo"
        assert corrected.status is SubmissionStatus.Draft

    def test_other_students_cannot_touch_it(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        student: UserWithProfile,
        user_factory: t.Callable[..., UserWithProfile],
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        item = item_factory(course)
        draft = submission_flow.get_or_create(
            Caller(student.user_id, student.role), enrollment.enrollment_id, item.item_id, session=db_session
        )
        other = user_factory()

        with pytest.raises(Forbidden):
            submission_flow.get(Caller(other.user_id, other.role), draft.submission_id, session=db_session)
        with pytest.raises(Forbidden):
            submission_flow.update(
                Caller(other.user_id, other.role), draft.submission_id, content="mine now", session=db_session
            )


class TestListing(object):
    def test_by_item_and_mine(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        student: UserWithProfile,
        professor: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        homework = item_factory(course)
        quiz = item_factory(course, kind=ItemKind.Quiz, title="Quiz 1")
        student_caller = Caller(student.user_id, student.role)
        for item in (homework, quiz):
            submission_flow.get_or_create(student_caller, enrollment.enrollment_id, item.item_id, session=db_session)

        by_item = submission_flow.list_by_item(
            Caller(professor.user_id, professor.role), homework.item_id, session=db_session
        )
        mine = submission_flow.list_mine_by_course(student_caller, course.course_id, session=db_session)

        assert [s.student.user_id for s in by_item] == [student.user_id]
        assert {s.item_id for s in mine} == {homework.item_id, quiz.item_id}
        with pytest.raises(Forbidden):
            submission_flow.list_by_item(student_caller, homework.item_id, session=db_session)
