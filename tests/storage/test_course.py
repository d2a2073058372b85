"""Tests for lectern.storage.course and lectern.storage.item."""

from __future__ import annotations

import datetime
import typing as t

from sqlalchemy.orm import Session

from lectern.model import Course, CourseID, CourseItem, Enrollment, EnrollmentStatus, ItemKind, UserRole, \
    UserWithProfile
from lectern.storage import course as course_storage
from lectern.storage import item as item_storage


class TestCourse(object):
    def test_create_and_get(self, db_session: Session, professor: UserWithProfile) -> None:
        with db_session.begin():
            created = course_storage.create(
                professor_id=professor.user_id,
                name="Algorithms",
                prefix="CSI",
                number="385",
                room="Joyce 210",
                start_time="10:00",
                end_time="11:15",
                days="TR",
                session=db_session,
            )

        with db_session.begin():
            found = course_storage.get(created.course_id, session=db_session)

        assert found == created
        assert found.room == "Joyce 210"
        assert found.days == "TR"

    def test_get_nonexistent(self, db_session: Session) -> None:
        with db_session.begin():
            assert course_storage.get(CourseID(), session=db_session) is None

    def test_find_by_professor_sorted(
        self,
        db_session: Session,
        course_factory: t.Callable[..., Course],
        professor: UserWithProfile,
        user_factory: t.Callable[..., UserWithProfile],
    ) -> None:
        later = course_factory(professor, prefix="CSI", number="340")
        earlier = course_factory(professor, prefix="CSI", number="140")
        course_factory(user_factory(role=UserRole.Professor))

        with db_session.begin():
            found = course_storage.find(professor_id=professor.user_id, session=db_session)

        assert [c.course_id for c in found] == [earlier.course_id, later.course_id]

    def test_find_by_student_and_status(
        self,
        db_session: Session,
        course_factory: t.Callable[..., Course],
        professor: UserWithProfile,
        student: UserWithProfile,
        enrollment_factory: t.Callable[..., Enrollment],
    ) -> None:
        active = course_factory(professor, number="101")
        pending = course_factory(professor, number="102")
        enrollment_factory(active, student)
        enrollment_factory(pending, student, status=EnrollmentStatus.Pending)

        with db_session.begin():
            taking = course_storage.find(
                student_id=student.user_id, enrollment_status=[EnrollmentStatus.Active], session=db_session
            )
            everything = course_storage.find(student_id=student.user_id, session=db_session)

        assert [c.course_id for c in taking] == [active.course_id]
        assert {c.course_id for c in everything} == {active.course_id, pending.course_id}

    def test_update_clears_nullable_fields(self, db_session: Session, course: Course) -> None:
        with db_session.begin():
            course_storage.update(course.course_id, room="Foley 101", session=db_session)
        with db_session.begin():
            updated = course_storage.update(course.course_id, name="Data Structures II", room=None, session=db_session)

        assert updated.name == "Data Structures II"
        assert updated.room is None
        assert updated.prefix == "CSI"

    def test_delete_cascades_to_items(
        self, db_session: Session, course: Course, item_factory: t.Callable[..., CourseItem]
    ) -> None:
        item = item_factory(course)

        with db_session.begin():
            assert course_storage.delete(course.course_id, session=db_session)

        with db_session.begin():
            assert item_storage.get(item.item_id, session=db_session) is None


class TestItem(object):
    def test_create_with_due_date(self, db_session: Session, course: Course) -> None:
        due = datetime.datetime(2026, 11, 2, 23, 59, tzinfo=datetime.UTC)
        with db_session.begin():
            item = item_storage.create(
                course_id=course.course_id,
                kind=ItemKind.Assignment,
                title="Linked lists",
                max_points=25,
                due_date=due,
                content="Implement a doubly linked list.",
                session=db_session,
            )

        assert item.kind is ItemKind.Assignment
        assert item.max_points == 25
        assert item.due_date is not None
        assert item.due_date.replace(tzinfo=datetime.UTC) == due

    def test_find_by_kind(
        self, db_session: Session, course: Course, item_factory: t.Callable[..., CourseItem]
    ) -> None:
        item_factory(course, title="Homework 1")
        quiz = item_factory(course, kind=ItemKind.Quiz, title="Quiz 1")

        with db_session.begin():
            quizzes = item_storage.find(course_id=course.course_id, kind=ItemKind.Quiz, session=db_session)
            everything = item_storage.find(course_id=course.course_id, session=db_session)

        assert [i.item_id for i in quizzes] == [quiz.item_id]
        assert len(everything) == 2

    def test_update_clears_due_date(
        self, db_session: Session, course: Course, item_factory: t.Callable[..., CourseItem]
    ) -> None:
        item = item_factory(course)
        with db_session.begin():
            item_storage.update(item.item_id, due_date=datetime.datetime.now(datetime.UTC), session=db_session)
        with db_session.begin():
            updated = item_storage.update(item.item_id, due_date=None, max_points=20, session=db_session)

        assert updated.due_date is None
        assert updated.max_points == 20
