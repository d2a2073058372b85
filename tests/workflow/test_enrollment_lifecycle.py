"""Tests for lectern.workflow.enrollment: invitations and the enrollment state machine."""

from __future__ import annotations

import typing as t

import pytest
from sqlalchemy.orm import Session

from lectern.model import Course, Enrollment, EnrollmentID, EnrollmentStatus, UserRole, UserWithProfile
from lectern.workflow import Caller, Conflict, Forbidden, NotFound, ValidationError
from lectern.workflow import enrollment as enrollment_flow


class TestInvite(object):
    def test_invite_creates_pending_enrollment(
        self, db_session: Session, course: Course, professor: UserWithProfile, student: UserWithProfile
    ) -> None:
        invitation = enrollment_flow.invite(
            Caller(professor.user_id, professor.role),
            course.course_id,
            " SAM@mymail.champlain.edu",
            session=db_session,
        )

        assert invitation.status is EnrollmentStatus.Pending
        assert invitation.student_id == student.user_id

        pending = enrollment_flow.list_invitations(Caller(student.user_id, student.role), session=db_session)
        assert [e.enrollment_id for e in pending] == [invitation.enrollment_id]
        assert pending[0].course.name == "Data Structures"
        assert pending[0].professor.email == professor.email

    def test_only_professors_invite(self, db_session: Session, course: Course, student: UserWithProfile) -> None:
        with pytest.raises(Forbidden):
            enrollment_flow.invite(
                Caller(student.user_id, student.role), course.course_id, student.email, session=db_session
            )

    def test_cannot_invite_into_anothers_course(
        self,
        db_session: Session,
        course: Course,
        student: UserWithProfile,
        user_factory: t.Callable[..., UserWithProfile],
    ) -> None:
        other = user_factory(role=UserRole.Professor)

        with pytest.raises(NotFound):
            enrollment_flow.invite(
                Caller(other.user_id, other.role), course.course_id, student.email, session=db_session
            )

    def test_unknown_email(self, db_session: Session, course: Course, professor: UserWithProfile) -> None:
        with pytest.raises(NotFound):
            enrollment_flow.invite(
                Caller(professor.user_id, professor.role),
                course.course_id,
                "nobody@mymail.champlain.edu",
                session=db_session,
            )

    def test_only_students_are_invited(
        self, db_session: Session, course: Course, professor: UserWithProfile, admin: UserWithProfile
    ) -> None:
        with pytest.raises(ValidationError):
            enrollment_flow.invite(
                Caller(professor.user_id, professor.role), course.course_id, admin.email, session=db_session
            )

    @pytest.mark.parametrize(
        "status",
        [EnrollmentStatus.Pending, EnrollmentStatus.Active, EnrollmentStatus.Dropped, EnrollmentStatus.Completed],
    )
    def test_existing_enrollment_in_any_status_conflicts(
        self,
        db_session: Session,
        course: Course,
        professor: UserWithProfile,
        student: UserWithProfile,
        enrollment_factory: t.Callable[..., Enrollment],
        status: EnrollmentStatus,
    ) -> None:
        enrollment_factory(course, student, status=status)

        with pytest.raises(Conflict):
            enrollment_flow.invite(
                Caller(professor.user_id, professor.role), course.course_id, student.email, session=db_session
            )


class TestRespond(object):
    def test_accept(
        self,
        db_session: Session,
        course: Course,
        student: UserWithProfile,
        enrollment_factory: t.Callable[..., Enrollment],
    ) -> None:
        invitation = enrollment_factory(course, student, status=EnrollmentStatus.Pending)
        caller = Caller(student.user_id, student.role)

        accepted = enrollment_flow.accept(caller, invitation.enrollment_id, session=db_session)

        assert accepted.status is EnrollmentStatus.Active
        assert enrollment_flow.list_invitations(caller, session=db_session) == ()
        with pytest.raises(NotFound):
            enrollment_flow.accept(caller, invitation.enrollment_id, session=db_session)

    def test_decline_removes_invitation(
        self,
        db_session: Session,
        course: Course,
        student: UserWithProfile,
        enrollment_factory: t.Callable[..., Enrollment],
    ) -> None:
        invitation = enrollment_factory(course, student, status=EnrollmentStatus.Pending)
        caller = Caller(student.user_id, student.role)

        enrollment_flow.decline(caller, invitation.enrollment_id, session=db_session)

        assert enrollment_flow.list_for_student(caller, student.user_id, session=db_session) == ()

    def test_cannot_answer_anothers_invitation(
        self,
        db_session: Session,
        course: Course,
        student: UserWithProfile,
        user_factory: t.Callable[..., UserWithProfile],
        enrollment_factory: t.Callable[..., Enrollment],
    ) -> None:
        invitation = enrollment_factory(course, student, status=EnrollmentStatus.Pending)
        other = user_factory()

        with pytest.raises(Forbidden):
            enrollment_flow.accept(Caller(other.user_id, other.role), invitation.enrollment_id, session=db_session)
        with pytest.raises(Forbidden):
            enrollment_flow.decline(Caller(other.user_id, other.role), invitation.enrollment_id, session=db_session)

    def test_active_enrollment_is_not_an_invitation(
        self, db_session: Session, enrollment: Enrollment, student: UserWithProfile
    ) -> None:
        with pytest.raises(NotFound):
            enrollment_flow.decline(Caller(student.user_id, student.role), enrollment.enrollment_id, session=db_session)

    def test_unknown_invitation(self, db_session: Session, student: UserWithProfile) -> None:
        with pytest.raises(NotFound):
            enrollment_flow.accept(Caller(student.user_id, student.role), EnrollmentID(), session=db_session)


class TestFinish(object):
    def test_drop_and_complete_only_from_active(
        self,
        db_session: Session,
        course: Course,
        professor: UserWithProfile,
        user_factory: t.Callable[..., UserWithProfile],
        enrollment_factory: t.Callable[..., Enrollment],
    ) -> None:
        caller = Caller(professor.user_id, professor.role)
        leaving = enrollment_factory(course, user_factory())
        finishing = enrollment_factory(course, user_factory())
        invited = enrollment_factory(course, user_factory(), status=EnrollmentStatus.Pending)

        dropped = enrollment_flow.drop(caller, leaving.enrollment_id, session=db_session)
        assert dropped.status is EnrollmentStatus.Dropped
        completed = enrollment_flow.complete(caller, finishing.enrollment_id, session=db_session)
        assert completed.status is EnrollmentStatus.Completed

        with pytest.raises(Conflict):
            enrollment_flow.complete(caller, leaving.enrollment_id, session=db_session)
        with pytest.raises(Conflict):
            enrollment_flow.drop(caller, finishing.enrollment_id, session=db_session)
        with pytest.raises(Conflict):
            enrollment_flow.drop(caller, invited.enrollment_id, session=db_session)

    def test_students_cannot_drop_themselves(
        self, db_session: Session, enrollment: Enrollment, student: UserWithProfile
    ) -> None:
        with pytest.raises(Forbidden):
            enrollment_flow.drop(Caller(student.user_id, student.role), enrollment.enrollment_id, session=db_session)

    def test_roster_filters_by_status(
        self,
        db_session: Session,
        course: Course,
        professor: UserWithProfile,
        user_factory: t.Callable[..., UserWithProfile],
        enrollment_factory: t.Callable[..., Enrollment],
    ) -> None:
        active = enrollment_factory(course, user_factory())
        enrollment_factory(course, user_factory(), status=EnrollmentStatus.Pending)
        caller = Caller(professor.user_id, professor.role)

        roster = enrollment_flow.list_for_course(
            caller, course.course_id, status=EnrollmentStatus.Active, session=db_session
        )
        everyone = enrollment_flow.list_for_course(caller, course.course_id, session=db_session)

        assert [e.enrollment_id for e in roster] == [active.enrollment_id]
        assert len(everyone) == 2


class TestDirectEnroll(object):
    def test_direct_enroll_is_active(
        self, db_session: Session, course: Course, professor: UserWithProfile, student: UserWithProfile
    ) -> None:
        enrolled = enrollment_flow.direct_enroll(
            Caller(professor.user_id, professor.role), course.course_id, student.user_id, session=db_session
        )

        assert enrolled.status is EnrollmentStatus.Active

    def test_direct_enroll_twice_conflicts(
        self, db_session: Session, enrollment: Enrollment, professor: UserWithProfile, student: UserWithProfile
    ) -> None:
        with pytest.raises(Conflict):
            enrollment_flow.direct_enroll(
                Caller(professor.user_id, professor.role), enrollment.course_id, student.user_id, session=db_session
            )
