"""Tests for lectern.workflow.grading."""

from __future__ import annotations

import typing as t

import pytest
from sqlalchemy.orm import Session

from conftest import Quiz
from lectern.model import Course, CourseItem, Enrollment, EnrollmentStatus, FinalGrade, UserWithProfile
from lectern.storage import submission as submission_storage
from lectern.workflow import Caller, Forbidden, grading, NotFound, scoring, submission, ValidationError


@pytest.fixture
def submit(db_session: Session) -> t.Callable[[Enrollment, CourseItem], None]:
    """Give an enrollment a submission for an item, so it can be graded."""

    def make(enrollment: Enrollment, item: CourseItem) -> None:
        with db_session.begin():
            submission_storage.get_or_create(
                enrollment_id=enrollment.enrollment_id, item_id=item.item_id, session=db_session
            )

    return make


def _rows(finals: t.Iterable[FinalGrade]) -> list[tuple[t.Any, ...]]:
    return [(f.student_id, f.points_earned, f.points_possible, f.percentage, f.letter) for f in finals]


class TestLetterScale(object):
    @pytest.mark.parametrize(
        "percentage,letter",
        [
            (100, "A"),
            (93, "A"),
            (92.99, "A-"),
            (90, "A-"),
            (89.99, "B+"),
            (87, "B+"),
            (83, "B"),
            (80, "B-"),
            (77, "C+"),
            (73, "C"),
            (70, "C-"),
            (67, "D+"),
            (63, "D"),
            (60, "D-"),
            (59.99, "F"),
            (0, "F"),
            (None, None),
        ],
    )
    def test_letter_for(self, percentage: float | None, letter: str | None) -> None:
        assert grading.letter_for(percentage) == letter


class TestGradeItem(object):
    def test_grade_and_regrade(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        professor: UserWithProfile,
        student: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
        submit: t.Callable[[Enrollment, CourseItem], None],
    ) -> None:
        item = item_factory(course)
        submit(enrollment, item)
        caller = Caller(professor.user_id, professor.role)

        grading.grade_item(caller, item.item_id, student.user_id, 7, feedback="Good start", session=db_session)
        grade = grading.grade_item(caller, item.item_id, student.user_id, 8.5, session=db_session)

        assert grade.score == 8.5
        assert grade.feedback == "Good start"
        mine = grading.student_grades(
            Caller(student.user_id, student.role), course.course_id, student.user_id, session=db_session
        )
        assert [g.score for g in mine] == [8.5]
        assert [(g.student_id, g.score) for g in grading.item_grades(caller, item.item_id, session=db_session)] == [
            (student.user_id, 8.5)
        ]

    def test_score_within_max_points(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        professor: UserWithProfile,
        student: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
        submit: t.Callable[[Enrollment, CourseItem], None],
    ) -> None:
        item = item_factory(course)
        submit(enrollment, item)

        for score in (-0.5, 10.5):
            with pytest.raises(ValidationError):
                grading.grade_item(
                    Caller(professor.user_id, professor.role), item.item_id, student.user_id, score, session=db_session
                )

    def test_needs_a_submission(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        professor: UserWithProfile,
        student: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
    ) -> None:
        item = item_factory(course)

        with pytest.raises(NotFound):
            grading.grade_item(
                Caller(professor.user_id, professor.role), item.item_id, student.user_id, 5, session=db_session
            )

    def test_students_cannot_grade(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        student: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
        submit: t.Callable[[Enrollment, CourseItem], None],
    ) -> None:
        item = item_factory(course)
        submit(enrollment, item)

        with pytest.raises(Forbidden):
            grading.grade_item(
                Caller(student.user_id, student.role), item.item_id, student.user_id, 10, session=db_session
            )


class TestFinalize(object):
    def test_final_grades(
        self,
        db_session: Session,
        course: Course,
        professor: UserWithProfile,
        user_factory: t.Callable[..., UserWithProfile],
        enrollment_factory: t.Callable[..., Enrollment],
        item_factory: t.Callable[..., CourseItem],
        submit: t.Callable[[Enrollment, CourseItem], None],
    ) -> None:
        homework = item_factory(course, title="Homework", max_points=10)
        project = item_factory(course, title="Project", max_points=20)
        both = enrollment_factory(course, user_factory())
        one = enrollment_factory(course, user_factory())
        completed = enrollment_factory(course, user_factory(), status=EnrollmentStatus.Completed)
        enrollment_factory(course, user_factory(), status=EnrollmentStatus.Dropped)
        enrollment_factory(course, user_factory(), status=EnrollmentStatus.Pending)

        caller = Caller(professor.user_id, professor.role)
        for enrollment, item, score in ((both, homework, 8), (both, project, 15), (one, homework, 9)):
            submit(enrollment, item)
            grading.grade_item(caller, item.item_id, enrollment.student_id, score, session=db_session)

        finals = {f.student_id: f for f in grading.finalize(caller, course.course_id, session=db_session)}

        assert set(finals) == {both.student_id, one.student_id, completed.student_id}
        assert (finals[both.student_id].points_earned, finals[both.student_id].points_possible) == (23, 30)
        assert finals[both.student_id].percentage == 76.67
        assert finals[both.student_id].letter == "C"
        # the project is not graded for this student, so it is not counted
        assert finals[one.student_id].points_possible == 10
        assert finals[one.student_id].percentage == 90.0
        assert finals[one.student_id].letter == "A-"
        assert finals[completed.student_id].percentage is None
        assert finals[completed.student_id].letter is None

    def test_finalize_twice_is_identical(
        self,
        db_session: Session,
        course: Course,
        enrollment: Enrollment,
        professor: UserWithProfile,
        student: UserWithProfile,
        item_factory: t.Callable[..., CourseItem],
        submit: t.Callable[[Enrollment, CourseItem], None],
    ) -> None:
        item = item_factory(course)
        submit(enrollment, item)
        caller = Caller(professor.user_id, professor.role)
        grading.grade_item(caller, item.item_id, student.user_id, 6, session=db_session)

        first = grading.finalize(caller, course.course_id, session=db_session)
        second = grading.finalize(caller, course.course_id, session=db_session)

        assert _rows(first) == _rows(second)
        assert _rows(grading.final_grades(caller, course.course_id, session=db_session)) == _rows(second)

    def test_finalize_scores_pending_quizzes(
        self,
        db_session: Session,
        quiz: Quiz,
        course: Course,
        enrollment: Enrollment,
        professor: UserWithProfile,
        student: UserWithProfile,
    ) -> None:
        caller = Caller(student.user_id, student.role)
        draft = submission.get_or_create(caller, enrollment.enrollment_id, quiz.item.item_id, session=db_session)
        scoring.finish(
            caller,
            draft.submission_id,
            {quiz.multiple_choice.question_id: quiz.correct_option},
            session=db_session,
        )

        finals = grading.finalize(Caller(professor.user_id, professor.role), course.course_id, session=db_session)

        assert _rows(finals) == [(student.user_id, 6, 10, 60.0, "D-")]

    def test_finalize_keeps_quiz_grade_entered_by_hand(
        self,
        db_session: Session,
        quiz: Quiz,
        course: Course,
        enrollment: Enrollment,
        professor: UserWithProfile,
        student: UserWithProfile,
    ) -> None:
        caller = Caller(student.user_id, student.role)
        draft = submission.get_or_create(caller, enrollment.enrollment_id, quiz.item.item_id, session=db_session)
        scoring.finish(
            caller,
            draft.submission_id,
            {quiz.multiple_choice.question_id: quiz.correct_option},
            session=db_session,
        )
        prof = Caller(professor.user_id, professor.role)
        grading.grade_item(prof, quiz.item.item_id, student.user_id, 9, feedback="Nice essay", session=db_session)

        finals = grading.finalize(prof, course.course_id, session=db_session)

        assert _rows(finals) == [(student.user_id, 9, 10, 90.0, "A-")]
        grade = grading.item_grades(prof, quiz.item.item_id, session=db_session)[0]
        assert (grade.score, grade.feedback, grade.manual) == (9, "Nice essay", True)
        # the automatic total is still recorded on the submission
        assert submission.get(prof, draft.submission_id, session=db_session).auto_score == 6

    def test_only_the_professor_finalizes(
        self, db_session: Session, course: Course, enrollment: Enrollment, student: UserWithProfile
    ) -> None:
        with pytest.raises(Forbidden):
            grading.finalize(Caller(student.user_id, student.role), course.course_id, session=db_session)

    def test_students_see_only_their_final_grade(
        self,
        db_session: Session,
        course: Course,
        professor: UserWithProfile,
        student: UserWithProfile,
        user_factory: t.Callable[..., UserWithProfile],
        enrollment_factory: t.Callable[..., Enrollment],
    ) -> None:
        enrollment_factory(course, student)
        enrollment_factory(course, user_factory())
        grading.finalize(Caller(professor.user_id, professor.role), course.course_id, session=db_session)

        mine = grading.final_grades(Caller(student.user_id, student.role), course.course_id, session=db_session)

        assert [f.student_id for f in mine] == [student.user_id]
