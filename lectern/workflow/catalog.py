"""Courses, their gradable items, and quiz questions."""

from __future__ import annotations

import datetime
import logging
import typing as t

from lectern.core import di
from lectern.lib import NotSet
from lectern.model import Course, CourseID, CourseItem, CourseItemID, EnrollmentStatus, ItemKind, QuestionID, \
    QuestionKind, QuizQuestion, UserRole
from lectern.storage import course as course_storage
from lectern.storage import enrollment as enrollment_storage
from lectern.storage import item as item_storage
from lectern.storage import quiz as quiz_storage
from lectern.storage import Session
from lectern.storage.quiz import OptionCreateParams

from .errors import NotFound, ValidationError
from .policy import authorize, Caller, is_owner
from .transaction import unit_of_work

logger = logging.getLogger(__name__)

# a student sees a course's contents while taking it and after completing it
ReadableStatuses: t.Final = (EnrollmentStatus.Active, EnrollmentStatus.Completed)


def load_course(course_id: CourseID, session: Session) -> Course:
    course = course_storage.get(course_id, session=session)
    if course is None:
        raise NotFound("Course not found")
    return course


def load_item(item_id: CourseItemID, session: Session) -> CourseItem:
    item = item_storage.get(item_id, session=session)
    if item is None:
        raise NotFound("Course item not found")
    return item


def can_read(caller: Caller, course: Course, session: Session) -> bool:
    """Whether the caller may see a course's items: its professor, an admin, or a current student."""
    if caller.is_admin or (caller.is_professor and caller.user_id == course.professor_id):
        return True
    if caller.is_student:
        enrollment = enrollment_storage.get_for(course_id=course.course_id, student_id=caller.user_id, session=session)
        return enrollment is not None and enrollment.status in ReadableStatuses
    return False


def require_owner(caller: Caller, course: Course, message: str = "Only the course's professor may do that") -> None:
    authorize(caller, roles=[UserRole.Professor], when=is_owner(course.professor_id), message=message)


# Courses


def create_course(
    caller: Caller,
    *,
    name: str,
    prefix: str,
    number: str,
    room: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    days: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Course:
    """Create a course owned by the calling professor."""
    authorize(caller, roles=[UserRole.Professor], message="Only professors may create courses")
    if not (name.strip() and prefix.strip() and number.strip()):
        raise ValidationError("Course name, prefix and number are required")

    with unit_of_work(session):
        course = course_storage.create(
            professor_id=caller.user_id,
            name=name.strip(),
            prefix=prefix.strip().upper(),
            number=number.strip(),
            room=room,
            start_time=start_time,
            end_time=end_time,
            days=days,
            session=session,
        )

    logger.info("created course", extra={"course_id": course.course_id, "professor_id": caller.user_id})
    return course


def get_course(
    caller: Caller,
    course_id: CourseID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Course:
    """A course, as seen by its professor, an admin, or one of its students.

    Students also see courses they have only been invited to.
    """
    with unit_of_work(session):
        course = load_course(course_id, session)
        if not can_read(caller, course, session):
            enrollment = enrollment_storage.get_for(course_id=course_id, student_id=caller.user_id, session=session)
            if enrollment is None or enrollment.status is not EnrollmentStatus.Pending:
                raise NotFound("Course not found")
    return course


def list_courses(
    caller: Caller,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Course, ...]:
    """Courses relevant to the caller: taught, taken, or (for admins) all."""
    with unit_of_work(session):
        match caller.role:
            case UserRole.Professor:
                return course_storage.find(professor_id=caller.user_id, session=session)
            case UserRole.Student:
                return course_storage.find(
                    student_id=caller.user_id, enrollment_status=[EnrollmentStatus.Active], session=session
                )
            case UserRole.Admin:
                return course_storage.find(session=session)


def update_course(
    caller: Caller,
    course_id: CourseID,
    *,
    name: str | NotSet = NotSet(),
    prefix: str | NotSet = NotSet(),
    number: str | NotSet = NotSet(),
    room: str | None | NotSet = NotSet(),
    start_time: str | None | NotSet = NotSet(),
    end_time: str | None | NotSet = NotSet(),
    days: str | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> Course:
    with unit_of_work(session):
        require_owner(caller, load_course(course_id, session))
        course = course_storage.update(
            course_id,
            name=name,
            prefix=prefix,
            number=number,
            room=room,
            start_time=start_time,
            end_time=end_time,
            days=days,
            session=session,
        )

    logger.info("updated course", extra={"course_id": course_id})
    return course


def delete_course(
    caller: Caller,
    course_id: CourseID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Delete a course together with its items, enrollments, submissions and grades."""
    with unit_of_work(session):
        require_owner(caller, load_course(course_id, session))
        course_storage.delete(course_id, session=session)

    logger.info("deleted course", extra={"course_id": course_id})


# Items


def check_max_points(max_points: float) -> None:
    if max_points < 0:
        raise ValidationError("Max points cannot be negative")


def create_item(
    caller: Caller,
    course_id: CourseID,
    *,
    kind: ItemKind,
    title: str,
    max_points: float,
    due_date: datetime.datetime | None = None,
    content: str = "",
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseItem:
    check_max_points(max_points)
    if not title.strip():
        raise ValidationError("A title is required")

    with unit_of_work(session):
        require_owner(caller, load_course(course_id, session))
        item = item_storage.create(
            course_id=course_id,
            kind=kind,
            title=title.strip(),
            max_points=max_points,
            due_date=due_date,
            content=content,
            session=session,
        )

    logger.info("created course item", extra={"item_id": item.item_id, "course_id": course_id, "kind": kind.value})
    return item


def get_item(
    caller: Caller,
    item_id: CourseItemID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseItem:
    with unit_of_work(session):
        item = load_item(item_id, session)
        if not can_read(caller, load_course(item.course_id, session), session):
            raise NotFound("Course item not found")
    return item


def list_items(
    caller: Caller,
    course_id: CourseID,
    *,
    kind: ItemKind | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[CourseItem, ...]:
    with unit_of_work(session):
        if not can_read(caller, load_course(course_id, session), session):
            raise NotFound("Course not found")
        return item_storage.find(course_id=course_id, kind=kind, session=session)


def update_item(
    caller: Caller,
    item_id: CourseItemID,
    *,
    title: str | NotSet = NotSet(),
    max_points: float | NotSet = NotSet(),
    due_date: datetime.datetime | None | NotSet = NotSet(),
    content: str | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseItem:
    if not isinstance(max_points, NotSet):
        check_max_points(max_points)

    with unit_of_work(session):
        item = load_item(item_id, session)
        require_owner(caller, load_course(item.course_id, session))
        item = item_storage.update(
            item_id, title=title, max_points=max_points, due_date=due_date, content=content, session=session
        )

    logger.info("updated course item", extra={"item_id": item_id})
    return item


def delete_item(
    caller: Caller,
    item_id: CourseItemID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    with unit_of_work(session):
        item = load_item(item_id, session)
        require_owner(caller, load_course(item.course_id, session))
        item_storage.delete(item_id, session=session)

    logger.info("deleted course item", extra={"item_id": item_id})


# Quiz questions


def check_question(kind: QuestionKind, points: float, options: t.Sequence[OptionCreateParams]) -> None:
    if points < 0:
        raise ValidationError("Question points cannot be negative")
    match kind:
        case QuestionKind.MultipleChoice:
            if len(options) < 2:
                raise ValidationError("A multiple choice question needs at least two options")
            if sum(1 for o in options if o["is_correct"]) != 1:
                raise ValidationError("A multiple choice question needs exactly one correct option")
            if any(not o["text"].strip() for o in options):
                raise ValidationError("Options cannot be blank")
        case QuestionKind.ShortAnswer:
            if options:
                raise ValidationError("A short answer question has no options")


def add_question(
    caller: Caller,
    item_id: CourseItemID,
    *,
    kind: QuestionKind,
    text: str,
    points: float,
    options: t.Sequence[OptionCreateParams] = (),
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizQuestion:
    """Append a question to a quiz."""
    check_question(kind, points, options)
    if not text.strip():
        raise ValidationError("Question text is required")

    with unit_of_work(session):
        item = load_item(item_id, session)
        require_owner(caller, load_course(item.course_id, session))
        if item.kind is not ItemKind.Quiz:
            raise ValidationError("Questions can only be added to quizzes")
        question = quiz_storage.create_question(
            item_id=item_id, kind=kind, text=text.strip(), points=points, options=options, session=session
        )

    logger.info("added quiz question", extra={"question_id": question.question_id, "item_id": item_id})
    return question


def delete_question(
    caller: Caller,
    question_id: QuestionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    with unit_of_work(session):
        question = quiz_storage.get_question(question_id, session=session)
        if question is None:
            raise NotFound("Question not found")
        item = load_item(question.item_id, session)
        require_owner(caller, load_course(item.course_id, session))
        quiz_storage.delete_question(question_id, session=session)

    logger.info("deleted quiz question", extra={"question_id": question_id})


def list_questions(
    caller: Caller,
    item_id: CourseItemID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[QuizQuestion, ...]:
    """The questions of a quiz in order; students do not learn which option is correct."""
    with unit_of_work(session):
        item = load_item(item_id, session)
        if not can_read(caller, load_course(item.course_id, session), session):
            raise NotFound("Course item not found")
        questions = quiz_storage.find_questions(item_id=item_id, session=session)

    if caller.is_student:
        return tuple(
            q.model_copy(update={"options": [o.model_copy(update={"is_correct": None}) for o in q.options]})
            for q in questions
        )
    return questions

