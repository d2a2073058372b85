"""Pytest fixtures for Lectern tests.

The container boots once per session against a throwaway SQLite file. Each
test runs inside a transaction that is rolled back afterwards, so tests are
isolated without recreating the schema.

Usage:
    def test_invite(db_session: Session, course: Course, student: UserWithProfile):
        invite(Caller(course.professor_id, UserRole.Professor), course.course_id, student.email, session=db_session)
"""

from __future__ import annotations

import typing as t
from pathlib import Path

import pydantic as p
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import lectern
from lectern.core import LecternContainer
from lectern.model import Course, CourseItem, DeploymentEnvironment, Enrollment, EnrollmentStatus, ItemKind, \
    QuestionKind, QuizQuestion, UserRole, UserWithProfile
from lectern.storage import course as course_storage
from lectern.storage import enrollment as enrollment_storage
from lectern.storage import item as item_storage
from lectern.storage import quiz as quiz_storage
from lectern.storage import user as user_storage
from lectern.storage.quiz import OptionCreateParams
from lectern.storage.table import metadata

DefaultPassword = "password123"


@pytest.fixture(scope="session")
def database_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "lectern.sqlite3"


@pytest.fixture(scope="session")
def container(database_path: Path) -> t.Generator[LecternContainer]:
    """Boot the DI container for the test session.

    Uses the Test environment, whose configuration selects SQLite; the
    database file is pointed at a per-run temporary path and its tables are
    created directly from the table metadata.
    """
    ct = LecternContainer()

    LecternContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{lectern.root}/config"),
        override=(f"storage.persistent.sqlite.path={database_path}",),
    )
    metadata.create_all(ct.storage().persistent().engine())

    yield ct

    ct.shutdown_resources()


@pytest.fixture(scope="session")
def app(container: LecternContainer) -> FastAPI:
    """Create the FastAPI application for testing, wired to the booted container."""
    from lectern.core.config.web import LecternWebSettings
    from lectern.web.lectern.main import _create_app  # pyright: ignore[reportPrivateUsage]

    container.wire(
        modules=[
            "lectern.web.lectern.main",
            "lectern.web.lectern.route.auth",
            "lectern.web.lectern.route.user",
            "lectern.web.lectern.route.course",
            "lectern.web.lectern.route.item",
            "lectern.web.lectern.route.question",
            "lectern.web.lectern.route.enrollment",
            "lectern.web.lectern.route.submission",
            "lectern.auth.middleware",
        ]
    )

    return _create_app(config=LecternWebSettings(**container.config.web.lectern()))


@pytest.fixture
def db_session(container: LecternContainer) -> t.Generator[Session]:
    """Provide a database session wrapped in a transaction.

    Uses join_transaction_mode="create_savepoint" so that the session.begin()
    in every unit of work becomes a savepoint inside the outer transaction,
    which is rolled back when the test completes.
    """
    engine = container.storage().persistent().engine()

    connection = engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        autobegin=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(app: FastAPI, container: LecternContainer, db_session: Session) -> t.Generator[TestClient]:
    """Provide a TestClient whose requests share the test's transactional session."""
    container.storage().persistent().session.override(db_session)

    with TestClient(app) as test_client:
        yield test_client

    container.storage().persistent().session.reset_override()


# Factories


@pytest.fixture
def user_factory(db_session: Session) -> t.Callable[..., UserWithProfile]:
    """Factory fixture for creating accounts with sensible defaults.

    Usage:
        def test_something(user_factory):
            prof = user_factory(role=UserRole.Professor)
    """
    counter = iter(range(1, 10_000))

    def create_user(
        email: str | None = None,
        password: str = DefaultPassword,
        first_name: str = "Test",
        last_name: str | None = None,
        role: UserRole = UserRole.Student,
        major: str | None = None,
        graduation_year: int | None = None,
    ) -> UserWithProfile:
        n = next(counter)
        with db_session.begin():
            return user_storage.create(
                email=email or f"{role.value}{n}@champlain.edu",
                password=p.Secret(password),
                first_name=first_name,
                last_name=last_name or f"{role.value.title()}{n}",
                role=role,
                major=major,
                graduation_year=graduation_year,
                session=db_session,
            )

    return create_user


@pytest.fixture
def professor(user_factory: t.Callable[..., UserWithProfile]) -> UserWithProfile:
    return user_factory(email="ada@champlain.edu", first_name="Ada", last_name="Lovelace", role=UserRole.Professor)


@pytest.fixture
def student(user_factory: t.Callable[..., UserWithProfile]) -> UserWithProfile:
    return user_factory(
        email="sam@mymail.champlain.edu",
        first_name="Sam",
        last_name="Student",
        major="Computer Science",
        graduation_year=2027,
    )


@pytest.fixture
def admin(user_factory: t.Callable[..., UserWithProfile]) -> UserWithProfile:
    return user_factory(email="root@champlain.edu", first_name="Root", last_name="Admin", role=UserRole.Admin)


@pytest.fixture
def course_factory(db_session: Session) -> t.Callable[..., Course]:
    def create_course(
        professor: UserWithProfile,
        name: str = "Data Structures",
        prefix: str = "CSI",
        number: str = "281",
    ) -> Course:
        with db_session.begin():
            return course_storage.create(
                professor_id=professor.user_id, name=name, prefix=prefix, number=number, session=db_session
            )

    return create_course


@pytest.fixture
def course(course_factory: t.Callable[..., Course], professor: UserWithProfile) -> Course:
    return course_factory(professor)


@pytest.fixture
def item_factory(db_session: Session) -> t.Callable[..., CourseItem]:
    def create_item(
        course: Course,
        kind: ItemKind = ItemKind.Assignment,
        title: str = "Homework 1",
        max_points: float = 10,
    ) -> CourseItem:
        with db_session.begin():
            return item_storage.create(
                course_id=course.course_id, kind=kind, title=title, max_points=max_points, session=db_session
            )

    return create_item


@pytest.fixture
def enrollment_factory(db_session: Session) -> t.Callable[..., Enrollment]:
    def create_enrollment(
        course: Course,
        student: UserWithProfile,
        status: EnrollmentStatus = EnrollmentStatus.Active,
    ) -> Enrollment:
        with db_session.begin():
            enrollment = enrollment_storage.create(
                course_id=course.course_id, student_id=student.user_id, status=status, session=db_session
            )
        assert enrollment is not None
        return enrollment

    return create_enrollment


@pytest.fixture
def enrollment(
    enrollment_factory: t.Callable[..., Enrollment], course: Course, student: UserWithProfile
) -> Enrollment:
    return enrollment_factory(course, student)


class Quiz(t.NamedTuple):
    item: CourseItem
    multiple_choice: QuizQuestion
    short_answer: QuizQuestion

    @property
    def correct_option(self) -> str:
        return next(str(o.option_id) for o in self.multiple_choice.options if o.is_correct)

    @property
    def wrong_option(self) -> str:
        return next(str(o.option_id) for o in self.multiple_choice.options if not o.is_correct)


@pytest.fixture
def quiz(db_session: Session, item_factory: t.Callable[..., CourseItem], course: Course) -> Quiz:
    """A 10 point quiz: a 6 point multiple choice question and a 4 point short answer."""
    item = item_factory(course, kind=ItemKind.Quiz, title="Quiz 1", max_points=10)
    with db_session.begin():
        mc = quiz_storage.create_question(
            item_id=item.item_id,
            kind=QuestionKind.MultipleChoice,
            text="Which structure is LIFO?",
            points=6,
            options=[
                OptionCreateParams(text="Queue", is_correct=False),
                OptionCreateParams(text="Stack", is_correct=True),
                OptionCreateParams(text="Heap", is_correct=False),
            ],
            session=db_session,
        )
        sa = quiz_storage.create_question(
            item_id=item.item_id,
            kind=QuestionKind.ShortAnswer,
            text="Explain amortized analysis.",
            points=4,
            session=db_session,
        )
    return Quiz(item, mc, sa)


@pytest.fixture
def auth_headers(container: LecternContainer) -> t.Callable[[UserWithProfile], dict[str, str]]:
    """Bearer headers for a user, signed with the configured test secret."""
    jwt_manager = container.auth().jwt_manager()

    def headers_for(user: UserWithProfile) -> dict[str, str]:
        token = jwt_manager.create_access_token(user.user_id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return headers_for
