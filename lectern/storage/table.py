import datetime

from sqlalchemy import CheckConstraint, ForeignKey, func, MetaData, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import DateTime, Text

from lectern.model import CourseID, CourseItemID, EnrollmentID, OptionID, ProfileID, QuestionID, SubmissionID, UserID

from .type import ShortUUIDKeyType

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        datetime.datetime: DateTime(timezone=True),
        UserID: ShortUUIDKeyType(UserID),
        ProfileID: ShortUUIDKeyType(ProfileID),
        CourseID: ShortUUIDKeyType(CourseID),
        CourseItemID: ShortUUIDKeyType(CourseItemID),
        EnrollmentID: ShortUUIDKeyType(EnrollmentID),
        SubmissionID: ShortUUIDKeyType(SubmissionID),
        QuestionID: ShortUUIDKeyType(QuestionID),
        OptionID: ShortUUIDKeyType(OptionID),
    }


# Identity


class profiles(base):
    __tablename__ = "profiles"

    profile_id: Mapped[ProfileID] = mapped_column(primary_key=True)
    first_name: Mapped[str]
    last_name: Mapped[str]
    major: Mapped[str | None] = mapped_column(default=None)
    graduation_year: Mapped[int | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class users(base):
    __tablename__ = "users"

    user_id: Mapped[UserID] = mapped_column(primary_key=True)
    profile_id: Mapped[ProfileID] = mapped_column(ForeignKey("profiles.profile_id", ondelete="CASCADE"))
    email: Mapped[str] = mapped_column(unique=True)
    password_hash: Mapped[str]
    role: Mapped[str] = mapped_column(default="student")
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Catalog


class courses(base):
    __tablename__ = "courses"

    course_id: Mapped[CourseID] = mapped_column(primary_key=True)
    professor_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id", ondelete="RESTRICT"))
    name: Mapped[str]
    prefix: Mapped[str]
    number: Mapped[str]
    room: Mapped[str | None] = mapped_column(default=None)
    start_time: Mapped[str | None] = mapped_column(default=None)
    end_time: Mapped[str | None] = mapped_column(default=None)
    days: Mapped[str | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class course_items(base):
    __tablename__ = "course_items"
    __table_args__ = (CheckConstraint("max_points >= 0", name="max_points_nonnegative"),)

    item_id: Mapped[CourseItemID] = mapped_column(primary_key=True)
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id", ondelete="CASCADE"))
    kind: Mapped[str]
    title: Mapped[str]
    max_points: Mapped[float]
    due_date: Mapped[datetime.datetime | None] = mapped_column(default=None)
    content: Mapped[str] = mapped_column(Text, default="")
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class quiz_questions(base):
    __tablename__ = "quiz_questions"

    question_id: Mapped[QuestionID] = mapped_column(primary_key=True)
    item_id: Mapped[CourseItemID] = mapped_column(ForeignKey("course_items.item_id", ondelete="CASCADE"))
    kind: Mapped[str]
    text: Mapped[str] = mapped_column(Text)
    points: Mapped[float] = mapped_column(default=1.0)
    position: Mapped[int] = mapped_column(default=0)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class quiz_options(base):
    __tablename__ = "quiz_options"

    option_id: Mapped[OptionID] = mapped_column(primary_key=True)
    question_id: Mapped[QuestionID] = mapped_column(ForeignKey("quiz_questions.question_id", ondelete="CASCADE"))
    text: Mapped[str]
    position: Mapped[int] = mapped_column(default=0)
    is_correct: Mapped[bool] = mapped_column(default=False)


# Enrollment


class enrollments(base):
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("course_id", "student_id"),)

    enrollment_id: Mapped[EnrollmentID] = mapped_column(primary_key=True)
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id", ondelete="CASCADE"))
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id", ondelete="CASCADE"))
    status: Mapped[str] = mapped_column(default="pending")
    enrollment_date: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Submissions


class submissions(base):
    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("enrollment_id", "item_id"),)

    submission_id: Mapped[SubmissionID] = mapped_column(primary_key=True)
    enrollment_id: Mapped[EnrollmentID] = mapped_column(ForeignKey("enrollments.enrollment_id", ondelete="CASCADE"))
    item_id: Mapped[CourseItemID] = mapped_column(ForeignKey("course_items.item_id", ondelete="CASCADE"))
    content: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(default="draft")
    submit_time: Mapped[datetime.datetime | None] = mapped_column(default=None)
    auto_score: Mapped[float | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class quiz_responses(base):
    __tablename__ = "quiz_responses"

    submission_id: Mapped[SubmissionID] = mapped_column(
        ForeignKey("submissions.submission_id", ondelete="CASCADE"), primary_key=True
    )
    question_id: Mapped[QuestionID] = mapped_column(
        ForeignKey("quiz_questions.question_id", ondelete="CASCADE"), primary_key=True
    )
    response: Mapped[str] = mapped_column(Text, default="")
    manual_points: Mapped[float | None] = mapped_column(default=None)
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Grades


class grades(base):
    __tablename__ = "grades"

    item_id: Mapped[CourseItemID] = mapped_column(
        ForeignKey("course_items.item_id", ondelete="CASCADE"), primary_key=True
    )
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    score: Mapped[float]
    feedback: Mapped[str | None] = mapped_column(Text, default=None)
    # entered by the professor directly; automatic scoring leaves it alone
    manual: Mapped[bool] = mapped_column(default=False)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class final_grades(base):
    __tablename__ = "final_grades"

    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id", ondelete="CASCADE"), primary_key=True)
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    points_earned: Mapped[float]
    points_possible: Mapped[float]
    percentage: Mapped[float | None] = mapped_column(default=None)
    letter: Mapped[str | None] = mapped_column(default=None)
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())
