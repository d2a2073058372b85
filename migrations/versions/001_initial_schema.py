"""Initial schema for the Lectern workflow engine

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

import typing as t

from alembic import op
from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlalchemy import func as f
from sqlalchemy.schema import Column, ForeignKey
from sqlalchemy.types import Boolean, DateTime, Float, Integer, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None

Key = String(22)


def _timestamps() -> list[Column[t.Any]]:
    return [
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    ]


def upgrade() -> None:
    # Identity
    op.create_table(
        "profiles",
        Column("profile_id", Key, primary_key=True),
        Column("first_name", String, nullable=False),
        Column("last_name", String, nullable=False),
        Column("major", String, nullable=True),
        Column("graduation_year", Integer, nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "users",
        Column("user_id", Key, primary_key=True),
        Column("profile_id", Key, ForeignKey("profiles.profile_id", ondelete="CASCADE"), nullable=False),
        Column("email", String, unique=True, nullable=False),
        Column("password_hash", String, nullable=False),
        Column("role", String, nullable=False),
        *_timestamps(),
    )

    # Catalog
    op.create_table(
        "courses",
        Column("course_id", Key, primary_key=True),
        Column("professor_id", Key, ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False),
        Column("name", String, nullable=False),
        Column("prefix", String, nullable=False),
        Column("number", String, nullable=False),
        Column("room", String, nullable=True),
        Column("start_time", String, nullable=True),
        Column("end_time", String, nullable=True),
        Column("days", String, nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "course_items",
        Column("item_id", Key, primary_key=True),
        Column("course_id", Key, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False),
        Column("kind", String, nullable=False),
        Column("title", String, nullable=False),
        Column("max_points", Float, nullable=False),
        Column("due_date", DateTime(timezone=True), nullable=True),
        Column("content", Text, nullable=False),
        *_timestamps(),
        CheckConstraint("max_points >= 0", name="max_points_nonnegative"),
    )
    op.create_table(
        "quiz_questions",
        Column("question_id", Key, primary_key=True),
        Column("item_id", Key, ForeignKey("course_items.item_id", ondelete="CASCADE"), nullable=False),
        Column("kind", String, nullable=False),
        Column("text", Text, nullable=False),
        Column("points", Float, nullable=False),
        Column("position", Integer, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )
    op.create_table(
        "quiz_options",
        Column("option_id", Key, primary_key=True),
        Column("question_id", Key, ForeignKey("quiz_questions.question_id", ondelete="CASCADE"), nullable=False),
        Column("text", String, nullable=False),
        Column("position", Integer, nullable=False),
        Column("is_correct", Boolean, nullable=False),
    )

    # Enrollment
    op.create_table(
        "enrollments",
        Column("enrollment_id", Key, primary_key=True),
        Column("course_id", Key, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False),
        Column("student_id", Key, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        Column("status", String, nullable=False),
        Column("enrollment_date", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        UniqueConstraint("course_id", "student_id"),
    )

    # Submissions
    op.create_table(
        "submissions",
        Column("submission_id", Key, primary_key=True),
        Column("enrollment_id", Key, ForeignKey("enrollments.enrollment_id", ondelete="CASCADE"), nullable=False),
        Column("item_id", Key, ForeignKey("course_items.item_id", ondelete="CASCADE"), nullable=False),
        Column("content", Text, nullable=False),
        Column("status", String, nullable=False),
        Column("submit_time", DateTime(timezone=True), nullable=True),
        Column("auto_score", Float, nullable=True),
        *_timestamps(),
        UniqueConstraint("enrollment_id", "item_id"),
    )
    op.create_table(
        "quiz_responses",
        Column("submission_id", Key, ForeignKey("submissions.submission_id", ondelete="CASCADE"), primary_key=True),
        Column("question_id", Key, ForeignKey("quiz_questions.question_id", ondelete="CASCADE"), primary_key=True),
        Column("response", Text, nullable=False),
        Column("manual_points", Float, nullable=True),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    # Grades
    op.create_table(
        "grades",
        Column("item_id", Key, ForeignKey("course_items.item_id", ondelete="CASCADE"), primary_key=True),
        Column("student_id", Key, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
        Column("score", Float, nullable=False),
        Column("feedback", Text, nullable=True),
        Column("manual", Boolean, nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "final_grades",
        Column("course_id", Key, ForeignKey("courses.course_id", ondelete="CASCADE"), primary_key=True),
        Column("student_id", Key, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
        Column("points_earned", Float, nullable=False),
        Column("points_possible", Float, nullable=False),
        Column("percentage", Float, nullable=True),
        Column("letter", String, nullable=True),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )


def downgrade() -> None:
    for table in (
        "final_grades",
        "grades",
        "quiz_responses",
        "submissions",
        "enrollments",
        "quiz_options",
        "quiz_questions",
        "course_items",
        "courses",
        "users",
        "profiles",
    ):
        op.drop_table(table)
