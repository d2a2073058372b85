"""View models for submissions and quiz answers."""

from __future__ import annotations

import pydantic as p

from lectern.model import CourseItemID, EnrollmentID, QuestionID, Submission, SubmissionStatus


class SubmissionStartRequest(p.BaseModel):
    enrollment_id: EnrollmentID
    item_id: CourseItemID


class SubmissionUpdateRequest(p.BaseModel):
    """Only the fields present in the request are changed."""

    content: str | None = None
    status: SubmissionStatus | None = None


class ResponseRequest(p.BaseModel):
    # an option id for multiple choice, free text for short answer
    response: str


class FinishRequest(p.BaseModel):
    responses: dict[QuestionID, str] = {}


class ResponseGradeRequest(p.BaseModel):
    points: float


class ScoreResponse(p.BaseModel):
    submission: Submission
    auto_score: float
    manual_points: float
    score: float
