"""View models for grading."""

from __future__ import annotations

import pydantic as p

from lectern.model import UserID


class GradeRequest(p.BaseModel):
    student_id: UserID
    score: float
    feedback: str | None = None
