"""View models for enrollment requests."""

from __future__ import annotations

import pydantic as p

from lectern.model import UserID


class InviteRequest(p.BaseModel):
    email: str


class DirectEnrollRequest(p.BaseModel):
    student_id: UserID
