"""View models for account administration."""

from __future__ import annotations

import pydantic as p

from lectern.model import UserID, UserRole

from .auth import RegisterRequest


class UserCreateRequest(RegisterRequest):
    """An admin creating an account with any role."""

    role: UserRole = UserRole.Student


class UserUpdateRequest(p.BaseModel):
    """Only the fields present in the request are changed."""

    email: str | None = None
    password: p.Secret[str] | None = None
    first_name: str | None = None
    last_name: str | None = None
    major: str | None = None
    graduation_year: int | None = None


class AccountResponse(p.BaseModel):
    """A user in listings, without profile details."""

    user_id: UserID
    email: str
    role: UserRole
