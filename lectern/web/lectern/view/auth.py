"""View models for authentication endpoints."""

from __future__ import annotations

import datetime

import pydantic as p

from lectern.model import UserID, UserRole, UserWithProfile


class LoginRequest(p.BaseModel):
    """Request body for login."""

    email: str
    password: p.Secret[str]


class RegisterRequest(p.BaseModel):
    """Request body for self-registration as a student."""

    email: str
    password: p.Secret[str]
    confirm_password: p.Secret[str]
    first_name: str
    last_name: str
    major: str | None = None
    graduation_year: int | None = None


class TokenResponse(p.BaseModel):
    """Response containing access token."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime.datetime


class UserResponse(p.BaseModel):
    """A user's account and profile, without credentials."""

    user_id: UserID
    email: str
    role: UserRole
    first_name: str
    last_name: str
    major: str | None = None
    graduation_year: int | None = None

    @classmethod
    def of(cls, user: UserWithProfile) -> UserResponse:
        return cls(
            user_id=user.user_id,
            email=user.email,
            role=user.role,
            first_name=user.profile.first_name,
            last_name=user.profile.last_name,
            major=user.profile.major,
            graduation_year=user.profile.graduation_year,
        )


class LoginResponse(p.BaseModel):
    """Response for successful login."""

    user: UserResponse
    token: TokenResponse
