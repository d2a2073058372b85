import enum

from pydantic import EmailStr

from .base import BaseModel, WithTimestamps
from .id import ProfileID, UserID


class UserRole(enum.Enum):
    Student = "student"
    Professor = "professor"
    Admin = "admin"


class Profile(WithTimestamps):
    profile_id: ProfileID
    first_name: str
    last_name: str
    major: str | None = None
    graduation_year: int | None = None


class User(WithTimestamps):
    user_id: UserID
    profile_id: ProfileID
    email: EmailStr
    role: UserRole
    password_hash: str | None = None


class UserWithProfile(User):
    profile: Profile


class PersonSummary(BaseModel):
    """Identity details joined onto enrollment and submission listings."""

    user_id: UserID
    email: EmailStr
    first_name: str
    last_name: str
