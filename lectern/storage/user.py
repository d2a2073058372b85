from __future__ import annotations

import typing as t

import bcrypt
import pydantic as p
import sqlalchemy as sqla

from lectern.core import di
from lectern.lib import NotSet
from lectern.lib.util import compact
from lectern.model import PersonSummary, Profile, ProfileID, User, UserID, UserRole, UserWithProfile

from . import Session
from .table import profiles, users


def hash_password(password: p.Secret[str]) -> str:
    return bcrypt.hashpw(password.get_secret_value().encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


@t.overload
def get(
    *,
    user_id: UserID,
    with_profile: t.Literal[False] = ...,
    session: Session = ...,
) -> User | None: ...


@t.overload
def get(
    *,
    user_id: UserID,
    with_profile: t.Literal[True],
    session: Session = ...,
) -> UserWithProfile | None: ...


@t.overload
def get(
    *,
    email: str,
    with_profile: t.Literal[False] = ...,
    session: Session = ...,
) -> User | None: ...


@t.overload
def get(
    *,
    email: str,
    with_profile: t.Literal[True],
    session: Session = ...,
) -> UserWithProfile | None: ...


def get(
    *,
    user_id: UserID | None = None,
    email: str | None = None,
    with_profile: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> User | UserWithProfile | None:
    """Get a user by ID or email.

    Exactly one of user_id or email must be provided. Emails are matched
    case-insensitively.
    """
    if user_id is None and email is None:
        raise ValueError("Either user_id or email must be provided")
    if user_id is not None and email is not None:
        raise ValueError("Only one of user_id or email should be provided")

    if user_id is not None:
        stmt = sqla.select(users.__table__).where(users.user_id == user_id)
    else:
        assert email is not None
        stmt = sqla.select(users.__table__).where(users.email == email.lower())

    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None

    user = User(**row)
    if with_profile:
        profile_stmt = sqla.select(profiles.__table__).where(profiles.profile_id == user.profile_id)
        profile = Profile(**session.execute(profile_stmt).mappings().one())
        return UserWithProfile(**user.model_dump(), profile=profile)

    return user


def find(
    *,
    role: UserRole | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[User, ...]:
    """Find users, optionally filtered by role."""
    stmt = sqla.select(users.__table__).order_by(users.email)
    if role is not None:
        stmt = stmt.where(users.role == role.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(User(**row) for row in rows)


def person_columns() -> tuple[sqla.ColumnElement[t.Any], ...]:
    """Columns for a PersonSummary, for joining users and profiles onto other listings."""
    return (
        users.user_id.label("person_user_id"),
        users.email.label("person_email"),
        profiles.first_name.label("person_first_name"),
        profiles.last_name.label("person_last_name"),
    )


def person_from_row(row: t.Mapping[str, t.Any]) -> PersonSummary:
    return PersonSummary(
        user_id=row["person_user_id"],
        email=row["person_email"],
        first_name=row["person_first_name"],
        last_name=row["person_last_name"],
    )


def create(
    *,
    email: str,
    password: p.Secret[str],
    first_name: str,
    last_name: str,
    role: UserRole = UserRole.Student,
    major: str | None = None,
    graduation_year: int | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> UserWithProfile:
    """Create a user together with its profile.

    Password is hashed internally using bcrypt. Both rows are written in the
    caller's transaction.
    """
    profile_id = ProfileID()
    session.execute(
        sqla.insert(profiles).values(
            profile_id=profile_id,
            first_name=first_name,
            last_name=last_name,
            major=major,
            graduation_year=graduation_year,
        )
    )

    user_id = UserID()
    session.execute(
        sqla.insert(users).values(
            user_id=user_id,
            profile_id=profile_id,
            email=email.lower(),
            password_hash=hash_password(password),
            role=role.value,
        )
    )
    session.flush()
    result = get(user_id=user_id, with_profile=True, session=session)
    assert result is not None
    return result


def update(
    user_id: UserID,
    *,
    email: str | NotSet = NotSet(),
    password: p.Secret[str] | NotSet = NotSet(),
    first_name: str | NotSet = NotSet(),
    last_name: str | NotSet = NotSet(),
    major: str | None | NotSet = NotSet(),
    graduation_year: int | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> UserWithProfile:
    """Update a user's account and profile rows.

    Uses NotSet sentinel for parameters where None is a valid update value.
    Role is deliberately absent: it is fixed at creation.

    Raises:
        KeyError: If user_id does not correspond to a user
    """
    user = get(user_id=user_id, session=session)
    if user is None:
        raise KeyError(f"User {user_id} not found")

    account = compact({"email": email, "password": password}, NotSet)
    if "email" in account:
        account["email"] = account["email"].lower()
    if "password" in account:
        account["password_hash"] = hash_password(account.pop("password"))
    if account:
        session.execute(sqla.update(users).where(users.user_id == user_id).values(**account))

    profile = compact(
        {
            "first_name": first_name,
            "last_name": last_name,
            "major": major,
            "graduation_year": graduation_year,
        },
        NotSet,
    )
    if profile:
        session.execute(sqla.update(profiles).where(profiles.profile_id == user.profile_id).values(**profile))

    session.flush()
    result = get(user_id=user_id, with_profile=True, session=session)
    assert result is not None
    return result


def delete(
    user_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Delete a user and its profile.

    Returns:
        True if a user was deleted, False if not found
    """
    user = get(user_id=user_id, session=session)
    if user is None:
        return False
    session.execute(sqla.delete(users).where(users.user_id == user_id))
    session.execute(sqla.delete(profiles).where(profiles.profile_id == user.profile_id))
    return True
