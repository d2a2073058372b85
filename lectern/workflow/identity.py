"""Accounts: registration, credential checks and profile maintenance."""

from __future__ import annotations

import logging

import pydantic as p

from lectern.auth.local import LocalAuthProvider
from lectern.auth.provider import AuthResult
from lectern.core import di
from lectern.core.config import IdentitySettings
from lectern.lib import NotSet
from lectern.model import User, UserID, UserRole, UserWithProfile
from lectern.storage import Session
from lectern.storage import user as user_storage

from .errors import Conflict, Forbidden, NotFound, ValidationError
from .policy import any_of, authorize, Caller, is_admin, is_self
from .transaction import unit_of_work

logger = logging.getLogger(__name__)

# bcrypt ignores everything past the 72nd byte
MaxPasswordBytes = 72


def check_email(email: str, settings: IdentitySettings) -> str:
    """Normalize an email address and require an allowed domain."""
    email = email.strip().lower()
    local, at, domain = email.rpartition("@")
    if not (local and at and domain):
        raise ValidationError("Enter a valid email address")
    if domain not in settings.allowed_email_domains:
        allowed = ", ".join(f"@{d}" for d in settings.allowed_email_domains)
        raise ValidationError(f"Email address must end in one of {allowed}")
    return email


def check_password(password: p.Secret[str], settings: IdentitySettings) -> None:
    secret = password.get_secret_value()
    if len(secret) < settings.min_password_length:
        raise ValidationError(f"Password must be at least {settings.min_password_length} characters long")
    if len(secret.encode("utf-8")) > MaxPasswordBytes:
        raise ValidationError(f"Password must be at most {MaxPasswordBytes} bytes long")


@di.inject
def register(
    *,
    email: str,
    password: p.Secret[str],
    confirm_password: p.Secret[str],
    first_name: str,
    last_name: str,
    role: UserRole = UserRole.Student,
    major: str | None = None,
    graduation_year: int | None = None,
    caller: Caller | None = None,
    session: Session = di.Provide["storage.persistent.session"],
    settings: IdentitySettings = di.Provide["config.identity", di.as_(IdentitySettings)],
) -> UserWithProfile:
    """Create an account and its profile.

    Anyone may register as a student; other roles are assigned by an admin.

    Raises:
        Forbidden: a non-admin asked for a role other than student
        ValidationError: the email domain or password breaks policy
        Conflict: the email is already registered
    """
    if role is not UserRole.Student and (caller is None or not caller.is_admin):
        raise Forbidden("Only an admin may assign roles")

    email = check_email(email, settings)
    check_password(password, settings)
    if password.get_secret_value() != confirm_password.get_secret_value():
        raise ValidationError("Passwords do not match")
    if not first_name.strip() or not last_name.strip():
        raise ValidationError("First and last name are required")

    conflict = "An account with that email already exists"
    with unit_of_work(session, conflict=conflict):
        if user_storage.get(email=email, session=session) is not None:
            raise Conflict(conflict)
        user = user_storage.create(
            email=email,
            password=password,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role,
            major=major,
            graduation_year=graduation_year,
            session=session,
        )

    logger.info("registered user", extra={"user_id": user.user_id, "role": user.role.value})
    return user


def authenticate(
    *,
    email: str,
    password: p.Secret[str],
    session: Session = di.Provide["storage.persistent.session"],
) -> AuthResult:
    """Check credentials; unknown email and wrong password are indistinguishable."""
    with unit_of_work(session):
        return LocalAuthProvider(session).authenticate(email, password)


def get_user(
    caller: Caller,
    user_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> UserWithProfile:
    authorize(caller, when=any_of(is_self(user_id), is_admin), message="You may only view your own account")
    with unit_of_work(session):
        user = user_storage.get(user_id=user_id, with_profile=True, session=session)
    if user is None:
        raise NotFound("User not found")
    return user


def list_users(
    caller: Caller,
    *,
    role: UserRole | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[User, ...]:
    authorize(caller, roles=[UserRole.Admin, UserRole.Professor], message="Only staff may list users")
    with unit_of_work(session):
        return user_storage.find(role=role, session=session)


@di.inject
def update_user(
    caller: Caller,
    user_id: UserID,
    *,
    email: str | NotSet = NotSet(),
    password: p.Secret[str] | NotSet = NotSet(),
    first_name: str | NotSet = NotSet(),
    last_name: str | NotSet = NotSet(),
    major: str | None | NotSet = NotSet(),
    graduation_year: int | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
    settings: IdentitySettings = di.Provide["config.identity", di.as_(IdentitySettings)],
) -> UserWithProfile:
    """Change account and profile fields together; the role cannot be changed."""
    authorize(caller, when=any_of(is_self(user_id), is_admin), message="You may only change your own account")
    if not isinstance(email, NotSet):
        email = check_email(email, settings)
    if not isinstance(password, NotSet):
        check_password(password, settings)

    conflict = "An account with that email already exists"
    with unit_of_work(session, conflict=conflict):
        if not isinstance(email, NotSet):
            existing = user_storage.get(email=email, session=session)
            if existing is not None and existing.user_id != user_id:
                raise Conflict(conflict)
        try:
            user = user_storage.update(
                user_id,
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
                major=major,
                graduation_year=graduation_year,
                session=session,
            )
        except KeyError as e:
            raise NotFound("User not found") from e

    logger.info("updated user", extra={"user_id": user_id, "by": caller.user_id})
    return user


def delete_user(
    caller: Caller,
    user_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Remove an account and its profile.

    A professor who still owns courses cannot be deleted; the database
    refuses and the refusal surfaces as Conflict.
    """
    authorize(caller, when=is_admin, message="Only an admin may delete users")
    with unit_of_work(session, conflict="That user still owns courses"):
        if not user_storage.delete(user_id, session=session):
            raise NotFound("User not found")

    logger.info("deleted user", extra={"user_id": user_id, "by": caller.user_id})
