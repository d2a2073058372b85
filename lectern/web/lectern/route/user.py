"""Account administration routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lectern.auth import get_caller
from lectern.core import di
from lectern.model import UserID, UserRole
from lectern.workflow import Caller, identity

from ..view import AccountResponse, Ok, ok, updates, UserCreateRequest, UserResponse, UserUpdateRequest

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", operation_id="create_user", status_code=status.HTTP_201_CREATED)
@di.inject
def create_user(
    request: UserCreateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[UserResponse]:
    """Create an account with any role. Admins only, except for student accounts."""
    user = identity.register(
        email=request.email,
        password=request.password,
        confirm_password=request.confirm_password,
        first_name=request.first_name,
        last_name=request.last_name,
        role=request.role,
        major=request.major,
        graduation_year=request.graduation_year,
        caller=caller,
        session=session,
    )
    return ok(UserResponse.of(user))


@router.get("", operation_id="list_users")
@di.inject
def list_users(
    role: UserRole | None = None,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[AccountResponse]]:
    users = identity.list_users(caller, role=role, session=session)
    return ok([AccountResponse(user_id=u.user_id, email=u.email, role=u.role) for u in users])


@router.get("/{user_id}", operation_id="get_user")
@di.inject
def get_user(
    user_id: UserID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[UserResponse]:
    return ok(UserResponse.of(identity.get_user(caller, user_id, session=session)))


@router.patch("/{user_id}", operation_id="update_user")
@di.inject
def update_user(
    user_id: UserID,
    request: UserUpdateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[UserResponse]:
    fields = updates(request, nullable=("major", "graduation_year"))
    return ok(UserResponse.of(identity.update_user(caller, user_id, **fields, session=session)))


@router.delete("/{user_id}", operation_id="delete_user")
@di.inject
def delete_user(
    user_id: UserID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[None]:
    identity.delete_user(caller, user_id, session=session)
    return ok(None)
