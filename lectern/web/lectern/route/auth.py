"""Authentication routes."""

from __future__ import annotations

import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from lectern.auth import AuthContext, get_current_user, JWTManager
from lectern.core import di
from lectern.model import UserWithProfile
from lectern.workflow import Caller, identity

from ..view import LoginRequest, LoginResponse, Ok, ok, RegisterRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _login_response(user: UserWithProfile, jwt_manager: JWTManager) -> LoginResponse:
    expires_delta = datetime.timedelta(minutes=jwt_manager.access_token_expire_minutes)
    expires_at = datetime.datetime.now(datetime.UTC) + expires_delta
    access_token = jwt_manager.create_access_token(user.user_id, user.role, expires_delta=expires_delta)
    return LoginResponse(
        user=UserResponse.of(user),
        token=TokenResponse(access_token=access_token, expires_at=expires_at),
    )


@router.post("/login", operation_id="login")
@di.inject
def login(
    request: LoginRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    jwt_manager: JWTManager = Depends(di.Provide["auth.jwt_manager"]),
) -> Ok[LoginResponse]:
    """Authenticate a user and return an access token."""
    result = identity.authenticate(email=request.email, password=request.password, session=session)
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    caller = Caller(result.user.user_id, result.user.role)
    user = identity.get_user(caller, result.user.user_id, session=session)
    return ok(_login_response(user, jwt_manager))


@router.post("/register", operation_id="register", status_code=status.HTTP_201_CREATED)
@di.inject
def register(
    request: RegisterRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    jwt_manager: JWTManager = Depends(di.Provide["auth.jwt_manager"]),
) -> Ok[LoginResponse]:
    """Register as a student and log in."""
    user = identity.register(
        email=request.email,
        password=request.password,
        confirm_password=request.confirm_password,
        first_name=request.first_name,
        last_name=request.last_name,
        major=request.major,
        graduation_year=request.graduation_year,
        session=session,
    )
    return ok(_login_response(user, jwt_manager))


@router.get("/me", operation_id="get_current_user")
@di.inject
def get_me(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[UserResponse]:
    """Get the current authenticated user."""
    return ok(UserResponse.of(identity.get_user(auth.caller, auth.user.user_id, session=session)))
