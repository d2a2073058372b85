"""Authentication dependencies for FastAPI routes."""

from __future__ import annotations

import typing as t

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lectern.core import di
from lectern.model import User
from lectern.workflow.policy import Caller

from .jwt import JWTManager, TokenData
from .local import LocalAuthProvider

# Security scheme for JWT bearer tokens
bearer_scheme = HTTPBearer(auto_error=False)


class AuthContext(t.NamedTuple):
    """Current authentication context."""

    user: User
    caller: Caller
    token_data: TokenData


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@di.inject
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    jwt_manager: JWTManager = Depends(di.Provide["auth.jwt_manager"]),
) -> AuthContext:
    """Dependency to get the current authenticated user.

    The caller's role is read from the account rather than trusted from the
    token.

    Raises:
        HTTPException 401: If no token provided, the token is invalid, or
            the user no longer exists
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    token_data = jwt_manager.decode_token(credentials.credentials)
    if token_data is None:
        raise _unauthorized("Invalid or expired token")

    with session.begin():
        user = LocalAuthProvider(session).get_user(token_data.user_id)
    if user is None:
        raise _unauthorized("User not found")

    return AuthContext(user=user, caller=Caller(user.user_id, user.role), token_data=token_data)


def get_caller(auth: AuthContext = Depends(get_current_user)) -> Caller:
    return auth.caller
