"""Local authentication provider using bcrypt for password hashing."""

from __future__ import annotations

import bcrypt
import pydantic as p
from sqlalchemy.orm import Session

from lectern.model import User, UserID
from lectern.storage import user as user_storage

from .provider import AuthProvider, AuthResult

InvalidCredentials = "Invalid email or password"


class LocalAuthProvider(AuthProvider):
    """Checks passwords against the bcrypt hashes stored in the users table.

    The caller owns the session and its transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def authenticate(self, email: str, password: p.Secret[str]) -> AuthResult:
        user = user_storage.get(email=email, session=self._session)
        if user is None or not self.verify_password(user, password):
            return AuthResult(success=False, error=InvalidCredentials)
        return AuthResult(success=True, user=user)

    def get_user(self, user_id: UserID) -> User | None:
        return user_storage.get(user_id=user_id, session=self._session)

    def verify_password(self, user: User, password: p.Secret[str]) -> bool:
        if user.password_hash is None:
            return False
        secret = password.get_secret_value().encode("utf-8")
        # bcrypt refuses secrets past 72 bytes; no stored hash can match one
        if len(secret) > 72:
            return False
        return bcrypt.checkpw(secret, user.password_hash.encode("utf-8"))
