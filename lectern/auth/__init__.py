"""Authentication utilities."""

__all__ = [
    "AuthContext",
    "AuthProvider",
    "AuthResult",
    "JWTManager",
    "LocalAuthProvider",
    "TokenData",
    "get_caller",
    "get_current_user",
]

from .jwt import JWTManager, TokenData
from .local import LocalAuthProvider
from .middleware import AuthContext, get_caller, get_current_user
from .provider import AuthProvider, AuthResult
