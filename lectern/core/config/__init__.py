__all__ = [
    "AuthSettings",
    "IdentitySettings",
    "LecternWebSettings",
    "LoggingSettings",
    "Secrets",
    "Settings",
    "WebSettings",
]


from .identity import IdentitySettings
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .web import AuthSettings, LecternWebSettings, WebSettings
