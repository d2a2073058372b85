__all__ = [
    "BootConfiguration",
    "di",
    "LecternContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


# di must load before the containers, storage modules import it at module scope
from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, LecternContainer
from .provider import LoggingProvider, TimestampProvider
