__all__ = [
    "AuthContainer",
    "BootConfiguration",
    "LecternContainer",
    "PersistentContainer",
    "StorageContainer",
]

from .auth import AuthContainer
from .lectern import BootConfiguration, LecternContainer
from .storage import PersistentContainer, StorageContainer
