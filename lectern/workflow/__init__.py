"""The academic workflow engine.

Operations take an explicit `Caller` and a session, run as one unit of work,
and fail with the typed errors of `lectern.workflow.errors`.
"""

import importlib
import sys
import types
import typing as t

from .errors import Conflict, Forbidden, NotFound, StorageError, ValidationError, WorkflowError
from .policy import Caller

__all__ = [
    "Caller",
    "Conflict",
    "Forbidden",
    "NotFound",
    "StorageError",
    "ValidationError",
    "WorkflowError",
    # Operation modules
    "identity",
    "catalog",
    "enrollment",
    "submission",
    "scoring",
    "grading",
]

if t.TYPE_CHECKING:
    from . import catalog, enrollment, grading, identity, scoring, submission

_modules = {"identity", "catalog", "enrollment", "submission", "scoring", "grading"}


def __getattr__(name: str) -> types.ModuleType:
    if name in _modules:
        module = importlib.import_module(f"{__name__}.{name}")
        setattr(sys.modules[__name__], name, module)
        return module
    raise AttributeError(f"module {__name__} has no attribute {name}")
