"""Typed failures of workflow operations.

Every error carries a message fit to show the person who made the request;
the HTTP layer and the CLI translate the class into a status or exit code.
"""

from __future__ import annotations


class WorkflowError(Exception):
    message: str

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(WorkflowError):
    """The entity is absent, or the caller may not know that it exists."""


class Forbidden(WorkflowError):
    """The caller is authenticated but has the wrong role or does not own the entity."""


class Conflict(WorkflowError):
    """A uniqueness or state-transition rule would be violated."""


class ValidationError(WorkflowError):
    """The input is malformed or breaks a configured policy."""


class StorageError(WorkflowError):
    """The transaction failed and was rolled back; nothing was applied."""

    DefaultMessage = "Something went wrong, please try again"

    def __init__(self, message: str = DefaultMessage) -> None:
        super().__init__(message)
