"""Authorization guard shared by every workflow operation.

Operations call `authorize()` once, at their boundary, with the roles allowed
to perform them and, where ownership matters, a predicate over the caller.
"""

from __future__ import annotations

import typing as t

from lectern.model import UserID, UserRole

from .errors import Forbidden


class Caller(t.NamedTuple):
    """An already-authenticated identity, passed explicitly to every operation."""

    user_id: UserID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.Admin

    @property
    def is_professor(self) -> bool:
        return self.role is UserRole.Professor

    @property
    def is_student(self) -> bool:
        return self.role is UserRole.Student


Predicate = t.Callable[[Caller], bool]


def authorize(
    caller: Caller,
    *,
    roles: t.Collection[UserRole] = (),
    when: Predicate | None = None,
    message: str = "You are not allowed to do that",
) -> None:
    """Raise Forbidden unless the caller has one of `roles` and satisfies `when`.

    An empty `roles` admits every role.
    """
    if roles and caller.role not in roles:
        raise Forbidden(message)
    if when is not None and not when(caller):
        raise Forbidden(message)


def is_self(user_id: UserID) -> Predicate:
    return lambda caller: caller.user_id == user_id


def is_owner(owner_id: UserID) -> Predicate:
    """The caller is the owning professor of a course (or of something in it)."""
    return lambda caller: caller.is_professor and caller.user_id == owner_id


def is_admin(caller: Caller) -> bool:
    return caller.is_admin


def any_of(*predicates: Predicate) -> Predicate:
    return lambda caller: any(p(caller) for p in predicates)
