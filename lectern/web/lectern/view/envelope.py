"""The response envelope every API route answers with."""

from __future__ import annotations

import typing as t

import pydantic as p

T = t.TypeVar("T")


class Ok(p.BaseModel, t.Generic[T]):
    success: t.Literal[True] = True
    data: T


class Failure(p.BaseModel):
    success: t.Literal[False] = False
    message: str


def ok(data: T) -> Ok[T]:
    return Ok[T](data=data)
