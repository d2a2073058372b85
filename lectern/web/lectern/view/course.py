"""View models for courses, items and quiz questions."""

from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant
import pydantic as p

from lectern.model import ItemKind, QuestionKind


class CourseCreateRequest(p.BaseModel):
    name: str
    prefix: str
    number: str
    room: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    days: str | None = None


class CourseUpdateRequest(p.BaseModel):
    """Only the fields present in the request are changed."""

    name: str | None = None
    prefix: str | None = None
    number: str | None = None
    room: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    days: str | None = None


class ItemCreateRequest(p.BaseModel):
    kind: ItemKind
    title: str
    max_points: float
    due_date: datetime.datetime | None = None
    content: str = ""


class ItemUpdateRequest(p.BaseModel):
    """Only the fields present in the request are changed; kind is fixed."""

    title: str | None = None
    max_points: float | None = None
    due_date: datetime.datetime | None = None
    content: str | None = None


class OptionRequest(p.BaseModel):
    text: str
    is_correct: bool = False


class QuestionCreateRequest(p.BaseModel):
    kind: QuestionKind
    text: str
    points: t.Annotated[float, ant.Ge(0)] = 1.0
    options: list[OptionRequest] = []
