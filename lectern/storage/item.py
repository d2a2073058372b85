from __future__ import annotations

import datetime

import sqlalchemy as sqla

from lectern.core import di
from lectern.lib import NotSet
from lectern.lib.util import compact
from lectern.model import CourseID, CourseItem, CourseItemID, ItemKind

from . import Session
from .table import course_items


def get(
    item_id: CourseItemID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseItem | None:
    """Get a course item by ID."""
    stmt = sqla.select(course_items.__table__).where(course_items.item_id == item_id)
    row = session.execute(stmt).mappings().one_or_none()
    return CourseItem(**row) if row else None


def find(
    *,
    course_id: CourseID | None = None,
    kind: ItemKind | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[CourseItem, ...]:
    """Find course items, ordered by due date then title."""
    stmt = sqla.select(course_items.__table__).order_by(course_items.due_date, course_items.title)
    if course_id is not None:
        stmt = stmt.where(course_items.course_id == course_id)
    if kind is not None:
        stmt = stmt.where(course_items.kind == kind.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(CourseItem(**row) for row in rows)


def create(
    *,
    course_id: CourseID,
    kind: ItemKind,
    title: str,
    max_points: float,
    due_date: datetime.datetime | None = None,
    content: str = "",
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseItem:
    """Create a new course item."""
    item_id = CourseItemID()
    stmt = sqla.insert(course_items).values(
        item_id=item_id,
        course_id=course_id,
        kind=kind.value,
        title=title,
        max_points=max_points,
        due_date=due_date,
        content=content,
    )
    session.execute(stmt)
    session.flush()
    result = get(item_id, session=session)
    assert result is not None
    return result


def update(
    item_id: CourseItemID,
    *,
    title: str | NotSet = NotSet(),
    max_points: float | NotSet = NotSet(),
    due_date: datetime.datetime | None | NotSet = NotSet(),
    content: str | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseItem:
    """Update a course item. The kind of an item is fixed at creation.

    Raises:
        KeyError: If item_id does not correspond to an item
    """
    values = compact(
        {"title": title, "max_points": max_points, "due_date": due_date, "content": content},
        NotSet,
    )
    if not values:
        values = {"item_id": item_id}

    result = session.execute(sqla.update(course_items).where(course_items.item_id == item_id).values(**values))
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Course item {item_id} not found")

    session.flush()
    item = get(item_id, session=session)
    assert item is not None
    return item


def delete(
    item_id: CourseItemID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Delete a course item along with its questions, submissions and grades."""
    result = session.execute(sqla.delete(course_items).where(course_items.item_id == item_id))
    return bool(result.rowcount)  # pyright: ignore[reportUnknownArgumentType, reportAttributeAccessIssue]
