import datetime
import enum

from .base import WithTimestamps
from .id import CourseID, CourseItemID, UserID


class ItemKind(enum.Enum):
    Assignment = "assignment"
    Quiz = "quiz"


class Course(WithTimestamps):
    course_id: CourseID
    professor_id: UserID
    name: str
    prefix: str
    number: str
    room: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    days: str | None = None


class CourseItem(WithTimestamps):
    item_id: CourseItemID
    course_id: CourseID
    kind: ItemKind
    title: str
    max_points: float
    due_date: datetime.datetime | None = None
    content: str = ""
