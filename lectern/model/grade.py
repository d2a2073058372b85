from .base import WithMtime, WithTimestamps
from .id import CourseID, CourseItemID, UserID


class Grade(WithTimestamps):
    item_id: CourseItemID
    student_id: UserID
    score: float
    feedback: str | None = None
    manual: bool = False


class FinalGrade(WithMtime):
    course_id: CourseID
    student_id: UserID
    points_earned: float
    points_possible: float
    percentage: float | None = None
    letter: str | None = None
