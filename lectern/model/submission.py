import datetime
import enum

from .base import WithTimestamps
from .id import CourseItemID, EnrollmentID, SubmissionID
from .user import PersonSummary


class SubmissionStatus(enum.Enum):
    Draft = "draft"
    Submitted = "submitted"


class Submission(WithTimestamps):
    submission_id: SubmissionID
    enrollment_id: EnrollmentID
    item_id: CourseItemID
    content: str = ""
    status: SubmissionStatus = SubmissionStatus.Draft
    submit_time: datetime.datetime | None = None
    auto_score: float | None = None


class SubmissionWithStudent(Submission):
    student: PersonSummary
