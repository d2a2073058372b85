import datetime
import enum

from .base import WithMtime
from .course import Course
from .id import CourseID, EnrollmentID, UserID
from .user import PersonSummary


class EnrollmentStatus(enum.Enum):
    Pending = "pending"
    Active = "active"
    Dropped = "dropped"
    Completed = "completed"


class Enrollment(WithMtime):
    enrollment_id: EnrollmentID
    course_id: CourseID
    student_id: UserID
    status: EnrollmentStatus
    enrollment_date: datetime.datetime


class EnrollmentWithStudent(Enrollment):
    student: PersonSummary


class EnrollmentWithCourse(Enrollment):
    course: Course
    professor: PersonSummary
