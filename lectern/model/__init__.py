__all__ = [
    # Base
    "BaseModel",
    "WithCtime",
    "WithMtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    # ID Types
    "ShortUUIDKey",
    "UserID",
    "ProfileID",
    "CourseID",
    "CourseItemID",
    "EnrollmentID",
    "SubmissionID",
    "QuestionID",
    "OptionID",
    # Identity
    "User",
    "UserRole",
    "Profile",
    "UserWithProfile",
    "PersonSummary",
    # Catalog
    "Course",
    "CourseItem",
    "ItemKind",
    # Enrollment
    "Enrollment",
    "EnrollmentStatus",
    "EnrollmentWithCourse",
    "EnrollmentWithStudent",
    # Submission
    "Submission",
    "SubmissionStatus",
    "SubmissionWithStudent",
    # Quiz
    "QuestionKind",
    "QuizOption",
    "QuizQuestion",
    "QuizResponse",
    # Grades
    "FinalGrade",
    "Grade",
]

from .base import BaseModel, WithCtime, WithMtime, WithTimestamps
from .course import Course, CourseItem, ItemKind
from .enrollment import Enrollment, EnrollmentStatus, EnrollmentWithCourse, EnrollmentWithStudent
from .enum import DeploymentEnvironment
from .grade import FinalGrade, Grade
from .id import CourseID, CourseItemID, EnrollmentID, OptionID, ProfileID, QuestionID, ShortUUIDKey, SubmissionID, \
    UserID
from .quiz import QuestionKind, QuizOption, QuizQuestion, QuizResponse
from .submission import Submission, SubmissionStatus, SubmissionWithStudent
from .user import PersonSummary, Profile, User, UserRole, UserWithProfile
