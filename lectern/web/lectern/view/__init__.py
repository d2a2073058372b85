"""View models for the Lectern web application."""

__all__ = [
    # Envelope
    "Failure",
    "Ok",
    "ok",
    # Auth views
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "TokenResponse",
    "UserResponse",
    # User views
    "AccountResponse",
    "UserCreateRequest",
    "UserUpdateRequest",
    # Course views
    "CourseCreateRequest",
    "CourseUpdateRequest",
    "ItemCreateRequest",
    "ItemUpdateRequest",
    "OptionRequest",
    "QuestionCreateRequest",
    # Enrollment views
    "DirectEnrollRequest",
    "InviteRequest",
    # Submission views
    "FinishRequest",
    "ResponseGradeRequest",
    "ResponseRequest",
    "ScoreResponse",
    "SubmissionStartRequest",
    "SubmissionUpdateRequest",
    # Grade views
    "GradeRequest",
    # Partial updates
    "updates",
]

from .auth import LoginRequest, LoginResponse, RegisterRequest, TokenResponse, UserResponse
from .course import CourseCreateRequest, CourseUpdateRequest, ItemCreateRequest, ItemUpdateRequest, OptionRequest, \
    QuestionCreateRequest
from .enrollment import DirectEnrollRequest, InviteRequest
from .envelope import Failure, ok, Ok
from .grade import GradeRequest
from .partial import updates
from .submission import FinishRequest, ResponseGradeRequest, ResponseRequest, ScoreResponse, SubmissionStartRequest, \
    SubmissionUpdateRequest
from .user import AccountResponse, UserCreateRequest, UserUpdateRequest
