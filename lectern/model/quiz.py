import enum

from .base import BaseModel, WithCtime, WithMtime
from .id import CourseItemID, OptionID, QuestionID, SubmissionID


class QuestionKind(enum.Enum):
    MultipleChoice = "multiple_choice"
    ShortAnswer = "short_answer"


class QuizOption(BaseModel):
    option_id: OptionID
    question_id: QuestionID
    text: str
    position: int
    # withheld (None) when questions are listed for a student
    is_correct: bool | None = None


class QuizQuestion(WithCtime):
    question_id: QuestionID
    item_id: CourseItemID
    kind: QuestionKind
    text: str
    points: float
    position: int
    options: list[QuizOption] = []


class QuizResponse(WithMtime):
    submission_id: SubmissionID
    question_id: QuestionID
    response: str
    manual_points: float | None = None
