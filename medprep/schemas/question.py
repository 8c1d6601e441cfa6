"""Pydantic schemas for questions and answer submission."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from medprep.schemas.base import CamelModel
from medprep.schemas.session import SessionOut


class QuestionOption(CamelModel):
    id: str
    letter: str
    text: str


class QuestionOut(CamelModel):
    """Question as served to the practice UI.

    `correct_answer` and `explanation` are only filled in review mode; other modes
    reveal them through the answer submission response.
    """

    id: UUID
    question_bank_id: UUID
    question_text: str
    options: list[QuestionOption]
    subject: str | None = None
    system: str | None = None
    difficulty: str
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    explanation: str | None = None


class QuestionListResponse(CamelModel):
    success: bool = True
    questions: list[QuestionOut]
    total: int
    has_more: bool


class QuestionCreate(CamelModel):
    """Question payload used by content seeding."""

    question_text: str
    options: list[QuestionOption]
    correct_answer: str
    explanation: str | None = None
    subject: str | None = None
    system: str | None = None
    difficulty: str = "medium"
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)


# ============================================================================
# Answer Schemas
# ============================================================================


class AnswerSubmit(CamelModel):
    """Submit an answer for a question.

    Range checks live in `validate_answer_submission` so they run as an explicit
    step before persistence.
    """

    question_id: str = Field(..., description="Question ID")
    selected_option: str = Field(..., description="Selected option id (e.g. 'b')")
    time_spent: float = Field(0.0, description="Seconds spent on the question")
    is_flagged: bool = Field(False, description="Flag for later review")
    session_id: UUID | None = Field(None, description="Owning practice session, if any")


class AnswerOut(CamelModel):
    id: UUID
    question_id: UUID
    session_id: UUID | None
    attempt_number: int
    selected_option: str
    is_correct: bool
    time_spent: float
    is_flagged: bool
    answered_at: datetime


class AnswerSubmitResponse(CamelModel):
    success: bool = True
    is_correct: bool
    explanation: str | None
    next_question_id: UUID | None
    answer_id: UUID
    attempt_number: int
    session: SessionOut | None = None


class FlagUpdate(CamelModel):
    is_flagged: bool


class AnswerResponse(CamelModel):
    success: bool = True
    answer: AnswerOut
