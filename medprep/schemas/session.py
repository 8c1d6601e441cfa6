"""Pydantic schemas for practice sessions."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from medprep.models.practice import SessionMode, SessionStatus
from medprep.schemas.base import CamelModel


class SessionCreate(CamelModel):
    """Request to start a practice session."""

    question_bank_id: UUID | None = Field(None, description="Bank to practice from (optional)")
    mode: SessionMode = Field(SessionMode.TUTOR, description="tutor, timed or review")
    total_questions: int = Field(..., description="Target number of questions")


class SessionOut(CamelModel):
    """Session response."""

    id: UUID
    question_bank_id: UUID | None
    mode: SessionMode
    status: SessionStatus
    total_questions: int
    completed_questions: int
    correct_answers: int
    time_spent: float
    accuracy: float
    started_at: datetime
    paused_at: datetime | None = None
    completed_at: datetime | None = None


class SessionResponse(CamelModel):
    success: bool = True
    session: SessionOut


class SessionListResponse(CamelModel):
    success: bool = True
    sessions: list[SessionOut]
