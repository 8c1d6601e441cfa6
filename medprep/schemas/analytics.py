"""Pydantic schemas for analytics."""

from datetime import date

from pydantic import Field

from medprep.schemas.base import CamelModel
from medprep.schemas.session import SessionOut

# ============================================================================
# Analytics Response Schemas
# ============================================================================


class PerformanceMetrics(CamelModel):
    """Overall performance."""

    total_questions: int
    correct_answers: int
    accuracy: float
    average_time_per_question: float
    total_time_spent: float
    flagged_questions: int


class BreakdownStats(CamelModel):
    total_questions: int
    correct_answers: int
    accuracy: float
    average_time: float


class SubjectBreakdown(BreakdownStats):
    subject: str


class SystemBreakdown(BreakdownStats):
    system: str


class DifficultyBreakdown(BreakdownStats):
    difficulty: str


class ProgressPoint(CamelModel):
    """Daily progress data point."""

    date: date
    accuracy: float
    questions_answered: int
    time_spent: float


class AnalyticsData(CamelModel):
    overall: PerformanceMetrics
    by_subject: list[SubjectBreakdown]
    by_system: list[SystemBreakdown]
    by_difficulty: list[DifficultyBreakdown]
    progress: list[ProgressPoint]
    recent_sessions: list[SessionOut] = Field(default_factory=list)


class AnalyticsResponse(CamelModel):
    success: bool = True
    analytics: AnalyticsData
