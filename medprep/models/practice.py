"""Practice session and answer models."""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
)
from sqlalchemy.orm import relationship

from medprep.common.clock import utcnow
from medprep.db.base import Base


class SessionMode(str, PyEnum):
    """Practice session mode."""

    TUTOR = "tutor"
    TIMED = "timed"
    REVIEW = "review"


class SessionStatus(str, PyEnum):
    """Practice session status."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class PracticeSession(Base):
    """An ordered run of answers under one mode, with progress counters."""

    __tablename__ = "practice_sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    question_bank_id = Column(
        Uuid,
        ForeignKey("question_banks.id", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
    )
    mode = Column(String(10), nullable=False, default=SessionMode.TUTOR.value)
    status = Column(String(10), nullable=False, default=SessionStatus.ACTIVE.value)

    # Counters
    total_questions = Column(Integer, nullable=False)
    completed_questions = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    time_spent = Column(Float, nullable=False, default=0.0)  # seconds

    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    paused_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Typed key/value map (see medprep.common.metadata); "metadata" is reserved on models
    meta = Column("metadata", JSON, nullable=False, default=dict)

    answers = relationship("UserAnswer", back_populates="session")

    __table_args__ = (
        CheckConstraint("total_questions >= 1", name="ck_practice_sessions_total_positive"),
        CheckConstraint(
            "completed_questions >= 0 AND completed_questions <= total_questions",
            name="ck_practice_sessions_completed_bounds",
        ),
        CheckConstraint(
            "correct_answers >= 0 AND correct_answers <= completed_questions",
            name="ck_practice_sessions_correct_bounds",
        ),
        Index("ix_practice_sessions_user_started", "user_id", "started_at"),
    )

    @property
    def accuracy(self) -> float:
        if not self.completed_questions:
            return 0.0
        return self.correct_answers / self.completed_questions


class UserAnswer(Base):
    """One answer event per (user, question, attempt).

    Append-only: after insert only `is_flagged` may change.
    """

    __tablename__ = "user_answers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    question_id = Column(
        Uuid,
        ForeignKey("questions.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )
    session_id = Column(
        Uuid,
        ForeignKey("practice_sessions.id", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
    )
    attempt_number = Column(Integer, nullable=False, default=1)
    selected_option = Column(String(10), nullable=False)
    is_correct = Column(Boolean, nullable=False)
    time_spent = Column(Float, nullable=False, default=0.0)  # seconds
    is_flagged = Column(Boolean, nullable=False, default=False)
    answered_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    question = relationship("Question")
    session = relationship("PracticeSession", back_populates="answers")

    __table_args__ = (
        CheckConstraint("time_spent >= 0", name="ck_user_answers_time_nonneg"),
        Index("ix_user_answers_user_answered", "user_id", "answered_at"),
        Index("ix_user_answers_user_question", "user_id", "question_id"),
        Index("ix_user_answers_session_id", "session_id"),
    )
