"""Question model."""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from medprep.common.clock import utcnow
from medprep.db.base import Base


class Difficulty(str, PyEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Question(Base):
    """Published practice question. Options are stored as [{id, letter, text}, ...]."""

    __tablename__ = "questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    question_bank_id = Column(
        Uuid,
        ForeignKey("question_banks.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )
    position = Column(Integer, nullable=False, default=0)
    question_text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    correct_answer = Column(String(10), nullable=False)  # one of options[*].id
    explanation = Column(Text, nullable=True)
    subject = Column(String(100), nullable=True)
    system = Column(String(100), nullable=True)
    difficulty = Column(String(10), nullable=False, default=Difficulty.MEDIUM.value)
    tags = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    question_bank = relationship("QuestionBank", back_populates="questions")

    __table_args__ = (Index("ix_questions_bank_position", "question_bank_id", "position"),)

    def option_ids(self) -> list[str]:
        return [str(option.get("id")) for option in (self.options or [])]

    def has_option(self, option_id: str) -> bool:
        return option_id in self.option_ids()
