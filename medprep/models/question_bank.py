"""Question bank model."""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from medprep.common.clock import utcnow
from medprep.db.base import Base


class QuestionBankStatus(str, PyEnum):
    """Aggregate processing status of a bank."""

    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class FileType(str, PyEnum):
    PDF = "pdf"
    DOCX = "docx"
    XLSX = "xlsx"


class QuestionBank(Base):
    """Named collection of questions owned by one user."""

    __tablename__ = "question_banks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    subject = Column(String(100), nullable=True)
    total_questions = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=QuestionBankStatus.UPLOADING.value)
    file_type = Column(String(10), nullable=True)
    file_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    questions = relationship(
        "Question",
        back_populates="question_bank",
        order_by="Question.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("total_questions >= 0", name="ck_question_banks_total_nonneg"),
        Index("ix_question_banks_user_created", "user_id", "created_at"),
    )
