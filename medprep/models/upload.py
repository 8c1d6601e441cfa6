"""File upload tracking model."""

from enum import Enum as PyEnum

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text, Uuid

from medprep.common.clock import utcnow
from medprep.db.base import Base


class UploadStatus(str, PyEnum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class FileUpload(Base):
    """An uploaded source document awaiting processing into a question bank."""

    __tablename__ = "file_uploads"

    id = Column(String(64), primary_key=True)  # public upload identifier
    user_id = Column(String(255), nullable=False, index=True)
    question_bank_id = Column(
        Uuid,
        ForeignKey("question_banks.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )
    file_name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    file_type = Column(String(10), nullable=False)
    mime_type = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default=UploadStatus.PENDING.value)
    progress = Column(Integer, nullable=False, default=0)  # 0-100
    file_path = Column(String(1024), nullable=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    processed_at = Column(DateTime(timezone=True), nullable=True)
