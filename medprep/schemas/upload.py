"""Pydantic schemas for file uploads and question banks."""

from datetime import datetime
from uuid import UUID

from medprep.schemas.base import CamelModel


class UploadResponse(CamelModel):
    success: bool = True
    upload_id: str
    question_bank_id: UUID
    file_name: str
    file_size: int
    file_type: str
    status: str
    message: str


class UploadStatusResponse(CamelModel):
    success: bool = True
    upload_id: str
    question_bank_id: UUID
    status: str
    progress: int
    message: str
    error: str | None = None


class QuestionBankOut(CamelModel):
    id: UUID
    name: str
    description: str | None = None
    subject: str | None = None
    total_questions: int
    status: str
    file_type: str | None = None
    created_at: datetime
    updated_at: datetime


class QuestionBankResponse(CamelModel):
    success: bool = True
    question_bank: QuestionBankOut


class QuestionBankListResponse(CamelModel):
    success: bool = True
    question_banks: list[QuestionBankOut]
