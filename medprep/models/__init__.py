"""Database models."""

# Import all models here so Base.metadata is complete
from medprep.models.practice import PracticeSession, SessionMode, SessionStatus, UserAnswer
from medprep.models.question import Difficulty, Question
from medprep.models.question_bank import FileType, QuestionBank, QuestionBankStatus
from medprep.models.upload import FileUpload, UploadStatus

__all__ = [
    "QuestionBank",
    "QuestionBankStatus",
    "FileType",
    "Question",
    "Difficulty",
    "PracticeSession",
    "SessionMode",
    "SessionStatus",
    "UserAnswer",
    "FileUpload",
    "UploadStatus",
]
