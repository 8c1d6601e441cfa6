"""Explicit validation run before any persistence call.

Each validator returns a `ValidationResult`; callers turn a failed result into an
`AppError` so nothing reaches the database unchecked.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from medprep.models.practice import SessionMode
from medprep.models.question import Difficulty

MAX_TIME_SPENT_SECONDS = 24 * 60 * 60
MAX_SESSION_QUESTIONS = 500
MAX_OPTION_ID_LENGTH = 10


class ValidationError:
    """Validation error for a specific field."""

    def __init__(self, code: str, message: str, field: str | None = None):
        """
        Initialize validation error.

        Args:
            code: Error code (stable identifier)
            message: Human-readable message
            field: Field name that failed validation
        """
        self.code = code
        self.message = message
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
        }

    def __repr__(self) -> str:
        return f"ValidationError({self.code!r}, field={self.field!r})"


@dataclass
class ValidationResult:
    """Outcome of a validation pass."""

    errors: list[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def first(self) -> ValidationError | None:
        return self.errors[0] if self.errors else None

    def add(self, code: str, message: str, field_name: str | None = None) -> None:
        self.errors.append(ValidationError(code, message, field_name))

    def to_list(self) -> list[dict[str, Any]]:
        return [error.to_dict() for error in self.errors]


# Error codes (stable)
MISSING_REQUIRED = "MISSING_REQUIRED"
INVALID_VALUE = "INVALID_VALUE"
OUT_OF_RANGE = "OUT_OF_RANGE"
INVALID_OPTIONS = "INVALID_OPTIONS"
INVALID_CORRECT = "INVALID_CORRECT"
INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
FILE_TOO_LARGE = "FILE_TOO_LARGE"
EMPTY_FILE = "EMPTY_FILE"
NO_FILE = "NO_FILE"
INVALID_DATE_RANGE = "INVALID_DATE_RANGE"


def validate_answer_submission(
    selected_option: str | None,
    time_spent: float | None,
    is_flagged: Any = False,
) -> ValidationResult:
    result = ValidationResult()

    if selected_option is None or not str(selected_option).strip():
        result.add(MISSING_REQUIRED, "selectedOption is required", "selectedOption")
    elif len(selected_option) > MAX_OPTION_ID_LENGTH:
        result.add(INVALID_VALUE, "selectedOption is not a valid option id", "selectedOption")

    if time_spent is None:
        result.add(MISSING_REQUIRED, "timeSpent is required", "timeSpent")
    elif time_spent != time_spent or time_spent < 0:  # NaN or negative
        result.add(OUT_OF_RANGE, "timeSpent must be a non-negative number of seconds", "timeSpent")
    elif time_spent > MAX_TIME_SPENT_SECONDS:
        result.add(OUT_OF_RANGE, "timeSpent exceeds 24 hours", "timeSpent")

    if not isinstance(is_flagged, bool):
        result.add(INVALID_VALUE, "isFlagged must be a boolean", "isFlagged")

    return result


def validate_session_create(
    mode: str | SessionMode,
    total_questions: int,
    available_questions: int | None = None,
) -> ValidationResult:
    """`available_questions` is the bank's question count when the session is bound to a bank."""
    result = ValidationResult()

    try:
        SessionMode(mode)
    except ValueError:
        result.add(INVALID_VALUE, f"Unknown mode '{mode}'", "mode")

    if total_questions < 1:
        result.add(OUT_OF_RANGE, "totalQuestions must be at least 1", "totalQuestions")
    elif total_questions > MAX_SESSION_QUESTIONS:
        result.add(
            OUT_OF_RANGE,
            f"totalQuestions must be at most {MAX_SESSION_QUESTIONS}",
            "totalQuestions",
        )
    elif available_questions is not None and total_questions > available_questions:
        result.add(
            "NOT_ENOUGH_QUESTIONS",
            f"Only {available_questions} questions available, but {total_questions} requested",
            "totalQuestions",
        )

    return result


def validate_question_payload(
    question_text: str | None,
    options: list[dict[str, Any]] | None,
    correct_answer: str | None,
    difficulty: str | None = None,
) -> ValidationResult:
    result = ValidationResult()

    if not question_text or not question_text.strip():
        result.add(MISSING_REQUIRED, "Question text is required", "questionText")

    option_ids: list[str] = []
    if not options or len(options) < 2:
        result.add(INVALID_OPTIONS, "A question needs at least two options", "options")
    else:
        for index, option in enumerate(options):
            option_id = str(option.get("id") or "").strip()
            if not option_id or not str(option.get("text") or "").strip():
                result.add(INVALID_OPTIONS, f"Option {index + 1} needs an id and text", "options")
            option_ids.append(option_id)
        if len(set(option_ids)) != len(option_ids):
            result.add(INVALID_OPTIONS, "Option ids must be unique", "options")

    if not correct_answer:
        result.add(MISSING_REQUIRED, "Correct answer is required", "correctAnswer")
    elif option_ids and correct_answer not in option_ids:
        result.add(
            INVALID_CORRECT,
            f"Correct answer '{correct_answer}' is not one of the option ids",
            "correctAnswer",
        )

    if difficulty is not None:
        try:
            Difficulty(difficulty)
        except ValueError:
            result.add(INVALID_VALUE, f"Unknown difficulty '{difficulty}'", "difficulty")

    return result


def validate_upload(
    filename: str | None,
    content_type: str | None,
    size: int | None,
    allowed_mime_types: list[str],
    max_bytes: int,
) -> ValidationResult:
    """Reject a file before it touches storage."""
    result = ValidationResult()

    if not filename:
        result.add(NO_FILE, "No file provided", "file")
        return result

    if content_type not in allowed_mime_types:
        result.add(
            INVALID_FILE_TYPE,
            "Invalid file type. Please upload PDF, DOCX, or XLSX files.",
            "file",
        )

    if size is not None:
        if size > max_bytes:
            result.add(
                FILE_TOO_LARGE,
                f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.",
                "file",
            )
        elif size == 0:
            result.add(EMPTY_FILE, "File is empty", "file")

    return result


def validate_date_range(start: date | None, end: date | None) -> ValidationResult:
    result = ValidationResult()
    if start and end and start > end:
        result.add(INVALID_DATE_RANGE, "'from' must not be after 'to'", "from")
    return result


_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")


def sanitize_filename(filename: str) -> str:
    """Strip potentially dangerous characters from a user-supplied file name."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _REPEATED_UNDERSCORES.sub("_", _UNSAFE_FILENAME_CHARS.sub("_", base)).lower()
    cleaned = cleaned.lstrip(".")
    return cleaned or "upload"
