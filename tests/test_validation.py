"""Tests for the explicit validators."""

from datetime import date

import pytest

from medprep.core.config import DOCX_MIME, PDF_MIME, XLSX_MIME
from medprep.services.validation import (
    EMPTY_FILE,
    FILE_TOO_LARGE,
    INVALID_CORRECT,
    INVALID_FILE_TYPE,
    INVALID_OPTIONS,
    NO_FILE,
    sanitize_filename,
    validate_answer_submission,
    validate_date_range,
    validate_question_payload,
    validate_session_create,
    validate_upload,
)

ALLOWED = [PDF_MIME, DOCX_MIME, XLSX_MIME]
OPTIONS = [{"id": "a", "text": "One"}, {"id": "b", "text": "Two"}]


class TestAnswerSubmission:
    def test_valid(self):
        assert validate_answer_submission("b", 12.5, False).ok

    @pytest.mark.parametrize("option", [None, "", "   "])
    def test_missing_option(self, option):
        result = validate_answer_submission(option, 1.0)
        assert not result.ok
        assert result.first.field == "selectedOption"

    @pytest.mark.parametrize("time_spent", [-0.1, float("nan"), 24 * 60 * 60 + 1])
    def test_time_out_of_range(self, time_spent):
        result = validate_answer_submission("a", time_spent)
        assert [e.field for e in result.errors] == ["timeSpent"]

    def test_flag_must_be_bool(self):
        assert not validate_answer_submission("a", 1.0, "yes").ok


class TestSessionCreate:
    def test_valid(self):
        assert validate_session_create("timed", 10, available_questions=10).ok

    def test_not_enough_questions(self):
        result = validate_session_create("tutor", 11, available_questions=10)
        assert result.first.code == "NOT_ENOUGH_QUESTIONS"

    def test_unknown_mode_and_zero_total(self):
        result = validate_session_create("exam", 0)
        assert {e.field for e in result.errors} == {"mode", "totalQuestions"}


class TestQuestionPayload:
    def test_valid(self):
        assert validate_question_payload("Which?", OPTIONS, "b", "hard").ok

    def test_correct_answer_must_be_an_option(self):
        result = validate_question_payload("Which?", OPTIONS, "e")
        assert result.first.code == INVALID_CORRECT

    def test_duplicate_option_ids(self):
        result = validate_question_payload("Which?", OPTIONS + [{"id": "a", "text": "Dup"}], "a")
        assert INVALID_OPTIONS in [e.code for e in result.errors]

    def test_needs_two_options(self):
        result = validate_question_payload("Which?", OPTIONS[:1], "a")
        assert result.first.code == INVALID_OPTIONS

    def test_unknown_difficulty(self):
        assert not validate_question_payload("Which?", OPTIONS, "a", "brutal").ok


class TestUpload:
    def test_valid(self):
        assert validate_upload("bank.xlsx", XLSX_MIME, 1024, ALLOWED, 50 * 1024 * 1024).ok

    def test_no_file(self):
        assert validate_upload(None, None, None, ALLOWED, 100).first.code == NO_FILE

    def test_wrong_type(self):
        assert validate_upload("a.txt", "text/plain", 10, ALLOWED, 100).first.code == INVALID_FILE_TYPE

    def test_too_large(self):
        assert validate_upload("a.pdf", PDF_MIME, 101, ALLOWED, 100).first.code == FILE_TOO_LARGE

    def test_exactly_max_is_allowed(self):
        assert validate_upload("a.pdf", PDF_MIME, 100, ALLOWED, 100).ok

    def test_empty(self):
        assert validate_upload("a.pdf", PDF_MIME, 0, ALLOWED, 100).first.code == EMPTY_FILE


def test_date_range():
    assert validate_date_range(date(2024, 1, 1), date(2024, 1, 1)).ok
    assert validate_date_range(None, date(2024, 1, 1)).ok
    assert not validate_date_range(date(2024, 1, 2), date(2024, 1, 1)).ok


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Cardio Review.pdf", "cardio_review.pdf"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\bank (1).docx", "bank_1_.docx"),
        (".hidden.pdf", "hidden.pdf"),
        ("...", "upload"),
    ],
)
def test_sanitize_filename(raw, expected):
    assert sanitize_filename(raw) == expected
