"""Sample question seeding tests."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from medprep.core.app_exceptions import AppError
from medprep.core.seed_questions import seed_demo_questions
from medprep.models.question import Question
from medprep.models.question_bank import QuestionBank
from medprep.schemas.question import QuestionCreate, QuestionOption
from medprep.services.question_service import SHARED_BANK_OWNER, add_question


def test_seed_creates_shared_bank_once(db: Session) -> None:
    bank = seed_demo_questions(db)
    again = seed_demo_questions(db)

    assert again.id == bank.id
    assert bank.user_id == SHARED_BANK_OWNER
    assert bank.status == "completed"
    assert bank.total_questions == 2
    assert db.execute(select(func.count(Question.id))).scalar_one() == 2
    assert db.execute(select(func.count(QuestionBank.id))).scalar_one() == 1

    stemi, meningitis = sorted(bank.questions, key=lambda q: q.position)
    assert stemi.correct_answer == "b"
    assert stemi.subject == "Cardiology"
    assert stemi.tags == ["STEMI", "ECG", "Chest Pain"]
    assert meningitis.difficulty == "easy"
    assert meningitis.option_ids() == ["a", "b", "c", "d"]


def test_seeded_bank_is_visible_to_everyone(client, db: Session, auth_headers: dict, other_auth_headers: dict) -> None:
    seed_demo_questions(db)

    for headers in (auth_headers, other_auth_headers):
        banks = client.get("/api/question-banks", headers=headers).json()["questionBanks"]
        assert [b["name"] for b in banks] == ["Sample Questions"]


def test_add_question_rejects_bad_correct_answer(db: Session) -> None:
    bank = seed_demo_questions(db)
    payload = QuestionCreate(
        question_text="Which?",
        options=[QuestionOption(id="a", letter="A", text="One"), QuestionOption(id="b", letter="B", text="Two")],
        correct_answer="c",
    )

    with pytest.raises(AppError) as exc_info:
        add_question(db, bank, payload)

    assert exc_info.value.status_code == 400
    assert exc_info.value.details[0]["code"] == "INVALID_CORRECT"
