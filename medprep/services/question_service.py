"""Question bank lookup, question ordering per practice mode, and content seeding."""

import hashlib
import random
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from medprep.common.clock import utcnow
from medprep.core.app_exceptions import not_found, validation_failed
from medprep.core.logging import get_logger
from medprep.models.practice import SessionMode, UserAnswer
from medprep.models.question import Question
from medprep.models.question_bank import QuestionBank
from medprep.schemas.question import QuestionCreate, QuestionOut
from medprep.services.validation import validate_question_payload

logger = get_logger(__name__)

# Banks owned by this pseudo-user are readable by everyone (seeded sample content)
SHARED_BANK_OWNER = "shared"


def _visible_to(user_id: str):
    return QuestionBank.user_id.in_([user_id, SHARED_BANK_OWNER])


def list_question_banks(db: Session, user_id: str) -> list[QuestionBank]:
    stmt = select(QuestionBank).where(_visible_to(user_id)).order_by(QuestionBank.created_at.desc())
    return list(db.execute(stmt).scalars().all())


def get_question_bank(db: Session, bank_id: UUID, user_id: str) -> QuestionBank:
    """Return a bank the caller may read, or raise 404 QUESTION_BANK_NOT_FOUND."""
    bank = db.execute(
        select(QuestionBank).where(QuestionBank.id == bank_id, _visible_to(user_id))
    ).scalar_one_or_none()
    if bank is None:
        raise not_found("QUESTION_BANK_NOT_FOUND", "Question bank not found")
    return bank


def count_bank_questions(db: Session, bank_id: UUID) -> int:
    return db.execute(
        select(func.count(Question.id)).where(Question.question_bank_id == bank_id)
    ).scalar_one()


def get_visible_question(db: Session, question_id: UUID, user_id: str) -> Question | None:
    stmt = (
        select(Question)
        .join(QuestionBank, Question.question_bank_id == QuestionBank.id)
        .where(Question.id == question_id, _visible_to(user_id))
    )
    return db.execute(stmt).scalar_one_or_none()


def daily_seed(user_id: str, bank_id: UUID | None, day: date | None = None) -> str:
    """Seed for timed-mode ordering; stable for one user, bank and UTC day."""
    day = day or utcnow().date()
    seed_string = ":".join([user_id, str(bank_id) if bank_id else "all", day.isoformat()])
    return hashlib.sha256(seed_string.encode()).hexdigest()


def shuffle_ids(ids: list[UUID], seed: str) -> list[UUID]:
    rng = random.Random(seed)
    shuffled = ids.copy()
    rng.shuffle(shuffled)
    return shuffled


def review_question_ids(db: Session, user_id: str) -> set[UUID]:
    """Questions whose latest attempt by the user was incorrect or flagged."""
    stmt = (
        select(UserAnswer.question_id, UserAnswer.is_correct, UserAnswer.is_flagged)
        .where(UserAnswer.user_id == user_id)
        .order_by(UserAnswer.answered_at, UserAnswer.attempt_number)
    )
    latest: dict[UUID, tuple[bool, bool]] = {}
    for question_id, is_correct, is_flagged in db.execute(stmt).all():
        latest[question_id] = (is_correct, is_flagged)
    return {qid for qid, (is_correct, is_flagged) in latest.items() if not is_correct or is_flagged}


def list_questions(
    db: Session,
    user_id: str,
    question_bank_id: UUID | None = None,
    mode: SessionMode = SessionMode.TUTOR,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[Question], int]:
    """
    Select one page of questions for a practice mode.

    Returns:
        (page of questions, total matching questions)
    """
    if question_bank_id is not None:
        get_question_bank(db, question_bank_id, user_id)

    stmt = (
        select(Question.id)
        .join(QuestionBank, Question.question_bank_id == QuestionBank.id)
        .where(_visible_to(user_id))
        .order_by(Question.question_bank_id, Question.position, Question.id)
    )
    if question_bank_id is not None:
        stmt = stmt.where(Question.question_bank_id == question_bank_id)

    ordered_ids = [row[0] for row in db.execute(stmt).all()]

    if mode == SessionMode.REVIEW:
        wanted = review_question_ids(db, user_id)
        ordered_ids = [qid for qid in ordered_ids if qid in wanted]
    elif mode == SessionMode.TIMED:
        ordered_ids = shuffle_ids(ordered_ids, daily_seed(user_id, question_bank_id))

    total = len(ordered_ids)
    page_ids = ordered_ids[offset : offset + limit]
    if not page_ids:
        return [], total

    by_id = {
        q.id: q for q in db.execute(select(Question).where(Question.id.in_(page_ids))).scalars().all()
    }
    return [by_id[qid] for qid in page_ids if qid in by_id], total


def next_question_id(db: Session, question: Question) -> UUID | None:
    """Next question of the same bank by position; None after the last one."""
    stmt = (
        select(Question.id)
        .where(
            Question.question_bank_id == question.question_bank_id,
            or_(
                Question.position > question.position,
                and_(Question.position == question.position, Question.id > question.id),
            ),
        )
        .order_by(Question.position, Question.id)
        .limit(1)
    )
    return db.execute(stmt).scalar_one_or_none()


def to_question_out(question: Question, reveal_answer: bool = False) -> QuestionOut:
    out = QuestionOut.model_validate(question)
    if not reveal_answer:
        out.correct_answer = None
        out.explanation = None
    return out


def add_question(db: Session, bank: QuestionBank, payload: QuestionCreate) -> Question:
    """Validate and stage a question at the end of a bank (caller commits)."""
    options: list[dict[str, Any]] = [option.model_dump() for option in payload.options]
    result = validate_question_payload(
        payload.question_text, options, payload.correct_answer, payload.difficulty
    )
    if not result.ok:
        raise validation_failed(result.to_list(), "Invalid question")

    position = db.execute(
        select(func.coalesce(func.max(Question.position), -1)).where(
            Question.question_bank_id == bank.id
        )
    ).scalar_one()

    question = Question(
        question_bank_id=bank.id,
        position=position + 1,
        question_text=payload.question_text,
        options=options,
        correct_answer=payload.correct_answer,
        explanation=payload.explanation,
        subject=payload.subject,
        system=payload.system,
        difficulty=payload.difficulty,
        tags=list(payload.tags),
        images=list(payload.images),
    )
    db.add(question)
    db.flush()
    bank.total_questions = (bank.total_questions or 0) + 1
    return question
