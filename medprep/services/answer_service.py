"""Answer submission: correctness, session progress and analytics invalidation."""

from dataclasses import dataclass
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medprep.common.clock import utcnow
from medprep.core.app_exceptions import AppError, not_found, validation_failed
from medprep.core.logging import get_logger
from medprep.models.practice import PracticeSession, SessionStatus, UserAnswer
from medprep.models.question import Question
from medprep.schemas.question import AnswerSubmit
from medprep.services.analytics_cache import AnalyticsCache
from medprep.services.question_service import get_visible_question, next_question_id
from medprep.services.session_service import get_user_session, record_answer_progress
from medprep.services.validation import validate_answer_submission

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    answer: UserAnswer
    question: Question
    session: PracticeSession | None
    next_question_id: UUID | None


def _check_session(db: Session, session_id: UUID, user_id: str, question: Question) -> PracticeSession:
    session = get_user_session(db, session_id, user_id)
    if session.status != SessionStatus.ACTIVE.value:
        raise AppError(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="SESSION_NOT_ACTIVE",
            message=f"Session is {session.status}",
        )
    if session.question_bank_id is not None and session.question_bank_id != question.question_bank_id:
        raise AppError(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="QUESTION_NOT_IN_SESSION_BANK",
            message="Question does not belong to the session's question bank",
        )
    return session


def _parse_question_id(raw: str) -> UUID | None:
    try:
        return UUID(raw)
    except ValueError:
        return None


def _next_attempt_number(db: Session, user_id: str, question_id: UUID) -> int:
    prior = db.execute(
        select(func.count(UserAnswer.id)).where(
            UserAnswer.user_id == user_id, UserAnswer.question_id == question_id
        )
    ).scalar_one()
    return prior + 1


async def submit_answer(
    db: Session,
    user_id: str,
    payload: AnswerSubmit,
    cache: AnalyticsCache | None = None,
) -> SubmissionResult:
    """
    Record an answer and update the owning session.

    Every check runs before the first write; the answer insert and the session counter
    update share one transaction.

    Raises:
        AppError: 400 VALIDATION_ERROR / SESSION_NOT_ACTIVE / QUESTION_NOT_IN_SESSION_BANK /
            SESSION_FULL, 404 QUESTION_NOT_FOUND / OPTION_NOT_FOUND / SESSION_NOT_FOUND
    """
    result = validate_answer_submission(payload.selected_option, payload.time_spent, payload.is_flagged)
    if not result.ok:
        raise validation_failed(result.to_list())

    question = None
    question_id = _parse_question_id(payload.question_id)
    if question_id is not None:
        question = get_visible_question(db, question_id, user_id)
    if question is None:
        raise not_found("QUESTION_NOT_FOUND", "Question not found")

    if not question.has_option(payload.selected_option):
        raise not_found(
            "OPTION_NOT_FOUND",
            f"Option '{payload.selected_option}' does not exist for this question",
        )

    session = None
    if payload.session_id is not None:
        session = _check_session(db, payload.session_id, user_id, question)

    is_correct = payload.selected_option == question.correct_answer

    answer = UserAnswer(
        user_id=user_id,
        question_id=question.id,
        session_id=session.id if session else None,
        attempt_number=_next_attempt_number(db, user_id, question.id),
        selected_option=payload.selected_option,
        is_correct=is_correct,
        time_spent=payload.time_spent,
        is_flagged=payload.is_flagged,
        answered_at=utcnow(),
    )

    try:
        db.add(answer)
        db.flush()
        if session is not None and not record_answer_progress(
            db, session.id, is_correct, payload.time_spent
        ):
            db.rollback()
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="SESSION_FULL",
                message="Session already has all of its answers",
            )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(
            "Answer write failed",
            extra={"user_id": user_id, "question_id": str(question.id)},
            exc_info=True,
        )
        raise

    db.refresh(answer)
    if session is not None:
        db.refresh(session)

    logger.info(
        "Answer recorded",
        extra={
            "user_id": user_id,
            "session_id": str(session.id) if session else None,
            "question_id": str(question.id),
            "is_correct": is_correct,
            "attempt_number": answer.attempt_number,
        },
    )

    if cache is not None:
        cache.invalidate_user(user_id)

    upcoming = None
    if session is None or session.status != SessionStatus.COMPLETED.value:
        upcoming = next_question_id(db, question)

    return SubmissionResult(answer=answer, question=question, session=session, next_question_id=upcoming)


async def set_answer_flag(
    db: Session,
    user_id: str,
    answer_id: UUID,
    is_flagged: bool,
    cache: AnalyticsCache | None = None,
) -> UserAnswer:
    """Toggle the flag on one of the caller's answers; the only mutation an answer allows."""
    answer = db.execute(
        select(UserAnswer).where(UserAnswer.id == answer_id, UserAnswer.user_id == user_id)
    ).scalar_one_or_none()
    if answer is None:
        raise not_found("ANSWER_NOT_FOUND", "Answer not found")

    answer.is_flagged = is_flagged
    db.commit()
    db.refresh(answer)

    if cache is not None:
        cache.invalidate_user(user_id)
    return answer
