"""Practice session lifecycle and counter updates."""

from uuid import UUID

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from medprep.common.clock import utcnow
from medprep.common.metadata import coerce_metadata, metadata_to_json
from medprep.core.app_exceptions import AppError, not_found
from medprep.core.logging import get_logger
from medprep.models.practice import PracticeSession, SessionStatus
from medprep.schemas.session import SessionCreate
from medprep.services.analytics_cache import AnalyticsCache
from medprep.services.question_service import count_bank_questions, get_question_bank
from medprep.services.validation import validate_session_create

logger = get_logger(__name__)

# action -> (allowed source states, target state)
TRANSITIONS: dict[str, tuple[frozenset[SessionStatus], SessionStatus]] = {
    "pause": (frozenset({SessionStatus.ACTIVE}), SessionStatus.PAUSED),
    "resume": (frozenset({SessionStatus.PAUSED}), SessionStatus.ACTIVE),
    "complete": (frozenset({SessionStatus.ACTIVE, SessionStatus.PAUSED}), SessionStatus.COMPLETED),
}


async def create_session(
    db: Session,
    user_id: str,
    payload: SessionCreate,
    cache: AnalyticsCache | None = None,
) -> PracticeSession:
    """
    Start a practice session.

    Raises:
        AppError: 404 for an unknown bank, 400 when the request is invalid or the bank
            holds fewer questions than requested
    """
    available = None
    if payload.question_bank_id is not None:
        get_question_bank(db, payload.question_bank_id, user_id)
        available = count_bank_questions(db, payload.question_bank_id)

    result = validate_session_create(payload.mode, payload.total_questions, available)
    if not result.ok:
        first = result.first
        code = "NOT_ENOUGH_QUESTIONS" if first.code == "NOT_ENOUGH_QUESTIONS" else "VALIDATION_ERROR"
        raise AppError(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=code,
            message=first.message,
            details=result.to_list(),
        )

    session = PracticeSession(
        user_id=user_id,
        question_bank_id=payload.question_bank_id,
        mode=payload.mode.value,
        status=SessionStatus.ACTIVE.value,
        total_questions=payload.total_questions,
        completed_questions=0,
        correct_answers=0,
        time_spent=0.0,
        started_at=utcnow(),
        meta=metadata_to_json(coerce_metadata({"available_questions": available})),
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info(
        "Practice session started",
        extra={"user_id": user_id, "session_id": str(session.id), "mode": session.mode},
    )
    if cache is not None:
        cache.invalidate_user(user_id)
    return session


def get_user_session(db: Session, session_id: UUID, user_id: str) -> PracticeSession:
    session = db.execute(
        select(PracticeSession).where(
            PracticeSession.id == session_id, PracticeSession.user_id == user_id
        )
    ).scalar_one_or_none()
    if session is None:
        raise not_found("SESSION_NOT_FOUND", "Practice session not found")
    return session


def list_sessions(db: Session, user_id: str, limit: int = 20) -> list[PracticeSession]:
    stmt = (
        select(PracticeSession)
        .where(PracticeSession.user_id == user_id)
        .order_by(PracticeSession.started_at.desc(), PracticeSession.id)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


async def transition_session(
    db: Session,
    session: PracticeSession,
    action: str,
    cache: AnalyticsCache | None = None,
) -> PracticeSession:
    """Apply pause/resume/complete. Completing a completed session is a no-op."""
    sources, target = TRANSITIONS[action]
    current = SessionStatus(session.status)

    if action == "complete" and current == SessionStatus.COMPLETED:
        return session
    if current not in sources:
        raise AppError(
            status_code=status.HTTP_409_CONFLICT,
            code="INVALID_SESSION_TRANSITION",
            message=f"Cannot {action} a session that is {current.value}",
            details={"from": current.value, "action": action},
        )

    now = utcnow()
    session.status = target.value
    if target == SessionStatus.PAUSED:
        session.paused_at = now
    elif target == SessionStatus.ACTIVE:
        session.paused_at = None
    else:
        session.completed_at = now
    db.commit()
    db.refresh(session)

    logger.info(
        "Practice session transitioned",
        extra={"user_id": session.user_id, "session_id": str(session.id), "action": action},
    )
    if cache is not None:
        cache.invalidate_user(session.user_id)
    return session


def record_answer_progress(
    db: Session, session_id: UUID, is_correct: bool, time_spent: float
) -> bool:
    """
    Count one answer against an active session inside the caller's transaction.

    The increment only applies while `completed_questions < total_questions`, so
    concurrent submissions cannot push the counter past the target. The session is
    completed in the same transaction once the target is reached.

    Returns:
        False when no row was updated (session full, inactive or gone)
    """
    now = utcnow()
    result = db.execute(
        update(PracticeSession)
        .where(
            PracticeSession.id == session_id,
            PracticeSession.status == SessionStatus.ACTIVE.value,
            PracticeSession.completed_questions < PracticeSession.total_questions,
        )
        .values(
            completed_questions=PracticeSession.completed_questions + 1,
            correct_answers=PracticeSession.correct_answers + (1 if is_correct else 0),
            time_spent=PracticeSession.time_spent + time_spent,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return False

    db.execute(
        update(PracticeSession)
        .where(
            PracticeSession.id == session_id,
            PracticeSession.status == SessionStatus.ACTIVE.value,
            PracticeSession.completed_questions >= PracticeSession.total_questions,
        )
        .values(status=SessionStatus.COMPLETED.value, completed_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    return True
