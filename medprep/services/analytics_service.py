"""Analytics service for computing student performance metrics.

The aggregation functions are pure: they take answer rows and return plain dicts, so
they can be tested without a database. `get_analytics` loads the rows and caches the
assembled payload.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from medprep.common.clock import day_bounds
from medprep.core.logging import get_logger
from medprep.models.practice import UserAnswer
from medprep.models.question import Question
from medprep.schemas.analytics import AnalyticsData
from medprep.schemas.session import SessionOut
from medprep.services.analytics_cache import AnalyticsCache, analytics_key
from medprep.services.session_service import list_sessions

logger = get_logger(__name__)

UNSPECIFIED = "unspecified"
BREAKDOWN_FIELDS = ("subject", "system", "difficulty")


@dataclass(frozen=True)
class AnswerRow:
    """One answer joined with the tags of its question."""

    is_correct: bool
    time_spent: float
    is_flagged: bool
    answered_at: datetime
    subject: str | None = None
    system: str | None = None
    difficulty: str | None = None


def ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator


def summarize(rows: Iterable[AnswerRow]) -> dict[str, Any]:
    total = correct = flagged = 0
    time_spent = 0.0
    for row in rows:
        total += 1
        correct += 1 if row.is_correct else 0
        flagged += 1 if row.is_flagged else 0
        time_spent += row.time_spent or 0.0

    return {
        "total_questions": total,
        "correct_answers": correct,
        "accuracy": round(ratio(correct, total), 4),
        "average_time_per_question": round(ratio(time_spent, total), 2),
        "total_time_spent": round(time_spent, 2),
        "flagged_questions": flagged,
    }


def tag_key(value: str | None) -> str:
    return value if value else UNSPECIFIED


def breakdown(rows: Iterable[AnswerRow], field: str) -> list[dict[str, Any]]:
    """
    Group rows by one question tag.

    One entry per exact tag value; absent or empty tags share the "unspecified"
    bucket. Sorted weakest first (accuracy ascending, then tag).
    """
    if field not in BREAKDOWN_FIELDS:
        raise ValueError(f"Unknown breakdown field: {field}")

    groups: dict[str, dict[str, float]] = defaultdict(lambda: {"total": 0, "correct": 0, "time": 0.0})
    for row in rows:
        stats = groups[tag_key(getattr(row, field))]
        stats["total"] += 1
        stats["correct"] += 1 if row.is_correct else 0
        stats["time"] += row.time_spent or 0.0

    result = [
        {
            field: key,
            "total_questions": int(stats["total"]),
            "correct_answers": int(stats["correct"]),
            "accuracy": round(ratio(stats["correct"], stats["total"]), 4),
            "average_time": round(ratio(stats["time"], stats["total"]), 2),
        }
        for key, stats in groups.items()
    ]
    result.sort(key=lambda item: (item["accuracy"], item[field]))
    return result


def answer_day(answered_at: datetime) -> date:
    """UTC calendar day; naive timestamps are taken as UTC."""
    if answered_at.tzinfo is None:
        return answered_at.date()
    return answered_at.astimezone(timezone.utc).date()


def progress_series(rows: Iterable[AnswerRow]) -> list[dict[str, Any]]:
    """One point per UTC day that has answers, oldest first."""
    daily: dict[date, dict[str, float]] = defaultdict(lambda: {"total": 0, "correct": 0, "time": 0.0})
    for row in rows:
        stats = daily[answer_day(row.answered_at)]
        stats["total"] += 1
        stats["correct"] += 1 if row.is_correct else 0
        stats["time"] += row.time_spent or 0.0

    return [
        {
            "date": day,
            "accuracy": round(ratio(stats["correct"], stats["total"]), 4),
            "questions_answered": int(stats["total"]),
            "time_spent": round(stats["time"], 2),
        }
        for day, stats in sorted(daily.items())
    ]


def build_analytics(rows: list[AnswerRow], recent_sessions: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {
        "overall": summarize(rows),
        "by_subject": breakdown(rows, "subject"),
        "by_system": breakdown(rows, "system"),
        "by_difficulty": breakdown(rows, "difficulty"),
        "progress": progress_series(rows),
        "recent_sessions": recent_sessions or [],
    }


def load_answer_rows(
    db: Session, user_id: str, start: date | None = None, end: date | None = None
) -> list[AnswerRow]:
    lower, upper = day_bounds(start, end)
    stmt = (
        select(
            UserAnswer.is_correct,
            UserAnswer.time_spent,
            UserAnswer.is_flagged,
            UserAnswer.answered_at,
            Question.subject,
            Question.system,
            Question.difficulty,
        )
        .join(Question, UserAnswer.question_id == Question.id)
        .where(UserAnswer.user_id == user_id)
    )
    if lower is not None:
        stmt = stmt.where(UserAnswer.answered_at >= lower)
    if upper is not None:
        stmt = stmt.where(UserAnswer.answered_at < upper)

    return [AnswerRow(*row) for row in db.execute(stmt).all()]


def get_analytics(
    db: Session,
    user_id: str,
    start: date | None = None,
    end: date | None = None,
    cache: AnalyticsCache | None = None,
    recent_limit: int = 5,
) -> AnalyticsData:
    """
    Compute (or fetch cached) analytics for one user and an inclusive date range.

    Args:
        db: Database session
        user_id: Caller id
        start: First day included (UTC), or None for unbounded
        end: Last day included (UTC), or None for unbounded
        cache: Fail-open Redis cache; None skips caching

    Returns:
        AnalyticsData
    """
    key = analytics_key(user_id, start, end)
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return AnalyticsData.model_validate(cached)

    rows = load_answer_rows(db, user_id, start, end)
    recent = [
        SessionOut.model_validate(session).model_dump()
        for session in list_sessions(db, user_id, recent_limit)
    ]
    data = AnalyticsData.model_validate(build_analytics(rows, recent))

    logger.info(
        "Analytics computed",
        extra={"user_id": user_id, "answers": len(rows), "cached": False},
    )

    if cache is not None:
        cache.set(key, data.model_dump(mode="json"))
    return data
