"""Analytics aggregation tests (pure functions, no database)."""

from datetime import date, datetime, timedelta, timezone

import pytest

from medprep.services.analytics_service import (
    UNSPECIFIED,
    AnswerRow,
    breakdown,
    build_analytics,
    progress_series,
    ratio,
    summarize,
)


def row(
    is_correct: bool,
    time_spent: float = 10.0,
    subject: str | None = "Cardiology",
    system: str | None = "Cardiovascular",
    difficulty: str | None = "medium",
    is_flagged: bool = False,
    answered_at: datetime | None = None,
) -> AnswerRow:
    return AnswerRow(
        is_correct=is_correct,
        time_spent=time_spent,
        is_flagged=is_flagged,
        answered_at=answered_at or datetime(2024, 3, 1, 12, tzinfo=timezone.utc),
        subject=subject,
        system=system,
        difficulty=difficulty,
    )


def test_ratio_zero_denominator() -> None:
    assert ratio(0, 0) == 0.0
    assert ratio(3, 4) == 0.75


def test_summarize_empty() -> None:
    assert summarize([]) == {
        "total_questions": 0,
        "correct_answers": 0,
        "accuracy": 0.0,
        "average_time_per_question": 0.0,
        "total_time_spent": 0.0,
        "flagged_questions": 0,
    }


def test_summarize_counts() -> None:
    rows = [row(True, 30), row(False, 60, is_flagged=True), row(True, 30), row(True, 0)]

    overall = summarize(rows)

    assert overall["total_questions"] == 4
    assert overall["correct_answers"] == 3
    assert overall["accuracy"] == 0.75
    assert overall["total_time_spent"] == 120
    assert overall["average_time_per_question"] == 30
    assert overall["flagged_questions"] == 1


def test_breakdown_groups_by_exact_tag_and_sorts_weakest_first() -> None:
    rows = [
        row(True, subject="Cardiology"),
        row(True, subject="Cardiology"),
        row(False, subject="Neurology"),
        row(True, subject="Neurology"),
        row(False, subject="cardiology"),
    ]

    result = breakdown(rows, "subject")

    assert [(r["subject"], r["total_questions"], r["accuracy"]) for r in result] == [
        ("cardiology", 1, 0.0),
        ("Neurology", 2, 0.5),
        ("Cardiology", 2, 1.0),
    ]


def test_breakdown_unspecified_bucket() -> None:
    rows = [row(True, system=None), row(False, system=""), row(True, system="Renal")]

    result = breakdown(rows, "system")

    by_key = {r["system"]: r for r in result}
    assert by_key[UNSPECIFIED]["total_questions"] == 2
    assert by_key[UNSPECIFIED]["correct_answers"] == 1
    assert by_key["Renal"]["accuracy"] == 1.0


def test_breakdown_ties_sorted_by_key() -> None:
    rows = [row(True, difficulty="hard"), row(True, difficulty="easy")]

    assert [r["difficulty"] for r in breakdown(rows, "difficulty")] == ["easy", "hard"]


def test_breakdown_rejects_unknown_field() -> None:
    with pytest.raises(ValueError):
        breakdown([], "topic")


def test_progress_one_point_per_utc_day_ascending() -> None:
    day1 = datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc)
    # 01:00 at +02:00 is still 2024-03-01 in UTC
    same_day_other_zone = datetime(2024, 3, 2, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    day2 = datetime(2024, 3, 2, 8, 0)  # naive, taken as UTC

    points = progress_series(
        [
            row(False, 20, answered_at=day2),
            row(True, 10, answered_at=day1),
            row(True, 10, answered_at=same_day_other_zone),
        ]
    )

    assert points == [
        {"date": date(2024, 3, 1), "accuracy": 1.0, "questions_answered": 2, "time_spent": 20.0},
        {"date": date(2024, 3, 2), "accuracy": 0.0, "questions_answered": 1, "time_spent": 20.0},
    ]


def test_build_analytics_shape() -> None:
    data = build_analytics([row(True), row(False, subject=None)])

    assert set(data) == {
        "overall",
        "by_subject",
        "by_system",
        "by_difficulty",
        "progress",
        "recent_sessions",
    }
    assert data["recent_sessions"] == []
    assert {r["subject"] for r in data["by_subject"]} == {"Cardiology", UNSPECIFIED}
