"""Analytics endpoint tests."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from medprep.core.config import settings
from medprep.core.services import Services
from medprep.main import app
from medprep.services.analytics_cache import AnalyticsCache, analytics_key
from tests.helpers.fake_redis import DictRedis
from tests.helpers.seed import (
    OTHER_USER_ID,
    TEST_USER_ID,
    bank_questions,
    create_test_answer,
    create_test_bank,
    create_test_session,
)


def test_no_answers_returns_zeroes(client: TestClient, db: Session, auth_headers: dict) -> None:
    response = client.get("/api/analytics", headers=auth_headers)

    assert response.status_code == 200
    analytics = response.json()["analytics"]
    assert analytics["overall"] == {
        "totalQuestions": 0,
        "correctAnswers": 0,
        "accuracy": 0.0,
        "averageTimePerQuestion": 0.0,
        "totalTimeSpent": 0.0,
        "flaggedQuestions": 0,
    }
    assert analytics["bySubject"] == []
    assert analytics["progress"] == []
    assert analytics["recentSessions"] == []


def test_aggregates_only_callers_answers(client: TestClient, db: Session, auth_headers: dict) -> None:
    bank = create_test_bank(db, TEST_USER_ID, num_questions=3, subjects=["Cardiology", "Neurology", None])
    q1, q2, q3 = bank_questions(bank)
    create_test_answer(db, TEST_USER_ID, q1, "b", time_spent=30)
    create_test_answer(db, TEST_USER_ID, q2, "a", time_spent=60, is_flagged=True)
    create_test_answer(db, TEST_USER_ID, q3, "b", time_spent=30)
    create_test_answer(db, OTHER_USER_ID, q1, "a", time_spent=500)
    create_test_session(db, TEST_USER_ID, bank)

    response = client.get("/api/analytics", headers=auth_headers)

    assert response.status_code == 200
    analytics = response.json()["analytics"]
    overall = analytics["overall"]
    assert overall["totalQuestions"] == 3
    assert overall["correctAnswers"] == 2
    assert overall["accuracy"] == round(2 / 3, 4)
    assert overall["totalTimeSpent"] == 120
    assert overall["averageTimePerQuestion"] == 40
    assert overall["flaggedQuestions"] == 1

    subjects = [entry["subject"] for entry in analytics["bySubject"]]
    assert subjects == ["Neurology", "Cardiology", "unspecified"]
    assert analytics["bySystem"][0]["system"] == "Cardiovascular"
    assert analytics["byDifficulty"][0]["difficulty"] == "medium"
    assert len(analytics["progress"]) == 1
    assert analytics["progress"][0]["questionsAnswered"] == 3
    assert len(analytics["recentSessions"]) == 1


def test_date_range_is_inclusive(client: TestClient, db: Session, auth_headers: dict) -> None:
    bank = create_test_bank(db, TEST_USER_ID, num_questions=1)
    (question,) = bank_questions(bank)
    for day in (1, 2, 3):
        create_test_answer(
            db, TEST_USER_ID, question, "b", answered_at=datetime(2024, 3, day, 23, 59, tzinfo=timezone.utc)
        )

    response = client.get(
        "/api/analytics", params={"from": "2024-03-02", "to": "2024-03-03"}, headers=auth_headers
    )

    analytics = response.json()["analytics"]
    assert analytics["overall"]["totalQuestions"] == 2
    assert [p["date"] for p in analytics["progress"]] == ["2024-03-02", "2024-03-03"]


def test_inverted_range_is_validation_error(client: TestClient, auth_headers: dict) -> None:
    response = client.get(
        "/api/analytics", params={"from": "2024-03-05", "to": "2024-03-01"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["errorCode"] == "VALIDATION_ERROR"


def test_malformed_date_is_validation_error(client: TestClient, auth_headers: dict) -> None:
    response = client.get("/api/analytics", params={"from": "yesterday"}, headers=auth_headers)

    assert response.status_code == 400


def test_cached_payload_is_served(
    client: TestClient, db: Session, auth_headers: dict, fake_redis: MagicMock
) -> None:
    app.state.services = Services(
        config=settings, redis=fake_redis, analytics_cache=AnalyticsCache(fake_redis, 300)
    )

    first = client.get("/api/analytics", headers=auth_headers)
    assert first.status_code == 200
    key = analytics_key(TEST_USER_ID, None, None)
    fake_redis.setex.assert_called_once()
    assert fake_redis.setex.call_args.args[:2] == (key, 300)

    cached = json.loads(fake_redis.setex.call_args.args[2])
    cached["overall"]["total_questions"] = 42
    fake_redis.get.return_value = json.dumps(cached)

    second = client.get("/api/analytics", headers=auth_headers)
    assert second.json()["analytics"]["overall"]["totalQuestions"] == 42


def test_redis_errors_fail_open(client: TestClient, db: Session, auth_headers: dict) -> None:
    broken = MagicMock()
    broken.get.side_effect = ConnectionError("redis down")
    broken.setex.side_effect = ConnectionError("redis down")
    app.state.services = Services(config=settings, redis=broken, analytics_cache=AnalyticsCache(broken, 300))

    response = client.get("/api/analytics", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["analytics"]["overall"]["totalQuestions"] == 0


def test_session_changes_refresh_cached_recent_sessions(client: TestClient, auth_headers: dict) -> None:
    redis = DictRedis()
    app.state.services = Services(config=settings, redis=redis, analytics_cache=AnalyticsCache(redis, 300))

    first = client.get("/api/analytics", headers=auth_headers).json()["analytics"]
    assert first["recentSessions"] == []
    assert redis.store

    created = client.post("/api/sessions", json={"totalQuestions": 2}, headers=auth_headers)
    assert created.status_code == 201
    assert redis.store == {}
    session_id = created.json()["session"]["id"]

    after_create = client.get("/api/analytics", headers=auth_headers).json()["analytics"]
    assert [s["id"] for s in after_create["recentSessions"]] == [session_id]
    assert after_create["recentSessions"][0]["status"] == "active"

    paused = client.post(f"/api/sessions/{session_id}/pause", headers=auth_headers)
    assert paused.status_code == 200

    after_pause = client.get("/api/analytics", headers=auth_headers).json()["analytics"]
    assert after_pause["recentSessions"][0]["status"] == "paused"
