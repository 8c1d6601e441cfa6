"""Question retrieval tests."""

import uuid
from datetime import date

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from medprep.services.question_service import daily_seed, shuffle_ids
from tests.helpers.seed import OTHER_USER_ID, TEST_USER_ID, bank_questions, create_test_answer, create_test_bank


def _ids(response) -> list[str]:
    return [q["id"] for q in response.json()["questions"]]


def test_tutor_mode_returns_bank_order_without_answers(
    client: TestClient, db: Session, auth_headers: dict
) -> None:
    bank = create_test_bank(db, TEST_USER_ID, num_questions=3)
    questions = bank_questions(bank)

    response = client.get(
        "/api/questions", params={"questionBankId": str(bank.id)}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["total"] == 3
    assert data["hasMore"] is False
    assert _ids(response) == [str(q.id) for q in questions]
    first = data["questions"][0]
    assert first["questionText"] == "Question 1?"
    assert [o["id"] for o in first["options"]] == ["a", "b", "c", "d"]
    assert first["correctAnswer"] is None
    assert first["explanation"] is None


def test_pagination(client: TestClient, db: Session, auth_headers: dict) -> None:
    bank = create_test_bank(db, TEST_USER_ID, num_questions=5)
    questions = bank_questions(bank)

    response = client.get(
        "/api/questions",
        params={"questionBankId": str(bank.id), "limit": 2, "offset": 2},
        headers=auth_headers,
    )

    data = response.json()
    assert data["total"] == 5
    assert data["hasMore"] is True
    assert _ids(response) == [str(q.id) for q in questions[2:4]]


def test_limit_out_of_range_is_validation_error(client: TestClient, auth_headers: dict) -> None:
    response = client.get("/api/questions", params={"limit": 101}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["errorCode"] == "VALIDATION_ERROR"


def test_unknown_bank_is_not_found(client: TestClient, db: Session, auth_headers: dict) -> None:
    response = client.get(
        "/api/questions", params={"questionBankId": str(uuid.uuid4())}, headers=auth_headers
    )

    assert response.status_code == 404
    assert response.json()["errorCode"] == "QUESTION_BANK_NOT_FOUND"


def test_other_users_bank_is_not_found(client: TestClient, db: Session, auth_headers: dict) -> None:
    bank = create_test_bank(db, OTHER_USER_ID, num_questions=1)

    response = client.get(
        "/api/questions", params={"questionBankId": str(bank.id)}, headers=auth_headers
    )

    assert response.status_code == 404


def test_timed_mode_is_stable_permutation(client: TestClient, db: Session, auth_headers: dict) -> None:
    bank = create_test_bank(db, TEST_USER_ID, num_questions=8)
    questions = bank_questions(bank)
    params = {"questionBankId": str(bank.id), "mode": "timed", "limit": 100}

    first = _ids(client.get("/api/questions", params=params, headers=auth_headers))
    second = _ids(client.get("/api/questions", params=params, headers=auth_headers))

    assert first == second
    assert sorted(first) == sorted(str(q.id) for q in questions)


def test_review_mode_returns_incorrect_or_flagged_latest_attempts(
    client: TestClient, db: Session, auth_headers: dict
) -> None:
    bank = create_test_bank(db, TEST_USER_ID, num_questions=4)
    q1, q2, q3, q4 = bank_questions(bank)
    create_test_answer(db, TEST_USER_ID, q1, selected_option="a")  # wrong
    create_test_answer(db, TEST_USER_ID, q2, selected_option="b", is_flagged=True)  # flagged
    create_test_answer(db, TEST_USER_ID, q3, selected_option="a")
    create_test_answer(db, TEST_USER_ID, q3, selected_option="b", attempt_number=2)  # fixed later
    # q4 never answered

    response = client.get(
        "/api/questions",
        params={"questionBankId": str(bank.id), "mode": "review"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert _ids(response) == [str(q1.id), str(q2.id)]
    first = response.json()["questions"][0]
    assert first["correctAnswer"] == "b"
    assert first["explanation"] == "Explanation 1"


def test_invalid_mode_is_validation_error(client: TestClient, auth_headers: dict) -> None:
    response = client.get("/api/questions", params={"mode": "speedrun"}, headers=auth_headers)

    assert response.status_code == 400


def test_shuffle_is_deterministic_per_seed() -> None:
    ids = [uuid.UUID(int=i) for i in range(20)]
    seed = daily_seed("user-1", None, date(2024, 5, 1))

    assert shuffle_ids(ids, seed) == shuffle_ids(ids, seed)
    assert sorted(shuffle_ids(ids, seed)) == ids
    assert daily_seed("user-1", None, date(2024, 5, 2)) != seed
    assert daily_seed("user-2", None, date(2024, 5, 1)) != seed


def test_question_banks_listing(client: TestClient, db: Session, auth_headers: dict) -> None:
    own = create_test_bank(db, TEST_USER_ID, num_questions=2, name="Mine")
    create_test_bank(db, OTHER_USER_ID, num_questions=1, name="Theirs")

    response = client.get("/api/question-banks", headers=auth_headers)

    assert response.status_code == 200
    banks = response.json()["questionBanks"]
    assert [b["name"] for b in banks] == ["Mine"]
    assert banks[0]["totalQuestions"] == 2

    detail = client.get(f"/api/question-banks/{own.id}", headers=auth_headers)
    assert detail.status_code == 200
    assert detail.json()["questionBank"]["id"] == str(own.id)
