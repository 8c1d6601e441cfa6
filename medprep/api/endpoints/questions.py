"""Question retrieval and answer submission endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medprep.core.dependencies import CurrentUserDep, ServicesDep
from medprep.db.session import get_db
from medprep.models.practice import SessionMode
from medprep.schemas.question import (
    AnswerOut,
    AnswerResponse,
    AnswerSubmit,
    AnswerSubmitResponse,
    FlagUpdate,
    QuestionListResponse,
)
from medprep.schemas.session import SessionOut
from medprep.services.answer_service import set_answer_flag, submit_answer
from medprep.services.question_service import list_questions, to_question_out

router = APIRouter()


@router.get("", response_model=QuestionListResponse, response_model_by_alias=True)
async def get_questions(
    user: CurrentUserDep,
    db: Annotated[Session, Depends(get_db)],
    question_bank_id: Annotated[UUID | None, Query(alias="questionBankId")] = None,
    mode: Annotated[SessionMode, Query()] = SessionMode.TUTOR,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> QuestionListResponse:
    """
    Page through questions for a practice mode.

    Correct answers and explanations are only included in review mode.
    """
    questions, total = list_questions(db, user.id, question_bank_id, mode, limit, offset)
    reveal = mode == SessionMode.REVIEW
    return QuestionListResponse(
        questions=[to_question_out(q, reveal_answer=reveal) for q in questions],
        total=total,
        has_more=offset + limit < total,
    )


@router.post("", response_model=AnswerSubmitResponse, response_model_by_alias=True)
async def post_answer(
    payload: AnswerSubmit,
    user: CurrentUserDep,
    services: ServicesDep,
    db: Annotated[Session, Depends(get_db)],
) -> AnswerSubmitResponse:
    """Submit an answer; returns correctness, the explanation and the next question."""
    result = await submit_answer(db, user.id, payload, services.cache)
    return AnswerSubmitResponse(
        is_correct=result.answer.is_correct,
        explanation=result.question.explanation,
        next_question_id=result.next_question_id,
        answer_id=result.answer.id,
        attempt_number=result.answer.attempt_number,
        session=SessionOut.model_validate(result.session) if result.session else None,
    )


@router.patch("/answers/{answer_id}/flag", response_model=AnswerResponse, response_model_by_alias=True)
async def patch_answer_flag(
    answer_id: UUID,
    payload: FlagUpdate,
    user: CurrentUserDep,
    services: ServicesDep,
    db: Annotated[Session, Depends(get_db)],
) -> AnswerResponse:
    answer = await set_answer_flag(db, user.id, answer_id, payload.is_flagged, services.cache)
    return AnswerResponse(answer=AnswerOut.model_validate(answer))
