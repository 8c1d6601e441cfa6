"""Question bank endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medprep.core.dependencies import CurrentUserDep
from medprep.db.session import get_db
from medprep.schemas.upload import QuestionBankListResponse, QuestionBankOut, QuestionBankResponse
from medprep.services.question_service import get_question_bank, list_question_banks

router = APIRouter()


@router.get("", response_model=QuestionBankListResponse, response_model_by_alias=True)
async def get_question_banks(
    user: CurrentUserDep,
    db: Annotated[Session, Depends(get_db)],
) -> QuestionBankListResponse:
    """Banks the caller owns plus the shared sample bank, newest first."""
    banks = list_question_banks(db, user.id)
    return QuestionBankListResponse(question_banks=[QuestionBankOut.model_validate(b) for b in banks])


@router.get("/{bank_id}", response_model=QuestionBankResponse, response_model_by_alias=True)
async def get_question_bank_detail(
    bank_id: UUID,
    user: CurrentUserDep,
    db: Annotated[Session, Depends(get_db)],
) -> QuestionBankResponse:
    bank = get_question_bank(db, bank_id, user.id)
    return QuestionBankResponse(question_bank=QuestionBankOut.model_validate(bank))
