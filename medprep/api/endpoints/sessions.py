"""Practice session endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from medprep.core.dependencies import CurrentUserDep, ServicesDep
from medprep.core.services import Services
from medprep.db.session import get_db
from medprep.schemas.session import SessionCreate, SessionListResponse, SessionOut, SessionResponse
from medprep.services.session_service import (
    create_session,
    get_user_session,
    list_sessions,
    transition_session,
)

router = APIRouter()


@router.post(
    "",
    response_model=SessionResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def start_session(
    payload: SessionCreate,
    user: CurrentUserDep,
    services: ServicesDep,
    db: Annotated[Session, Depends(get_db)],
) -> SessionResponse:
    session = await create_session(db, user.id, payload, services.cache)
    return SessionResponse(session=SessionOut.model_validate(session))


@router.get("", response_model=SessionListResponse, response_model_by_alias=True)
async def get_sessions(
    user: CurrentUserDep,
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> SessionListResponse:
    """List the caller's sessions, newest first."""
    sessions = list_sessions(db, user.id, limit)
    return SessionListResponse(sessions=[SessionOut.model_validate(s) for s in sessions])


@router.get("/{session_id}", response_model=SessionResponse, response_model_by_alias=True)
async def get_session(
    session_id: UUID,
    user: CurrentUserDep,
    db: Annotated[Session, Depends(get_db)],
) -> SessionResponse:
    session = get_user_session(db, session_id, user.id)
    return SessionResponse(session=SessionOut.model_validate(session))


async def _transition(
    db: Session, session_id: UUID, user_id: str, action: str, services: Services
) -> SessionResponse:
    session = get_user_session(db, session_id, user_id)
    session = await transition_session(db, session, action, services.cache)
    return SessionResponse(session=SessionOut.model_validate(session))


@router.post("/{session_id}/pause", response_model=SessionResponse, response_model_by_alias=True)
async def pause_session(
    session_id: UUID,
    user: CurrentUserDep,
    services: ServicesDep,
    db: Annotated[Session, Depends(get_db)],
) -> SessionResponse:
    return await _transition(db, session_id, user.id, "pause", services)


@router.post("/{session_id}/resume", response_model=SessionResponse, response_model_by_alias=True)
async def resume_session(
    session_id: UUID,
    user: CurrentUserDep,
    services: ServicesDep,
    db: Annotated[Session, Depends(get_db)],
) -> SessionResponse:
    return await _transition(db, session_id, user.id, "resume", services)


@router.post("/{session_id}/complete", response_model=SessionResponse, response_model_by_alias=True)
async def complete_session(
    session_id: UUID,
    user: CurrentUserDep,
    services: ServicesDep,
    db: Annotated[Session, Depends(get_db)],
) -> SessionResponse:
    """Finish a session early; completing an already completed session is a no-op."""
    return await _transition(db, session_id, user.id, "complete", services)
