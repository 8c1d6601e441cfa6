"""Analytics endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medprep.core.app_exceptions import validation_failed
from medprep.core.dependencies import CurrentUserDep, ServicesDep
from medprep.db.session import get_db
from medprep.schemas.analytics import AnalyticsResponse
from medprep.services.analytics_service import get_analytics
from medprep.services.validation import validate_date_range

router = APIRouter()


@router.get("", response_model=AnalyticsResponse, response_model_by_alias=True)
async def get_user_analytics(
    user: CurrentUserDep,
    services: ServicesDep,
    db: Annotated[Session, Depends(get_db)],
    start: Annotated[date | None, Query(alias="from")] = None,
    end: Annotated[date | None, Query(alias="to")] = None,
) -> AnalyticsResponse:
    """
    Performance summary for the caller.

    `from` and `to` are inclusive UTC dates (YYYY-MM-DD); either may be omitted.
    """
    result = validate_date_range(start, end)
    if not result.ok:
        raise validation_failed(result.to_list(), result.first.message)

    analytics = get_analytics(
        db,
        user.id,
        start,
        end,
        cache=services.cache,
        recent_limit=services.config.RECENT_SESSIONS_LIMIT,
    )
    return AnalyticsResponse(analytics=analytics)
