"""Health endpoint: process metrics and datastore connectivity."""

import time
from typing import Literal

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medprep.common.clock import utcnow
from medprep.common.process_metrics import memory_snapshot
from medprep.core.dependencies import ServicesDep
from medprep.core.document_store import ping_mongo
from medprep.core.logging import get_logger
from medprep.core.redis_client import ping_redis
from medprep.db.session import get_db

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

ConnectionState = Literal["connected", "disconnected"]


class MemoryUsage(BaseModel):
    used: float
    total: float
    percentage: float


class DatabaseStatus(BaseModel):
    postgres: ConnectionState
    mongodb: ConnectionState
    redis: ConnectionState


class HealthResponse(BaseModel):
    """Health report. Field names are already camelCase on the wire."""

    status: Literal["healthy", "degraded"]
    timestamp: str
    uptime: float
    memory: MemoryUsage
    version: str
    environment: str
    databases: DatabaseStatus
    responseTime: int


def ping_postgres(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning("Relational store ping failed", extra={"error": str(e)})
        return False


def _state(ok: bool) -> ConnectionState:
    return "connected" if ok else "disconnected"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Reports process metrics and datastore connectivity. 503 when any datastore is unreachable.",
    responses={503: {"description": "Degraded or unhealthy"}},
)
async def health_check(
    services: ServicesDep,
    db: Session = Depends(get_db),
) -> JSONResponse:
    started = time.perf_counter()
    try:
        databases = DatabaseStatus(
            postgres=_state(ping_postgres(db)),
            mongodb=_state(ping_mongo(services.mongo)),
            redis=_state(ping_redis(services.redis)),
        )
        healthy = all(state == "connected" for state in databases.model_dump().values())
        report = HealthResponse(
            status="healthy" if healthy else "degraded",
            timestamp=utcnow().isoformat(),
            uptime=round(time.monotonic() - services.started_at, 2),
            memory=MemoryUsage(**memory_snapshot()),
            version=services.config.VERSION,
            environment=services.config.ENV,
            databases=databases,
            responseTime=int((time.perf_counter() - started) * 1000),
        )
    except Exception as e:
        logger.error("Health check failed", extra={"error": str(e)}, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "error": str(e), "timestamp": utcnow().isoformat()},
        )

    logger.info(
        "System health check",
        extra={
            "event": "system_health",
            "status": report.status,
            "postgres": databases.postgres,
            "mongodb": databases.mongodb,
            "redis": databases.redis,
            "response_time_ms": report.responseTime,
        },
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=report.model_dump(mode="json"),
    )
