"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

import medprep.models  # noqa: F401  (registers every table on Base.metadata)
from medprep.api.router import api_router
from medprep.common.request_id import RequestIDMiddleware
from medprep.core.config import settings
from medprep.core.document_store import system_logs_collection
from medprep.core.errors import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from medprep.core.logging import attach_document_sink, detach_document_sink, get_logger, setup_logging
from medprep.core.seed_questions import seed_demo_questions
from medprep.core.services import build_services, close_services
from medprep.db.base import Base
from medprep.db.engine import engine

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    services = build_services(settings)
    app.state.services = services

    if settings.LOG_TO_DOCUMENT_STORE and services.mongo is not None:
        attach_document_sink(system_logs_collection(services.mongo, settings.MONGODB_DB))

    # Create tables (in production, use migrations)
    if settings.ENV in ("dev", "test"):
        Base.metadata.create_all(bind=engine)

    if settings.SEED_DEMO_QUESTIONS:
        seed_demo_questions()

    logger.info("Application started", extra={"environment": settings.ENV, "version": settings.VERSION})
    yield
    # Shutdown
    detach_document_sink()
    close_services(services)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Medical exam practice API: question banks, practice sessions and analytics",
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        lifespan=lifespan,
    )

    # Add middleware (order matters - first added is outermost)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include API routers
    app.include_router(api_router, prefix=settings.API_PREFIX)

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - API information."""
        return {
            "message": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs_url": "/docs" if settings.ENV != "prod" else None,
        }

    return app


# Create app instance
app = create_app()
