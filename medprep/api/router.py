"""API router - includes all endpoints."""

from fastapi import APIRouter

from medprep.api.endpoints import analytics, health, question_banks, questions, sessions, upload

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(questions.router, prefix="/questions", tags=["Questions"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
api_router.include_router(question_banks.router, prefix="/question-banks", tags=["Question Banks"])
api_router.include_router(upload.router, prefix="/upload", tags=["Upload"])
