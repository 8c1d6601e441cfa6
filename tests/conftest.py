"""Pytest configuration and shared fixtures."""

import os
import tempfile
from collections.abc import Generator
from unittest.mock import MagicMock

# Configure the app for tests before anything imports settings
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["REDIS_ENABLED"] = "false"
os.environ["MONGODB_ENABLED"] = "false"
os.environ["LOG_TO_DOCUMENT_STORE"] = "false"
os.environ["SEED_DEMO_QUESTIONS"] = "false"
os.environ["JWT_SECRET"] = "test-secret-key-for-tests-only"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="medprep-uploads-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from medprep.core.config import settings  # noqa: E402
from medprep.core.security import create_access_token  # noqa: E402
from medprep.core.services import Services  # noqa: E402
from medprep.db.base import Base  # noqa: E402
from medprep.db.engine import engine  # noqa: E402
from medprep.db.session import SessionLocal  # noqa: E402
from medprep.main import app  # noqa: E402
from medprep.services.analytics_cache import AnalyticsCache  # noqa: E402
from tests.helpers.seed import OTHER_USER_ID, TEST_USER_ID  # noqa: E402

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh schema per test on the shared in-memory SQLite connection."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis() -> MagicMock:
    """Redis stand-in: empty cache, successful writes."""
    client = MagicMock()
    client.get.return_value = None
    client.ping.return_value = True
    client.scan_iter.return_value = iter([])
    client.delete.return_value = 0
    return client


@pytest.fixture
def services() -> Services:
    """Services with no datastores attached (Redis and Mongo disabled)."""
    return Services(config=settings)


@pytest.fixture
def client(db: Session, services: Services) -> Generator[TestClient, None, None]:
    with TestClient(app, raise_server_exceptions=False) as test_client:
        app.state.services = services
        yield test_client


@pytest.fixture
def user_token() -> str:
    return create_access_token(TEST_USER_ID, email="student@example.com")


@pytest.fixture
def auth_headers(user_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(OTHER_USER_ID)}"}


@pytest.fixture
def cache(fake_redis: MagicMock) -> AnalyticsCache:
    return AnalyticsCache(fake_redis, ttl_seconds=300)
