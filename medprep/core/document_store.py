"""MongoDB document store: system log sink and health probing."""

from typing import Any

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from medprep.core.config import Settings
from medprep.core.logging import get_logger

logger = get_logger(__name__)

SYSTEM_LOGS_COLLECTION = "system_logs"


def create_mongo_client(config: Settings) -> MongoClient | None:
    """Build a MongoDB client. Returns None if the document store is disabled.

    pymongo connects in the background, so construction does not block on an
    unreachable server.
    """
    if not config.MONGODB_ENABLED:
        return None

    if not config.MONGODB_URL:
        logger.warning("Document store enabled but MONGODB_URL not set. It will be disabled.")
        return None

    return MongoClient(
        config.MONGODB_URL,
        serverSelectionTimeoutMS=config.MONGODB_TIMEOUT_MS,
        connectTimeoutMS=config.MONGODB_TIMEOUT_MS,
        appname=config.PROJECT_NAME,
    )


def ping_mongo(client: MongoClient | None) -> bool:
    """Check if the document store answers a ping command."""
    if client is None:
        return False
    try:
        result: dict[str, Any] = client.admin.command("ping")
        return bool(result.get("ok"))
    except PyMongoError as e:
        logger.warning("Document store ping failed", extra={"error": str(e)})
        return False


def system_logs_collection(client: MongoClient, database: str) -> Collection:
    return client[database][SYSTEM_LOGS_COLLECTION]
