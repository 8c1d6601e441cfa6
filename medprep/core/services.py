"""Process-wide service container built once in the app lifespan."""

import time
from dataclasses import dataclass, field
from typing import Any

from medprep.core.config import Settings
from medprep.core.document_store import create_mongo_client
from medprep.core.logging import get_logger
from medprep.core.redis_client import create_redis_client
from medprep.services.analytics_cache import AnalyticsCache

logger = get_logger(__name__)


@dataclass
class Services:
    """Collaborators handed to request handlers by reference."""

    config: Settings
    redis: Any | None = None
    mongo: Any | None = None
    analytics_cache: AnalyticsCache | None = None
    started_at: float = field(default_factory=time.monotonic)

    @property
    def cache(self) -> AnalyticsCache:
        if self.analytics_cache is None:
            self.analytics_cache = AnalyticsCache(self.redis, self.config.ANALYTICS_CACHE_TTL)
        return self.analytics_cache


def build_services(config: Settings) -> Services:
    """Construct clients; construction never blocks on an unreachable datastore."""
    redis_client = create_redis_client(config)
    mongo_client = create_mongo_client(config)
    services = Services(
        config=config,
        redis=redis_client,
        mongo=mongo_client,
        analytics_cache=AnalyticsCache(redis_client, config.ANALYTICS_CACHE_TTL),
    )
    logger.info(
        "Services initialized",
        extra={"redis_enabled": redis_client is not None, "mongodb_enabled": mongo_client is not None},
    )
    return services


def close_services(services: Services) -> None:
    for name in ("redis", "mongo"):
        client = getattr(services, name)
        if client is None:
            continue
        try:
            client.close()
        except Exception as e:
            logger.warning("Failed to close client", extra={"client": name, "error": str(e)})
