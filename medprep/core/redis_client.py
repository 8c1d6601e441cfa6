"""Redis client construction and probing."""

import redis
from redis.exceptions import RedisError

from medprep.core.config import Settings
from medprep.core.logging import get_logger

logger = get_logger(__name__)


def create_redis_client(config: Settings) -> redis.Redis | None:
    """Build a Redis client. Returns None if Redis is disabled or not configured.

    The connection is lazy; an unreachable server shows up in `ping_redis`,
    not here.
    """
    if not config.REDIS_ENABLED:
        return None

    if not config.REDIS_URL:
        logger.warning("Redis enabled but REDIS_URL not set. Redis features will be disabled.")
        return None

    return redis.from_url(
        config.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=1,  # Fast fail on connect
        socket_timeout=1,  # Fast fail on operations
        retry_on_timeout=True,
        health_check_interval=30,
    )


def ping_redis(client: redis.Redis | None) -> bool:
    """Check if Redis answers a PING."""
    if client is None:
        return False
    try:
        return bool(client.ping())
    except (RedisError, OSError) as e:
        logger.warning("Redis ping failed", extra={"error": str(e)})
        return False
