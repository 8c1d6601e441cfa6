"""Redis cache for analytics payloads (fail-open).

- Any Redis error must NOT break endpoint responses.
- Entries are per user and short-lived; answer and session writes drop them.
"""

from __future__ import annotations

import json
import re
from datetime import date
from typing import Any

from medprep.core.logging import get_logger

logger = get_logger(__name__)


def analytics_key(user_id: str, start: date | None, end: date | None) -> str:
    start_part = start.isoformat() if start else "-"
    end_part = end.isoformat() if end else "-"
    return f"analytics:{user_id}:{start_part}:{end_part}"


def user_key_pattern(user_id: str) -> str:
    """SCAN pattern for one user's keys, with glob characters in the id escaped."""
    escaped = re.sub(r"([*?\[\]\\])", r"\\\1", user_id)
    return f"analytics:{escaped}:*"


class AnalyticsCache:
    """Thin JSON cache over a Redis client; every operation is a no-op without one."""

    def __init__(self, client: Any | None, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = int(ttl_seconds)

    @property
    def enabled(self) -> bool:
        return self.client is not None and self.ttl_seconds > 0

    def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None
        try:
            raw = self.client.get(key)
            if not raw:
                return None
            return json.loads(raw)
        except Exception as e:
            logger.warning("analytics_cache_get_failed", extra={"key": key, "error": str(e)})
            return None

    def set(self, key: str, value: Any) -> bool:
        if not self.enabled:
            return False
        try:
            self.client.setex(key, self.ttl_seconds, json.dumps(value, default=str))
            return True
        except Exception as e:
            logger.warning("analytics_cache_set_failed", extra={"key": key, "error": str(e)})
            return False

    def invalidate_user(self, user_id: str, max_delete: int = 1000) -> int:
        """Drop every cached range for one user using SCAN."""
        if not self.enabled:
            return 0
        deleted = 0
        try:
            keys = []
            for key in self.client.scan_iter(match=user_key_pattern(user_id), count=200):
                keys.append(key)
                if len(keys) >= max_delete:
                    break
            if keys:
                deleted = int(self.client.delete(*keys))
        except Exception as e:
            logger.warning("analytics_cache_invalidate_failed", extra={"user_id": user_id, "error": str(e)})
            return 0
        return deleted
