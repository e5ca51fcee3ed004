"""
Redis connection and stream names.

Sync runs announce their results on Redis streams for downstream consumers.
"""

from typing import Optional
from redis import Redis
from tickstore.core.config import settings

# Synchronous Redis client (for Celery tasks)
redis_client: Optional[Redis] = None


def get_redis() -> Redis:
    """Get synchronous Redis client."""
    global redis_client
    if redis_client is None:
        redis_client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
        )
    return redis_client


# Redis Stream Names
class StreamNames:
    """Redis Stream names for the event bus."""

    INTRADAY_BARS = "intraday-bars"
    ALERTS = "alerts"
