"""
Shared Redis client with connection pooling.

The reminder engine only needs Redis for its cross-process run lock, so the
pool is kept small.
"""
import logging

import redis
from redis.connection import ConnectionPool

from app.core.config import settings
from app.core.redis_utils import prepare_redis_url

logger = logging.getLogger(__name__)

_pool: ConnectionPool | None = None
_client: redis.Redis | None = None


def redis_configured() -> bool:
    return bool(settings.REDIS_URL)


def get_redis_pool() -> ConnectionPool:
    """Get or create a shared Redis connection pool."""
    global _pool
    if _pool is not None:
        return _pool

    redis_url = prepare_redis_url(settings.REDIS_URL)
    if not redis_url:
        raise RuntimeError("REDIS_URL is not configured")

    _pool = ConnectionPool.from_url(
        redis_url,
        max_connections=5,
        socket_timeout=5,
        socket_connect_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30,
        decode_responses=True,
    )
    logger.info("Redis connection pool created (max_connections=5)")
    return _pool


def get_redis_client() -> redis.Redis:
    """Get or create a Redis client using the shared connection pool."""
    global _client
    if _client is not None:
        return _client

    client = redis.Redis(connection_pool=get_redis_pool())
    try:
        client.ping()
    except redis.RedisError as e:
        logger.error("Redis connection failed: %s", e)
        raise
    logger.info("Redis client connected successfully")
    _client = client
    return _client


def close_redis_pool() -> None:
    """Close the Redis connection pool. Called on app shutdown."""
    global _pool, _client
    if _client is not None:
        _client.close()
        _client = None
    if _pool is not None:
        _pool.disconnect()
        _pool = None
    logger.info("Redis pool closed")
