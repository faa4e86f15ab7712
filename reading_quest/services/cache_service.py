"""Redis cache for published reading plan definitions."""
import json
import logging
from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from reading_quest.config import get_settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None

PLAN_KEY_PREFIX = "reading-plan"


def initialize_redis() -> None:
    """Connect to Redis when caching is enabled; a failed ping leaves the cache off."""
    global _redis_client

    settings = get_settings()
    if _redis_client is not None or not settings.cache_enabled:
        return

    client = redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=3,
        socket_timeout=3,
    )
    try:
        client.ping()
    except RedisError as e:
        logger.warning(f"Plan cache disabled, Redis unreachable at {settings.redis_url}: {e}")
        return
    _redis_client = client
    logger.info("Plan cache connected")


def close_redis() -> None:
    global _redis_client

    client, _redis_client = _redis_client, None
    if client is None:
        return
    try:
        client.close()
    except RedisError as e:
        logger.warning(f"Redis close failed: {e}")


def _get_client() -> Optional[redis.Redis]:
    return _redis_client


def _plan_key(kind: str, value: Any) -> str:
    return f"{PLAN_KEY_PREFIX}:{kind}:{str(value).strip().lower()}"


class CacheService:
    """Read-through cache for plan definitions, which never change once published."""

    @staticmethod
    def get(key: str) -> Optional[Any]:
        """Get a JSON value from cache, or None on a miss or Redis failure."""
        client = _get_client()
        if client is None:
            return None

        try:
            value = client.get(key)
            if value is None:
                logger.info(f"Cache miss for key: {key}")
                return None
            logger.info(f"Cache hit for key: {key}")
            return json.loads(value)
        except (RedisError, json.JSONDecodeError) as e:
            logger.error(f"Cache get error for key {key}: {e}")
            return None

    @staticmethod
    def set(key: str, value: Any, ttl: int = 0) -> bool:
        """Store a JSON value; ``ttl`` of 0 means no expiry."""
        client = _get_client()
        if client is None:
            return False

        try:
            serialized = json.dumps(value, default=str)
            if ttl > 0:
                client.setex(key, ttl, serialized)
            else:
                client.set(key, serialized)
            return True
        except RedisError as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

    @staticmethod
    def get_plan(plan_id: int) -> Optional[dict]:
        return CacheService.get(_plan_key("id", plan_id))

    @staticmethod
    def set_plan(plan_id: int, plan_data: dict) -> bool:
        settings = get_settings()
        return CacheService.set(_plan_key("id", plan_id), plan_data, ttl=settings.cache_ttl_plans)

    @staticmethod
    def get_plan_by_slug(slug: str) -> Optional[dict]:
        return CacheService.get(_plan_key("slug", slug))

    @staticmethod
    def set_plan_by_slug(slug: str, plan_data: dict) -> bool:
        settings = get_settings()
        return CacheService.set(_plan_key("slug", slug), plan_data, ttl=settings.cache_ttl_plans)
