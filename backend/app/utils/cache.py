"""Redis caching utilities for Brymar.

Provides decorators and functions for caching public listing queries.
Uses Redis for distributed caching across multiple backend instances.
Every Redis failure degrades to an uncached call.
"""

import functools
import hashlib
import json
import logging
from datetime import date, datetime
from typing import Any, Callable, Optional

import redis.asyncio as redis
from app.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def cache_key(*args, **kwargs) -> str:
    """Generate a cache key from function arguments.

    Creates a deterministic hash from function name and arguments.
    """
    if not args and not kwargs:
        return "default"

    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True, default=str)
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return key_hash


def _serialize(result: Any) -> Any:
    if hasattr(result, "model_dump"):
        return result.model_dump(mode="json")
    if isinstance(result, list) and result and hasattr(result[0], "model_dump"):
        return [item.model_dump(mode="json") for item in result]
    return result


def cached(
    ttl: int = 300,
    prefix: str = "cache",
    key_builder: Optional[Callable] = None,
):
    """Decorator to cache function results in Redis.

    Args:
        ttl: Time-to-live in seconds (default: 300 = 5 minutes)
        prefix: Cache key prefix for namespacing
        key_builder: Custom function to build cache key from args/kwargs

    Example:
        @cached(ttl=300, prefix="properties")
        async def list_properties(db: AsyncSession, limit: int = 12):
            # ... query ...
            return results

    Cache keys: {prefix}:{function_name}:{args_hash}
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.cache_enabled:
                return await func(*args, **kwargs)

            if key_builder:
                key = key_builder(*args, **kwargs)
            else:
                # Only simple kwargs go into the key; injected objects
                # (AsyncSession, User, UIContext) are skipped.
                cache_kwargs = {}
                for k, v in kwargs.items():
                    if k.startswith("_"):
                        continue
                    if isinstance(v, (int, str, bool, float, type(None))):
                        cache_kwargs[k] = v
                    elif isinstance(v, (date, datetime)):
                        cache_kwargs[k] = v.isoformat()
                key = f"{prefix}:{func.__name__}:{cache_key(**cache_kwargs)}"

            try:
                redis_client = await get_redis()
                cached_value = await redis_client.get(key)

                if cached_value:
                    logger.debug(f"Cache HIT: {key}")
                    return json.loads(cached_value)

                logger.debug(f"Cache MISS: {key}")
                result = await func(*args, **kwargs)

                await redis_client.setex(
                    key,
                    ttl,
                    json.dumps(_serialize(result)),
                )
                return result

            except redis.RedisError as e:
                logger.warning(f"Redis error (falling back to uncached): {e}")
                return await func(*args, **kwargs)

        return wrapper

    return decorator


async def invalidate_cache(pattern: str):
    """Invalidate cache keys matching a pattern.

    Args:
        pattern: Redis key pattern (e.g., "properties:*")

    Example:
        await invalidate_cache("properties:*")
    """
    if not settings.cache_enabled:
        return
    try:
        redis_client = await get_redis()
        keys = []
        async for key in redis_client.scan_iter(match=pattern):
            keys.append(key)

        if keys:
            await redis_client.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching {pattern}")
    except redis.RedisError as e:
        logger.warning(f"Failed to invalidate cache: {e}")


# ── Post-commit invalidation ────────────────────────────────

STALE_PATTERNS_KEY = "stale_cache_patterns"


def mark_stale(session, pattern: str) -> None:
    """Queue `pattern` for invalidation once `session` commits.

    Invalidating before the commit lets a concurrent public read cache
    the pre-commit rows again, so writers only mark here.
    """
    session.info.setdefault(STALE_PATTERNS_KEY, set()).add(pattern)


async def flush_stale(session) -> None:
    """Invalidate every pattern queued on `session` since its last commit."""
    for pattern in sorted(session.info.pop(STALE_PATTERNS_KEY, ())):
        await invalidate_cache(pattern)
