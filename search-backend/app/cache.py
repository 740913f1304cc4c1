from __future__ import annotations
"""Redis-backed cache for projected points with graceful no-op fallback.

Usage:
    from app.cache import build_cache_from_env
    cache = await build_cache_from_env()
    await cache.set_point(3010, 3006, 150000.0, 6580000.0, {"x": 1.0, "y": 2.0})
    data = await cache.get_point(3010, 3006, 150000.0, 6580000.0)

Connection errors are logged and swallowed; a transform never fails because
Redis is unavailable. Keys are automatically prefixed.
"""
import asyncio
import json
import logging
import os
from typing import Any, Dict, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


def point_key(source: int, target: int, easting: float, northing: float) -> str:
    # millimetre resolution; finer differences are noise for a map marker
    return f"point:{source}:{target}:{easting:.3f}:{northing:.3f}"


class _NoopCache:
    async def get_json(self, key: str):  # pragma: no cover - trivial
        return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None):  # pragma: no cover - trivial
        return False

    async def get_point(self, source: int, target: int, easting: float, northing: float):
        return None

    async def set_point(self, source: int, target: int, easting: float, northing: float, point: Dict[str, Any]):
        return False

    async def close(self):  # pragma: no cover - trivial
        return None


class RedisCache:
    def __init__(self, client: Any, prefix: str = "coords", default_ttl: int = 3600):
        self.client = client
        self.prefix = prefix.rstrip(":")
        self.default_ttl = default_ttl

    def _k(self, key: str) -> str:
        return f"{self.prefix}:{key}" if self.prefix else key

    async def get_json(self, key: str) -> Optional[Any]:
        try:
            raw = await self.client.get(self._k(key))
        except Exception as e:  # pragma: no cover (network issues)
            logger.debug("Redis get failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.debug("Corrupt cache entry for %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        data = json.dumps(value, separators=(",", ":"))
        ex = ttl if ttl is not None else self.default_ttl
        try:
            await self.client.set(self._k(key), data, ex=ex)
            return True
        except Exception as e:  # pragma: no cover
            logger.debug("Redis set failed for %s: %s", key, e)
            return False

    async def get_point(self, source: int, target: int, easting: float, northing: float) -> Optional[Dict[str, Any]]:
        data = await self.get_json(point_key(source, target, easting, northing))
        if not isinstance(data, dict) or "x" not in data or "y" not in data:
            return None
        return data

    async def set_point(
        self, source: int, target: int, easting: float, northing: float, point: Dict[str, Any]
    ) -> bool:
        return await self.set_json(point_key(source, target, easting, northing), point)

    async def close(self):  # pragma: no cover - rarely used
        try:
            await self.client.close()
        except Exception as e:
            logger.debug("Redis close failed: %s", e)


async def build_cache_from_env() -> RedisCache | _NoopCache:
    """Instantiate a RedisCache if REDIS_URL is set and reachable; else a no-op.

    Env vars:
      REDIS_URL                 e.g. redis://redis:6379/0
      CACHE_DISABLE=1           force disable
      CACHE_PREFIX              (optional) namespace prefix (default 'coords')
      COORDS_CACHE_TTL_SECONDS  (optional) default TTL, via app.settings
    """
    from app.settings import SETTINGS

    if os.getenv("CACHE_DISABLE") == "1":
        return _NoopCache()
    url = os.getenv("REDIS_URL")
    if not url:
        return _NoopCache()
    try:
        client = redis.from_url(url, encoding="utf-8", decode_responses=False)
        # Ping with short timeout so startup isn't delayed badly
        await asyncio.wait_for(client.ping(), timeout=0.75)
        prefix = os.getenv("CACHE_PREFIX", "coords")
        return RedisCache(client, prefix=prefix, default_ttl=SETTINGS.cache_ttl_seconds)
    except Exception as e:  # pragma: no cover (network issues)
        logger.info("Redis unavailable (%s); proceeding without cache", e)
        return _NoopCache()


__all__ = ["RedisCache", "build_cache_from_env", "point_key"]
