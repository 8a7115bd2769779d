#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Object cache adapter
====================
Thin client for the host's object cache.  Values are JSON documents keyed by
``make_key()``; the backend is chosen by ``CACHE_BACKEND``:

  - memory : in-process hash with expiry (development and tests)
  - redis  : ``redis.asyncio`` against ``REDIS_URL``
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import json
import logging
import time
from typing import Any
from urllib.parse import quote

import redis.asyncio as redis

from .config import get_settings

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

class ObjectCache:
    """Common key handling; backends implement the storage calls."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def make_key(self, *parts: Any) -> str:
        """Join *parts* under the keyspace prefix.

        Each part is percent-encoded so a ``:`` inside a category name can
        never be mistaken for a separator.
        """
        encoded = [quote(str(p), safe="") for p in parts]
        return ":".join([self.prefix, *encoded])

    async def get(self, key: str) -> Any | None:
        raise NotImplementedError

    async def set(self, key: str, value: Any, ttl: int) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        pass


# -----------------------------------------------------------------------------

class HashObjectCache(ObjectCache):
    """Per-process cache; entries vanish when the worker restarts."""

    def __init__(self, prefix: str) -> None:
        super().__init__(prefix)
        self._data: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at <= time.monotonic():
            del self._data[key]
            return None
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        now = time.monotonic()
        self._sweep(now)
        self._data[key] = (now + ttl, json.dumps(value))

    def _sweep(self, now: float) -> None:
        """Drop every expired entry, read or not."""
        expired = [k for k, (expires_at, _) in self._data.items() if expires_at <= now]
        for k in expired:
            del self._data[k]

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)


# -----------------------------------------------------------------------------

class RedisObjectCache(ObjectCache):

    def __init__(self, prefix: str, url: str) -> None:
        super().__init__(prefix)
        self._redis = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )

    async def get(self, key: str) -> Any | None:
        payload = await self._redis.get(key)
        if payload is None:
            return None
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        await self._redis.setex(key, ttl, json.dumps(value))

    async def delete(self, key: str) -> None:
        await self._redis.delete(key)

    async def close(self) -> None:
        await self._redis.aclose()


# -----------------------------------------------------------------------------

_cache: ObjectCache | None = None


# -----------------------------------------------------------------------------

def create_cache() -> ObjectCache:
    settings = get_settings()
    if settings.cache_backend == "redis":
        log.info("Using redis object cache at %s", settings.redis_url)
        return RedisObjectCache(settings.cache_key_prefix, settings.redis_url)
    return HashObjectCache(settings.cache_key_prefix)


# -----------------------------------------------------------------------------

def get_cache() -> ObjectCache:
    global _cache
    if _cache is None:
        _cache = create_cache()
    return _cache


# -----------------------------------------------------------------------------

def set_cache(cache: ObjectCache | None) -> None:
    """Swap the process-wide cache (tests, or a host-provided instance)."""
    global _cache
    _cache = cache


# -----------------------------------------------------------------------------

async def close_cache() -> None:
    global _cache
    if _cache is not None:
        await _cache.close()
    _cache = None


# -----------------------------------------------------------------------------
