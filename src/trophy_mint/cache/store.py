"""Read-through cache store backed by Redis.

The cache is an optimization only. Every failure (connect, GET, SET, bad
payload) is logged and reported to the caller as a miss, so the request path
keeps working in fetch-through mode when Redis is down.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

import redis.asyncio as redis

from trophy_mint.errors import CacheUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


def player_achievements_key(steam_id: str, app_id: int) -> str:
    return f"playerAch:{steam_id}:{app_id}"


def schema_key(app_id: int) -> str:
    return f"schema:{app_id}"


def global_achievements_key(app_id: int) -> str:
    return f"globalAch:{app_id}"


class CacheStore:
    """Key/value cache with per-key expiry over a lazily opened Redis connection.

    One store is shared by all concurrent requests. The connection is opened on
    first use; while an attempt is in flight, other callers await that same
    attempt instead of opening their own.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        client_factory: Callable[[], Any] | None = None,
        default_ttl: int = DEFAULT_TTL_SECONDS,
    ):
        self.redis_url = redis_url
        self.default_ttl = default_ttl
        self._client_factory = client_factory or self._default_factory
        self._client: Any | None = None
        self._connecting: asyncio.Future | None = None
        self.connect_attempts = 0

    def _default_factory(self):
        return redis.from_url(
            self.redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )

    async def _connect(self):
        self.connect_attempts += 1
        logger.info("Connecting to cache at %s", self.redis_url)
        client = self._client_factory()
        try:
            await client.ping()
        except Exception as e:
            logger.warning("Cache connection failed: %s", e)
            try:
                await client.aclose()
            except Exception:
                pass
            raise CacheUnavailable(f"Cannot connect to cache: {e}") from e
        self._client = client
        logger.info("Cache connected")
        return client

    async def client(self):
        """Return the shared client, connecting if needed.

        Raises:
            CacheUnavailable: If the connection attempt fails.
        """
        if self._client is not None:
            return self._client

        if self._connecting is None:
            self._connecting = asyncio.ensure_future(self._connect())
        attempt = self._connecting
        try:
            return await asyncio.shield(attempt)
        finally:
            if attempt.done() and self._connecting is attempt:
                self._connecting = None

    async def get(self, key: str) -> str | None:
        """Return the cached payload, or None on a miss or any cache failure."""
        try:
            client = await self.client()
            value = await client.get(key)
        except CacheUnavailable:
            return None
        except Exception as e:
            logger.warning("Cache GET failed for %s: %s", key, e)
            return None

        if value is None:
            logger.debug("Cache miss for %s", key)
        else:
            logger.debug("Cache hit for %s", key)
        return value

    async def set(self, key: str, payload: str, ttl_seconds: int | None = None) -> None:
        """Store a payload with an expiry. Failures are logged and ignored."""
        ttl = ttl_seconds or self.default_ttl
        try:
            client = await self.client()
            await client.set(key, payload, ex=ttl)
        except CacheUnavailable:
            return
        except Exception as e:
            logger.warning("Cache SET failed for %s: %s", key, e)
            return
        logger.debug("Cached %s for %ss", key, ttl)

    async def get_json(self, key: str) -> Any | None:
        """Return a decoded JSON payload. A corrupt entry counts as a miss."""
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        await self.set(key, json.dumps(value), ttl_seconds)

    async def close(self) -> None:
        """Close the connection if one was opened."""
        client, self._client = self._client, None
        if client is not None:
            try:
                await client.aclose()
            except Exception as e:
                logger.debug("Ignoring error while closing cache: %s", e)
