from __future__ import annotations

import logging
import time
from typing import Optional

from redis.asyncio import Redis

logger = logging.getLogger("cache")

COOLDOWN_PREFIX = "submit_cooldown:"
BLOCKED_TOKEN_PREFIX = "token:"


class RedisStore:
    """Expiring keys in redis: run/submit cooldowns and the logout blocklist."""

    def __init__(self, client: Redis, *, cooldown_seconds: int = 10) -> None:
        self._client = client
        self.cooldown_seconds = max(1, int(cooldown_seconds))

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisStore":
        return cls(Redis.from_url(url, decode_responses=True), **kwargs)

    async def try_acquire_cooldown(self, user_id: object) -> bool:
        """Open a cooldown window for ``user_id``; False if one is already open."""
        acquired = await self._client.set(
            f"{COOLDOWN_PREFIX}{user_id}",
            "submit_cooldown",
            ex=self.cooldown_seconds,
            nx=True,
        )
        return bool(acquired)

    async def block_token(self, token: str, expires_at: Optional[int] = None) -> None:
        key = f"{BLOCKED_TOKEN_PREFIX}{token}"
        if expires_at and expires_at > int(time.time()):
            await self._client.set(key, "blocked", exat=int(expires_at))
        elif expires_at:
            # already expired; nothing left to block
            return
        else:
            await self._client.set(key, "blocked")

    async def is_token_blocked(self, token: str) -> bool:
        return bool(await self._client.exists(f"{BLOCKED_TOKEN_PREFIX}{token}"))

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["RedisStore", "COOLDOWN_PREFIX", "BLOCKED_TOKEN_PREFIX"]
