"""Replay protection for one-time login challenges."""

from __future__ import annotations

import time
from threading import Lock
from typing import Final

import redis

from textstore.core.settings import settings


class ReplayProtectionService:
    """Remember used challenge nonces until they could no longer validate.

    Backed by Redis when `REDIS_URL` is configured; otherwise an in-process
    cache shared by every instance.
    """

    def __init__(self, redis_url: str | None = None, ttl_seconds: int | None = None) -> None:
        url = redis_url if redis_url is not None else settings.redis_url
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.challenge_ttl_seconds
        self._redis: redis.Redis | None = redis.from_url(url) if url else None

    def register_replay(self, pubkey_hex: str, nonce_hex: str) -> bool:
        """Mark a nonce as used. Returns False if it was already registered."""
        key = f"replay:{pubkey_hex}:{nonce_hex}"
        if self._redis is not None:
            return bool(self._redis.set(key, "1", ex=self._ttl, nx=True))

        now = time.time()
        with _CACHE_LOCK:
            _purge_expired(now)
            if key in _NONCE_CACHE:
                return False
            _NONCE_CACHE[key] = now + self._ttl
            return True


def _purge_expired(now: float) -> None:
    expired = [key for key, expiry in _NONCE_CACHE.items() if expiry < now]
    for key in expired:
        del _NONCE_CACHE[key]


_NONCE_CACHE: dict[str, float] = {}
_CACHE_LOCK: Final[Lock] = Lock()


def get_replay_service() -> ReplayProtectionService:
    """Return a replay protection service instance."""
    return ReplayProtectionService()
