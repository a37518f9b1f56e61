"""Key-value store holding live refresh tokens.

A refresh token is valid iff its key maps to ``"true"``. ``delete`` reports how
many keys it removed so concurrent refreshes of one token can tell who won.
"""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Dict, Optional, Protocol, Tuple

import redis
from flask import current_app

EXTENSION_KEY = "revocation_store"


class RevocationStore(Protocol):
    def set(self, key: str, value: str, ttl: timedelta) -> None: ...

    def get(self, key: str) -> Optional[str]: ...

    def delete(self, key: str) -> int: ...


class RedisRevocationStore:
    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisRevocationStore":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def set(self, key: str, value: str, ttl: timedelta) -> None:
        self.client.set(key, value, ex=ttl)

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def delete(self, key: str) -> int:
        return int(self.client.delete(key))


class MemoryRevocationStore:
    """Process-local store for tests and single-process development."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[str, float]] = {}

    def set(self, key: str, value: str, ttl: timedelta) -> None:
        with self._lock:
            self._data[key] = (value, self._clock() + ttl.total_seconds())

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._live_entry(key)
            return entry[0] if entry else None

    def delete(self, key: str) -> int:
        with self._lock:
            entry = self._live_entry(key)
            self._data.pop(key, None)
            return 1 if entry else 0

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._data) if self._live_entry(key))

    def _live_entry(self, key: str) -> Optional[Tuple[str, float]]:
        entry = self._data.get(key)
        if entry and entry[1] <= self._clock():
            del self._data[key]
            return None
        return entry


def build_revocation_store(uri: str) -> RevocationStore:
    if not uri or uri.startswith("memory://"):
        return MemoryRevocationStore()
    if uri.startswith(("redis://", "rediss://", "unix://")):
        return RedisRevocationStore.from_url(uri)
    raise ValueError(f"unsupported revocation store uri: {uri}")


def init_revocation_store(app) -> None:
    app.extensions[EXTENSION_KEY] = build_revocation_store(app.config.get("REVOCATION_STORE_URI", "memory://"))


def get_revocation_store() -> RevocationStore:
    return current_app.extensions[EXTENSION_KEY]
