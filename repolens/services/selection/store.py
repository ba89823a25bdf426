"""
Key/value store for compressed notebooks.

The orchestrator only needs async get/set, so any backend (Redis, a database
table) can be plugged in. The default keeps entries in process memory.
"""

import hashlib
import logging
from typing import Any, Protocol

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...


class InMemoryStore:
    """TTL-bounded in-process store."""

    def __init__(self, maxsize: int = 500, ttl: float = 3600):
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=maxsize, ttl=ttl)

    async def get(self, key: str) -> Any | None:
        return self._cache.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._cache[key] = value

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


def notebook_cache_key(full_name: str, commit: str, path: str, course_id: str) -> str:
    """Key for a compressed notebook. Commit-pinned, so entries never go stale."""
    key_data = f"notebook:{full_name}@{commit}:{path}:{course_id}"
    return hashlib.md5(key_data.encode()).hexdigest()
