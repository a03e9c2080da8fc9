"""
TTL-gated cache of fetched collections.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from inspection_sync.schema.models import ListCacheEntry
from inspection_sync.storage.base import BaseStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "list_cache"


def now_ms() -> int:
    return int(time.time() * 1000)


class ListCache:
    """
    One entry per list view, persisted across restarts.

    ``read`` always returns the last-known items, even when stale, so a
    screen can render them while it refetches.
    """

    def __init__(self, backend: BaseStore, clock: Callable[[], int] = now_ms):
        self._backend = backend
        self._clock = clock

    def _key(self, key: str) -> str:
        return f"{KEY_PREFIX}:{key}"

    async def entry(self, key: str) -> ListCacheEntry | None:
        raw = await self._backend.get(self._key(key))
        if not raw:
            return None
        try:
            return ListCacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable list cache %s: %s", key, e)
            return None

    async def read(self, key: str, ttl_ms: int) -> tuple[list[Any], bool]:
        """Return ``(items, is_fresh)``; fresh iff fetched less than ``ttl_ms`` ago."""
        cached = await self.entry(key)
        if cached is None:
            return [], False

        if cached.fetched_at == 0:
            return cached.items, False

        is_fresh = self._clock() - cached.fetched_at < ttl_ms
        logger.debug("List cache %s: %d items, fresh=%s", key, len(cached.items), is_fresh)
        return cached.items, is_fresh

    async def write(self, key: str, items: list[Any], fetched_at: int | None = None) -> None:
        stamp = self._clock() if fetched_at is None else fetched_at
        entry = ListCacheEntry(items=list(items), fetched_at=stamp)
        await self._backend.set(self._key(key), entry.model_dump_json())

    async def invalidate(self, key: str) -> None:
        """Force the next read to be stale while keeping the last items."""
        cached = await self.entry(key)
        await self.write(key, cached.items if cached else [], 0)
