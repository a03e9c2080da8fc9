"""
In-memory dictionary store.

Fast, ephemeral storage used by tests and as a scratch backend.
"""

from __future__ import annotations

from inspection_sync.storage.base import BaseStore


class DictStore(BaseStore):
    """
    In-memory dictionary-based key-value storage.

    Features:
    - O(1) access by key
    - No persistence (ephemeral)
    - Write counter, so callers can observe coalescing
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self.writes = 0

    async def initialize(self) -> None:
        """Nothing to prepare."""

    async def close(self) -> None:
        """Nothing to release."""

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes += 1
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        if key in self._data:
            del self._data[key]
            return True
        return False

    async def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))
