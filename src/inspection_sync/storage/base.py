"""
Base storage interface for all durable key-value backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseStore(ABC):
    """
    Abstract base class for key-value storage backends.

    Values are JSON strings; binary payloads are never stored.
    All implementations must implement these methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend (create tables, etc.)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the storage backend and cleanup resources."""
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Retrieve a value by key."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one (last write wins)."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key. Returns True if deleted, False if not found."""
        pass

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """List keys starting with ``prefix``, sorted."""
        pass

    async def get_many(self, keys: list[str]) -> dict[str, str]:
        """Fetch several keys. Default implementation calls get() in loop."""
        values: dict[str, str] = {}
        for key in keys:
            value = await self.get(key)
            if value is not None:
                values[key] = value
        return values
