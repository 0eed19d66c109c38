"""
Cache port.

Grants snapshots, generation tokens and license status reports are
cached through this interface. The cache is never authoritative; every
value can be rebuilt from the database.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional


class CachePort(ABC):
    """Async key/value cache with optional expiry."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Returns:
            The stored value, or None on a miss
        """

    @abstractmethod
    async def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        """Store ``value``; a ``timeout`` of None keeps it until evicted."""

    @abstractmethod
    async def put(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        """
        Like ``set``, for writes other data depends on.

        Raises:
            CacheUnavailableError: If the backend rejects the write
        """

    @abstractmethod
    async def add(self, key: str, value: Any, timeout: Optional[int] = None) -> bool:
        """
        Store ``value`` only if ``key`` is absent. Concurrent callers race
        on the first write, so generation tokens are created exactly once.

        Returns:
            True if this call stored the value
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass
