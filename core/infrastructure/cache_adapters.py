"""
Django cache adapter.

Redis backs the cache in production and LocMem in tests. A backend
error degrades to a miss (or a skipped write) and the caller rebuilds
the value from the database, so an unavailable cache slows requests down
but never fails them.
"""

import logging
from typing import Any, Optional

from asgiref.sync import sync_to_async
from django.core.cache import cache

from core.domain.exceptions import CacheUnavailableError
from core.infrastructure.cache import CachePort
from core.metrics import cache_hits_total, cache_misses_total

logger = logging.getLogger(__name__)


def _namespace(key: str) -> str:
    """Metric label for a key: ``authz`` or ``license``."""
    return key.split(":", 1)[0]


class DjangoCacheAdapter(CachePort):
    """CachePort backed by ``django.core.cache.cache``."""

    async def get(self, key: str) -> Optional[Any]:
        try:
            value = await sync_to_async(cache.get)(key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Cache read failed for %s, treating as miss: %s", key, e)
            value = None
        counter = cache_hits_total if value is not None else cache_misses_total
        counter.labels(cache_key=_namespace(key)).inc()
        return value

    async def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        try:
            await sync_to_async(cache.set)(key, value, timeout=timeout)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Cache write skipped for %s: %s", key, e)

    async def put(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        try:
            await sync_to_async(cache.set)(key, value, timeout=timeout)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Cache write failed for %s: %s", key, e)
            raise CacheUnavailableError(f"Cache write failed for {key}") from e

    async def add(self, key: str, value: Any, timeout: Optional[int] = None) -> bool:
        try:
            return await sync_to_async(cache.add)(key, value, timeout=timeout)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Cache add skipped for %s: %s", key, e)
            return False

    async def delete(self, key: str) -> None:
        try:
            await sync_to_async(cache.delete)(key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            # A stale entry outlives its TTL at most; log loudly.
            logger.error("Cache delete failed for %s: %s", key, e)


cache_adapter = DjangoCacheAdapter()
