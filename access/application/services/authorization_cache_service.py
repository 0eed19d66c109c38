"""
Authorization cache service.

Caches resolved principal grants in the Django cache. Entries are never
deleted one by one: every key embeds two generation tokens (a global one
bumped on role permission changes and a per-principal one bumped on
membership changes), and invalidation replaces the token. A grants
snapshot loaded before an invalidation is therefore written under a key
that no later lookup computes. Token writes go through ``put``, so a
failed invalidation reaches the caller instead of being logged away.
"""

import logging
import uuid
from typing import Optional

from django.conf import settings

from access.domain.grants import PrincipalGrants
from access.ports.authorization_cache import AuthorizationCache
from core.infrastructure.cache import CachePort
from core.infrastructure.cache_adapters import cache_adapter

logger = logging.getLogger(__name__)

GLOBAL_GENERATION_KEY = "authz:gen:global"
PRINCIPAL_GENERATION_KEY = "authz:gen:principal:{principal_id}"
GRANTS_KEY = "authz:grants:{principal_id}:{global_token}:{principal_token}"


class AuthorizationCacheService(AuthorizationCache):
    """AuthorizationCache backed by a CachePort."""

    def __init__(self, cache: CachePort = cache_adapter, ttl: Optional[int] = None):
        self.cache = cache
        self.ttl = ttl if ttl is not None else getattr(settings, "AUTHORIZATION_CACHE_TTL", 300)

    async def _token(self, key: str) -> str:
        token = await self.cache.get(key)
        if token is not None:
            return token
        # Generation tokens never expire; losing one only forces a reload.
        await self.cache.add(key, uuid.uuid4().hex, timeout=None)
        token = await self.cache.get(key)
        return token if token is not None else uuid.uuid4().hex

    async def key_for(self, principal_id: uuid.UUID) -> str:
        global_token = await self._token(GLOBAL_GENERATION_KEY)
        principal_token = await self._token(
            PRINCIPAL_GENERATION_KEY.format(principal_id=principal_id)
        )
        return GRANTS_KEY.format(
            principal_id=principal_id,
            global_token=global_token,
            principal_token=principal_token,
        )

    async def get(self, key: str) -> Optional[PrincipalGrants]:
        cached = await self.cache.get(key)
        if not cached:
            return None
        try:
            return PrincipalGrants.from_dict(cached)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding malformed cached grants %s: %s", key, e)
            return None

    async def set(self, key: str, grants: PrincipalGrants) -> None:
        await self.cache.set(key, grants.to_dict(), timeout=self.ttl)

    async def invalidate_principal(self, principal_id: uuid.UUID) -> None:
        await self.cache.put(
            PRINCIPAL_GENERATION_KEY.format(principal_id=principal_id),
            uuid.uuid4().hex,
            timeout=None,
        )
        logger.info("Invalidated cached grants for principal %s", principal_id)

    async def invalidate_all(self) -> None:
        await self.cache.put(GLOBAL_GENERATION_KEY, uuid.uuid4().hex, timeout=None)
        logger.info("Invalidated all cached grants")
