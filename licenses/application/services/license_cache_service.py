"""
License status cache.

Status reports are read far more often than licenses change, so they are
cached briefly and dropped by every lifecycle handler that touches the
license. Only the status and expiry are trusted from the cache.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import LicenseStatus
from core.infrastructure.cache_adapters import cache_adapter
from licenses.domain.services import LicenseStatusReport

logger = logging.getLogger(__name__)

STATUS_TTL_SECONDS = 60


class LicenseCacheService:
    @staticmethod
    def _status_key(license_id: uuid.UUID) -> str:
        return f"license:status:{license_id}"

    @staticmethod
    async def get_license_status(license_id: uuid.UUID) -> Optional[LicenseStatusReport]:
        """
        Returns:
            A report rebuilt against the current clock, or None when nothing
            usable is cached
        """
        cached = await cache_adapter.get(LicenseCacheService._status_key(license_id))
        if not cached:
            return None
        try:
            status = LicenseStatus(cached["status"])
            expires_at = datetime.fromisoformat(cached["expires_at"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding unreadable status entry for %s: %s", license_id, e)
            return None
        now = datetime.now(timezone.utc)
        return LicenseStatusReport(
            valid=status.grants_access and now < expires_at,
            status=status.value,
            expires_at=expires_at,
            days_remaining=max(0, (expires_at - now).days),
        )

    @staticmethod
    async def set_license_status(
        license_id: uuid.UUID, report: LicenseStatusReport, ttl: int = None
    ) -> None:
        await cache_adapter.set(
            LicenseCacheService._status_key(license_id),
            report.to_dict(),
            timeout=ttl or STATUS_TTL_SECONDS,
        )

    @staticmethod
    async def invalidate_license_status(license_id: uuid.UUID) -> None:
        await cache_adapter.delete(LicenseCacheService._status_key(license_id))
        logger.debug("Dropped cached status for license %s", license_id)
