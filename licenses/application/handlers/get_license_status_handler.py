"""
GetLicenseStatusHandler.

Handler for getting license status query.
"""
from typing import Union

from core.domain.results import NotFound, Ok
from licenses.application.queries.get_license_status import GetLicenseStatusQuery
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.domain.services import LicenseUsageManager


class GetLicenseStatusHandler:
    """Handler for GetLicenseStatusQuery."""

    def __init__(self, usage_manager: LicenseUsageManager):
        """Initialize handler with the usage manager."""
        self.usage_manager = usage_manager

    async def handle(self, query: GetLicenseStatusQuery) -> Union[Ok, NotFound]:
        """
        Handle get license status query.

        Args:
            query: GetLicenseStatusQuery

        Returns:
            Ok(LicenseStatusReport) or NotFound
        """
        cached = await LicenseCacheService.get_license_status(query.license_id)
        if cached is not None:
            return Ok(cached)

        result = await self.usage_manager.get_license_status(query.license_id)
        if result.ok:
            await LicenseCacheService.set_license_status(query.license_id, result.value)
        return result
