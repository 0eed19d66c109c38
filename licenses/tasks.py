"""
Celery tasks for scheduled license maintenance.
"""
import logging

from asgiref.sync import async_to_sync

from MediCoreService.celery import app

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def reset_monthly_usage_task(self):
    """
    Zero the monthly usage counters of every license.

    Returns:
        Number of licenses reset
    """
    from licenses.application.handlers.usage_handlers import ResetMonthlyUsageHandler
    from licenses.application.services.licensing import build_usage_manager

    try:
        result = async_to_sync(ResetMonthlyUsageHandler(build_usage_manager()).handle)()
    except Exception as exc:
        logger.error("Monthly usage reset failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    return result.value


@app.task(bind=True, max_retries=3)
def expire_licenses_task(self):
    """
    Mark running licenses whose expiry has passed as expired.

    Returns:
        Number of licenses expired
    """
    from licenses.application.handlers.license_lifecycle_handlers import ExpireLicensesHandler
    from licenses.infrastructure.repositories.django_license_repository import (
        DjangoLicenseRepository,
    )

    try:
        expired = async_to_sync(ExpireLicensesHandler(DjangoLicenseRepository()).handle)()
    except Exception as exc:
        logger.error("License expiry sweep failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    return len(expired)
