"""
Django management command to check and mark expired licenses.

This command should be run periodically (e.g., via cron or scheduled task).
"""

import logging

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand
from django.utils import timezone

from licenses.application.handlers.license_lifecycle_handlers import ExpireLicensesHandler
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to check and mark expired licenses."""

    help = "Check and mark expired licenses"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - don't actually update licenses",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        repository = DjangoLicenseRepository()
        now = timezone.now()

        if options["dry_run"]:
            overdue = async_to_sync(repository.find_expired_running)(now)
            self.stdout.write(f"Found {len(overdue)} expired license(s)")
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            for license in overdue[:10]:
                self.stdout.write(f"  - License {license.id} expired at {license.expires_at}")
            return

        expired = async_to_sync(ExpireLicensesHandler(repository).handle)(now)
        if not expired:
            # pylint: disable=no-member
            self.stdout.write(self.style.SUCCESS("No expired licenses to update"))
            return

        self.stdout.write(
            # pylint: disable=no-member
            self.style.SUCCESS(f"Successfully marked {len(expired)} license(s) as expired")
        )
