"""
Django management command that fails when permission names used by the
code base are missing from storage. Run after deploys and seeding.
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from access.application.services.authorization import build_permission_registry
from core.domain.exceptions import UnknownPermissionError


class Command(BaseCommand):
    """Command to verify the seeded permission set."""

    help = "Verify that every permission referenced by code is seeded"

    def handle(self, *args, **options):
        """Execute the command."""
        try:
            async_to_sync(build_permission_registry().verify)()
        except UnknownPermissionError as e:
            raise CommandError(e.message) from e
        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS("All referenced permissions are seeded"))
