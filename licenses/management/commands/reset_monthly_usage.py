"""
Django management command to reset monthly usage counters.
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from licenses.application.handlers.usage_handlers import ResetMonthlyUsageHandler
from licenses.application.services.licensing import build_usage_manager


class Command(BaseCommand):
    """Command to zero the monthly counters of every license."""

    help = "Reset monthly usage counters (runs at most once per license per month)"

    def handle(self, *args, **options):
        """Execute the command."""
        result = async_to_sync(ResetMonthlyUsageHandler(build_usage_manager()).handle)()
        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS(f"Reset monthly usage for {result.value} license(s)"))
