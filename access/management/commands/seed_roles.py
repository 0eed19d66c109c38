"""
Django management command to seed permissions and system roles.
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from access.application.services.role_seeder import RoleSeeder
from access.infrastructure.repositories.django_permission_repository import (
    DjangoPermissionRepository,
)
from access.infrastructure.repositories.django_role_repository import DjangoRoleRepository


class Command(BaseCommand):
    """Command to seed the permission catalog and default system roles."""

    help = "Seed permissions and system roles (safe to run repeatedly)"

    def handle(self, *args, **options):
        """Execute the command."""
        seeder = RoleSeeder(DjangoPermissionRepository(), DjangoRoleRepository())
        report = async_to_sync(seeder.seed)()

        self.stdout.write(f"Permissions created: {len(report.permissions_created)}")
        for role_name in report.roles_created:
            self.stdout.write(f"  + role {role_name}")
        for role_name in report.roles_skipped:
            self.stdout.write(f"  = role {role_name} (already present)")
        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS("Seeding complete"))
