"""
Integration tests for the maintenance management commands.
"""
from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from access.infrastructure.models import Role as RoleModel
from licenses.infrastructure.models import License as LicenseModel


def run(name, *args, **options):
    out = StringIO()
    call_command(name, *args, stdout=out, stderr=StringIO(), **options)
    return out.getvalue()


@pytest.mark.django_db
@pytest.mark.integration
class TestAccessCommands:
    def test_seed_roles_is_repeatable(self):
        first = run("seed_roles")
        second = run("seed_roles")

        assert "+ role superadmin" in first
        assert "= role superadmin (already present)" in second
        assert RoleModel.objects.filter(name="superadmin", is_system_role=True).count() == 1

    def test_validate_permissions_fails_before_seeding(self):
        with pytest.raises(CommandError, match="not seeded"):
            run("validate_permissions")

    def test_validate_permissions_after_seeding(self, db_roles):
        assert "All referenced permissions are seeded" in run("validate_permissions")


@pytest.mark.django_db
@pytest.mark.integration
class TestGenerateLicenseKeys:
    def test_generates_valid_compact_keys(self):
        output = run("generate_license_keys", count=3, strategy="compact", validate=True)

        assert "Generated 3 license key(s)" in output
        assert "All 3 keys are valid" in output

    def test_dry_run_lists_options(self):
        output = run("generate_license_keys", count=2, prefix="TEST", dry_run=True)

        assert "DRY RUN" in output
        assert "prefix: TEST" in output

    @pytest.mark.parametrize("count", [0, 101])
    def test_count_out_of_range(self, count):
        with pytest.raises(CommandError, match="--count"):
            run("generate_license_keys", count=count)

    def test_custom_requires_format(self):
        with pytest.raises(CommandError, match="--format"):
            run("generate_license_keys", strategy="custom")


@pytest.mark.django_db
@pytest.mark.integration
class TestLicenseMaintenanceCommands:
    @pytest.fixture
    def license_id(self, db_clinic_factory, db_license_factory):
        return db_license_factory(db_clinic_factory()).license.id

    def test_expiry_dry_run_changes_nothing(self, license_id):
        LicenseModel.objects.filter(id=license_id).update(
            expires_at=timezone.now() - timedelta(days=1)
        )

        output = run("check_license_expirations", dry_run=True)

        assert "Found 1 expired license(s)" in output
        assert LicenseModel.objects.get(id=license_id).status != "expired"

    def test_expiry_marks_overdue_licenses(self, license_id):
        LicenseModel.objects.filter(id=license_id).update(
            expires_at=timezone.now() - timedelta(days=1)
        )

        output = run("check_license_expirations")

        assert "marked 1 license(s) as expired" in output
        assert LicenseModel.objects.get(id=license_id).status == "expired"

    def test_expiry_with_nothing_overdue(self, license_id):
        assert "No expired licenses to update" in run("check_license_expirations")

    def test_monthly_reset_zeroes_appointments_only(self, license_id):
        LicenseModel.objects.filter(id=license_id).update(
            appointments_this_month=7,
            current_patients=1,
            last_usage_reset=timezone.now() - timedelta(days=400),
        )

        output = run("reset_monthly_usage")

        model = LicenseModel.objects.get(id=license_id)
        assert "Reset monthly usage for 1 license(s)" in output
        assert model.appointments_this_month == 0
        assert model.current_patients == 1

    def test_monthly_reset_runs_once_per_month(self, license_id):
        run("reset_monthly_usage")
        LicenseModel.objects.filter(id=license_id).update(appointments_this_month=3)

        run("reset_monthly_usage")

        assert LicenseModel.objects.get(id=license_id).appointments_this_month == 3
