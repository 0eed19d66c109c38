"""
Unit tests for the License and LicenseKey entities.
"""
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.exceptions import LicenseAlreadyActivatedError
from core.domain.value_objects import KeyStrategy, LicensePlan, LicenseStatus, ResourceType
from licenses.domain.license import License, add_months
from licenses.domain.license_key import LicenseKey
from licenses.domain.plans import PLAN_LIMITS, limits_for


class TestLicenseEntity:
    """Tests for License entity."""

    def test_create_trial_license(self):
        """Test trial plans start in trial status."""
        license = License.create(
            clinic_id=uuid.uuid4(),
            license_key="MEDI-AB12-CD34-EF56-GH78",
            plan=LicensePlan.TRIAL,
            expires_at=datetime.now(timezone.utc) + timedelta(days=30),
            usage_limits=PLAN_LIMITS[LicensePlan.TRIAL],
        )

        assert license.status is LicenseStatus.TRIAL
        assert license.is_valid()
        assert license.usage == {t: 0 for t in ResourceType}
        assert license.limit_for(ResourceType.PATIENTS) == 50

    def test_missing_limits_default_to_zero(self, license_factory):
        license = license_factory(limits={ResourceType.USERS: 5})
        assert license.limit_for(ResourceType.APPOINTMENTS) == 0

    def test_negative_limit_is_rejected(self, license_factory):
        with pytest.raises(ValueError, match="cannot be negative"):
            license_factory(limits={ResourceType.USERS: -1})

    def test_empty_key_is_rejected(self, license_factory):
        with pytest.raises(ValueError):
            license_factory(license_key=" ")

    def test_validity_boundary(self, license_factory):
        """Test a license is invalid from its expiry instant onward."""
        expires_at = datetime(2030, 6, 1, tzinfo=timezone.utc)
        license = license_factory(expires_at=expires_at)

        assert license.is_valid(expires_at - timedelta(seconds=1))
        assert not license.is_valid(expires_at)
        assert license.days_remaining(expires_at + timedelta(days=3)) == 0

    def test_activate_only_once(self, license_factory):
        activated = license_factory().activate()
        with pytest.raises(LicenseAlreadyActivatedError):
            activated.activate()

    def test_renew_keeps_suspension(self, license_factory):
        license = license_factory(status=LicenseStatus.SUSPENDED)
        assert license.renew(12).status is LicenseStatus.SUSPENDED

    def test_renew_requires_positive_months(self, license_factory):
        with pytest.raises(ValueError):
            license_factory().renew(0)

    def test_change_plan_from_trial(self, license_factory):
        trial = license_factory(plan=LicensePlan.TRIAL)
        assert trial.change_plan(LicensePlan.PREMIUM).status is LicenseStatus.ACTIVE

    def test_usage_snapshot(self, license_factory):
        license = license_factory(usage={ResourceType.USERS: 2})
        assert license.usage_snapshot()["users"] == {"current": 2, "limit": 10}


class TestAddMonths:
    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
            (datetime(2023, 11, 15), 3, datetime(2024, 2, 15)),
            (datetime(2024, 12, 1), 12, datetime(2025, 12, 1)),
        ],
    )
    def test_add_months(self, start, months, expected):
        assert add_months(start, months) == expected


class TestPlans:
    def test_limit_overrides(self):
        limits = limits_for(LicensePlan.STANDARD, {"standard": {"patients": 5}})

        assert limits[ResourceType.PATIENTS] == 5
        assert limits[ResourceType.USERS] == PLAN_LIMITS[LicensePlan.STANDARD][ResourceType.USERS]


class TestLicenseKeyEntity:
    """Tests for the issued key registry entry."""

    def test_issue_and_retire(self):
        key = LicenseKey.issue("MEDI-AB12-CD34-EF56-GH78", KeyStrategy.STANDARD)

        assert not key.is_retired
        assert key.verify_key("MEDI-AB12-CD34-EF56-GH78")
        assert not key.verify_key("MEDI-AB12-CD34-EF56-GH79")
        assert key.retire().is_retired
