"""
Unit tests for core value objects.
"""
import pytest

from core.domain.exceptions import InvalidKeyStrategyError, InvalidResourceTypeError
from core.domain.value_objects import (
    ClinicSlug,
    Email,
    KeyStrategy,
    LicenseStatus,
    ResourceType,
)


class TestEmail:
    """Tests for Email value object."""

    def test_valid_email(self):
        """Test valid email creation."""
        email = Email("test@example.com")
        assert str(email) == "test@example.com"

    def test_email_is_normalized(self):
        """Test email is trimmed and lower-cased."""
        assert Email("  Doctor@Clinic.COM ").value == "doctor@clinic.com"

    def test_invalid_email_no_at(self):
        """Test invalid email without @."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("invalid-email")

    def test_invalid_email_empty(self):
        """Test invalid empty email."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("")


class TestClinicSlug:
    """Tests for ClinicSlug value object."""

    def test_valid_slug_with_hyphens(self):
        """Test valid slug with hyphens."""
        assert str(ClinicSlug("north-side_clinic")) == "north-side_clinic"

    def test_invalid_slug_empty(self):
        """Test invalid empty slug."""
        with pytest.raises(ValueError, match="cannot be empty"):
            ClinicSlug("")

    def test_invalid_slug_special_chars(self):
        """Test invalid slug with special characters."""
        with pytest.raises(ValueError, match="Invalid clinic slug"):
            ClinicSlug("north@clinic")

    def test_slugs_compare_by_value(self):
        """Test value equality and hashing."""
        assert ClinicSlug("a-b") == ClinicSlug("a-b")
        assert len({ClinicSlug("a-b"), ClinicSlug("a-b")}) == 1


class TestLicenseStatus:
    """Tests for LicenseStatus enum."""

    def test_running_statuses_grant_access(self):
        assert LicenseStatus.ACTIVE.grants_access
        assert LicenseStatus.TRIAL.grants_access

    def test_stopped_statuses_do_not_grant_access(self):
        assert not LicenseStatus.SUSPENDED.grants_access
        assert not LicenseStatus.EXPIRED.grants_access


class TestResourceType:
    """Tests for ResourceType parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("users", ResourceType.USERS),
            ("Patients", ResourceType.PATIENTS),
            (" appointments ", ResourceType.APPOINTMENTS),
            (ResourceType.CLINICS, ResourceType.CLINICS),
        ],
    )
    def test_parse(self, raw, expected):
        assert ResourceType.parse(raw) is expected

    def test_parse_unknown_type(self):
        """Test unknown names are rejected with the valid choices listed."""
        with pytest.raises(InvalidResourceTypeError, match="users, clinics"):
            ResourceType.parse("storage")

    def test_only_appointments_are_monthly(self):
        assert [t for t in ResourceType if t.is_monthly] == [ResourceType.APPOINTMENTS]


class TestKeyStrategy:
    """Tests for KeyStrategy parsing."""

    def test_parse_known_strategy(self):
        assert KeyStrategy.parse("COMPACT") is KeyStrategy.COMPACT

    def test_parse_unknown_strategy(self):
        with pytest.raises(InvalidKeyStrategyError) as exc_info:
            KeyStrategy.parse("hex")
        assert exc_info.value.code == "INVALID_KEY_STRATEGY"
