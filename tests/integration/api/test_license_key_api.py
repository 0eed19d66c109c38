"""
Integration tests for License Key API endpoints.
"""

import pytest
from django.urls import reverse

from licenses.domain.key_generator import LicenseKeyGenerator


@pytest.fixture
def clinic(db_clinic_factory):
    return db_clinic_factory("Key Clinic")


@pytest.fixture
def superadmin_client(clinic, db_member_factory, login):
    return login(db_member_factory(clinic, "superadmin"), HTTP_X_CLINIC_ID=str(clinic.id))


@pytest.mark.django_db
@pytest.mark.integration
class TestGenerateKeyAPI:
    """Integration tests for key generation."""

    def test_generate_standard_key(self, superadmin_client):
        response = superadmin_client.post(reverse("generate-license-key"), {}, format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["strategy"] == "standard"
        assert LicenseKeyGenerator.validate_format(body["key"], "standard")

    def test_generate_with_plan_prefix(self, superadmin_client):
        response = superadmin_client.post(
            reverse("generate-license-key"), {"plan": "enterprise"}, format="json"
        )

        assert response.status_code == 201
        assert response.json()["key"].startswith("ENT-")

    def test_generate_custom_template(self, superadmin_client):
        response = superadmin_client.post(
            reverse("generate-license-key"),
            {"strategy": "custom", "options": {"format": "CLINIC-{random:6}"}},
            format="json",
        )

        assert response.status_code == 201
        key = response.json()["key"]
        assert key.startswith("CLINIC-")
        assert len(key) == len("CLINIC-") + 6

    def test_unknown_strategy(self, superadmin_client):
        response = superadmin_client.post(
            reverse("generate-license-key"), {"strategy": "hex"}, format="json"
        )

        assert response.status_code == 422

    def test_generate_multiple(self, superadmin_client):
        response = superadmin_client.post(
            reverse("generate-license-keys"),
            {"count": 5, "strategy": "compact"},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["count"] == 5
        assert len(set(body["keys"])) == 5

    @pytest.mark.parametrize("count", [0, 101])
    def test_generate_multiple_bounds(self, superadmin_client, count):
        response = superadmin_client.post(
            reverse("generate-license-keys"), {"count": count}, format="json"
        )

        assert response.status_code == 422

    def test_admin_lacks_generate_permission(self, clinic, db_member_factory, login):
        client = login(db_member_factory(clinic, "admin"))

        response = client.post(
            reverse("generate-license-key"), {}, format="json", HTTP_X_CLINIC_ID=str(clinic.id)
        )

        assert response.status_code == 403
        assert response.json()["error"]["required_permission"] == "licenses.generate_keys"

    def test_membership_in_the_selected_clinic_is_required(
        self, clinic, db_clinic_factory, db_member_factory, login
    ):
        other = db_clinic_factory("Other Clinic")
        client = login(db_member_factory(clinic, "superadmin"))

        response = client.post(
            reverse("generate-license-key"), {}, format="json", HTTP_X_CLINIC_ID=str(other.id)
        )

        assert response.status_code == 403

    def test_malformed_clinic_header(self, clinic, db_member_factory, login):
        client = login(db_member_factory(clinic, "superadmin"))

        response = client.post(
            reverse("generate-license-key"), {}, format="json", HTTP_X_CLINIC_ID="not-a-uuid"
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CLINIC_ID"


@pytest.mark.django_db
@pytest.mark.integration
class TestInspectKeyAPI:
    """Integration tests for validation, parsing, strategies and statistics."""

    @pytest.mark.parametrize(
        "key,strategy,valid",
        [
            ("MEDI-AB12-CD34-EF56-GH78", "standard", True),
            ("MEDI-AB12-CD34", "standard", False),
            ("MEDI-AB12CD34EF56GH78", "compact", True),
        ],
    )
    def test_validate(self, superadmin_client, key, strategy, valid):
        response = superadmin_client.post(
            reverse("validate-license-key"), {"key": key, "strategy": strategy}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["valid"] is valid
        assert "exists" not in response.json()

    def test_validate_reports_issued_keys(self, superadmin_client, clinic, db_license_factory):
        provisioned = db_license_factory(clinic)

        response = superadmin_client.post(
            reverse("validate-license-key"),
            {"key": provisioned.license.license_key, "check_exists": True},
            format="json",
        )

        assert response.json()["exists"] is True

    def test_parse(self, superadmin_client):
        response = superadmin_client.post(
            reverse("parse-license-key"), {"key": "MEDI-AB12-CD34-EF56-GH78"}, format="json"
        )

        assert response.status_code == 200
        body = response.json()
        assert body["prefix"] == "MEDI"
        assert body["segment_count"] == 4
        assert body["strategy_guess"] == "standard"
        assert body["recognized"] is True

    def test_strategies(self, clinic, db_member_factory, login):
        client = login(db_member_factory(clinic, "patient"))

        response = client.get(reverse("license-key-strategies"))

        assert response.status_code == 200
        assert set(response.json()) == {"standard", "compact", "segmented", "custom"}

    def test_statistics(self, superadmin_client, clinic, db_license_factory):
        db_license_factory(clinic, plan="premium")

        response = superadmin_client.get(reverse("license-key-statistics"))

        assert response.status_code == 200
        body = response.json()
        assert body["total_keys_issued"] >= 1
        assert body["licenses_by_plan"]["premium"] >= 1

    def test_statistics_requires_system_permission(self, clinic, db_member_factory, login):
        client = login(db_member_factory(clinic, "admin"))

        response = client.get(reverse("license-key-statistics"))

        assert response.status_code == 403
