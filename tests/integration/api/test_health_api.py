"""
Integration tests for health, readiness and metrics endpoints.
"""

import pytest
from django.test import Client


@pytest.mark.django_db
@pytest.mark.integration
class TestHealthEndpoints:
    def test_health(self):
        response = Client().get("/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self):
        response = Client().get("/ready/")

        assert response.status_code == 200
        assert response.json()["checks"] == {"database": True, "cache": True}

    def test_metrics(self):
        Client().get("/health/")

        response = Client().get("/metrics")

        assert response.status_code == 200
        assert b"http_requests_total" in response.content
