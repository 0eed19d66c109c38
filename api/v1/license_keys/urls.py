"""
URL configuration for license key endpoints.
"""

from django.urls import path

from api.v1.license_keys import views

urlpatterns = [
    path("generate", views.GenerateKeyView.as_view(), name="generate-license-key"),
    path(
        "generate-multiple",
        views.GenerateMultipleKeysView.as_view(),
        name="generate-license-keys",
    ),
    path("validate", views.ValidateKeyView.as_view(), name="validate-license-key"),
    path("parse", views.ParseKeyView.as_view(), name="parse-license-key"),
    path("strategies", views.KeyStrategiesView.as_view(), name="license-key-strategies"),
    path("statistics", views.KeyStatisticsView.as_view(), name="license-key-statistics"),
]
