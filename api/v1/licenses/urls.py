"""
URL configuration for license endpoints.
"""

from django.urls import path

from api.v1.licenses import views

urlpatterns = [
    path("", views.ProvisionLicenseView.as_view(), name="provision-license"),
    path("activate", views.ActivateLicenseView.as_view(), name="activate-license"),
    path("<uuid:license_id>", views.LicenseDetailView.as_view(), name="license-detail"),
    path(
        "<uuid:license_id>/regenerate-key",
        views.RegenerateLicenseKeyView.as_view(),
        name="regenerate-license-key",
    ),
    path("<uuid:license_id>/status", views.LicenseStatusView.as_view(), name="license-status"),
    path("<uuid:license_id>/usage", views.LicenseUsageView.as_view(), name="license-usage"),
    path(
        "<uuid:license_id>/usage/increment",
        views.IncrementUsageView.as_view(),
        name="increment-license-usage",
    ),
    path(
        "<uuid:license_id>/usage/decrement",
        views.DecrementUsageView.as_view(),
        name="decrement-license-usage",
    ),
    path(
        "<uuid:license_id>/features/<str:feature>",
        views.LicenseFeatureView.as_view(),
        name="license-feature",
    ),
    path("<uuid:license_id>/suspend", views.SuspendLicenseView.as_view(), name="suspend-license"),
    path("<uuid:license_id>/resume", views.ResumeLicenseView.as_view(), name="resume-license"),
    path("<uuid:license_id>/renew", views.RenewLicenseView.as_view(), name="renew-license"),
]
