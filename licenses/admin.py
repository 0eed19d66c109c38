"""
Django admin configuration for licenses app.
"""
import json

from django.contrib import admin
from django.utils.html import format_html

from licenses.infrastructure.models import USAGE_COLUMNS, License, LicenseAuditLog, LicenseKey


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    """Admin interface for License model."""

    list_display = [
        "license_key",
        "clinic",
        "plan",
        "status_display",
        "usage_display",
        "expires_at",
        "created_at",
    ]
    list_filter = ["status", "plan", "expires_at"]
    search_fields = ["license_key", "clinic__name", "clinic__slug"]
    readonly_fields = [
        "id",
        "license_key",
        "current_users",
        "current_clinics",
        "current_patients",
        "appointments_this_month",
        "last_usage_reset",
        "activated_at",
        "created_at",
        "updated_at",
    ]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "clinic", "license_key", "plan", "status", "features"),
            },
        ),
        (
            "Usage Limits",
            {
                "fields": (
                    "max_users",
                    "max_clinics",
                    "max_patients",
                    "max_appointments_per_month",
                ),
            },
        ),
        (
            "Usage",
            {
                "fields": (
                    "current_users",
                    "current_clinics",
                    "current_patients",
                    "appointments_this_month",
                    "last_usage_reset",
                ),
            },
        ),
        (
            "Expiration",
            {
                "fields": ("expires_at", "activated_at"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "active": "green",
            "trial": "blue",
            "suspended": "orange",
            "expired": "gray",
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, "black"),
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def usage_display(self, obj):
        """Display counters against limits."""
        return ", ".join(
            f"{resource_type.value} {getattr(obj, counter)}/{getattr(obj, limit)}"
            for resource_type, (counter, limit) in USAGE_COLUMNS.items()
        )

    usage_display.short_description = "Usage"

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("clinic")


@admin.register(LicenseKey)
class LicenseKeyAdmin(admin.ModelAdmin):
    """Admin interface for the key registry. Read-only."""

    list_display = ["key", "strategy", "license", "issued_at", "retired_at"]
    list_filter = ["strategy", "issued_at", "retired_at"]
    search_fields = ["key", "key_hash"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        """Issued keys are never removed."""
        return False


@admin.register(LicenseAuditLog)
class LicenseAuditLogAdmin(admin.ModelAdmin):
    """Admin interface for LicenseAuditLog model."""

    list_display = ["action", "license", "actor", "created_at"]
    list_filter = ["action", "created_at"]
    search_fields = ["actor", "license__license_key"]
    readonly_fields = ["id", "license", "action", "actor", "changes_display", "created_at"]
    exclude = ["changes"]

    def changes_display(self, obj):
        """Display changes in a formatted way."""
        if obj.changes:
            return format_html(
                '<pre style="background: #f5f5f5; padding: 10px; '
                'border-radius: 4px; overflow-x: auto;">{}</pre>',
                json.dumps(obj.changes, indent=2),
            )
        return "-"

    changes_display.short_description = "Changes"

    def has_add_permission(self, request):
        """Audit logs are read-only."""
        return False

    def has_change_permission(self, request, obj=None):
        """Audit logs are read-only."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Audit logs should not be deleted."""
        return False
