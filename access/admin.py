"""
Django admin configuration for access app.
"""

from django.contrib import admin

from access.infrastructure.models import ClinicMembership, Permission, Principal, Role


@admin.register(Principal)
class PrincipalAdmin(admin.ModelAdmin):
    """Admin interface for Principal model."""

    list_display = ["email", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["email"]
    readonly_fields = ["id", "password", "created_at", "updated_at"]


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    """Admin interface for Permission model."""

    list_display = ["name", "module", "action"]
    list_filter = ["module"]
    search_fields = ["name", "description"]


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    """Admin interface for Role model."""

    list_display = ["name", "is_system_role", "permission_count", "created_at"]
    list_filter = ["is_system_role"]
    search_fields = ["name"]
    filter_horizontal = ["permissions"]
    readonly_fields = ["id", "created_at", "updated_at"]

    def permission_count(self, obj):
        """Display number of permissions in this role."""
        return obj.permissions.count()

    permission_count.short_description = "Permissions"

    def has_delete_permission(self, request, obj=None):
        """System roles cannot be deleted."""
        if obj is not None and obj.is_system_role:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(ClinicMembership)
class ClinicMembershipAdmin(admin.ModelAdmin):
    """Admin interface for ClinicMembership model."""

    list_display = ["principal", "clinic", "role", "created_at"]
    list_filter = ["role", "clinic"]
    search_fields = ["principal__email", "clinic__name"]

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("principal", "clinic", "role")
