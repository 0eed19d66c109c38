"""
Principal, Permission, Role and ClinicMembership models.
"""

import uuid

from django.db import models


class Principal(models.Model):
    """
    An authenticated user identity. Never hard-deleted; see ``is_active``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, db_index=True)
    password = models.CharField(max_length=255, help_text="Hashed with Django's password hashers")
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "access"
        db_table = "principals"
        ordering = ["email"]

    def __str__(self):
        return self.email


class Permission(models.Model):
    """An atomic capability identified by name and by module/action."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150, unique=True)
    module = models.CharField(max_length=50, db_index=True)
    action = models.CharField(max_length=50)
    description = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "access"
        db_table = "permissions"
        ordering = ["module", "action"]
        unique_together = [["module", "action"]]

    def __str__(self):
        return self.name


class Role(models.Model):
    """A named bundle of permissions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    is_system_role = models.BooleanField(default=False, db_index=True)
    permissions = models.ManyToManyField(Permission, related_name="roles", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "access"
        db_table = "roles"
        ordering = ["name"]

    def __str__(self):
        return self.name


class ClinicMembership(models.Model):
    """Binds a principal to one clinic with one role."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    principal = models.ForeignKey(Principal, on_delete=models.CASCADE, related_name="memberships")
    clinic = models.ForeignKey("clinics.Clinic", on_delete=models.CASCADE, related_name="memberships")
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name="memberships")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "access"
        db_table = "clinic_memberships"
        ordering = ["created_at"]
        unique_together = [["principal", "clinic"]]
        indexes = [
            models.Index(fields=["principal", "clinic"]),
            models.Index(fields=["role"]),
        ]

    def __str__(self):
        return f"{self.principal_id} @ {self.clinic_id} as {self.role_id}"
