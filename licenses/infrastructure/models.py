"""
License, LicenseKey and LicenseAuditLog models.
"""
import uuid

from django.db import models

from core.domain.value_objects import ResourceType

# (counter column, limit column) per metered resource type
USAGE_COLUMNS = {
    ResourceType.USERS: ("current_users", "max_users"),
    ResourceType.CLINICS: ("current_clinics", "max_clinics"),
    ResourceType.PATIENTS: ("current_patients", "max_patients"),
    ResourceType.APPOINTMENTS: ("appointments_this_month", "max_appointments_per_month"),
}


class License(models.Model):
    """
    The license of one clinic: plan tier, status, expiry, feature flags,
    and usage limits with their counters.
    """

    PLAN_CHOICES = [
        ("trial", "Trial"),
        ("standard", "Standard"),
        ("premium", "Premium"),
        ("enterprise", "Enterprise"),
    ]

    STATUS_CHOICES = [
        ("active", "Active"),
        ("trial", "Trial"),
        ("expired", "Expired"),
        ("suspended", "Suspended"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.OneToOneField(
        "clinics.Clinic", on_delete=models.CASCADE, related_name="license"
    )
    license_key = models.CharField(max_length=120, unique=True, db_index=True)
    plan = models.CharField(max_length=20, choices=PLAN_CHOICES, default="trial")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="trial")
    expires_at = models.DateTimeField()
    features = models.JSONField(default=list, blank=True)

    max_users = models.PositiveIntegerField(default=0)
    max_clinics = models.PositiveIntegerField(default=0)
    max_patients = models.PositiveIntegerField(default=0)
    max_appointments_per_month = models.PositiveIntegerField(default=0)

    current_users = models.PositiveIntegerField(default=0)
    current_clinics = models.PositiveIntegerField(default=0)
    current_patients = models.PositiveIntegerField(default=0)
    appointments_this_month = models.PositiveIntegerField(default=0)
    last_usage_reset = models.DateTimeField(null=True, blank=True)

    activated_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "licenses"
        db_table = "licenses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"]),
            models.Index(fields=["plan"]),
        ]

    def __str__(self):
        return f"{self.license_key} ({self.plan})"


class LicenseKey(models.Model):
    """
    Registry of every issued key. Rows are never deleted; a replaced key
    is retired.
    """

    STRATEGY_CHOICES = [
        ("standard", "Standard"),
        ("compact", "Compact"),
        ("segmented", "Segmented"),
        ("custom", "Custom"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.CharField(max_length=120, unique=True, db_index=True)
    key_hash = models.CharField(max_length=64, db_index=True, help_text="SHA-256 of the key")
    strategy = models.CharField(max_length=20, choices=STRATEGY_CHOICES)
    license = models.ForeignKey(
        License,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="issued_keys",
    )
    issued_at = models.DateTimeField()
    retired_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        app_label = "licenses"
        db_table = "license_keys"
        ordering = ["-issued_at"]
        indexes = [
            models.Index(fields=["key_hash"]),
            models.Index(fields=["license", "retired_at"]),
        ]

    def __str__(self):
        return self.key


class LicenseAuditLog(models.Model):
    """
    Append-only audit trail of license changes.
    """

    ACTION_CHOICES = [
        ("license_provisioned", "License Provisioned"),
        ("license_activated", "License Activated"),
        ("key_regenerated", "Key Regenerated"),
        ("license_renewed", "License Renewed"),
        ("license_suspended", "License Suspended"),
        ("license_resumed", "License Resumed"),
        ("license_expired", "License Expired"),
        ("features_changed", "Features Changed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(License, on_delete=models.CASCADE, related_name="audit_entries")
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    changes = models.JSONField(default=dict, help_text="Details of the change")
    actor = models.CharField(max_length=255, help_text="Who performed the action")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "licenses"
        db_table = "license_audit_logs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["license", "action"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self):
        return f"{self.action} - {self.license_id}"
