"""
Serializers for license endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import KeyStrategy, LicensePlan, ResourceType

STRATEGY_CHOICES = [strategy.value for strategy in KeyStrategy]
PLAN_CHOICES = [plan.value for plan in LicensePlan]
RESOURCE_TYPE_CHOICES = [resource_type.value for resource_type in ResourceType]


class ProvisionLicenseRequestSerializer(serializers.Serializer):
    """Serializer for provision license request."""

    clinic_id = serializers.UUIDField()
    plan = serializers.ChoiceField(choices=PLAN_CHOICES, default="trial")
    strategy = serializers.ChoiceField(choices=STRATEGY_CHOICES, default="standard")
    key_options = serializers.DictField(required=False, default=dict)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    usage_limits = serializers.DictField(
        child=serializers.IntegerField(min_value=0), required=False, default=dict
    )
    features = serializers.ListField(
        child=serializers.CharField(max_length=100), required=False, allow_null=True
    )

    def validate_usage_limits(self, value):
        unknown = sorted(set(value) - set(RESOURCE_TYPE_CHOICES))
        if unknown:
            raise serializers.ValidationError(f"Unknown resource types: {', '.join(unknown)}")
        return value


class RegenerateKeyRequestSerializer(serializers.Serializer):
    strategy = serializers.ChoiceField(choices=STRATEGY_CHOICES, default="standard")
    options = serializers.DictField(required=False, default=dict)


class ActivateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for activation request."""

    license_key = serializers.CharField(max_length=255)
    activation_code = serializers.CharField(max_length=64)


class RenewLicenseRequestSerializer(serializers.Serializer):
    months = serializers.IntegerField(min_value=1, max_value=120, default=12)


class SuspendLicenseRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500, default="")


class UsageChangeRequestSerializer(serializers.Serializer):
    """Serializer for usage increment/decrement requests."""

    resource_type = serializers.ChoiceField(choices=RESOURCE_TYPE_CHOICES)
    amount = serializers.IntegerField(min_value=1, default=1)


class FeatureToggleRequestSerializer(serializers.Serializer):
    enabled = serializers.BooleanField()


class LicenseSerializer(serializers.Serializer):
    """Serializer for LicenseDTO."""

    id = serializers.UUIDField()
    clinic_id = serializers.UUIDField()
    license_key = serializers.CharField()
    plan = serializers.CharField()
    status = serializers.CharField()
    expires_at = serializers.DateTimeField()
    features = serializers.ListField(child=serializers.CharField())
    usage = serializers.DictField()
    activated_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()


class ProvisionLicenseResponseSerializer(serializers.Serializer):
    license = LicenseSerializer()
    activation_code = serializers.CharField()


class KeyRegenerationSerializer(serializers.Serializer):
    license_id = serializers.UUIDField()
    old_key = serializers.CharField()
    new_key = serializers.CharField()
    activation_code = serializers.CharField()


class LicenseStatusSerializer(serializers.Serializer):
    """Serializer for LicenseStatusReport."""

    valid = serializers.BooleanField()
    status = serializers.CharField()
    expires_at = serializers.DateTimeField()
    days_remaining = serializers.IntegerField()


class UsageReportSerializer(serializers.Serializer):
    """Serializer for UsageReport."""

    resource_type = serializers.CharField()
    current = serializers.IntegerField()
    limit = serializers.IntegerField()
    remaining = serializers.IntegerField()
    exceeded = serializers.BooleanField()
    percentage = serializers.FloatField()


class FeatureStatusSerializer(serializers.Serializer):
    feature = serializers.CharField()
    enabled = serializers.BooleanField()
