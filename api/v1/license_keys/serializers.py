"""
Serializers for license key endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import KeyStrategy, LicensePlan
from licenses.domain.key_generator import MAX_BATCH_SIZE

STRATEGY_CHOICES = [strategy.value for strategy in KeyStrategy]
PLAN_CHOICES = [plan.value for plan in LicensePlan]


class GenerateKeyRequestSerializer(serializers.Serializer):
    """Serializer for a single key generation request."""

    strategy = serializers.ChoiceField(choices=STRATEGY_CHOICES, default="standard")
    options = serializers.DictField(required=False, default=dict)
    plan = serializers.ChoiceField(choices=PLAN_CHOICES, required=False, allow_null=True)


class GenerateMultipleKeysRequestSerializer(serializers.Serializer):
    """Serializer for a batch key generation request."""

    count = serializers.IntegerField(min_value=1, max_value=MAX_BATCH_SIZE)
    strategy = serializers.ChoiceField(choices=STRATEGY_CHOICES, default="standard")
    options = serializers.DictField(required=False, default=dict)


class ValidateKeyRequestSerializer(serializers.Serializer):
    """Serializer for a key format check."""

    key = serializers.CharField(trim_whitespace=False)
    strategy = serializers.ChoiceField(choices=STRATEGY_CHOICES, default="standard")
    options = serializers.DictField(required=False, default=dict)
    check_exists = serializers.BooleanField(required=False, default=False)


class ParseKeyRequestSerializer(serializers.Serializer):
    key = serializers.CharField(trim_whitespace=False)


class GeneratedKeySerializer(serializers.Serializer):
    key = serializers.CharField()
    strategy = serializers.CharField()


class GeneratedKeysSerializer(serializers.Serializer):
    keys = serializers.ListField(child=serializers.CharField())
    count = serializers.IntegerField()
    strategy = serializers.CharField()


class KeyValidationSerializer(serializers.Serializer):
    key = serializers.CharField()
    strategy = serializers.CharField()
    valid = serializers.BooleanField()
    exists = serializers.BooleanField(required=False)


class ParsedKeySerializer(serializers.Serializer):
    """Serializer for ParsedLicenseKey."""

    prefix = serializers.CharField(allow_blank=True)
    segments = serializers.ListField(child=serializers.CharField())
    segment_count = serializers.IntegerField()
    total_length = serializers.IntegerField()
    strategy_guess = serializers.CharField(allow_null=True)
    recognized = serializers.BooleanField()


class KeyStatisticsSerializer(serializers.Serializer):
    """Serializer for KeyStatistics."""

    total_keys_issued = serializers.IntegerField()
    retired_keys = serializers.IntegerField()
    keys_by_strategy = serializers.DictField(child=serializers.IntegerField())
    total_licenses = serializers.IntegerField()
    licenses_by_plan = serializers.DictField(child=serializers.IntegerField())
    licenses_by_status = serializers.DictField(child=serializers.IntegerField())
    expiring_soon = serializers.IntegerField()
    generation_strategies = serializers.DictField(child=serializers.CharField())
