"""
Plan tiers: default feature sets, usage limits and key prefixes.

Deployments override the usage limits through ``LICENSE_DEFAULT_LIMITS``.
"""

from typing import Dict, FrozenSet, Mapping, Optional, Union

from core.domain.value_objects import LicensePlan, ResourceType

_STANDARD_FEATURES = frozenset(
    {
        "basic_appointments",
        "patient_management",
        "prescription_management",
        "basic_reporting",
    }
)

_PREMIUM_FEATURES = _STANDARD_FEATURES | frozenset(
    {
        "advanced_reporting",
        "lab_results",
        "medrep_management",
        "multi_clinic",
        "email_notifications",
    }
)

_ENTERPRISE_FEATURES = _PREMIUM_FEATURES | frozenset(
    {
        "sms_notifications",
        "api_access",
        "custom_branding",
        "priority_support",
        "advanced_analytics",
        "backup_restore",
    }
)

PLAN_FEATURES: Dict[LicensePlan, FrozenSet[str]] = {
    LicensePlan.TRIAL: _STANDARD_FEATURES,
    LicensePlan.STANDARD: _STANDARD_FEATURES,
    LicensePlan.PREMIUM: _PREMIUM_FEATURES,
    LicensePlan.ENTERPRISE: _ENTERPRISE_FEATURES,
}

PLAN_LIMITS: Dict[LicensePlan, Dict[ResourceType, int]] = {
    LicensePlan.TRIAL: {
        ResourceType.USERS: 3,
        ResourceType.CLINICS: 1,
        ResourceType.PATIENTS: 50,
        ResourceType.APPOINTMENTS: 100,
    },
    LicensePlan.STANDARD: {
        ResourceType.USERS: 10,
        ResourceType.CLINICS: 1,
        ResourceType.PATIENTS: 1000,
        ResourceType.APPOINTMENTS: 1000,
    },
    LicensePlan.PREMIUM: {
        ResourceType.USERS: 50,
        ResourceType.CLINICS: 5,
        ResourceType.PATIENTS: 10000,
        ResourceType.APPOINTMENTS: 5000,
    },
    LicensePlan.ENTERPRISE: {
        ResourceType.USERS: 500,
        ResourceType.CLINICS: 50,
        ResourceType.PATIENTS: 100000,
        ResourceType.APPOINTMENTS: 50000,
    },
}

PLAN_DURATION_MONTHS: Dict[LicensePlan, int] = {
    LicensePlan.TRIAL: 1,
    LicensePlan.STANDARD: 12,
    LicensePlan.PREMIUM: 12,
    LicensePlan.ENTERPRISE: 12,
}

# Trial licenses use the deployment's default prefix.
PLAN_KEY_PREFIXES: Dict[LicensePlan, str] = {
    LicensePlan.STANDARD: "STD",
    LicensePlan.PREMIUM: "PRM",
    LicensePlan.ENTERPRISE: "ENT",
}


def parse_plan(value: Union[str, LicensePlan]) -> LicensePlan:
    """
    Raises:
        ValueError: If the plan name is unknown
    """
    if isinstance(value, LicensePlan):
        return value
    return LicensePlan(str(value).strip().lower())


def limits_for(
    plan: LicensePlan, overrides: Optional[Mapping[str, Mapping[str, int]]] = None
) -> Dict[ResourceType, int]:
    """Default usage limits of a plan, with per-plan overrides keyed by name."""
    limits = dict(PLAN_LIMITS[plan])
    for name, value in ((overrides or {}).get(plan.value) or {}).items():
        limits[ResourceType.parse(name)] = int(value)
    return limits
