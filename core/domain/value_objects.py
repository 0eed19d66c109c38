"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Union

from core.domain.exceptions import InvalidKeyStrategyError, InvalidResourceTypeError


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    value: str

    def __post_init__(self):
        """Validate and normalize email."""
        if not self.value or "@" not in self.value:
            raise ValueError(f"Invalid email address: {self.value}")
        object.__setattr__(self, "value", self.value.strip().lower())

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


@dataclass(frozen=True)
class ClinicSlug(ValueObject):
    """Clinic slug value object."""

    value: str

    def __post_init__(self):
        """Validate slug format."""
        if not self.value:
            raise ValueError("Clinic slug cannot be empty")
        if not self.value.replace("-", "").replace("_", "").isalnum():
            raise ValueError(f"Invalid clinic slug format: {self.value}")

    def __str__(self) -> str:
        """Return slug as string."""
        return self.value


class LicenseStatus(Enum):
    """License status value object."""

    ACTIVE = "active"
    TRIAL = "trial"
    EXPIRED = "expired"
    SUSPENDED = "suspended"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value

    @property
    def grants_access(self) -> bool:
        """Statuses under which an unexpired license is valid."""
        return self in (LicenseStatus.ACTIVE, LicenseStatus.TRIAL)


class LicensePlan(Enum):
    """License plan tier."""

    TRIAL = "trial"
    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"

    def __str__(self) -> str:
        return self.value


class ResourceType(Enum):
    """
    Metered resource families.

    Appointments are counted per calendar month; the others are
    persistent caps.
    """

    USERS = "users"
    CLINICS = "clinics"
    PATIENTS = "patients"
    APPOINTMENTS = "appointments"

    def __str__(self) -> str:
        return self.value

    @property
    def is_monthly(self) -> bool:
        return self is ResourceType.APPOINTMENTS

    @classmethod
    def parse(cls, value: Union[str, "ResourceType"]) -> "ResourceType":
        """
        Resolve a resource type from its name.

        Raises:
            InvalidResourceTypeError: If the name is not one of the fixed types
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidResourceTypeError(
                f"Invalid resource type: {value}. "
                f"Expected one of: {', '.join(t.value for t in cls)}"
            ) from None


class KeyStrategy(Enum):
    """License key generation strategy."""

    STANDARD = "standard"
    COMPACT = "compact"
    SEGMENTED = "segmented"
    CUSTOM = "custom"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union[str, "KeyStrategy"]) -> "KeyStrategy":
        """
        Resolve a strategy from its name.

        Raises:
            InvalidKeyStrategyError: If the strategy is unknown
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidKeyStrategyError(
                f"Invalid license key generation strategy: {value}"
            ) from None
