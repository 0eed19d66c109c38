"""
Explicit result types for business outcomes.

Operations that can be rejected for a business reason return either
``Ok`` or one of the ``Failure`` variants instead of raising, so the
reason travels with the return value. ``unwrap()`` converts a failure
into the matching domain exception at boundaries that prefer exceptions.
"""
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Type

from core.domain.exceptions import (
    AuthorizationDeniedError,
    BusinessRuleViolation,
    DomainException,
    InvalidInputError,
    NotFoundError,
    UsageLimitExceededError,
)


@dataclass(frozen=True)
class Ok:
    """Successful outcome carrying an optional value."""

    value: Any = None

    ok: ClassVar[bool] = True

    def __bool__(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Return the carried value."""
        return self.value


@dataclass(frozen=True)
class Failure:
    """Base class for rejected outcomes."""

    message: str
    code: str = "FAILURE"

    ok: ClassVar[bool] = False
    exception_class: ClassVar[Type[DomainException]] = DomainException

    def __bool__(self) -> bool:
        return False

    def to_exception(self) -> DomainException:
        """Build the domain exception matching this failure."""
        exc = self.exception_class(self.message)
        exc.code = self.code
        return exc

    def unwrap(self) -> Any:
        """Raise the matching domain exception."""
        raise self.to_exception()

    def to_dict(self) -> dict:
        """Serialize failure for API responses."""
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class AuthorizationFailure(Failure):
    """Principal lacks a required permission, role or clinic membership."""

    code: str = "FORBIDDEN"
    required_permission: Optional[str] = None
    required_role: Optional[str] = None
    clinic_id: Optional[uuid.UUID] = None

    exception_class: ClassVar[Type[DomainException]] = AuthorizationDeniedError

    def to_exception(self) -> DomainException:
        exc = super().to_exception()
        exc.required_permission = self.required_permission
        exc.required_role = self.required_role
        exc.clinic_id = self.clinic_id
        return exc


@dataclass(frozen=True)
class ValidationFailure(Failure):
    """Malformed input."""

    code: str = "VALIDATION_ERROR"
    field: Optional[str] = None

    exception_class: ClassVar[Type[DomainException]] = InvalidInputError


@dataclass(frozen=True)
class UsageLimitExceeded(Failure):
    """Increment rejected because it would exceed the configured limit."""

    code: str = "USAGE_LIMIT_EXCEEDED"
    resource_type: Optional[str] = None
    current: int = 0
    limit: int = 0
    requested: int = 0

    exception_class: ClassVar[Type[DomainException]] = UsageLimitExceededError


@dataclass(frozen=True)
class NotFound(Failure):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"
    entity: Optional[str] = None

    exception_class: ClassVar[Type[DomainException]] = NotFoundError


@dataclass(frozen=True)
class BusinessRuleFailure(Failure):
    """Operation rejected by a business rule (immutable role, bad activation code, ...)."""

    code: str = "BUSINESS_RULE_VIOLATION"

    exception_class: ClassVar[Type[DomainException]] = BusinessRuleViolation
