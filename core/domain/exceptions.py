"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class AuthorizationDeniedError(DomainException):
    """Raised when a principal lacks a required permission, role or clinic membership."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="FORBIDDEN")


class InvalidInputError(DomainException):
    """Base exception for caller-correctable input problems."""

    def __init__(self, message: str = "Invalid input", code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class InvalidKeyStrategyError(InvalidInputError):
    """Raised when an unknown key generation strategy is requested."""

    def __init__(self, message: str = "Invalid license key generation strategy"):
        super().__init__(message, code="INVALID_KEY_STRATEGY")


class InvalidKeyOptionsError(InvalidInputError):
    """Raised when key generation options are unusable after clamping."""

    def __init__(self, message: str = "Invalid license key options"):
        super().__init__(message, code="INVALID_KEY_OPTIONS")


class InvalidResourceTypeError(InvalidInputError):
    """Raised when a usage resource type is not recognized."""

    def __init__(self, message: str = "Invalid resource type"):
        super().__init__(message, code="INVALID_RESOURCE_TYPE")


class NotFoundError(DomainException):
    """Base exception for missing entities."""

    def __init__(self, message: str = "Resource not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class LicenseNotFoundError(NotFoundError):
    """Raised when a license is not found."""

    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class ClinicNotFoundError(NotFoundError):
    """Raised when a clinic is not found."""

    def __init__(self, message: str = "Clinic not found"):
        super().__init__(message, code="CLINIC_NOT_FOUND")


class PrincipalNotFoundError(NotFoundError):
    """Raised when a principal is not found."""

    def __init__(self, message: str = "Principal not found"):
        super().__init__(message, code="PRINCIPAL_NOT_FOUND")


class RoleNotFoundError(NotFoundError):
    """Raised when a role is not found."""

    def __init__(self, message: str = "Role not found"):
        super().__init__(message, code="ROLE_NOT_FOUND")


class PermissionNotFoundError(NotFoundError):
    """Raised when a permission is not found."""

    def __init__(self, message: str = "Permission not found"):
        super().__init__(message, code="PERMISSION_NOT_FOUND")


class MembershipNotFoundError(NotFoundError):
    """Raised when a clinic membership is not found."""

    def __init__(self, message: str = "Membership not found"):
        super().__init__(message, code="MEMBERSHIP_NOT_FOUND")


class UsageLimitExceededError(DomainException):
    """Raised when a usage increment would exceed the license limit."""

    def __init__(self, message: str = "Usage limit exceeded"):
        super().__init__(message, code="USAGE_LIMIT_EXCEEDED")


class BusinessRuleViolation(DomainException):
    """Base exception for rejected operations that are not authorization or quota related."""

    def __init__(self, message: str = "Operation not allowed", code: str = "BUSINESS_RULE_VIOLATION"):
        super().__init__(message, code=code)


class SystemRoleImmutableError(BusinessRuleViolation):
    """Raised when a system role is modified or deleted."""

    def __init__(self, message: str = "System roles cannot be modified"):
        super().__init__(message, code="SYSTEM_ROLE_IMMUTABLE")


class RoleInUseError(BusinessRuleViolation):
    """Raised when deleting a role that is still assigned to memberships."""

    def __init__(self, message: str = "Cannot delete role that is currently assigned to users"):
        super().__init__(message, code="ROLE_IN_USE")


class RoleNameTakenError(BusinessRuleViolation):
    """Raised when a role name is already used."""

    def __init__(self, message: str = "Role name already exists"):
        super().__init__(message, code="ROLE_NAME_TAKEN")


class LicenseAlreadyProvisionedError(BusinessRuleViolation):
    """Raised when a clinic already holds a license."""

    def __init__(self, message: str = "Clinic already has a license"):
        super().__init__(message, code="LICENSE_ALREADY_PROVISIONED")


class InvalidLicenseStatusError(BusinessRuleViolation):
    """Raised when a license operation is invalid for the current status."""

    def __init__(self, message: str = "Invalid license status"):
        super().__init__(message, code="INVALID_LICENSE_STATUS")


class LicenseExpiredError(BusinessRuleViolation):
    """Raised when a license has expired."""

    def __init__(self, message: str = "License has expired"):
        super().__init__(message, code="LICENSE_EXPIRED")


class LicenseSuspendedError(BusinessRuleViolation):
    """Raised when a license is suspended."""

    def __init__(self, message: str = "License is suspended"):
        super().__init__(message, code="LICENSE_SUSPENDED")


class InvalidActivationCodeError(BusinessRuleViolation):
    """Raised when an activation code does not match the license key."""

    def __init__(self, message: str = "Invalid activation code"):
        super().__init__(message, code="INVALID_ACTIVATION_CODE")


class LicenseAlreadyActivatedError(BusinessRuleViolation):
    """Raised when a license is activated twice."""

    def __init__(self, message: str = "License already activated"):
        super().__init__(message, code="ALREADY_ACTIVATED")


class DuplicateLicenseKeyError(DomainException):
    """Raised by storage when a key is already present in the issued key registry."""

    def __init__(self, message: str = "License key already issued"):
        super().__init__(message, code="DUPLICATE_LICENSE_KEY")


class KeyCollisionExhaustedError(DomainException):
    """Raised when no unique license key could be produced within the attempt cap."""

    def __init__(self, message: str = "Unable to generate a unique license key"):
        super().__init__(message, code="KEY_COLLISION_EXHAUSTED")


class UnknownPermissionError(DomainException):
    """Raised when code references permission names missing from the seeded set."""

    def __init__(self, message: str = "Unknown permission referenced"):
        super().__init__(message, code="UNKNOWN_PERMISSION")


class CacheUnavailableError(DomainException):
    """Raised when a cache write that must not be skipped fails."""

    def __init__(self, message: str = "Cache backend unavailable"):
        super().__init__(message, code="CACHE_UNAVAILABLE")
