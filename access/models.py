"""Model registration for the access app."""

from access.infrastructure.models import (  # noqa: F401
    ClinicMembership,
    Permission,
    Principal,
    Role,
)
