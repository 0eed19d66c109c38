"""
Resolved authorization grants for one principal.

A snapshot of everything the resolver needs to answer questions about a
principal: whether it is active, and for each clinic membership the role
name and the permission strings that role matches. Snapshots are what
the authorization cache stores.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from access.domain.membership import Membership
from access.domain.principal import Principal


@dataclass(frozen=True)
class ClinicGrant:
    """Role and permission strings held in one clinic."""

    clinic_id: uuid.UUID
    role_name: str
    permissions: FrozenSet[str]


@dataclass(frozen=True)
class PrincipalGrants:
    """Grants for one principal across all clinics."""

    principal_id: uuid.UUID
    is_active: bool
    clinics: Tuple[ClinicGrant, ...]

    @classmethod
    def build(cls, principal: Principal, memberships: Iterable[Membership]) -> "PrincipalGrants":
        grants = tuple(
            ClinicGrant(
                clinic_id=m.clinic_id,
                role_name=m.role.name,
                permissions=m.role.grant_names,
            )
            for m in sorted(memberships, key=lambda m: m.created_at)
        )
        return cls(principal_id=principal.id, is_active=principal.is_active, clinics=grants)

    @classmethod
    def empty(cls, principal_id: uuid.UUID) -> "PrincipalGrants":
        """Grants for an unknown principal: nothing is allowed."""
        return cls(principal_id=principal_id, is_active=False, clinics=())

    def for_clinic(self, clinic_id: uuid.UUID) -> Optional[ClinicGrant]:
        for grant in self.clinics:
            if grant.clinic_id == clinic_id:
                return grant
        return None

    @property
    def clinic_ids(self) -> Tuple[uuid.UUID, ...]:
        return tuple(grant.clinic_id for grant in self.clinics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "principal_id": str(self.principal_id),
            "is_active": self.is_active,
            "clinics": [
                {
                    "clinic_id": str(grant.clinic_id),
                    "role_name": grant.role_name,
                    "permissions": sorted(grant.permissions),
                }
                for grant in self.clinics
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrincipalGrants":
        return cls(
            principal_id=uuid.UUID(data["principal_id"]),
            is_active=bool(data["is_active"]),
            clinics=tuple(
                ClinicGrant(
                    clinic_id=uuid.UUID(item["clinic_id"]),
                    role_name=item["role_name"],
                    permissions=frozenset(item["permissions"]),
                )
                for item in data["clinics"]
            ),
        )
