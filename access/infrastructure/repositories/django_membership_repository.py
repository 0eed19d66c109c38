"""
Django implementation of MembershipRepository port.
"""

import uuid
from typing import List, Optional

from asgiref.sync import sync_to_async

from access.domain.membership import Membership
from access.infrastructure.models import ClinicMembership as MembershipModel
from access.infrastructure.repositories.django_role_repository import role_to_domain
from access.ports.membership_repository import MembershipRepository


class DjangoMembershipRepository(MembershipRepository):
    """Django ORM implementation of MembershipRepository."""

    def _queryset(self):
        return MembershipModel.objects.select_related("role").prefetch_related(
            "role__permissions"
        )

    def _to_domain(self, model: MembershipModel) -> Membership:
        return Membership(
            id=model.id,
            principal_id=model.principal_id,
            clinic_id=model.clinic_id,
            role=role_to_domain(model.role),
            created_at=model.created_at,
        )

    @sync_to_async
    def save(self, membership: Membership) -> Membership:
        model, _ = MembershipModel.objects.update_or_create(
            principal_id=membership.principal_id,
            clinic_id=membership.clinic_id,
            defaults={"role_id": membership.role.id},
        )
        return self._to_domain(self._queryset().get(id=model.id))

    @sync_to_async
    def find(self, principal_id: uuid.UUID, clinic_id: uuid.UUID) -> Optional[Membership]:
        try:
            model = self._queryset().get(principal_id=principal_id, clinic_id=clinic_id)
            return self._to_domain(model)
        except MembershipModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_principal(self, principal_id: uuid.UUID) -> List[Membership]:
        models = self._queryset().filter(principal_id=principal_id).order_by("created_at")
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def delete(self, principal_id: uuid.UUID, clinic_id: uuid.UUID) -> bool:
        deleted, _ = MembershipModel.objects.filter(
            principal_id=principal_id, clinic_id=clinic_id
        ).delete()
        return deleted > 0

    @sync_to_async
    def count_by_role(self, role_id: uuid.UUID) -> int:
        return MembershipModel.objects.filter(role_id=role_id).count()
