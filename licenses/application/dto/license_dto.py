"""
License DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from licenses.domain.license import License


@dataclass
class LicenseDTO:
    """DTO for license information."""

    id: uuid.UUID
    clinic_id: uuid.UUID
    license_key: str
    plan: str
    status: str
    expires_at: datetime
    features: List[str]
    usage: Dict[str, Dict[str, int]]
    activated_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_entity(cls, license: License) -> "LicenseDTO":
        return cls(
            id=license.id,
            clinic_id=license.clinic_id,
            license_key=license.license_key,
            plan=license.plan.value,
            status=license.status.value,
            expires_at=license.expires_at,
            features=sorted(license.features),
            usage=license.usage_snapshot(),
            activated_at=license.activated_at,
            created_at=license.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "clinic_id": str(self.clinic_id),
            "license_key": self.license_key,
            "plan": self.plan,
            "status": self.status,
            "expires_at": self.expires_at.isoformat(),
            "features": self.features,
            "usage": self.usage,
            "activated_at": self.activated_at.isoformat() if self.activated_at else None,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class ProvisionLicenseResponseDTO:
    """DTO for provision license response."""

    license: LicenseDTO
    activation_code: str

    def to_dict(self) -> Dict[str, Any]:
        return {"license": self.license.to_dict(), "activation_code": self.activation_code}


@dataclass
class KeyRegenerationDTO:
    """DTO for key regeneration response."""

    license_id: uuid.UUID
    old_key: str
    new_key: str
    activation_code: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "license_id": str(self.license_id),
            "old_key": self.old_key,
            "new_key": self.new_key,
            "activation_code": self.activation_code,
        }
