"""
GetLicenseUsageQuery.
"""
import uuid
from dataclasses import dataclass


@dataclass
class GetLicenseUsageQuery:
    """Query to get the usage report of a license."""

    license_id: uuid.UUID
