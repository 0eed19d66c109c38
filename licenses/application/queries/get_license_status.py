"""
GetLicenseStatusQuery.

Query to get the effective validity of a license.
"""
import uuid
from dataclasses import dataclass


@dataclass
class GetLicenseStatusQuery:
    """Query to get license status by license id."""

    license_id: uuid.UUID
