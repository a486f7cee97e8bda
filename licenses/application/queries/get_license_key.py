"""
GetLicenseKeyQuery.
"""
import uuid
from dataclasses import dataclass


@dataclass
class GetLicenseKeyQuery:
    """Query a single license key by id."""

    license_key_id: uuid.UUID
