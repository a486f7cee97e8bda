"""
GetActivationHistoryQuery.

Query to page through the validation attempts of a license key.
"""
import uuid
from dataclasses import dataclass


@dataclass
class GetActivationHistoryQuery:
    """Query to get activation attempts for a license key."""

    license_key_id: uuid.UUID
    limit: int = 50
    offset: int = 0
