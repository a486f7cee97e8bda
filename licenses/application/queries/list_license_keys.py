"""
ListLicenseKeysQuery.
"""
from dataclasses import dataclass
from typing import Optional

from core.domain.value_objects import LicenseStatus


@dataclass
class ListLicenseKeysQuery:
    """Query license keys, newest first."""

    status: Optional[LicenseStatus] = None
    limit: int = 100
    offset: int = 0
