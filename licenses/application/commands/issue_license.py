"""
IssueLicenseCommand.

Command to issue a new license key.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.domain.value_objects import LicenseStatus


@dataclass
class IssueLicenseCommand:
    """Command to issue a license key."""

    assigned_to: Optional[str] = None
    assigned_email: Optional[str] = None
    max_activations: int = 1
    expires_at: Optional[datetime] = None
    initial_status: LicenseStatus = LicenseStatus.PENDING
    notes: Optional[str] = None
    created_by: Optional[str] = None
