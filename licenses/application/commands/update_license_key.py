"""
UpdateLicenseKeyCommand.

Administrative edit of a license key's details. Status is not editable.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class UpdateLicenseKeyCommand:
    """Command to edit license key details."""

    license_key_id: uuid.UUID
    assigned_to: Optional[str] = None
    assigned_email: Optional[str] = None
    notes: Optional[str] = None
    max_activations: Optional[int] = None
    expires_at: Optional[datetime] = None
