"""
RevokeLicenseKeyCommand.

Administrative command revoking a license key.
"""
import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass
class RevokeLicenseKeyCommand:
    """Command to revoke a license key."""

    license_key_id: uuid.UUID
    reason: Optional[str] = None
