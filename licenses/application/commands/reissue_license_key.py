"""
ReissueLicenseKeyCommand.

Issues a new key replacing an existing one. The old key is left as it is.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ReissueLicenseKeyCommand:
    """Command to reissue a license key."""

    license_key_id: uuid.UUID
    expires_at: Optional[datetime] = None
    max_activations: Optional[int] = None
    created_by: Optional[str] = None
