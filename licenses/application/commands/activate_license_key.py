"""
ActivateLicenseKeyCommand.

Administrative command moving a pending key to active.
"""
import uuid
from dataclasses import dataclass


@dataclass
class ActivateLicenseKeyCommand:
    """Command to activate a pending license key."""

    license_key_id: uuid.UUID
