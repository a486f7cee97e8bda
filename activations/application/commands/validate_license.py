"""
ValidateLicenseCommand.

Command sent by a client application to validate (and, on first use,
activate) its license key.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ValidateLicenseCommand:
    """Command to validate a license key from a client machine."""

    license_key: str
    ip_address: Optional[str] = None
    hardware_id: Optional[str] = None
    machine_name: Optional[str] = None
    os_version: Optional[str] = None
    app_version: Optional[str] = None
