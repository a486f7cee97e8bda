"""
ReportStatusCommand.

Client heartbeat recorded regardless of license validity.
"""
from dataclasses import dataclass
from typing import Optional

from core.domain.value_objects import AppStatus


@dataclass
class ReportStatusCommand:
    """Command to record a client status report."""

    license_key: str
    status: AppStatus
    app_version: str
    ip_address: Optional[str] = None
    hardware_id: Optional[str] = None
    os_version: Optional[str] = None
    error_message: Optional[str] = None
    uptime_seconds: Optional[int] = None
