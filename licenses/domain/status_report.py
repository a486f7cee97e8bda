"""
StatusReport domain entity.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.domain.value_objects import AppStatus


@dataclass(frozen=True)
class StatusReport:
    """A client heartbeat tied to a license key."""

    id: uuid.UUID
    license_key_id: uuid.UUID
    ip_address: str
    app_version: str
    status: AppStatus
    created_at: datetime
    hardware_id: Optional[str] = None
    os_version: Optional[str] = None
    error_message: Optional[str] = None
    uptime_seconds: Optional[int] = None

    def __post_init__(self):
        if not self.app_version:
            raise ValueError("App version is required")
        if self.uptime_seconds is not None and self.uptime_seconds < 0:
            raise ValueError("Uptime cannot be negative")

    @classmethod
    def create(
        cls,
        license_key_id: uuid.UUID,
        ip_address: str,
        app_version: str,
        status: AppStatus,
        now: datetime,
        hardware_id: Optional[str] = None,
        os_version: Optional[str] = None,
        error_message: Optional[str] = None,
        uptime_seconds: Optional[int] = None,
    ) -> "StatusReport":
        return cls(
            id=uuid.uuid4(),
            license_key_id=license_key_id,
            ip_address=ip_address,
            app_version=app_version,
            status=status,
            created_at=now,
            hardware_id=hardware_id,
            os_version=os_version,
            error_message=error_message,
            uptime_seconds=uptime_seconds,
        )
