"""
License DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from licenses.domain.license_key import LicenseKey
from licenses.domain.status_report import StatusReport


@dataclass
class LicenseKeyDTO:
    """DTO for license key information."""

    id: uuid.UUID
    key: str
    status: str
    max_activations: int
    current_activations: int
    bound_hardware_id: Optional[str]
    bound_ip: Optional[str]
    last_activated_at: Optional[datetime]
    expires_at: Optional[datetime]
    assigned_to: Optional[str]
    assigned_email: Optional[str]
    notes: Optional[str]
    created_by: Optional[str]
    reissued_from_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, license_key: LicenseKey) -> "LicenseKeyDTO":
        """Build the DTO from a LicenseKey entity."""
        return cls(
            id=license_key.id,
            key=license_key.key,
            status=license_key.status.value,
            max_activations=license_key.max_activations,
            current_activations=license_key.current_activations,
            bound_hardware_id=license_key.bound_hardware_id,
            bound_ip=license_key.bound_ip,
            last_activated_at=license_key.last_activated_at,
            expires_at=license_key.expires_at,
            assigned_to=license_key.assigned_to,
            assigned_email=str(license_key.assigned_email) if license_key.assigned_email else None,
            notes=license_key.notes,
            created_by=license_key.created_by,
            reissued_from_id=license_key.reissued_from_id,
            created_at=license_key.created_at,
            updated_at=license_key.updated_at,
        )


@dataclass
class LicenseKeyListDTO:
    """DTO for a page of license keys."""

    count: int
    results: List[LicenseKeyDTO]


@dataclass
class LicenseStatsDTO:
    """DTO for license key counts by status."""

    total: int
    by_status: Dict[str, int]
    expiring_soon: int


@dataclass
class StatusReportDTO:
    """DTO for an acknowledged status report."""

    id: uuid.UUID
    license_key_id: uuid.UUID
    status: str
    received_at: datetime

    @classmethod
    def from_entity(cls, report: StatusReport) -> "StatusReportDTO":
        return cls(
            id=report.id,
            license_key_id=report.license_key_id,
            status=report.status.value,
            received_at=report.created_at,
        )


@dataclass
class MaintenanceResultDTO:
    """DTO for a sweep, purge or warning run."""

    operation: str
    count: int
    dry_run: bool = False
    license_key_ids: Optional[List[uuid.UUID]] = None
