"""
Security DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from security.domain.security_event import SecurityEvent


@dataclass
class SecurityEventDTO:
    """DTO for security event information."""

    id: uuid.UUID
    event_type: str
    severity: str
    ip_address: str
    license_key_id: Optional[uuid.UUID]
    attempted_key: Optional[str]
    details: Optional[str]
    resolved: bool
    resolved_by: Optional[str]
    resolved_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_entity(cls, event: SecurityEvent) -> "SecurityEventDTO":
        """Build the DTO from a SecurityEvent entity."""
        return cls(
            id=event.id,
            event_type=event.event_type.value,
            severity=event.severity.value,
            ip_address=event.ip_address,
            license_key_id=event.license_key_id,
            attempted_key=event.attempted_key,
            details=event.details,
            resolved=event.resolved,
            resolved_by=event.resolved_by,
            resolved_at=event.resolved_at,
            created_at=event.created_at,
        )


@dataclass
class SecurityEventListDTO:
    """DTO for a page of security events."""

    count: int
    results: List[SecurityEventDTO]


@dataclass
class SecurityStatsDTO:
    """DTO for the security dashboard counters."""

    total: int
    unresolved: int
    critical_unresolved: int
    last_24_hours: int
