"""
SecurityEvent domain entity.

A classified abuse signal. Immutable apart from the resolution fields,
which only an explicit resolve action sets.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from core.domain.exceptions import SecurityEventAlreadyResolvedError
from core.domain.value_objects import SecurityEventType, Severity

DEFAULT_SEVERITIES = {
    SecurityEventType.BRUTE_FORCE: Severity.CRITICAL,
    SecurityEventType.INVALID_KEY: Severity.MEDIUM,
    SecurityEventType.EXPIRED_KEY_ATTEMPT: Severity.LOW,
    SecurityEventType.REVOKED_KEY_ATTEMPT: Severity.HIGH,
    SecurityEventType.HWID_MISMATCH: Severity.HIGH,
    SecurityEventType.MULTI_ACTIVATION_OVERFLOW: Severity.MEDIUM,
}


@dataclass(frozen=True)
class SecurityEvent:
    """SecurityEvent domain entity."""

    id: uuid.UUID
    event_type: SecurityEventType
    severity: Severity
    ip_address: str
    created_at: datetime
    license_key_id: Optional[uuid.UUID] = None
    attempted_key: Optional[str] = None
    details: Optional[str] = None
    resolved: bool = False
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

    def __post_init__(self):
        if self.resolved and not self.resolved_by:
            raise ValueError("Resolved events require resolved_by")

    @classmethod
    def create(
        cls,
        event_type: SecurityEventType,
        ip_address: str,
        now: datetime,
        severity: Optional[Severity] = None,
        license_key_id: Optional[uuid.UUID] = None,
        attempted_key: Optional[str] = None,
        details: Optional[str] = None,
    ) -> "SecurityEvent":
        """
        Create a new SecurityEvent entity.

        Args:
            event_type: Classified event type
            ip_address: Client IP address
            now: Creation time
            severity: Overrides the default severity of ``event_type``
            license_key_id: Related key, if it resolved
            attempted_key: Key string as submitted, for unresolved keys
            details: Human-readable context

        Returns:
            SecurityEvent entity instance
        """
        return cls(
            id=uuid.uuid4(),
            event_type=event_type,
            severity=severity or DEFAULT_SEVERITIES[event_type],
            ip_address=ip_address,
            license_key_id=license_key_id,
            attempted_key=attempted_key[:64] if attempted_key else None,
            details=details,
            created_at=now,
        )

    def resolve(self, resolved_by: str, now: datetime) -> "SecurityEvent":
        """
        Mark the event as handled by a human.

        Args:
            resolved_by: Identity of the resolver
            now: Resolution time

        Returns:
            New SecurityEvent instance with resolution fields set
        """
        if self.resolved:
            raise SecurityEventAlreadyResolvedError(
                f"Security event {self.id} was already resolved by {self.resolved_by}"
            )
        if not resolved_by:
            raise ValueError("resolved_by is required")
        return replace(self, resolved=True, resolved_by=resolved_by, resolved_at=now)
