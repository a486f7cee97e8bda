"""
Security domain events.
"""
import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class SecurityEventRaised(DomainEvent):
    """Event raised when the abuse detector records a security event."""

    def __init__(
        self,
        security_event_id: uuid.UUID,
        event_type: str,
        severity: str,
        ip_address: str,
        license_key_id: Optional[uuid.UUID] = None,
        details: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize SecurityEventRaised event.

        Args:
            security_event_id: SecurityEvent UUID
            event_type: Security event type value
            severity: Severity value
            ip_address: Client IP address
            license_key_id: Related key, if any
            details: Human-readable context
            occurred_at: When the event occurred
        """
        super().__init__(aggregate_id=str(security_event_id), occurred_at=occurred_at)
        self.security_event_id = security_event_id
        # ``event_type`` is the class-level event name; keep the
        # security classification under its own attribute.
        self.security_event_type = event_type
        self.severity = severity
        self.ip_address = ip_address
        self.license_key_id = license_key_id
        self.details = details


class SecurityEventResolved(DomainEvent):
    """Event raised when a human resolves a security event."""

    def __init__(
        self,
        security_event_id: uuid.UUID,
        resolved_by: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(security_event_id), occurred_at=occurred_at)
        self.security_event_id = security_event_id
        self.resolved_by = resolved_by
