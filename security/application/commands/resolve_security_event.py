"""
ResolveSecurityEventCommand.

Command to mark a security event as handled.
"""
import uuid
from dataclasses import dataclass


@dataclass
class ResolveSecurityEventCommand:
    """Command to resolve a security event."""

    security_event_id: uuid.UUID
    resolved_by: str
