"""
SecurityEvent repository port (interface).
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
import uuid

from core.domain.value_objects import SecurityEventType
from security.domain.security_event import SecurityEvent


class SecurityEventRepository(ABC):
    """Abstract repository for SecurityEvent entities."""

    @abstractmethod
    async def add(self, event: SecurityEvent) -> SecurityEvent:
        """
        Persist a new security event.

        Args:
            event: SecurityEvent entity

        Returns:
            Saved SecurityEvent entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, event_id: uuid.UUID) -> Optional[SecurityEvent]:
        """Find a security event by ID."""
        pass

    @abstractmethod
    async def find_all(
        self, unresolved_only: bool = False, limit: int = 100, offset: int = 0
    ) -> List[SecurityEvent]:
        """List security events, newest first."""
        pass

    @abstractmethod
    async def count(self, unresolved_only: bool = False) -> int:
        """Count security events."""
        pass

    @abstractmethod
    async def has_unresolved(
        self, event_type: SecurityEventType, license_key_id: uuid.UUID
    ) -> bool:
        """
        Check for an open event of a type on a key.

        Args:
            event_type: Security event type
            license_key_id: License key UUID

        Returns:
            True if an unresolved event exists
        """
        pass

    @abstractmethod
    async def mark_resolved(self, event: SecurityEvent) -> bool:
        """
        Persist the resolution fields of ``event``.

        Guarded by ``resolved = False`` on the stored row.

        Returns:
            True if this call resolved the event
        """
        pass

    @abstractmethod
    async def stats(self, since: datetime) -> Dict[str, int]:
        """
        Aggregate counters for the security dashboard.

        Args:
            since: Start of the "recent" window

        Returns:
            Dict with total, unresolved, critical_unresolved, recent
        """
        pass
