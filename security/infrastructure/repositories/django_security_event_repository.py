"""
Django implementation of SecurityEventRepository port.
"""
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from asgiref.sync import sync_to_async

from core.domain.value_objects import SecurityEventType, Severity
from core.infrastructure.database import store_operation
from security.domain.security_event import SecurityEvent
from security.infrastructure.models import SecurityEvent as SecurityEventModel
from security.ports.security_event_repository import SecurityEventRepository


class DjangoSecurityEventRepository(SecurityEventRepository):
    """Django ORM implementation of SecurityEventRepository."""

    def _to_domain(self, model: SecurityEventModel) -> SecurityEvent:
        """
        Convert Django model to domain entity.

        Args:
            model: Django SecurityEvent model

        Returns:
            SecurityEvent domain entity
        """
        return SecurityEvent(
            id=model.id,
            event_type=SecurityEventType(model.event_type),
            severity=Severity(model.severity),
            license_key_id=model.license_key_id,
            ip_address=model.ip_address,
            attempted_key=model.attempted_key,
            details=model.details,
            resolved=model.resolved,
            resolved_by=model.resolved_by,
            resolved_at=model.resolved_at,
            created_at=model.created_at,
        )

    @sync_to_async
    @store_operation
    def add(self, event: SecurityEvent) -> SecurityEvent:
        """
        Persist a new security event.

        Args:
            event: SecurityEvent entity

        Returns:
            Saved SecurityEvent entity
        """
        model = SecurityEventModel.objects.create(
            id=event.id,
            event_type=event.event_type.value,
            severity=event.severity.value,
            license_key_id=event.license_key_id,
            ip_address=event.ip_address,
            attempted_key=event.attempted_key,
            details=event.details,
            resolved=event.resolved,
            resolved_by=event.resolved_by,
            resolved_at=event.resolved_at,
            created_at=event.created_at,
        )
        return self._to_domain(model)

    @sync_to_async
    @store_operation
    def find_by_id(self, event_id: uuid.UUID) -> Optional[SecurityEvent]:
        try:
            return self._to_domain(SecurityEventModel.objects.get(id=event_id))
        except SecurityEventModel.DoesNotExist:
            return None

    @sync_to_async
    @store_operation
    def find_all(
        self, unresolved_only: bool = False, limit: int = 100, offset: int = 0
    ) -> List[SecurityEvent]:
        queryset = SecurityEventModel.objects.all()
        if unresolved_only:
            queryset = queryset.filter(resolved=False)
        return [self._to_domain(model) for model in queryset[offset : offset + limit]]

    @sync_to_async
    @store_operation
    def count(self, unresolved_only: bool = False) -> int:
        queryset = SecurityEventModel.objects.all()
        if unresolved_only:
            queryset = queryset.filter(resolved=False)
        return queryset.count()

    @sync_to_async
    @store_operation
    def has_unresolved(
        self, event_type: SecurityEventType, license_key_id: uuid.UUID
    ) -> bool:
        return SecurityEventModel.objects.filter(
            event_type=event_type.value,
            license_key_id=license_key_id,
            resolved=False,
        ).exists()

    @sync_to_async
    @store_operation
    def mark_resolved(self, event: SecurityEvent) -> bool:
        updated = SecurityEventModel.objects.filter(id=event.id, resolved=False).update(
            resolved=True,
            resolved_by=event.resolved_by,
            resolved_at=event.resolved_at,
        )
        return updated == 1

    @sync_to_async
    @store_operation
    def stats(self, since: datetime) -> Dict[str, int]:
        """Aggregate counters for the security dashboard."""
        queryset = SecurityEventModel.objects.all()
        unresolved = queryset.filter(resolved=False)
        return {
            "total": queryset.count(),
            "unresolved": unresolved.count(),
            "critical_unresolved": unresolved.filter(severity=Severity.CRITICAL.value).count(),
            "recent": queryset.filter(created_at__gte=since).count(),
        }
