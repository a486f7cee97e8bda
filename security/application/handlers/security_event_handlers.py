"""
Security event handlers.

Admin-facing handlers for listing, resolving and summarizing
security events.
"""
import logging
from datetime import timedelta
from typing import Optional

from activations.ports.activation_attempt_repository import ActivationAttemptRepository
from core.domain.clock import Clock, SystemClock
from core.domain.events import EventBus
from core.infrastructure.events import event_bus as default_event_bus
from security.application.commands.resolve_security_event import ResolveSecurityEventCommand
from security.application.dto.security_dto import (
    SecurityEventDTO,
    SecurityEventListDTO,
    SecurityStatsDTO,
)
from security.application.queries.list_security_events import ListSecurityEventsQuery
from security.domain.services import AbuseDetector
from security.ports.security_event_repository import SecurityEventRepository

logger = logging.getLogger(__name__)


class ListSecurityEventsHandler:
    """Handler for ListSecurityEventsQuery."""

    def __init__(self, security_event_repository: SecurityEventRepository):
        self.security_event_repository = security_event_repository

    async def handle(self, query: ListSecurityEventsQuery) -> SecurityEventListDTO:
        events = await self.security_event_repository.find_all(
            unresolved_only=query.unresolved_only, limit=query.limit, offset=query.offset
        )
        total = await self.security_event_repository.count(unresolved_only=query.unresolved_only)
        return SecurityEventListDTO(
            count=total,
            results=[SecurityEventDTO.from_entity(event) for event in events],
        )


class ResolveSecurityEventHandler:
    """Handler for ResolveSecurityEventCommand."""

    def __init__(
        self,
        security_event_repository: SecurityEventRepository,
        attempt_repository: ActivationAttemptRepository,
        clock: Optional[Clock] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize handler with repositories."""
        self.abuse_detector = AbuseDetector(
            attempt_repository=attempt_repository,
            security_event_repository=security_event_repository,
            event_bus=event_bus or default_event_bus,
            clock=clock or SystemClock(),
        )

    async def handle(self, command: ResolveSecurityEventCommand) -> SecurityEventDTO:
        """
        Handle resolve security event command.

        Args:
            command: ResolveSecurityEventCommand

        Returns:
            SecurityEventDTO of the resolved event

        Raises:
            SecurityEventNotFoundError: If the event does not exist
            SecurityEventAlreadyResolvedError: If it was already resolved
        """
        resolved = await self.abuse_detector.resolve(
            command.security_event_id, command.resolved_by
        )
        logger.info(
            "Security event %s resolved by %s",
            resolved.id,
            command.resolved_by,
            extra={"security_event_id": str(resolved.id)},
        )
        return SecurityEventDTO.from_entity(resolved)


class GetSecurityStatsHandler:
    """Handler for security event counters over the last 24 hours."""

    def __init__(
        self,
        security_event_repository: SecurityEventRepository,
        clock: Optional[Clock] = None,
    ):
        self.security_event_repository = security_event_repository
        self.clock = clock or SystemClock()

    async def handle(self) -> SecurityStatsDTO:
        stats = await self.security_event_repository.stats(
            since=self.clock.now() - timedelta(hours=24)
        )
        return SecurityStatsDTO(
            total=stats["total"],
            unresolved=stats["unresolved"],
            critical_unresolved=stats["critical_unresolved"],
            last_24_hours=stats["recent"],
        )
