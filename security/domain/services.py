"""
Security domain services.

The AbuseDetector reads activation attempt history and writes security
events. It never touches license key state.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from activations.ports.activation_attempt_repository import ActivationAttemptRepository
from core.domain.clock import Clock
from core.domain.events import EventBus
from core.domain.exceptions import (
    SecurityEventAlreadyResolvedError,
    SecurityEventNotFoundError,
)
from core.domain.value_objects import FailureReason, SecurityEventType, Severity
from security.domain.events import SecurityEventRaised, SecurityEventResolved
from security.domain.security_event import SecurityEvent
from security.ports.security_event_repository import SecurityEventRepository

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT_THRESHOLD = 5
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 300


@dataclass(frozen=True)
class SignalContext:
    """Request context attached to a security event."""

    ip_address: str
    license_key_id: Optional[uuid.UUID] = None
    attempted_key: Optional[str] = None
    details: Optional[str] = None


class AbuseDetector:
    """
    Domain service correlating validation attempts into security events.

    Rate limiting is a sliding window over failed ``NOT_FOUND`` attempts
    per IP, recomputed on every check. There is no persistent ban list.
    """

    def __init__(
        self,
        attempt_repository: ActivationAttemptRepository,
        security_event_repository: SecurityEventRepository,
        event_bus: EventBus,
        clock: Clock,
        threshold: int = DEFAULT_RATE_LIMIT_THRESHOLD,
        window_seconds: int = DEFAULT_RATE_LIMIT_WINDOW_SECONDS,
    ):
        """Initialize detector with repositories, event bus and clock."""
        if threshold < 1:
            raise ValueError("Rate limit threshold must be at least 1")
        self.attempt_repository = attempt_repository
        self.security_event_repository = security_event_repository
        self.event_bus = event_bus
        self.clock = clock
        self.threshold = threshold
        self.window = timedelta(seconds=window_seconds)

    async def count_recent_invalid_attempts(self, ip_address: str) -> int:
        """
        Count invalid-key attempts from an IP inside the trailing window.

        Args:
            ip_address: Client IP address

        Returns:
            Number of failed NOT_FOUND attempts in the window
        """
        since = self.clock.now() - self.window
        return await self.attempt_repository.count_failures_from_ip(
            ip_address, FailureReason.NOT_FOUND, since
        )

    async def is_rate_limited(self, ip_address: str) -> bool:
        """
        Check whether an IP is currently rate limited.

        Args:
            ip_address: Client IP address

        Returns:
            True if the IP reached the threshold inside the window
        """
        return await self.count_recent_invalid_attempts(ip_address) >= self.threshold

    async def signal(
        self,
        event_type: SecurityEventType,
        context: SignalContext,
        severity: Optional[Severity] = None,
    ) -> SecurityEvent:
        """
        Record a security event. Unconditional: repeated signals are not merged.

        Args:
            event_type: Classified event type
            context: Request context
            severity: Overrides the default severity of ``event_type``

        Returns:
            Saved SecurityEvent entity
        """
        event = SecurityEvent.create(
            event_type=event_type,
            ip_address=context.ip_address,
            now=self.clock.now(),
            severity=severity,
            license_key_id=context.license_key_id,
            attempted_key=context.attempted_key,
            details=context.details,
        )
        saved = await self.security_event_repository.add(event)
        logger.warning(
            "Security event %s (%s) from %s",
            saved.event_type.value,
            saved.severity.value,
            saved.ip_address,
            extra={
                "security_event_id": str(saved.id),
                "security_event_type": saved.event_type.value,
                "severity": saved.severity.value,
                "license_key_id": str(saved.license_key_id) if saved.license_key_id else None,
            },
        )
        await self.event_bus.publish(
            SecurityEventRaised(
                security_event_id=saved.id,
                event_type=saved.event_type.value,
                severity=saved.severity.value,
                ip_address=saved.ip_address,
                license_key_id=saved.license_key_id,
                details=saved.details,
                occurred_at=saved.created_at,
            )
        )
        return saved

    async def signal_once(
        self, event_type: SecurityEventType, context: SignalContext
    ) -> Optional[SecurityEvent]:
        """
        Record a key-scoped event unless an unresolved one of the same type exists.

        Args:
            event_type: Classified event type
            context: Request context with ``license_key_id`` set

        Returns:
            Saved SecurityEvent, or None if an open event already covers the key
        """
        if context.license_key_id is not None and await self.security_event_repository.has_unresolved(
            event_type, context.license_key_id
        ):
            return None
        return await self.signal(event_type, context)

    async def note_invalid_key(self, context: SignalContext) -> SecurityEvent:
        """
        Signal an unresolved key string and escalate to brute force.

        Must be called after the failed attempt has been recorded. The
        brute force event fires once, on the attempt that brings the IP's
        window count to exactly the threshold.

        Args:
            context: Request context with ``attempted_key`` set

        Returns:
            The invalid_key SecurityEvent
        """
        event = await self.signal(SecurityEventType.INVALID_KEY, context)
        recent = await self.count_recent_invalid_attempts(context.ip_address)
        if recent == self.threshold:
            await self.signal(
                SecurityEventType.BRUTE_FORCE,
                SignalContext(
                    ip_address=context.ip_address,
                    attempted_key=context.attempted_key,
                    details=(
                        f"{recent} invalid license keys from {context.ip_address} "
                        f"within {int(self.window.total_seconds())} seconds"
                    ),
                ),
            )
        return event

    async def resolve(self, event_id: uuid.UUID, resolved_by: str) -> SecurityEvent:
        """
        Mark a security event as handled by a human.

        Args:
            event_id: SecurityEvent UUID
            resolved_by: Identity of the resolver

        Returns:
            Resolved SecurityEvent

        Raises:
            SecurityEventNotFoundError: If the event does not exist
            SecurityEventAlreadyResolvedError: If it was already resolved
        """
        event = await self.security_event_repository.find_by_id(event_id)
        if not event:
            raise SecurityEventNotFoundError(f"Security event {event_id} not found")

        resolved = event.resolve(resolved_by, self.clock.now())
        if not await self.security_event_repository.mark_resolved(resolved):
            raise SecurityEventAlreadyResolvedError(
                f"Security event {event_id} was resolved concurrently"
            )

        await self.event_bus.publish(
            SecurityEventResolved(security_event_id=resolved.id, resolved_by=resolved_by)
        )
        return resolved
