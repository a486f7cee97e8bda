"""
Event handlers for domain events.

These handlers process domain events for side effects like audit
logging, metrics and outbound notifications.
"""

import logging

from activations.domain.events import LicenseActivated
from core.domain.events import DomainEvent, EventBus, EventHandler
from core.domain.value_objects import Severity
from core.infrastructure.webhooks import WebhookDeliveryService
from core.metrics import (
    license_activations_total,
    license_keys_expired_total,
    license_keys_issued_total,
    license_keys_purged_total,
    license_keys_revoked_total,
    notifications_sent_total,
    security_events_total,
)
from licenses.domain.events import (
    LicenseKeyActivated,
    LicenseKeyExpired,
    LicenseKeyExpiringSoon,
    LicenseKeyIssued,
    LicenseKeyPurged,
    LicenseKeyReissued,
    LicenseKeyRevoked,
)
from security.domain.events import SecurityEventRaised, SecurityEventResolved

logger = logging.getLogger(__name__)

ALL_EVENTS = (
    LicenseKeyIssued,
    LicenseKeyActivated,
    LicenseKeyRevoked,
    LicenseKeyReissued,
    LicenseKeyExpired,
    LicenseKeyExpiringSoon,
    LicenseKeyPurged,
    LicenseActivated,
    SecurityEventRaised,
    SecurityEventResolved,
)

NOTIFY_SEVERITIES = {Severity.HIGH.value, Severity.CRITICAL.value}


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Logs every domain event with its payload as structured fields.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra={"event": event.to_dict()},
        )


class MetricsEventHandler(EventHandler):
    """Event handler that feeds the Prometheus business counters."""

    async def handle(self, event: DomainEvent) -> None:
        if isinstance(event, LicenseKeyIssued):
            license_keys_issued_total.labels(status=event.status).inc()
        elif isinstance(event, LicenseKeyRevoked):
            license_keys_revoked_total.inc()
        elif isinstance(event, LicenseKeyExpired):
            license_keys_expired_total.labels(source=event.source).inc()
        elif isinstance(event, LicenseKeyPurged):
            license_keys_purged_total.inc()
        elif isinstance(event, LicenseActivated):
            license_activations_total.labels(
                new_activation=str(event.new_activation).lower()
            ).inc()
        elif isinstance(event, SecurityEventRaised):
            security_events_total.labels(
                event_type=event.security_event_type, severity=event.severity
            ).inc()


class NotificationEventHandler(EventHandler):
    """
    Event handler for outbound notifications.

    High and critical security events and expiry warnings are handed to
    a Celery task that posts them to the notification webhook.
    """

    @staticmethod
    def notification_type(event: DomainEvent):
        """
        Map an event to its notification type.

        Returns:
            Notification type string, or None if the event is not notified
        """
        if isinstance(event, SecurityEventRaised) and event.severity in NOTIFY_SEVERITIES:
            return "security_event.raised"
        if isinstance(event, LicenseKeyExpiringSoon):
            return "license_key.expiring_soon"
        return None

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for notification delivery.

        Args:
            event: Domain event
        """
        notification_type = self.notification_type(event)
        if not notification_type or not WebhookDeliveryService.is_configured():
            return

        from core.tasks import deliver_notification_task

        deliver_notification_task.delay(notification_type, event.to_dict())
        notifications_sent_total.labels(event_type=notification_type, outcome="queued").inc()


# Shared instances so repeated registration stays idempotent
audit_handler = AuditLogEventHandler()
metrics_handler = MetricsEventHandler()
notification_handler = NotificationEventHandler()


def register_event_handlers(bus: EventBus = None) -> None:
    """Register all event handlers with the event bus."""
    if bus is None:
        from core.infrastructure.events import event_bus as bus

    for event_type in ALL_EVENTS:
        bus.subscribe(event_type, audit_handler)
        bus.subscribe(event_type, metrics_handler)

    bus.subscribe(SecurityEventRaised, notification_handler)
    bus.subscribe(LicenseKeyExpiringSoon, notification_handler)

    logger.info("Event handlers registered")
