"""
Celery tasks for background processing.

Tasks for notification delivery and the scheduled license maintenance
runs (expiration sweep, purge, expiry warnings).
"""
import logging

from asgiref.sync import async_to_sync
from django.conf import settings

from LicenseActivationService.celery import app

from core.infrastructure.webhooks import WebhookDeliveryService
from licenses.application.commands.maintenance import (
    PurgeExpiredLicensesCommand,
    SweepExpirationsCommand,
    WarnExpiringLicensesCommand,
)
from licenses.application.handlers.maintenance_handlers import (
    PurgeExpiredLicensesHandler,
    SweepExpirationsHandler,
    WarnExpiringLicensesHandler,
)
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def deliver_notification_task(self, event_type: str, payload: dict):
    """
    Celery task for notification webhook delivery.

    Args:
        event_type: Notification type
        payload: Notification payload
    """
    if WebhookDeliveryService.deliver(event_type, payload):
        return True
    if not WebhookDeliveryService.is_configured():
        return False
    logger.warning(
        "Retrying notification %s (attempt %d/%d)",
        event_type,
        self.request.retries + 1,
        self.max_retries,
    )
    raise self.retry(countdown=2**self.request.retries)


@app.task
def sweep_expired_licenses_task() -> int:
    """Transition every active key past its expiry to expired."""
    handler = SweepExpirationsHandler(DjangoLicenseKeyRepository())
    result = async_to_sync(handler.handle)(SweepExpirationsCommand())
    return result.count


@app.task
def purge_expired_licenses_task(retention_days: int = None) -> int:
    """Delete expired keys older than the retention window."""
    if retention_days is None:
        retention_days = getattr(settings, "LICENSE_RETENTION_DAYS", 30)
    handler = PurgeExpiredLicensesHandler(DjangoLicenseKeyRepository())
    result = async_to_sync(handler.handle)(
        PurgeExpiredLicensesCommand(retention_days=retention_days)
    )
    return result.count


@app.task
def warn_expiring_licenses_task(days: int = None) -> int:
    """Publish expiry warnings for keys close to their expiration."""
    if days is None:
        days = getattr(settings, "LICENSE_EXPIRY_WARNING_DAYS", 7)
    handler = WarnExpiringLicensesHandler(DjangoLicenseKeyRepository())
    result = async_to_sync(handler.handle)(WarnExpiringLicensesCommand(days=days))
    return result.count
