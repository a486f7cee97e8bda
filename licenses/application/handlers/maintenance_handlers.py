"""
Maintenance handlers.

Entry points for the expiration sweep, the purge of old expired keys
and expiry warnings. Used by Celery beat, management commands and the
admin API alike.
"""
from typing import Optional

from core.domain.clock import Clock, SystemClock
from core.domain.events import EventBus
from core.infrastructure.events import event_bus as default_event_bus
from licenses.application.commands.maintenance import (
    PurgeExpiredLicensesCommand,
    SweepExpirationsCommand,
    WarnExpiringLicensesCommand,
)
from licenses.application.dto.license_dto import MaintenanceResultDTO
from licenses.domain.services import ExpirationSweeper
from licenses.ports.license_key_repository import LicenseKeyRepository


class _SweeperHandler:
    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        clock: Optional[Clock] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize handler with repository and optional collaborators."""
        self.sweeper = ExpirationSweeper(
            license_key_repository=license_key_repository,
            event_bus=event_bus or default_event_bus,
            clock=clock or SystemClock(),
        )


class SweepExpirationsHandler(_SweeperHandler):
    """Handler for SweepExpirationsCommand."""

    async def handle(self, command: SweepExpirationsCommand) -> MaintenanceResultDTO:
        """
        Handle sweep expirations command.

        Args:
            command: SweepExpirationsCommand

        Returns:
            MaintenanceResultDTO with the number of keys expired (or due, on dry run)
        """
        if command.dry_run:
            due = await self.sweeper.find_due()
            return MaintenanceResultDTO(
                operation="sweep", count=len(due), dry_run=True, license_key_ids=due
            )
        count = await self.sweeper.sweep_expirations()
        return MaintenanceResultDTO(operation="sweep", count=count)


class PurgeExpiredLicensesHandler(_SweeperHandler):
    """Handler for PurgeExpiredLicensesCommand."""

    async def handle(self, command: PurgeExpiredLicensesCommand) -> MaintenanceResultDTO:
        """
        Handle purge expired licenses command.

        Args:
            command: PurgeExpiredLicensesCommand

        Returns:
            MaintenanceResultDTO with the number of keys deleted (or eligible, on dry run)
        """
        if command.dry_run:
            eligible = await self.sweeper.find_purgeable(command.retention_days)
            return MaintenanceResultDTO(
                operation="purge", count=len(eligible), dry_run=True, license_key_ids=eligible
            )
        count = await self.sweeper.purge_old_expired(command.retention_days)
        return MaintenanceResultDTO(operation="purge", count=count)


class WarnExpiringLicensesHandler(_SweeperHandler):
    """Handler for WarnExpiringLicensesCommand."""

    async def handle(self, command: WarnExpiringLicensesCommand) -> MaintenanceResultDTO:
        count = await self.sweeper.warn_expiring(command.days)
        return MaintenanceResultDTO(operation="warn_expiring", count=count)
