"""
ReportStatusHandler.

Records a client heartbeat. The key must exist; its status is not checked.
"""
import logging
from typing import Optional

from core.domain.clock import Clock, SystemClock
from core.domain.exceptions import LicenseNotFoundError
from core.domain.value_objects import AppStatus
from licenses.application.commands.report_status import ReportStatusCommand
from licenses.application.dto.license_dto import StatusReportDTO
from licenses.domain.status_report import StatusReport
from licenses.ports.license_key_repository import LicenseKeyRepository
from licenses.ports.status_report_repository import StatusReportRepository

logger = logging.getLogger(__name__)


class ReportStatusHandler:
    """Handler for ReportStatusCommand."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        status_report_repository: StatusReportRepository,
        clock: Optional[Clock] = None,
    ):
        """Initialize handler with repositories."""
        self.license_key_repository = license_key_repository
        self.status_report_repository = status_report_repository
        self.clock = clock or SystemClock()

    async def handle(self, command: ReportStatusCommand) -> StatusReportDTO:
        """
        Handle report status command.

        Args:
            command: ReportStatusCommand

        Returns:
            StatusReportDTO acknowledging the report

        Raises:
            LicenseNotFoundError: If the key string does not resolve
        """
        license_key = await self.license_key_repository.find_by_key(command.license_key)
        if not license_key:
            raise LicenseNotFoundError()

        report = await self.status_report_repository.add(
            StatusReport.create(
                license_key_id=license_key.id,
                ip_address=command.ip_address or "unknown",
                app_version=command.app_version,
                status=command.status,
                now=self.clock.now(),
                hardware_id=command.hardware_id,
                os_version=command.os_version,
                error_message=command.error_message,
                uptime_seconds=command.uptime_seconds,
            )
        )
        if report.status == AppStatus.ERROR:
            logger.warning(
                "Client of license key %s reported an error: %s",
                license_key.id,
                report.error_message,
                extra={"license_key_id": str(license_key.id), "app_version": report.app_version},
            )
        return StatusReportDTO.from_entity(report)
