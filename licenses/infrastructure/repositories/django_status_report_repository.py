"""
Django implementation of StatusReportRepository port.
"""
import uuid
from typing import List

from asgiref.sync import sync_to_async

from core.domain.value_objects import AppStatus
from core.infrastructure.database import store_operation
from licenses.domain.status_report import StatusReport
from licenses.infrastructure.models import StatusReport as StatusReportModel
from licenses.ports.status_report_repository import StatusReportRepository


class DjangoStatusReportRepository(StatusReportRepository):
    """Django ORM implementation of StatusReportRepository."""

    def _to_domain(self, model: StatusReportModel) -> StatusReport:
        return StatusReport(
            id=model.id,
            license_key_id=model.license_key_id,
            ip_address=model.ip_address,
            hardware_id=model.hardware_id,
            app_version=model.app_version,
            os_version=model.os_version,
            status=AppStatus(model.status),
            error_message=model.error_message,
            uptime_seconds=model.uptime_seconds,
            created_at=model.created_at,
        )

    @sync_to_async
    @store_operation
    def add(self, report: StatusReport) -> StatusReport:
        """
        Append a status report.

        Args:
            report: StatusReport entity

        Returns:
            Saved StatusReport entity
        """
        model = StatusReportModel.objects.create(
            id=report.id,
            license_key_id=report.license_key_id,
            ip_address=report.ip_address,
            hardware_id=report.hardware_id,
            app_version=report.app_version,
            os_version=report.os_version,
            status=report.status.value,
            error_message=report.error_message,
            uptime_seconds=report.uptime_seconds,
            created_at=report.created_at,
        )
        return self._to_domain(model)

    @sync_to_async
    @store_operation
    def find_by_license_key(
        self, license_key_id: uuid.UUID, limit: int = 50
    ) -> List[StatusReport]:
        models = StatusReportModel.objects.filter(license_key_id=license_key_id)[:limit]
        return [self._to_domain(model) for model in models]
