"""
StatusReport repository port (interface).
"""
from abc import ABC, abstractmethod
from typing import List
import uuid

from licenses.domain.status_report import StatusReport


class StatusReportRepository(ABC):
    """Abstract repository for client status reports."""

    @abstractmethod
    async def add(self, report: StatusReport) -> StatusReport:
        """
        Append a status report.

        Args:
            report: StatusReport entity

        Returns:
            Saved StatusReport entity
        """
        pass

    @abstractmethod
    async def find_by_license_key(
        self, license_key_id: uuid.UUID, limit: int = 50
    ) -> List[StatusReport]:
        """Return the latest reports for a key, newest first."""
        pass
