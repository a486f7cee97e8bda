"""
License query handlers.
"""
from datetime import timedelta
from typing import List, Optional

from core.domain.clock import Clock, SystemClock
from core.domain.exceptions import LicenseNotFoundError
from licenses.application.dto.license_dto import (
    LicenseKeyDTO,
    LicenseKeyListDTO,
    LicenseStatsDTO,
)
from licenses.application.queries.get_license_key import GetLicenseKeyQuery
from licenses.application.queries.list_expiring_licenses import ListExpiringLicensesQuery
from licenses.application.queries.list_license_keys import ListLicenseKeysQuery
from licenses.domain.services import DEFAULT_WARNING_DAYS
from licenses.ports.license_key_repository import LicenseKeyRepository


class GetLicenseKeyHandler:
    """Handler for GetLicenseKeyQuery."""

    def __init__(self, license_key_repository: LicenseKeyRepository):
        self.license_key_repository = license_key_repository

    async def handle(self, query: GetLicenseKeyQuery) -> LicenseKeyDTO:
        """
        Handle get license key query.

        Raises:
            LicenseNotFoundError: If the key does not exist
        """
        license_key = await self.license_key_repository.find_by_id(query.license_key_id)
        if not license_key:
            raise LicenseNotFoundError(f"License key {query.license_key_id} not found")
        return LicenseKeyDTO.from_entity(license_key)


class ListLicenseKeysHandler:
    """Handler for ListLicenseKeysQuery."""

    def __init__(self, license_key_repository: LicenseKeyRepository):
        self.license_key_repository = license_key_repository

    async def handle(self, query: ListLicenseKeysQuery) -> LicenseKeyListDTO:
        license_keys = await self.license_key_repository.find_all(
            status=query.status, limit=query.limit, offset=query.offset
        )
        total = await self.license_key_repository.count(status=query.status)
        return LicenseKeyListDTO(
            count=total,
            results=[LicenseKeyDTO.from_entity(license_key) for license_key in license_keys],
        )


class GetLicenseStatsHandler:
    """Handler for license key counts by status."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        clock: Optional[Clock] = None,
    ):
        self.license_key_repository = license_key_repository
        self.clock = clock or SystemClock()

    async def handle(self) -> LicenseStatsDTO:
        by_status = await self.license_key_repository.count_by_status()
        now = self.clock.now()
        expiring = await self.license_key_repository.find_expiring_within(
            now, now + timedelta(days=DEFAULT_WARNING_DAYS)
        )
        return LicenseStatsDTO(
            total=sum(by_status.values()),
            by_status=by_status,
            expiring_soon=len(expiring),
        )


class ListExpiringLicensesHandler:
    """Handler for ListExpiringLicensesQuery."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        clock: Optional[Clock] = None,
    ):
        self.license_key_repository = license_key_repository
        self.clock = clock or SystemClock()

    async def handle(self, query: ListExpiringLicensesQuery) -> List[LicenseKeyDTO]:
        now = self.clock.now()
        expiring = await self.license_key_repository.find_expiring_within(
            now, now + timedelta(days=query.days)
        )
        return [LicenseKeyDTO.from_entity(license_key) for license_key in expiring]
