"""
GetActivationHistoryHandler.
"""

from activations.application.dto.activation_dto import (
    ActivationAttemptDTO,
    ActivationAttemptListDTO,
)
from activations.application.queries.get_activation_history import GetActivationHistoryQuery
from activations.ports.activation_attempt_repository import ActivationAttemptRepository
from core.domain.exceptions import LicenseNotFoundError
from licenses.ports.license_key_repository import LicenseKeyRepository


class GetActivationHistoryHandler:
    """Handler for GetActivationHistoryQuery."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        attempt_repository: ActivationAttemptRepository,
    ):
        """Initialize handler with repositories."""
        self.license_key_repository = license_key_repository
        self.attempt_repository = attempt_repository

    async def handle(self, query: GetActivationHistoryQuery) -> ActivationAttemptListDTO:
        """
        Handle get activation history query.

        Args:
            query: GetActivationHistoryQuery

        Returns:
            ActivationAttemptListDTO, newest attempts first

        Raises:
            LicenseNotFoundError: If the key does not exist
        """
        license_key = await self.license_key_repository.find_by_id(query.license_key_id)
        if not license_key:
            raise LicenseNotFoundError(f"License key {query.license_key_id} not found")

        attempts = await self.attempt_repository.find_by_license_key(
            license_key.id, limit=query.limit, offset=query.offset
        )
        total = await self.attempt_repository.count_by_license_key(license_key.id)
        return ActivationAttemptListDTO(
            count=total,
            results=[ActivationAttemptDTO.from_entity(attempt) for attempt in attempts],
        )
