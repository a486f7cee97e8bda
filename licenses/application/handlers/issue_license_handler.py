"""
IssueLicenseHandler.

Handles the issue license command.
"""

import logging
from typing import Callable, Optional

from django.conf import settings

from core.domain.clock import Clock, SystemClock
from core.domain.events import EventBus
from core.infrastructure.events import event_bus as default_event_bus
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.dto.license_dto import LicenseKeyDTO
from licenses.domain.events import LicenseKeyIssued
from licenses.domain.services import LicenseKeyGenerator, LicenseLifecycleManager
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class IssueLicenseHandler:
    """Handler for IssueLicenseCommand."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        clock: Optional[Clock] = None,
        key_generator: Optional[Callable[[], str]] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize handler with repository and optional collaborators."""
        self.license_key_repository = license_key_repository
        self.clock = clock or SystemClock()
        self.key_generator = key_generator or LicenseKeyGenerator.generate
        self.event_bus = event_bus or default_event_bus

    async def handle(self, command: IssueLicenseCommand) -> LicenseKeyDTO:
        """
        Handle issue license command.

        Args:
            command: IssueLicenseCommand

        Returns:
            LicenseKeyDTO of the issued key

        Raises:
            DuplicateLicenseKeyError: If every generated key collided
            InvalidLicenseStatusError: If the initial status is not pending or active
        """
        saved = await LicenseLifecycleManager.issue(
            self.license_key_repository,
            max_attempts=getattr(settings, "LICENSE_KEY_GENERATION_ATTEMPTS", 3),
            generate=self.key_generator,
            assigned_to=command.assigned_to,
            assigned_email=command.assigned_email,
            max_activations=command.max_activations,
            expires_at=command.expires_at,
            initial_status=command.initial_status,
            notes=command.notes,
            created_by=command.created_by,
            now=self.clock.now(),
        )

        logger.info(
            "Issued license key %s (%s)",
            saved.id,
            saved.status.value,
            extra={"license_key_id": str(saved.id)},
        )
        await self.event_bus.publish(
            LicenseKeyIssued(
                license_key_id=saved.id,
                status=saved.status.value,
                max_activations=saved.max_activations,
                expires_at=saved.expires_at,
            )
        )
        return LicenseKeyDTO.from_entity(saved)
