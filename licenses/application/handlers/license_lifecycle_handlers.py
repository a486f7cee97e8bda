"""
License lifecycle handlers.

Handlers for the administrative activate, revoke, update and reissue
commands. None of them moves a key out of ``revoked`` or ``expired``;
reissue creates a separate key instead.
"""
import logging
from typing import Callable, Optional

from django.conf import settings

from core.domain.clock import Clock, SystemClock
from core.domain.events import EventBus
from core.domain.exceptions import InvalidLicenseUpdateError, LicenseNotFoundError
from core.domain.value_objects import LicenseStatus
from core.infrastructure.events import event_bus as default_event_bus
from licenses.application.commands.activate_license_key import ActivateLicenseKeyCommand
from licenses.application.commands.reissue_license_key import ReissueLicenseKeyCommand
from licenses.application.commands.revoke_license_key import RevokeLicenseKeyCommand
from licenses.application.commands.update_license_key import UpdateLicenseKeyCommand
from licenses.application.dto.license_dto import LicenseKeyDTO
from licenses.domain.events import (
    LicenseKeyActivated,
    LicenseKeyIssued,
    LicenseKeyReissued,
    LicenseKeyRevoked,
)
from licenses.domain.license_key import LicenseKey
from licenses.domain.services import LicenseKeyGenerator, LicenseLifecycleManager
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class _LicenseKeyCommandHandler:
    """Shared lookup for handlers addressing a key by id."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        clock: Optional[Clock] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize handler with repository and optional collaborators."""
        self.license_key_repository = license_key_repository
        self.clock = clock or SystemClock()
        self.event_bus = event_bus or default_event_bus

    async def _get(self, license_key_id) -> LicenseKey:
        license_key = await self.license_key_repository.find_by_id(license_key_id)
        if not license_key:
            raise LicenseNotFoundError(f"License key {license_key_id} not found")
        return license_key


class ActivateLicenseKeyHandler(_LicenseKeyCommandHandler):
    """Handler for ActivateLicenseKeyCommand."""

    async def handle(self, command: ActivateLicenseKeyCommand) -> LicenseKeyDTO:
        """
        Handle activate license key command.

        Args:
            command: ActivateLicenseKeyCommand

        Returns:
            LicenseKeyDTO of the activated key

        Raises:
            LicenseNotFoundError: If the key does not exist
            InvalidLicenseStatusError: If the key is not pending
        """
        license_key = await self._get(command.license_key_id)
        activated = await LicenseLifecycleManager.activate(
            license_key, self.license_key_repository, self.clock.now()
        )
        logger.info("Activated license key %s", activated.id)
        await self.event_bus.publish(LicenseKeyActivated(license_key_id=activated.id))
        return LicenseKeyDTO.from_entity(await self._get(activated.id))


class RevokeLicenseKeyHandler(_LicenseKeyCommandHandler):
    """Handler for RevokeLicenseKeyCommand."""

    async def handle(self, command: RevokeLicenseKeyCommand) -> LicenseKeyDTO:
        """
        Handle revoke license key command. Revoking twice is a no-op.

        Args:
            command: RevokeLicenseKeyCommand

        Returns:
            LicenseKeyDTO of the revoked key

        Raises:
            LicenseNotFoundError: If the key does not exist
        """
        license_key = await self._get(command.license_key_id)
        revoked = await LicenseLifecycleManager.revoke(
            license_key, self.license_key_repository, self.clock.now()
        )
        if revoked:
            logger.info(
                "Revoked license key %s (was %s)",
                license_key.id,
                license_key.status.value,
                extra={"license_key_id": str(license_key.id), "reason": command.reason},
            )
            await self.event_bus.publish(
                LicenseKeyRevoked(
                    license_key_id=license_key.id,
                    previous_status=license_key.status.value,
                )
            )
        return LicenseKeyDTO.from_entity(await self._get(license_key.id))


class UpdateLicenseKeyHandler(_LicenseKeyCommandHandler):
    """Handler for UpdateLicenseKeyCommand."""

    async def handle(self, command: UpdateLicenseKeyCommand) -> LicenseKeyDTO:
        """
        Handle update license key command.

        Args:
            command: UpdateLicenseKeyCommand

        Returns:
            LicenseKeyDTO of the updated key

        Raises:
            LicenseNotFoundError: If the key does not exist
            InvalidLicenseUpdateError: If max activations would drop below current
        """
        license_key = await self._get(command.license_key_id)
        updated = await LicenseLifecycleManager.update_details(
            license_key,
            self.license_key_repository,
            assigned_to=command.assigned_to,
            assigned_email=command.assigned_email,
            notes=command.notes,
            max_activations=command.max_activations,
            expires_at=command.expires_at,
            now=self.clock.now(),
        )
        return LicenseKeyDTO.from_entity(updated)


class ReissueLicenseKeyHandler(_LicenseKeyCommandHandler):
    """Handler for ReissueLicenseKeyCommand."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        clock: Optional[Clock] = None,
        event_bus: Optional[EventBus] = None,
        key_generator: Optional[Callable[[], str]] = None,
    ):
        super().__init__(license_key_repository, clock=clock, event_bus=event_bus)
        self.key_generator = key_generator or LicenseKeyGenerator.generate

    async def handle(self, command: ReissueLicenseKeyCommand) -> LicenseKeyDTO:
        """
        Handle reissue license key command.

        The new key copies the assignment data of the old one and starts
        active with no activations. The old key keeps its status.

        Args:
            command: ReissueLicenseKeyCommand

        Returns:
            LicenseKeyDTO of the new key

        Raises:
            LicenseNotFoundError: If the old key does not exist
            InvalidLicenseUpdateError: If the new key would already be past its expiry
        """
        original = await self._get(command.license_key_id)
        now = self.clock.now()
        expires_at = command.expires_at or original.expires_at
        if expires_at is not None and expires_at <= now:
            raise InvalidLicenseUpdateError("Reissued key needs an expiry in the future")

        reissued = await LicenseLifecycleManager.issue(
            self.license_key_repository,
            max_attempts=getattr(settings, "LICENSE_KEY_GENERATION_ATTEMPTS", 3),
            generate=self.key_generator,
            assigned_to=original.assigned_to,
            assigned_email=str(original.assigned_email) if original.assigned_email else None,
            max_activations=command.max_activations or original.max_activations,
            expires_at=expires_at,
            initial_status=LicenseStatus.ACTIVE,
            notes=original.notes,
            created_by=command.created_by,
            reissued_from_id=original.id,
            now=now,
        )

        logger.info(
            "Reissued license key %s as %s",
            original.id,
            reissued.id,
            extra={"license_key_id": str(reissued.id)},
        )
        await self.event_bus.publish(
            LicenseKeyIssued(
                license_key_id=reissued.id,
                status=reissued.status.value,
                max_activations=reissued.max_activations,
                expires_at=reissued.expires_at,
            )
        )
        await self.event_bus.publish(
            LicenseKeyReissued(
                license_key_id=reissued.id,
                replaced_license_key_id=original.id,
            )
        )
        return LicenseKeyDTO.from_entity(reissued)
