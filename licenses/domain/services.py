"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from core.domain.clock import Clock
from core.domain.events import EventBus
from core.domain.exceptions import (
    DuplicateLicenseKeyError,
    InvalidLicenseStatusError,
    InvalidLicenseUpdateError,
)
from core.domain.value_objects import LicenseStatus
from licenses.domain.events import (
    LicenseKeyExpired,
    LicenseKeyExpiringSoon,
    LicenseKeyPurged,
)
from licenses.domain.license_key import LicenseKey, generate_license_key
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30
DEFAULT_WARNING_DAYS = 7


class LicenseKeyGenerator:
    """Domain service for license key generation."""

    @staticmethod
    def generate() -> str:
        """
        Generate a license key.

        Returns:
            Generated license key string
        """
        return generate_license_key()


class LicenseLifecycleManager:
    """Domain service for administrative license key transitions."""

    @staticmethod
    async def issue(
        repository: LicenseKeyRepository,
        max_attempts: int = 3,
        generate: Callable[[], str] = LicenseKeyGenerator.generate,
        **fields,
    ) -> LicenseKey:
        """
        Create and store a new key, regenerating the key string on collision.

        Args:
            repository: License key repository
            max_attempts: Number of generated keys to try
            generate: Key string factory
            **fields: Arguments for ``LicenseKey.create`` other than ``key``

        Returns:
            Saved LicenseKey entity

        Raises:
            DuplicateLicenseKeyError: If every generated key collided
        """
        last_error: Optional[DuplicateLicenseKeyError] = None
        for attempt in range(1, max_attempts + 1):
            license_key = LicenseKey.create(key=generate(), **fields)
            try:
                return await repository.add(license_key)
            except DuplicateLicenseKeyError as e:
                logger.warning("Generated license key collided (attempt %d/%d)", attempt, max_attempts)
                last_error = e
        raise last_error or DuplicateLicenseKeyError()

    @staticmethod
    async def activate(
        license_key: LicenseKey, repository: LicenseKeyRepository, now: datetime
    ) -> LicenseKey:
        """
        Move a pending key to active.

        Args:
            license_key: LicenseKey entity
            repository: License key repository
            now: Current time

        Returns:
            Activated LicenseKey entity
        """
        activated = license_key.activate(now)
        changed = await repository.transition_status(
            license_key.id, [LicenseStatus.PENDING], LicenseStatus.ACTIVE, now
        )
        if not changed:
            raise InvalidLicenseStatusError("License key is no longer pending")
        return activated

    @staticmethod
    async def revoke(
        license_key: LicenseKey, repository: LicenseKeyRepository, now: datetime
    ) -> bool:
        """
        Revoke a key from any status.

        Args:
            license_key: LicenseKey entity
            repository: License key repository
            now: Current time

        Returns:
            True if this call revoked the key, False if it already was
        """
        if license_key.status == LicenseStatus.REVOKED:
            return False
        return await repository.transition_status(
            license_key.id,
            [LicenseStatus.PENDING, LicenseStatus.ACTIVE, LicenseStatus.EXPIRED],
            LicenseStatus.REVOKED,
            now,
        )

    @staticmethod
    async def update_details(
        license_key: LicenseKey, repository: LicenseKeyRepository, **changes
    ) -> LicenseKey:
        """
        Apply an administrative edit. Never changes status.

        Args:
            license_key: LicenseKey entity
            repository: License key repository
            **changes: Fields accepted by ``LicenseKey.update_details``

        Returns:
            Updated LicenseKey entity
        """
        edited = license_key.update_details(**changes)
        if edited is license_key:
            return license_key
        saved = await repository.update_details(edited)
        if saved is None:
            raise InvalidLicenseUpdateError(
                "Max activations cannot be lower than current activations"
            )
        return saved


class ExpirationSweeper:
    """
    Scheduled expiry and retention of license keys.

    Both operations are idempotent and safe to run concurrently with
    each other and with validations. A failure on one key is logged and
    the run continues with the next.
    """

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        event_bus: EventBus,
        clock: Clock,
    ):
        """Initialize sweeper with repository, event bus and clock."""
        self.license_key_repository = license_key_repository
        self.event_bus = event_bus
        self.clock = clock

    async def find_due(self) -> List[uuid.UUID]:
        """Return ids of active keys past their expiry."""
        return await self.license_key_repository.find_expiry_due_ids(self.clock.now())

    async def sweep_expirations(self) -> int:
        """
        Transition every active key past its expiry to expired.

        Returns:
            Number of keys this run transitioned
        """
        now = self.clock.now()
        expired = 0
        for license_key_id in await self.license_key_repository.find_expiry_due_ids(now):
            try:
                if not await self.license_key_repository.expire_if_due(license_key_id, now):
                    continue
                expired += 1
                logger.info(
                    "Marked license key %s as expired",
                    license_key_id,
                    extra={"license_key_id": str(license_key_id)},
                )
                await self.event_bus.publish(
                    LicenseKeyExpired(
                        license_key_id=license_key_id,
                        expires_at=None,
                        source="sweep",
                        occurred_at=now,
                    )
                )
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error(
                    "Error marking license key %s as expired: %s",
                    license_key_id,
                    e,
                    exc_info=True,
                )
        logger.info("Expiration sweep finished: %d key(s) expired", expired)
        return expired

    def purge_cutoff(self, retention_days: int) -> datetime:
        if retention_days < 0:
            raise ValueError("Retention days cannot be negative")
        return self.clock.now() - timedelta(days=retention_days)

    async def find_purgeable(self, retention_days: int = DEFAULT_RETENTION_DAYS) -> List[uuid.UUID]:
        """Return ids of expired keys older than the retention window."""
        return await self.license_key_repository.find_purgeable_ids(
            self.purge_cutoff(retention_days)
        )

    async def purge_old_expired(self, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
        """
        Delete expired keys whose expiry is older than the retention window.

        Their activation attempts and status reports go with them. This is
        irreversible.

        Args:
            retention_days: Days an expired key is retained

        Returns:
            Number of keys deleted
        """
        cutoff = self.purge_cutoff(retention_days)
        purged = 0
        for license_key_id in await self.license_key_repository.find_purgeable_ids(cutoff):
            try:
                if not await self.license_key_repository.purge(license_key_id, cutoff):
                    continue
                purged += 1
                logger.info(
                    "Purged expired license key %s",
                    license_key_id,
                    extra={"license_key_id": str(license_key_id)},
                )
                await self.event_bus.publish(LicenseKeyPurged(license_key_id=license_key_id))
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error(
                    "Error purging license key %s: %s",
                    license_key_id,
                    e,
                    exc_info=True,
                )
        logger.info("Purge finished: %d key(s) deleted (retention %d days)", purged, retention_days)
        return purged

    async def find_expiring(self, days: int = DEFAULT_WARNING_DAYS) -> List[LicenseKey]:
        """Return active keys expiring within ``days``."""
        now = self.clock.now()
        return await self.license_key_repository.find_expiring_within(now, now + timedelta(days=days))

    async def warn_expiring(self, days: int = DEFAULT_WARNING_DAYS) -> int:
        """
        Publish an expiry warning for every active key expiring within ``days``.

        Args:
            days: Warning window in days

        Returns:
            Number of warnings published
        """
        expiring = await self.find_expiring(days)
        for license_key in expiring:
            await self.event_bus.publish(
                LicenseKeyExpiringSoon(
                    license_key_id=license_key.id,
                    key=license_key.key,
                    expires_at=license_key.expires_at,
                    assigned_to=license_key.assigned_to,
                    assigned_email=str(license_key.assigned_email) if license_key.assigned_email else None,
                )
            )
        logger.info("Published %d expiry warning(s) for a %d day window", len(expiring), days)
        return len(expiring)
