"""
LicenseKey repository port (interface).

This defines the contract for license key persistence operations.
Implementations are in the infrastructure layer.

Every state-changing method is a conditional update: it returns True only
if the row matched the guard and was changed, so concurrent callers can
never both win the same transition.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional
import uuid

from core.domain.value_objects import LicenseStatus
from licenses.domain.license_key import LicenseKey


class LicenseKeyRepository(ABC):
    """
    Abstract repository for LicenseKey entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def add(self, license_key: LicenseKey) -> LicenseKey:
        """
        Insert a new license key.

        Args:
            license_key: LicenseKey entity to insert

        Returns:
            Saved license key entity

        Raises:
            DuplicateLicenseKeyError: If the key string already exists
        """
        pass

    @abstractmethod
    async def find_by_id(self, license_key_id: uuid.UUID) -> Optional[LicenseKey]:
        """
        Find a license key by ID.

        Args:
            license_key_id: License key UUID

        Returns:
            LicenseKey entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[LicenseKey]:
        """
        Find a license key by key string.

        Args:
            key: License key string

        Returns:
            LicenseKey entity or None if not found
        """
        pass

    @abstractmethod
    async def find_all(
        self,
        status: Optional[LicenseStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[LicenseKey]:
        """List license keys, newest first."""
        pass

    @abstractmethod
    async def count(self, status: Optional[LicenseStatus] = None) -> int:
        """Count license keys, optionally filtered by status."""
        pass

    @abstractmethod
    async def count_by_status(self) -> Dict[str, int]:
        """
        Count license keys grouped by status.

        Returns:
            Mapping of every status value to its count (zero included)
        """
        pass

    @abstractmethod
    async def update_details(self, license_key: LicenseKey) -> Optional[LicenseKey]:
        """
        Persist the administrative fields of an edited key.

        Only assignment data, notes, ``max_activations`` and ``expires_at``
        are written; status and activation counters are left alone. The
        write is guarded by ``current_activations <= max_activations``.

        Args:
            license_key: Edited LicenseKey entity

        Returns:
            Refreshed entity, or None if the guard rejected the write
        """
        pass

    @abstractmethod
    async def transition_status(
        self,
        license_key_id: uuid.UUID,
        from_statuses: Iterable[LicenseStatus],
        to_status: LicenseStatus,
        now: datetime,
    ) -> bool:
        """
        Move a key to ``to_status`` if its current status is in ``from_statuses``.

        Returns:
            True if the row was changed
        """
        pass

    @abstractmethod
    async def expire_if_due(self, license_key_id: uuid.UUID, now: datetime) -> bool:
        """
        Transition an active key whose expiry has passed to expired.

        Shared by lazy expiry and the scheduled sweep. Idempotent: a key
        that is already expired is not matched and the call returns False.

        Returns:
            True if this call performed the transition
        """
        pass

    @abstractmethod
    async def touch_binding(
        self,
        license_key_id: uuid.UUID,
        hardware_id: str,
        ip_address: str,
        now: datetime,
    ) -> bool:
        """
        Refresh ip and timestamp for the already-bound machine.

        Guarded by status active, not expired, and
        ``bound_hardware_id == hardware_id``. The counter is untouched.

        Returns:
            True if the row was changed
        """
        pass

    @abstractmethod
    async def claim_activation(
        self,
        license_key_id: uuid.UUID,
        hardware_id: Optional[str],
        ip_address: str,
        now: datetime,
    ) -> bool:
        """
        Atomically take one activation slot.

        Increments ``current_activations`` by one and overwrites the
        binding, guarded by status active, not expired,
        ``current_activations < max_activations`` and (when a hardware id
        is given) ``bound_hardware_id != hardware_id``. A missing hardware
        id leaves the stored binding in place.

        Returns:
            True if the slot was claimed
        """
        pass

    @abstractmethod
    async def find_expiry_due_ids(self, now: datetime) -> List[uuid.UUID]:
        """Return ids of active keys with ``expires_at < now``."""
        pass

    @abstractmethod
    async def find_purgeable_ids(self, cutoff: datetime) -> List[uuid.UUID]:
        """Return ids of expired keys with ``expires_at < cutoff``."""
        pass

    @abstractmethod
    async def purge(self, license_key_id: uuid.UUID, cutoff: datetime) -> bool:
        """
        Delete an expired key older than ``cutoff`` with its dependent rows.

        Activation attempts and status reports are cascade-deleted;
        security events keep their row with the key reference cleared.

        Returns:
            True if the key was deleted
        """
        pass

    @abstractmethod
    async def find_expiring_within(self, now: datetime, until: datetime) -> List[LicenseKey]:
        """Return active keys expiring between ``now`` and ``until``."""
        pass
