"""
ActivationAttempt repository port (interface).

Attempts are append-only: the port offers no update or delete.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
import uuid

from activations.domain.activation_attempt import ActivationAttempt
from core.domain.value_objects import FailureReason


class ActivationAttemptRepository(ABC):
    """Abstract repository for ActivationAttempt entities."""

    @abstractmethod
    async def add(self, attempt: ActivationAttempt) -> ActivationAttempt:
        """
        Append an attempt to the audit log.

        Args:
            attempt: ActivationAttempt entity

        Returns:
            Saved ActivationAttempt entity
        """
        pass

    @abstractmethod
    async def count_failures_from_ip(
        self, ip_address: str, failure_reason: FailureReason, since: datetime
    ) -> int:
        """
        Count failed attempts from an IP with a given reason.

        Args:
            ip_address: Client IP address
            failure_reason: Reason to count
            since: Window start (inclusive)

        Returns:
            Number of matching attempts
        """
        pass

    @abstractmethod
    async def find_by_license_key(
        self, license_key_id: uuid.UUID, limit: int = 50, offset: int = 0
    ) -> List[ActivationAttempt]:
        """Return attempts for a key, newest first."""
        pass

    @abstractmethod
    async def count_by_license_key(self, license_key_id: uuid.UUID) -> int:
        """Count attempts recorded for a key."""
        pass
