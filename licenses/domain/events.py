"""
License domain events.

Domain events represent something that happened in the license domain.
"""

import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class LicenseKeyIssued(DomainEvent):
    """Event raised when a license key is issued."""

    def __init__(
        self,
        license_key_id: uuid.UUID,
        status: str,
        max_activations: int,
        expires_at: Optional[datetime] = None,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseKeyIssued event.

        Args:
            license_key_id: License key UUID
            status: Initial status
            max_activations: Activation limit
            expires_at: Expiration datetime, if any
            occurred_at: When the event occurred
        """
        super().__init__(aggregate_id=str(license_key_id), occurred_at=occurred_at)
        self.license_key_id = license_key_id
        self.status = status
        self.max_activations = max_activations
        self.expires_at = expires_at


class LicenseKeyActivated(DomainEvent):
    """Event raised when a pending key is activated by an admin."""

    def __init__(self, license_key_id: uuid.UUID, occurred_at: Optional[datetime] = None):
        super().__init__(aggregate_id=str(license_key_id), occurred_at=occurred_at)
        self.license_key_id = license_key_id


class LicenseKeyRevoked(DomainEvent):
    """Event raised when a key is revoked."""

    def __init__(
        self,
        license_key_id: uuid.UUID,
        previous_status: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(license_key_id), occurred_at=occurred_at)
        self.license_key_id = license_key_id
        self.previous_status = previous_status


class LicenseKeyReissued(DomainEvent):
    """Event raised when a key is replaced by a newly issued one."""

    def __init__(
        self,
        license_key_id: uuid.UUID,
        replaced_license_key_id: uuid.UUID,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(license_key_id), occurred_at=occurred_at)
        self.license_key_id = license_key_id
        self.replaced_license_key_id = replaced_license_key_id


class LicenseKeyExpired(DomainEvent):
    """
    Event raised when an active key transitions to expired.

    ``source`` is ``"sweep"`` for the scheduled sweep and ``"lazy"`` when
    a validation observed the passed expiry first.
    """

    def __init__(
        self,
        license_key_id: uuid.UUID,
        expires_at: Optional[datetime],
        source: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(license_key_id), occurred_at=occurred_at)
        self.license_key_id = license_key_id
        self.expires_at = expires_at
        self.source = source


class LicenseKeyExpiringSoon(DomainEvent):
    """Expiry warning for an active key close to its expiration."""

    def __init__(
        self,
        license_key_id: uuid.UUID,
        key: str,
        expires_at: datetime,
        assigned_to: Optional[str] = None,
        assigned_email: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(license_key_id), occurred_at=occurred_at)
        self.license_key_id = license_key_id
        self.key = key
        self.expires_at = expires_at
        self.assigned_to = assigned_to
        self.assigned_email = assigned_email


class LicenseKeyPurged(DomainEvent):
    """Event raised when an old expired key is physically deleted."""

    def __init__(self, license_key_id: uuid.UUID, occurred_at: Optional[datetime] = None):
        super().__init__(aggregate_id=str(license_key_id), occurred_at=occurred_at)
        self.license_key_id = license_key_id
