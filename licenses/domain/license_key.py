"""
LicenseKey domain entity.

This is the core domain entity representing a license key.
It contains business logic and is independent of infrastructure.
"""

import secrets
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from core.domain.exceptions import InvalidLicenseStatusError, InvalidLicenseUpdateError
from core.domain.value_objects import Email, LicenseStatus

# No 0/O, 1/I/L: keys are read aloud and typed by hand.
KEY_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
KEY_SEGMENTS = 4
KEY_SEGMENT_LENGTH = 5


def generate_license_key() -> str:
    """
    Generate a license key in format: XXXXX-XXXXX-XXXXX-XXXXX.

    Uniqueness is not checked here; the store's unique index rejects
    collisions.

    Returns:
        Generated license key string
    """
    parts = [
        "".join(secrets.choice(KEY_ALPHABET) for _ in range(KEY_SEGMENT_LENGTH))
        for _ in range(KEY_SEGMENTS)
    ]
    return "-".join(parts)


@dataclass(frozen=True)
class LicenseKey:
    """
    LicenseKey domain entity.

    Represents one assignable activation credential. Instances are
    immutable; state changes return new instances and are persisted
    through the repository's conditional updates.
    """

    id: uuid.UUID
    key: str
    status: LicenseStatus
    max_activations: int
    current_activations: int
    created_at: datetime
    updated_at: datetime
    bound_hardware_id: Optional[str] = None
    bound_ip: Optional[str] = None
    last_activated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    assigned_to: Optional[str] = None
    assigned_email: Optional[Email] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    reissued_from_id: Optional[uuid.UUID] = None

    def __post_init__(self):
        """Validate license key entity."""
        if not self.key or len(self.key.strip()) == 0:
            raise ValueError("License key cannot be empty")
        if len(self.key) > 64:
            raise ValueError("License key too long")
        if self.max_activations < 1:
            raise ValueError("Max activations must be at least 1")
        if not 0 <= self.current_activations <= self.max_activations:
            raise ValueError("Current activations must be between 0 and max activations")

    @classmethod
    def create(
        cls,
        key: str,
        assigned_to: Optional[str] = None,
        assigned_email: Optional[str] = None,
        max_activations: int = 1,
        expires_at: Optional[datetime] = None,
        initial_status: LicenseStatus = LicenseStatus.PENDING,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
        reissued_from_id: Optional[uuid.UUID] = None,
        license_key_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> "LicenseKey":
        """
        Create a new LicenseKey entity.

        Args:
            key: Generated key string
            assigned_to: Optional holder name
            assigned_email: Optional holder email
            max_activations: Number of permitted activations
            expires_at: Optional expiration datetime
            initial_status: PENDING or ACTIVE
            notes: Optional admin notes
            created_by: Optional admin identity
            reissued_from_id: Key this one replaces, if any
            license_key_id: Optional UUID (generated if not provided)
            now: Creation time (defaults to current UTC time)

        Returns:
            LicenseKey entity instance
        """
        if initial_status not in (LicenseStatus.PENDING, LicenseStatus.ACTIVE):
            raise InvalidLicenseStatusError(
                f"License keys cannot be issued as {initial_status.value}"
            )
        now = now or datetime.now(timezone.utc)
        return cls(
            id=license_key_id or uuid.uuid4(),
            key=key,
            status=initial_status,
            max_activations=max_activations,
            current_activations=0,
            expires_at=expires_at,
            assigned_to=assigned_to,
            assigned_email=Email(assigned_email) if assigned_email else None,
            notes=notes,
            created_by=created_by,
            reissued_from_id=reissued_from_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_at_capacity(self) -> bool:
        return self.current_activations >= self.max_activations

    def is_expiry_due(self, now: datetime) -> bool:
        """
        Check whether an active key has passed its expiry.

        Args:
            now: Current time

        Returns:
            True if the key is active and ``expires_at`` is before ``now``
        """
        return (
            self.status == LicenseStatus.ACTIVE
            and self.expires_at is not None
            and self.expires_at < now
        )

    def is_bound_to(self, hardware_id: Optional[str]) -> bool:
        """A missing hardware id never matches the bound one."""
        return hardware_id is not None and hardware_id == self.bound_hardware_id

    def activate(self, now: datetime) -> "LicenseKey":
        """
        Move a pending key to active.

        Args:
            now: Transition time

        Returns:
            New LicenseKey instance with active status
        """
        if self.status != LicenseStatus.PENDING:
            raise InvalidLicenseStatusError(
                f"Only pending keys can be activated (status: {self.status.value})"
            )
        return replace(self, status=LicenseStatus.ACTIVE, updated_at=now)

    def update_details(
        self,
        assigned_to: Optional[str] = None,
        assigned_email: Optional[str] = None,
        notes: Optional[str] = None,
        max_activations: Optional[int] = None,
        expires_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> "LicenseKey":
        """
        Apply an administrative edit. Status is never touched by an edit.

        Args:
            assigned_to: New holder name
            assigned_email: New holder email
            notes: New admin notes
            max_activations: New activation limit
            expires_at: New expiration datetime
            now: Edit time, defaults to the current UTC time

        Returns:
            New LicenseKey instance with the edited fields
        """
        changes = {}
        if assigned_to is not None:
            changes["assigned_to"] = assigned_to
        if assigned_email is not None:
            changes["assigned_email"] = Email(assigned_email)
        if notes is not None:
            changes["notes"] = notes
        if expires_at is not None:
            changes["expires_at"] = expires_at
        if max_activations is not None:
            if max_activations < 1:
                raise InvalidLicenseUpdateError("Max activations must be at least 1")
            if max_activations < self.current_activations:
                raise InvalidLicenseUpdateError(
                    f"Max activations cannot be lower than current activations "
                    f"({self.current_activations})"
                )
            changes["max_activations"] = max_activations
        if not changes:
            return self
        return replace(self, updated_at=now or datetime.now(timezone.utc), **changes)
