"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    value: str

    def __post_init__(self):
        """Validate email format."""
        if not self.value or "@" not in self.value:
            raise ValueError(f"Invalid email address: {self.value}")

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


@dataclass(frozen=True)
class HardwareId(ValueObject):
    """Client-supplied machine fingerprint. Opaque to the service."""

    value: str

    def __post_init__(self):
        """Validate hardware id."""
        if not self.value or len(self.value.strip()) == 0:
            raise ValueError("Hardware ID cannot be empty")
        if len(self.value) > 128:
            raise ValueError("Hardware ID too long")

    def __str__(self) -> str:
        return self.value


class LicenseStatus(Enum):
    """License key lifecycle status."""

    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class FailureReason(Enum):
    """Classified reason an activation attempt was rejected."""

    NOT_FOUND = "NOT_FOUND"
    REVOKED = "REVOKED"
    EXPIRED = "EXPIRED"
    NOT_ACTIVATED = "NOT_ACTIVATED"
    MAX_ACTIVATIONS = "MAX_ACTIVATIONS"

    def __str__(self) -> str:
        return self.value


class SecurityEventType(Enum):
    """Classified abuse signal type."""

    BRUTE_FORCE = "brute_force"
    INVALID_KEY = "invalid_key"
    EXPIRED_KEY_ATTEMPT = "expired_key_attempt"
    REVOKED_KEY_ATTEMPT = "revoked_key_attempt"
    HWID_MISMATCH = "hwid_mismatch"
    MULTI_ACTIVATION_OVERFLOW = "multi_activation_overflow"

    def __str__(self) -> str:
        return self.value


class Severity(Enum):
    """Security event severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value


class AppStatus(Enum):
    """Status reported by a running client."""

    RUNNING = "running"
    IDLE = "idle"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value
