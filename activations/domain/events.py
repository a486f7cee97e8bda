"""
Activation domain events.

Domain events represent something that happened in the activation domain.
"""
import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class LicenseActivated(DomainEvent):
    """Event raised when a validation is admitted."""

    def __init__(
        self,
        license_key_id: uuid.UUID,
        hardware_id: Optional[str],
        ip_address: str,
        new_activation: bool,
        current_activations: int,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseActivated event.

        Args:
            license_key_id: License key UUID
            hardware_id: Client hardware fingerprint
            ip_address: Client IP address
            new_activation: True if a slot was consumed
            current_activations: Counter value after the admission
            occurred_at: When the event occurred
        """
        super().__init__(aggregate_id=str(license_key_id), occurred_at=occurred_at)
        self.license_key_id = license_key_id
        self.hardware_id = hardware_id
        self.ip_address = ip_address
        self.new_activation = new_activation
        self.current_activations = current_activations
