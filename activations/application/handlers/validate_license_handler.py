"""
ValidateLicenseHandler.

Handler for client license validation. Wires the activation admission
service to its collaborators and records the outcome metric.
"""

import logging
from typing import Optional

from django.conf import settings

from activations.application.commands.validate_license import ValidateLicenseCommand
from activations.application.dto.activation_dto import ValidationResultDTO
from activations.domain.services import UNKNOWN_IP, ActivationAdmission, AdmissionRequest
from activations.ports.activation_attempt_repository import ActivationAttemptRepository
from core.domain.clock import Clock, SystemClock
from core.domain.events import EventBus
from core.domain.exceptions import DomainException
from core.infrastructure.events import event_bus as default_event_bus
from core.metrics import license_validations_total
from licenses.ports.license_key_repository import LicenseKeyRepository
from security.domain.services import (
    DEFAULT_RATE_LIMIT_THRESHOLD,
    DEFAULT_RATE_LIMIT_WINDOW_SECONDS,
    AbuseDetector,
)
from security.ports.security_event_repository import SecurityEventRepository

logger = logging.getLogger(__name__)


class ValidateLicenseHandler:
    """Handler for ValidateLicenseCommand."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        attempt_repository: ActivationAttemptRepository,
        security_event_repository: SecurityEventRepository,
        clock: Optional[Clock] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize handler with repositories."""
        clock = clock or SystemClock()
        event_bus = event_bus or default_event_bus
        abuse_detector = AbuseDetector(
            attempt_repository=attempt_repository,
            security_event_repository=security_event_repository,
            event_bus=event_bus,
            clock=clock,
            threshold=getattr(settings, "LICENSE_RATE_LIMIT_THRESHOLD", DEFAULT_RATE_LIMIT_THRESHOLD),
            window_seconds=getattr(
                settings, "LICENSE_RATE_LIMIT_WINDOW_SECONDS", DEFAULT_RATE_LIMIT_WINDOW_SECONDS
            ),
        )
        self.admission = ActivationAdmission(
            license_key_repository=license_key_repository,
            attempt_repository=attempt_repository,
            abuse_detector=abuse_detector,
            event_bus=event_bus,
            clock=clock,
        )

    async def handle(self, command: ValidateLicenseCommand) -> ValidationResultDTO:
        """
        Handle validate license command.

        Args:
            command: ValidateLicenseCommand

        Returns:
            ValidationResultDTO for an admitted request

        Raises:
            RateLimitedError: If the client IP is rate limited
            LicenseNotFoundError: If the key does not exist
            LicenseRevokedError: If the key is revoked
            LicenseExpiredError: If the key is expired
            LicenseNotActivatedError: If the key is still pending
            MaxActivationsReachedError: If no activation slot is left
            StoreUnavailableError: If the license store cannot be reached
        """
        request = AdmissionRequest(
            license_key=command.license_key,
            ip_address=command.ip_address or UNKNOWN_IP,
            hardware_id=command.hardware_id,
            machine_name=command.machine_name,
            os_version=command.os_version,
            app_version=command.app_version,
        )
        try:
            result = await self.admission.admit(request)
        except DomainException as e:
            license_validations_total.labels(result=e.code.lower()).inc()
            raise

        license_validations_total.labels(
            result="activated" if result.new_activation else "valid"
        ).inc()
        return ValidationResultDTO.from_result(result)
