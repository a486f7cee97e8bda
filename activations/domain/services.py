"""
Activation domain services.

ActivationAdmission decides whether a validation request for a
(key, hardware id, ip) triple is admitted. Steps run in a fixed order
(rate check, resolution, status gate, binding check, capacity check,
commit) because the order determines which security event fires first.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import NoReturn, Optional

from activations.domain.activation_attempt import ActivationAttempt
from activations.domain.events import LicenseActivated
from activations.ports.activation_attempt_repository import ActivationAttemptRepository
from core.domain.clock import Clock
from core.domain.events import EventBus
from core.domain.exceptions import (
    LicenseExpiredError,
    LicenseNotActivatedError,
    LicenseNotFoundError,
    LicenseRevokedError,
    MaxActivationsReachedError,
    RateLimitedError,
)
from core.domain.value_objects import FailureReason, LicenseStatus, SecurityEventType
from licenses.domain.events import LicenseKeyExpired
from licenses.domain.license_key import LicenseKey
from licenses.ports.license_key_repository import LicenseKeyRepository
from security.domain.services import AbuseDetector, SignalContext

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"


@dataclass(frozen=True)
class AdmissionRequest:
    """A single validation call as seen by the admission algorithm."""

    license_key: str
    ip_address: str = UNKNOWN_IP
    hardware_id: Optional[str] = None
    machine_name: Optional[str] = None
    os_version: Optional[str] = None
    app_version: Optional[str] = None


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of an admitted validation."""

    license_key_id: uuid.UUID
    expires_at: Optional[datetime]
    assigned_to: Optional[str]
    new_activation: bool
    current_activations: int
    max_activations: int
    valid: bool = True


class ActivationAdmission:
    """
    Domain service implementing activation admission.

    Counter updates never read-then-write: the commit is a conditional
    update on the key row. When it loses a race the row is reloaded and
    the gate re-evaluated against the fresh state.
    """

    MAX_COMMIT_ATTEMPTS = 3

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        attempt_repository: ActivationAttemptRepository,
        abuse_detector: AbuseDetector,
        event_bus: EventBus,
        clock: Clock,
    ):
        """Initialize admission with repositories, detector, event bus and clock."""
        self.license_key_repository = license_key_repository
        self.attempt_repository = attempt_repository
        self.abuse_detector = abuse_detector
        self.event_bus = event_bus
        self.clock = clock

    async def admit(self, request: AdmissionRequest) -> AdmissionResult:
        """
        Admit or reject a validation request.

        Args:
            request: AdmissionRequest

        Returns:
            AdmissionResult for an admitted request

        Raises:
            RateLimitedError: IP is rate limited (nothing is recorded)
            LicenseNotFoundError: Key does not resolve
            LicenseRevokedError: Key is revoked
            LicenseExpiredError: Key is expired or past its expiry
            LicenseNotActivatedError: Key is still pending
            MaxActivationsReachedError: No activation slot left
            StoreUnavailableError: License store cannot be reached (nothing is recorded)
        """
        if await self.abuse_detector.is_rate_limited(request.ip_address):
            logger.warning(
                "Rate limited validation from %s",
                request.ip_address,
                extra={"ip_address": request.ip_address},
            )
            raise RateLimitedError()

        now = self.clock.now()
        license_key = await self.license_key_repository.find_by_key(request.license_key)
        if license_key is None:
            await self._reject_unknown_key(request, now)

        mismatch_signalled = False
        for _ in range(self.MAX_COMMIT_ATTEMPTS):
            await self._check_status(license_key, request, now)

            if not mismatch_signalled and self._is_hardware_mismatch(
                license_key, request.hardware_id
            ):
                await self.abuse_detector.signal(
                    SecurityEventType.HWID_MISMATCH,
                    self._context(
                        license_key,
                        request,
                        f"Bound to {license_key.bound_hardware_id}, "
                        f"validated from {request.hardware_id}",
                    ),
                )
                mismatch_signalled = True

            same_machine = license_key.is_bound_to(request.hardware_id)
            if license_key.is_at_capacity and not same_machine:
                await self._reject_over_capacity(license_key, request, now)

            if same_machine:
                committed = await self.license_key_repository.touch_binding(
                    license_key.id, request.hardware_id, request.ip_address, now
                )
            else:
                committed = await self.license_key_repository.claim_activation(
                    license_key.id, request.hardware_id, request.ip_address, now
                )
            if committed:
                return await self._admit(license_key, request, now, new_activation=not same_machine)

            logger.info(
                "Activation commit for %s lost a race, re-evaluating",
                license_key.id,
                extra={"license_key_id": str(license_key.id)},
            )
            license_key = await self.license_key_repository.find_by_id(license_key.id)
            if license_key is None:
                await self._reject_unknown_key(request, now)

        await self._reject_over_capacity(license_key, request, now)

    @staticmethod
    def _is_hardware_mismatch(license_key: LicenseKey, hardware_id: Optional[str]) -> bool:
        return (
            license_key.bound_hardware_id is not None
            and hardware_id is not None
            and hardware_id != license_key.bound_hardware_id
        )

    @staticmethod
    def _context(
        license_key: LicenseKey, request: AdmissionRequest, details: str
    ) -> SignalContext:
        return SignalContext(
            ip_address=request.ip_address,
            license_key_id=license_key.id,
            details=details,
        )

    async def _check_status(
        self, license_key: LicenseKey, request: AdmissionRequest, now: datetime
    ) -> None:
        """Reject revoked, expired and pending keys. Lazily expires due keys."""
        if license_key.status == LicenseStatus.REVOKED:
            await self._record_failure(
                license_key.id, request, now, FailureReason.REVOKED, "License key has been revoked"
            )
            await self.abuse_detector.signal(
                SecurityEventType.REVOKED_KEY_ATTEMPT,
                self._context(license_key, request, "Validation of a revoked license key"),
            )
            raise LicenseRevokedError()

        if license_key.status == LicenseStatus.EXPIRED or license_key.is_expiry_due(now):
            if license_key.is_expiry_due(now):
                await self._expire_lazily(license_key, now)
            await self._record_failure(
                license_key.id, request, now, FailureReason.EXPIRED, "License key has expired"
            )
            await self.abuse_detector.signal_once(
                SecurityEventType.EXPIRED_KEY_ATTEMPT,
                self._context(license_key, request, "Validation of an expired license key"),
            )
            raise LicenseExpiredError()

        if license_key.status == LicenseStatus.PENDING:
            await self._record_failure(
                license_key.id,
                request,
                now,
                FailureReason.NOT_ACTIVATED,
                "License key is pending activation",
            )
            raise LicenseNotActivatedError()

    async def _expire_lazily(self, license_key: LicenseKey, now: datetime) -> None:
        if await self.license_key_repository.expire_if_due(license_key.id, now):
            logger.info(
                "License key %s expired on validation",
                license_key.id,
                extra={"license_key_id": str(license_key.id)},
            )
            await self.event_bus.publish(
                LicenseKeyExpired(
                    license_key_id=license_key.id,
                    expires_at=license_key.expires_at,
                    source="lazy",
                    occurred_at=now,
                )
            )

    async def _reject_unknown_key(self, request: AdmissionRequest, now: datetime) -> NoReturn:
        await self._record_failure(
            None, request, now, FailureReason.NOT_FOUND, "License key not found"
        )
        await self.abuse_detector.note_invalid_key(
            SignalContext(
                ip_address=request.ip_address,
                attempted_key=request.license_key,
                details="Validation of an unknown license key",
            )
        )
        raise LicenseNotFoundError()

    async def _reject_over_capacity(
        self, license_key: LicenseKey, request: AdmissionRequest, now: datetime
    ) -> NoReturn:
        await self._record_failure(
            license_key.id,
            request,
            now,
            FailureReason.MAX_ACTIVATIONS,
            f"All {license_key.max_activations} activation(s) in use",
        )
        await self.abuse_detector.signal(
            SecurityEventType.MULTI_ACTIVATION_OVERFLOW,
            self._context(
                license_key,
                request,
                f"Activation limit {license_key.max_activations} reached",
            ),
        )
        raise MaxActivationsReachedError()

    async def _record_failure(
        self,
        license_key_id: Optional[uuid.UUID],
        request: AdmissionRequest,
        now: datetime,
        reason: FailureReason,
        detail: str,
    ) -> None:
        await self.attempt_repository.add(
            ActivationAttempt.failed(
                license_key_id=license_key_id,
                ip_address=request.ip_address,
                now=now,
                failure_reason=reason,
                failure_detail=detail,
                hardware_id=request.hardware_id,
                machine_name=request.machine_name,
                os_version=request.os_version,
                app_version=request.app_version,
            )
        )

    async def _admit(
        self,
        license_key: LicenseKey,
        request: AdmissionRequest,
        now: datetime,
        new_activation: bool,
    ) -> AdmissionResult:
        await self.attempt_repository.add(
            ActivationAttempt.succeeded(
                license_key_id=license_key.id,
                ip_address=request.ip_address,
                now=now,
                hardware_id=request.hardware_id,
                machine_name=request.machine_name,
                os_version=request.os_version,
                app_version=request.app_version,
            )
        )
        committed = await self.license_key_repository.find_by_id(license_key.id) or license_key
        logger.info(
            "License key %s admitted (new activation: %s, %d/%d)",
            license_key.id,
            new_activation,
            committed.current_activations,
            committed.max_activations,
            extra={"license_key_id": str(license_key.id), "ip_address": request.ip_address},
        )
        await self.event_bus.publish(
            LicenseActivated(
                license_key_id=license_key.id,
                hardware_id=request.hardware_id,
                ip_address=request.ip_address,
                new_activation=new_activation,
                current_activations=committed.current_activations,
                occurred_at=now,
            )
        )
        return AdmissionResult(
            license_key_id=license_key.id,
            expires_at=committed.expires_at,
            assigned_to=committed.assigned_to,
            new_activation=new_activation,
            current_activations=committed.current_activations,
            max_activations=committed.max_activations,
        )
