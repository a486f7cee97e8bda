"""
Activation DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from activations.domain.activation_attempt import ActivationAttempt
from activations.domain.services import AdmissionResult


@dataclass
class ValidationResultDTO:
    """DTO for an admitted validation."""

    valid: bool
    license_key_id: uuid.UUID
    expires_at: Optional[datetime]
    assigned_to: Optional[str]
    new_activation: bool
    current_activations: int
    max_activations: int
    message: str

    @classmethod
    def from_result(cls, result: AdmissionResult) -> "ValidationResultDTO":
        return cls(
            valid=result.valid,
            license_key_id=result.license_key_id,
            expires_at=result.expires_at,
            assigned_to=result.assigned_to,
            new_activation=result.new_activation,
            current_activations=result.current_activations,
            max_activations=result.max_activations,
            message="License activated" if result.new_activation else "License valid",
        )


@dataclass
class ActivationAttemptDTO:
    """DTO for activation attempt information."""

    id: uuid.UUID
    license_key_id: Optional[uuid.UUID]
    ip_address: str
    success: bool
    hardware_id: Optional[str]
    machine_name: Optional[str]
    os_version: Optional[str]
    app_version: Optional[str]
    failure_reason: Optional[str]
    failure_detail: Optional[str]
    created_at: datetime

    @classmethod
    def from_entity(cls, attempt: ActivationAttempt) -> "ActivationAttemptDTO":
        return cls(
            id=attempt.id,
            license_key_id=attempt.license_key_id,
            ip_address=attempt.ip_address,
            success=attempt.success,
            hardware_id=attempt.hardware_id,
            machine_name=attempt.machine_name,
            os_version=attempt.os_version,
            app_version=attempt.app_version,
            failure_reason=attempt.failure_reason.value if attempt.failure_reason else None,
            failure_detail=attempt.failure_detail,
            created_at=attempt.created_at,
        )


@dataclass
class ActivationAttemptListDTO:
    """DTO for a page of activation attempts."""

    count: int
    results: List[ActivationAttemptDTO]
