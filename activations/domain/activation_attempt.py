"""
ActivationAttempt domain entity.

An immutable audit record of a single validation call.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.domain.value_objects import FailureReason


@dataclass(frozen=True)
class ActivationAttempt:
    """
    ActivationAttempt domain entity.

    ``license_key_id`` is None when the submitted key string did not
    resolve to any record.
    """

    id: uuid.UUID
    license_key_id: Optional[uuid.UUID]
    ip_address: str
    success: bool
    created_at: datetime
    hardware_id: Optional[str] = None
    machine_name: Optional[str] = None
    os_version: Optional[str] = None
    app_version: Optional[str] = None
    failure_reason: Optional[FailureReason] = None
    failure_detail: Optional[str] = None

    def __post_init__(self):
        """Validate activation attempt entity."""
        if self.success and self.failure_reason is not None:
            raise ValueError("Successful attempts cannot carry a failure reason")
        if not self.success and self.failure_reason is None:
            raise ValueError("Failed attempts require a failure reason")
        if not self.ip_address:
            raise ValueError("IP address is required")

    @classmethod
    def succeeded(
        cls,
        license_key_id: uuid.UUID,
        ip_address: str,
        now: datetime,
        hardware_id: Optional[str] = None,
        machine_name: Optional[str] = None,
        os_version: Optional[str] = None,
        app_version: Optional[str] = None,
    ) -> "ActivationAttempt":
        """
        Create a successful attempt record.

        Args:
            license_key_id: Admitted license key UUID
            ip_address: Client IP address
            now: Attempt time
            hardware_id: Client hardware fingerprint
            machine_name: Client machine name
            os_version: Client OS version
            app_version: Client application version

        Returns:
            ActivationAttempt entity instance
        """
        return cls(
            id=uuid.uuid4(),
            license_key_id=license_key_id,
            ip_address=ip_address,
            success=True,
            created_at=now,
            hardware_id=hardware_id,
            machine_name=machine_name,
            os_version=os_version,
            app_version=app_version,
        )

    @classmethod
    def failed(
        cls,
        license_key_id: Optional[uuid.UUID],
        ip_address: str,
        now: datetime,
        failure_reason: FailureReason,
        failure_detail: Optional[str] = None,
        hardware_id: Optional[str] = None,
        machine_name: Optional[str] = None,
        os_version: Optional[str] = None,
        app_version: Optional[str] = None,
    ) -> "ActivationAttempt":
        """
        Create a failed attempt record.

        Args:
            license_key_id: Resolved license key UUID, or None
            ip_address: Client IP address
            now: Attempt time
            failure_reason: Classified rejection reason
            failure_detail: Human-readable context
            hardware_id: Client hardware fingerprint
            machine_name: Client machine name
            os_version: Client OS version
            app_version: Client application version

        Returns:
            ActivationAttempt entity instance
        """
        return cls(
            id=uuid.uuid4(),
            license_key_id=license_key_id,
            ip_address=ip_address,
            success=False,
            created_at=now,
            hardware_id=hardware_id,
            machine_name=machine_name,
            os_version=os_version,
            app_version=app_version,
            failure_reason=failure_reason,
            failure_detail=failure_detail,
        )
