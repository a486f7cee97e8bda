"""
Django implementation of ActivationAttemptRepository port.
"""
import uuid
from datetime import datetime
from typing import List

from asgiref.sync import sync_to_async

from activations.domain.activation_attempt import ActivationAttempt
from activations.infrastructure.models import ActivationAttempt as ActivationAttemptModel
from activations.ports.activation_attempt_repository import ActivationAttemptRepository
from core.domain.value_objects import FailureReason
from core.infrastructure.database import store_operation


class DjangoActivationAttemptRepository(ActivationAttemptRepository):
    """Django ORM implementation of ActivationAttemptRepository."""

    def _to_domain(self, model: ActivationAttemptModel) -> ActivationAttempt:
        """
        Convert Django model to domain entity.

        Args:
            model: Django ActivationAttempt model

        Returns:
            ActivationAttempt domain entity
        """
        return ActivationAttempt(
            id=model.id,
            license_key_id=model.license_key_id,
            ip_address=model.ip_address,
            hardware_id=model.hardware_id,
            machine_name=model.machine_name,
            os_version=model.os_version,
            app_version=model.app_version,
            success=model.success,
            failure_reason=FailureReason(model.failure_reason) if model.failure_reason else None,
            failure_detail=model.failure_detail,
            created_at=model.created_at,
        )

    @sync_to_async
    @store_operation
    def add(self, attempt: ActivationAttempt) -> ActivationAttempt:
        """
        Append an attempt to the audit log.

        Args:
            attempt: ActivationAttempt entity

        Returns:
            Saved ActivationAttempt entity
        """
        model = ActivationAttemptModel.objects.create(
            id=attempt.id,
            license_key_id=attempt.license_key_id,
            ip_address=attempt.ip_address,
            hardware_id=attempt.hardware_id,
            machine_name=attempt.machine_name,
            os_version=attempt.os_version,
            app_version=attempt.app_version,
            success=attempt.success,
            failure_reason=attempt.failure_reason.value if attempt.failure_reason else None,
            failure_detail=attempt.failure_detail,
            created_at=attempt.created_at,
        )
        return self._to_domain(model)

    @sync_to_async
    @store_operation
    def count_failures_from_ip(
        self, ip_address: str, failure_reason: FailureReason, since: datetime
    ) -> int:
        """Count failed attempts from an IP with a given reason."""
        return ActivationAttemptModel.objects.filter(
            ip_address=ip_address,
            success=False,
            failure_reason=failure_reason.value,
            created_at__gte=since,
        ).count()

    @sync_to_async
    @store_operation
    def find_by_license_key(
        self, license_key_id: uuid.UUID, limit: int = 50, offset: int = 0
    ) -> List[ActivationAttempt]:
        """Return attempts for a key, newest first."""
        models = ActivationAttemptModel.objects.filter(license_key_id=license_key_id)
        return [self._to_domain(model) for model in models[offset : offset + limit]]

    @sync_to_async
    @store_operation
    def count_by_license_key(self, license_key_id: uuid.UUID) -> int:
        """Count attempts recorded for a key."""
        return ActivationAttemptModel.objects.filter(license_key_id=license_key_id).count()
