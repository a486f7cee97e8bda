"""
Django implementation of LicenseKeyRepository port.

This adapter converts between domain entities and Django ORM models.
State transitions are single conditional UPDATE statements so the
database row is the only arbiter between concurrent requests.
"""
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q

from core.domain.exceptions import DuplicateLicenseKeyError
from core.domain.value_objects import Email, LicenseStatus
from core.infrastructure.database import store_operation
from licenses.domain.license_key import LicenseKey
from licenses.infrastructure.models import (
    LicenseKey as LicenseKeyModel,
)
from licenses.ports.license_key_repository import LicenseKeyRepository


def _not_expired(now: datetime) -> Q:
    return Q(expires_at__isnull=True) | Q(expires_at__gte=now)


class DjangoLicenseKeyRepository(LicenseKeyRepository):
    """
    Django ORM implementation of LicenseKeyRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements state transitions as compare-and-swap updates
    """

    def _to_domain(self, model: LicenseKeyModel) -> LicenseKey:
        """
        Convert Django model to domain entity.

        Args:
            model: Django LicenseKey model

        Returns:
            LicenseKey domain entity
        """
        return LicenseKey(
            id=model.id,
            key=model.key,
            status=LicenseStatus(model.status),
            max_activations=model.max_activations,
            current_activations=model.current_activations,
            bound_hardware_id=model.bound_hardware_id,
            bound_ip=model.bound_ip,
            last_activated_at=model.last_activated_at,
            expires_at=model.expires_at,
            assigned_to=model.assigned_to,
            assigned_email=Email(model.assigned_email) if model.assigned_email else None,
            notes=model.notes,
            created_by=model.created_by,
            reissued_from_id=model.reissued_from_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, license_key: LicenseKey) -> LicenseKeyModel:
        """
        Convert domain entity to an unsaved Django model.

        Args:
            license_key: LicenseKey domain entity

        Returns:
            Django LicenseKey model
        """
        return LicenseKeyModel(
            id=license_key.id,
            key=license_key.key,
            status=license_key.status.value,
            max_activations=license_key.max_activations,
            current_activations=license_key.current_activations,
            bound_hardware_id=license_key.bound_hardware_id,
            bound_ip=license_key.bound_ip,
            last_activated_at=license_key.last_activated_at,
            expires_at=license_key.expires_at,
            assigned_to=license_key.assigned_to,
            assigned_email=str(license_key.assigned_email) if license_key.assigned_email else None,
            notes=license_key.notes,
            created_by=license_key.created_by,
            reissued_from_id=license_key.reissued_from_id,
            created_at=license_key.created_at,
            updated_at=license_key.updated_at,
        )

    @sync_to_async
    @store_operation
    def add(self, license_key: LicenseKey) -> LicenseKey:
        """
        Insert a new license key.

        Args:
            license_key: LicenseKey entity to insert

        Returns:
            Saved license key entity
        """
        model = self._to_model(license_key)
        try:
            with transaction.atomic():
                model.save(force_insert=True)
        except IntegrityError as e:
            if LicenseKeyModel.objects.filter(key=license_key.key).exists():
                raise DuplicateLicenseKeyError(
                    f"License key {license_key.key} already exists"
                ) from e
            raise
        return self._to_domain(model)

    @sync_to_async
    @store_operation
    def find_by_id(self, license_key_id: uuid.UUID) -> Optional[LicenseKey]:
        """
        Find a license key by ID.

        Args:
            license_key_id: License key UUID

        Returns:
            LicenseKey entity or None if not found
        """
        try:
            model = LicenseKeyModel.objects.get(id=license_key_id)
            return self._to_domain(model)
        except LicenseKeyModel.DoesNotExist:
            return None

    @sync_to_async
    @store_operation
    def find_by_key(self, key: str) -> Optional[LicenseKey]:
        """
        Find a license key by key string.

        Args:
            key: License key string

        Returns:
            LicenseKey entity or None if not found
        """
        try:
            model = LicenseKeyModel.objects.get(key=key)
            return self._to_domain(model)
        except LicenseKeyModel.DoesNotExist:
            return None

    @sync_to_async
    @store_operation
    def find_all(
        self,
        status: Optional[LicenseStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[LicenseKey]:
        """List license keys, newest first."""
        queryset = LicenseKeyModel.objects.all()
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return [self._to_domain(model) for model in queryset[offset : offset + limit]]

    @sync_to_async
    @store_operation
    def count(self, status: Optional[LicenseStatus] = None) -> int:
        """Count license keys, optionally filtered by status."""
        queryset = LicenseKeyModel.objects.all()
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return queryset.count()

    @sync_to_async
    @store_operation
    def count_by_status(self) -> Dict[str, int]:
        """Count license keys grouped by status."""
        counts = {status.value: 0 for status in LicenseStatus}
        rows = LicenseKeyModel.objects.order_by().values("status").annotate(total=Count("id"))
        for row in rows:
            counts[row["status"]] = row["total"]
        return counts

    @sync_to_async
    @store_operation
    def update_details(self, license_key: LicenseKey) -> Optional[LicenseKey]:
        """
        Persist the administrative fields of an edited key.

        Args:
            license_key: Edited LicenseKey entity

        Returns:
            Refreshed entity, or None if the guard rejected the write
        """
        updated = LicenseKeyModel.objects.filter(
            id=license_key.id,
            current_activations__lte=license_key.max_activations,
        ).update(
            assigned_to=license_key.assigned_to,
            assigned_email=str(license_key.assigned_email) if license_key.assigned_email else None,
            notes=license_key.notes,
            max_activations=license_key.max_activations,
            expires_at=license_key.expires_at,
            updated_at=license_key.updated_at,
        )
        if not updated:
            return None
        return self._to_domain(LicenseKeyModel.objects.get(id=license_key.id))

    @sync_to_async
    @store_operation
    def transition_status(
        self,
        license_key_id: uuid.UUID,
        from_statuses: Iterable[LicenseStatus],
        to_status: LicenseStatus,
        now: datetime,
    ) -> bool:
        """Move a key to ``to_status`` if its status is in ``from_statuses``."""
        updated = LicenseKeyModel.objects.filter(
            id=license_key_id,
            status__in=[status.value for status in from_statuses],
        ).update(status=to_status.value, updated_at=now)
        return updated == 1

    @sync_to_async
    @store_operation
    def expire_if_due(self, license_key_id: uuid.UUID, now: datetime) -> bool:
        """Transition an active key whose expiry has passed to expired."""
        updated = LicenseKeyModel.objects.filter(
            id=license_key_id,
            status=LicenseStatus.ACTIVE.value,
            expires_at__lt=now,
        ).update(status=LicenseStatus.EXPIRED.value, updated_at=now)
        return updated == 1

    @sync_to_async
    @store_operation
    def touch_binding(
        self,
        license_key_id: uuid.UUID,
        hardware_id: str,
        ip_address: str,
        now: datetime,
    ) -> bool:
        """Refresh ip and timestamp for the already-bound machine."""
        updated = LicenseKeyModel.objects.filter(
            _not_expired(now),
            id=license_key_id,
            status=LicenseStatus.ACTIVE.value,
            bound_hardware_id=hardware_id,
        ).update(bound_ip=ip_address, last_activated_at=now, updated_at=now)
        return updated == 1

    @sync_to_async
    @store_operation
    def claim_activation(
        self,
        license_key_id: uuid.UUID,
        hardware_id: Optional[str],
        ip_address: str,
        now: datetime,
    ) -> bool:
        """Atomically take one activation slot."""
        queryset = LicenseKeyModel.objects.filter(
            _not_expired(now),
            id=license_key_id,
            status=LicenseStatus.ACTIVE.value,
            current_activations__lt=F("max_activations"),
        )
        changes = {
            "current_activations": F("current_activations") + 1,
            "bound_ip": ip_address,
            "last_activated_at": now,
            "updated_at": now,
        }
        if hardware_id is not None:
            queryset = queryset.exclude(bound_hardware_id=hardware_id)
            changes["bound_hardware_id"] = hardware_id
        return queryset.update(**changes) == 1

    @sync_to_async
    @store_operation
    def find_expiry_due_ids(self, now: datetime) -> List[uuid.UUID]:
        """Return ids of active keys with ``expires_at < now``."""
        return list(
            LicenseKeyModel.objects.filter(
                status=LicenseStatus.ACTIVE.value,
                expires_at__lt=now,
            ).values_list("id", flat=True)
        )

    @sync_to_async
    @store_operation
    def find_purgeable_ids(self, cutoff: datetime) -> List[uuid.UUID]:
        """Return ids of expired keys with ``expires_at < cutoff``."""
        return list(
            LicenseKeyModel.objects.filter(
                status=LicenseStatus.EXPIRED.value,
                expires_at__lt=cutoff,
            ).values_list("id", flat=True)
        )

    @sync_to_async
    @store_operation
    def purge(self, license_key_id: uuid.UUID, cutoff: datetime) -> bool:
        """Delete an expired key older than ``cutoff`` with its dependent rows."""
        with transaction.atomic():
            _, deleted = LicenseKeyModel.objects.filter(
                id=license_key_id,
                status=LicenseStatus.EXPIRED.value,
                expires_at__lt=cutoff,
            ).delete()
        return deleted.get(LicenseKeyModel._meta.label, 0) == 1

    @sync_to_async
    @store_operation
    def find_expiring_within(self, now: datetime, until: datetime) -> List[LicenseKey]:
        """Return active keys expiring between ``now`` and ``until``."""
        models = LicenseKeyModel.objects.filter(
            status=LicenseStatus.ACTIVE.value,
            expires_at__gte=now,
            expires_at__lte=until,
        ).order_by("expires_at")
        return [self._to_domain(model) for model in models]
