"""
Integration tests for repository implementations.
"""

import uuid
from datetime import timedelta

import pytest
from asgiref.sync import async_to_sync
from django.utils import timezone

from activations.domain.activation_attempt import ActivationAttempt
from activations.infrastructure.models import ActivationAttempt as ActivationAttemptModel
from core.domain.exceptions import DuplicateLicenseKeyError
from core.domain.value_objects import AppStatus, FailureReason, LicenseStatus, SecurityEventType
from licenses.domain.license_key import LicenseKey
from licenses.domain.status_report import StatusReport
from licenses.infrastructure.models import LicenseKey as LicenseKeyModel
from licenses.infrastructure.models import StatusReport as StatusReportModel
from security.domain.security_event import SecurityEvent
from security.infrastructure.models import SecurityEvent as SecurityEventModel


@pytest.mark.django_db
@pytest.mark.integration
class TestLicenseKeyRepository:
    """Integration tests for LicenseKeyRepository."""

    def test_add_and_find(self, license_key_repository, sample_license_key):
        """Test saving and finding a license key."""
        saved = async_to_sync(license_key_repository.add)(sample_license_key)

        by_id = async_to_sync(license_key_repository.find_by_id)(saved.id)
        by_key = async_to_sync(license_key_repository.find_by_key)(saved.key)

        assert by_id == by_key
        assert by_id.status == LicenseStatus.PENDING
        assert str(by_id.assigned_email) == "jane@example.com"

    def test_find_not_found(self, license_key_repository):
        assert async_to_sync(license_key_repository.find_by_id)(uuid.uuid4()) is None
        assert async_to_sync(license_key_repository.find_by_key)("NOPE-NOPE") is None

    def test_duplicate_key(self, license_key_repository, make_license_key):
        existing = make_license_key()

        with pytest.raises(DuplicateLicenseKeyError):
            async_to_sync(license_key_repository.add)(LicenseKey.create(key=existing.key))

    def test_transition_status_is_conditional(self, license_key_repository, make_license_key):
        license_key = make_license_key(status=LicenseStatus.PENDING)
        now = timezone.now()
        transition = async_to_sync(license_key_repository.transition_status)

        assert transition(license_key.id, [LicenseStatus.PENDING], LicenseStatus.ACTIVE, now)
        assert not transition(license_key.id, [LicenseStatus.PENDING], LicenseStatus.ACTIVE, now)

    def test_claim_activation_binds_and_counts(self, license_key_repository, make_license_key):
        license_key = make_license_key(max_activations=2)
        now = timezone.now()

        claimed = async_to_sync(license_key_repository.claim_activation)(
            license_key.id, "HW-A", "10.0.0.1", now
        )

        stored = async_to_sync(license_key_repository.find_by_id)(license_key.id)
        assert claimed is True
        assert stored.current_activations == 1
        assert stored.bound_hardware_id == "HW-A"
        assert stored.bound_ip == "10.0.0.1"
        assert stored.last_activated_at == now

    def test_claim_activation_at_capacity(self, license_key_repository, make_license_key):
        license_key = make_license_key(
            max_activations=1, current_activations=1, bound_hardware_id="HW-A"
        )

        claimed = async_to_sync(license_key_repository.claim_activation)(
            license_key.id, "HW-B", "10.0.0.2", timezone.now()
        )

        stored = async_to_sync(license_key_repository.find_by_id)(license_key.id)
        assert claimed is False
        assert stored.current_activations == 1
        assert stored.bound_hardware_id == "HW-A"

    def test_claim_activation_rejects_bound_machine(self, license_key_repository, make_license_key):
        """A stale snapshot cannot count the bound machine twice."""
        license_key = make_license_key(
            max_activations=3, current_activations=1, bound_hardware_id="HW-A"
        )

        claimed = async_to_sync(license_key_repository.claim_activation)(
            license_key.id, "HW-A", "10.0.0.1", timezone.now()
        )

        assert claimed is False

    def test_claim_activation_without_hardware_id(self, license_key_repository, make_license_key):
        license_key = make_license_key(
            max_activations=3, current_activations=1, bound_hardware_id="HW-A"
        )

        claimed = async_to_sync(license_key_repository.claim_activation)(
            license_key.id, None, "10.0.0.9", timezone.now()
        )

        stored = async_to_sync(license_key_repository.find_by_id)(license_key.id)
        assert claimed is True
        assert stored.current_activations == 2
        assert stored.bound_hardware_id == "HW-A"
        assert stored.bound_ip == "10.0.0.9"

    def test_claim_activation_on_expired_key(self, license_key_repository, make_license_key):
        license_key = make_license_key(expires_at=timezone.now() - timedelta(minutes=1))

        claimed = async_to_sync(license_key_repository.claim_activation)(
            license_key.id, "HW-A", "10.0.0.1", timezone.now()
        )

        assert claimed is False

    def test_touch_binding(self, license_key_repository, make_license_key):
        license_key = make_license_key(current_activations=1, bound_hardware_id="HW-A")
        touch = async_to_sync(license_key_repository.touch_binding)

        assert touch(license_key.id, "HW-A", "10.0.0.7", timezone.now()) is True
        assert touch(license_key.id, "HW-B", "10.0.0.7", timezone.now()) is False

        stored = async_to_sync(license_key_repository.find_by_id)(license_key.id)
        assert stored.current_activations == 1
        assert stored.bound_ip == "10.0.0.7"

    def test_expire_if_due_is_idempotent(self, license_key_repository, make_license_key):
        license_key = make_license_key(expires_at=timezone.now() - timedelta(hours=1))
        expire = async_to_sync(license_key_repository.expire_if_due)

        assert expire(license_key.id, timezone.now()) is True
        assert expire(license_key.id, timezone.now()) is False
        stored = async_to_sync(license_key_repository.find_by_id)(license_key.id)
        assert stored.status == LicenseStatus.EXPIRED

    def test_expire_if_due_ignores_future_and_revoked(
        self, license_key_repository, make_license_key
    ):
        future = make_license_key(expires_at=timezone.now() + timedelta(days=1))
        revoked = make_license_key(
            status=LicenseStatus.REVOKED, expires_at=timezone.now() - timedelta(days=1)
        )
        expire = async_to_sync(license_key_repository.expire_if_due)

        assert expire(future.id, timezone.now()) is False
        assert expire(revoked.id, timezone.now()) is False

    def test_update_details_guard(self, license_key_repository, make_license_key):
        from dataclasses import replace

        license_key = make_license_key(max_activations=3, current_activations=2)

        rejected = async_to_sync(license_key_repository.update_details)(
            replace(license_key, current_activations=0, max_activations=1)
        )

        assert rejected is None
        stored = async_to_sync(license_key_repository.find_by_id)(license_key.id)
        assert stored.max_activations == 3

    def test_count_by_status(self, license_key_repository, make_license_key):
        make_license_key()
        make_license_key()
        make_license_key(status=LicenseStatus.REVOKED)

        counts = async_to_sync(license_key_repository.count_by_status)()

        assert counts == {"pending": 0, "active": 2, "expired": 0, "revoked": 1}

    def test_find_all_filters_and_pages(self, license_key_repository, make_license_key):
        for _ in range(3):
            make_license_key()
        make_license_key(status=LicenseStatus.PENDING)

        active = async_to_sync(license_key_repository.find_all)(
            status=LicenseStatus.ACTIVE, limit=2, offset=0
        )

        assert len(active) == 2
        assert all(k.status == LicenseStatus.ACTIVE for k in active)
        assert async_to_sync(license_key_repository.count)(status=LicenseStatus.ACTIVE) == 3

    def test_find_expiring_within(self, license_key_repository, make_license_key):
        now = timezone.now()
        soon = make_license_key(expires_at=now + timedelta(days=3))
        make_license_key(expires_at=now + timedelta(days=30))
        make_license_key(status=LicenseStatus.PENDING, expires_at=now + timedelta(days=2))

        expiring = async_to_sync(license_key_repository.find_expiring_within)(
            now, now + timedelta(days=7)
        )

        assert [k.id for k in expiring] == [soon.id]

    def test_purge_cascades(
        self,
        license_key_repository,
        attempt_repository,
        security_event_repository,
        status_report_repository,
        make_license_key,
    ):
        """Attempts and reports go with the key; security events stay."""
        now = timezone.now()
        license_key = make_license_key(
            status=LicenseStatus.EXPIRED, expires_at=now - timedelta(days=45)
        )
        async_to_sync(attempt_repository.add)(
            ActivationAttempt.succeeded(license_key_id=license_key.id, ip_address="10.0.0.1", now=now)
        )
        async_to_sync(status_report_repository.add)(
            StatusReport.create(
                license_key_id=license_key.id,
                ip_address="10.0.0.1",
                app_version="1.0.0",
                status=AppStatus.RUNNING,
                now=now,
            )
        )
        event = async_to_sync(security_event_repository.add)(
            SecurityEvent.create(
                event_type=SecurityEventType.EXPIRED_KEY_ATTEMPT,
                ip_address="10.0.0.1",
                now=now,
                license_key_id=license_key.id,
            )
        )

        purged = async_to_sync(license_key_repository.purge)(
            license_key.id, now - timedelta(days=30)
        )

        assert purged is True
        assert not LicenseKeyModel.objects.filter(id=license_key.id).exists()
        assert not ActivationAttemptModel.objects.filter(license_key_id=license_key.id).exists()
        assert not StatusReportModel.objects.filter(license_key_id=license_key.id).exists()
        assert SecurityEventModel.objects.get(id=event.id).license_key_id is None

    def test_purge_respects_cutoff(self, license_key_repository, make_license_key):
        now = timezone.now()
        license_key = make_license_key(
            status=LicenseStatus.EXPIRED, expires_at=now - timedelta(days=10)
        )

        assert not async_to_sync(license_key_repository.purge)(
            license_key.id, now - timedelta(days=30)
        )
        assert LicenseKeyModel.objects.filter(id=license_key.id).exists()


@pytest.mark.django_db
@pytest.mark.integration
class TestActivationAttemptRepository:
    """Integration tests for ActivationAttemptRepository."""

    def _fail(self, repository, ip, reason, when, license_key_id=None):
        return async_to_sync(repository.add)(
            ActivationAttempt.failed(
                license_key_id=license_key_id,
                ip_address=ip,
                now=when,
                failure_reason=reason,
            )
        )

    def test_count_failures_from_ip(self, attempt_repository, make_license_key):
        now = timezone.now()
        license_key = make_license_key()
        self._fail(attempt_repository, "10.0.0.1", FailureReason.NOT_FOUND, now)
        self._fail(attempt_repository, "10.0.0.1", FailureReason.NOT_FOUND, now - timedelta(minutes=10))
        self._fail(attempt_repository, "10.0.0.2", FailureReason.NOT_FOUND, now)
        self._fail(
            attempt_repository, "10.0.0.1", FailureReason.EXPIRED, now, license_key_id=license_key.id
        )

        count = async_to_sync(attempt_repository.count_failures_from_ip)(
            "10.0.0.1", FailureReason.NOT_FOUND, now - timedelta(minutes=5)
        )

        assert count == 1

    def test_history_newest_first(self, attempt_repository, make_license_key):
        now = timezone.now()
        license_key = make_license_key()
        for minutes in (3, 1, 2):
            async_to_sync(attempt_repository.add)(
                ActivationAttempt.succeeded(
                    license_key_id=license_key.id,
                    ip_address="10.0.0.1",
                    now=now - timedelta(minutes=minutes),
                )
            )

        history = async_to_sync(attempt_repository.find_by_license_key)(license_key.id, limit=2)

        assert [a.created_at for a in history] == [
            now - timedelta(minutes=1),
            now - timedelta(minutes=2),
        ]
        assert async_to_sync(attempt_repository.count_by_license_key)(license_key.id) == 3


@pytest.mark.django_db
@pytest.mark.integration
class TestSecurityEventRepository:
    """Integration tests for SecurityEventRepository."""

    def test_mark_resolved_is_conditional(self, security_event_repository):
        event = async_to_sync(security_event_repository.add)(
            SecurityEvent.create(
                event_type=SecurityEventType.BRUTE_FORCE,
                ip_address="10.0.0.1",
                now=timezone.now(),
            )
        )
        resolved = event.resolve("ops", timezone.now())

        assert async_to_sync(security_event_repository.mark_resolved)(resolved) is True
        assert async_to_sync(security_event_repository.mark_resolved)(resolved) is False

    def test_has_unresolved(self, security_event_repository, make_license_key):
        license_key = make_license_key()
        has_unresolved = async_to_sync(security_event_repository.has_unresolved)

        assert not has_unresolved(SecurityEventType.EXPIRED_KEY_ATTEMPT, license_key.id)
        async_to_sync(security_event_repository.add)(
            SecurityEvent.create(
                event_type=SecurityEventType.EXPIRED_KEY_ATTEMPT,
                ip_address="10.0.0.1",
                now=timezone.now(),
                license_key_id=license_key.id,
            )
        )
        assert has_unresolved(SecurityEventType.EXPIRED_KEY_ATTEMPT, license_key.id)

    def test_stats(self, security_event_repository):
        now = timezone.now()
        for event_type, created in (
            (SecurityEventType.BRUTE_FORCE, now),
            (SecurityEventType.INVALID_KEY, now - timedelta(days=2)),
        ):
            async_to_sync(security_event_repository.add)(
                SecurityEvent.create(event_type=event_type, ip_address="10.0.0.1", now=created)
            )

        stats = async_to_sync(security_event_repository.stats)(now - timedelta(hours=24))

        assert stats == {"total": 2, "unresolved": 2, "critical_unresolved": 1, "recent": 1}
