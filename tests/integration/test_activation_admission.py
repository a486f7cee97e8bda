"""
Integration tests for the activation admission algorithm.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from asgiref.sync import async_to_sync

from activations.domain.events import LicenseActivated
from activations.domain.services import ActivationAdmission, AdmissionRequest
from activations.infrastructure.models import ActivationAttempt as ActivationAttemptModel
from core.domain.exceptions import (
    LicenseExpiredError,
    LicenseNotActivatedError,
    LicenseNotFoundError,
    LicenseRevokedError,
    MaxActivationsReachedError,
    RateLimitedError,
)
from core.domain.value_objects import LicenseStatus
from licenses.domain.events import LicenseKeyExpired
from licenses.infrastructure.models import LicenseKey as LicenseKeyModel
from security.domain.services import AbuseDetector
from security.infrastructure.models import SecurityEvent as SecurityEventModel


@pytest.fixture
def admission(license_key_repository, attempt_repository, security_event_repository, event_bus, clock):
    detector = AbuseDetector(
        attempt_repository=attempt_repository,
        security_event_repository=security_event_repository,
        event_bus=event_bus,
        clock=clock,
        threshold=5,
        window_seconds=300,
    )
    return ActivationAdmission(
        license_key_repository=license_key_repository,
        attempt_repository=attempt_repository,
        abuse_detector=detector,
        event_bus=event_bus,
        clock=clock,
    )


def admit(admission, key, hardware_id=None, ip_address="10.0.0.1"):
    return async_to_sync(admission.admit)(
        AdmissionRequest(
            license_key=key,
            ip_address=ip_address,
            hardware_id=hardware_id,
            machine_name="WORKSTATION-1",
            os_version="Windows 11",
            app_version="3.2.0",
        )
    )


def stored(license_key):
    return LicenseKeyModel.objects.get(id=license_key.id)


def security_event_types(license_key=None):
    events = SecurityEventModel.objects.all()
    if license_key is not None:
        events = events.filter(license_key_id=license_key.id)
    return sorted(e.event_type for e in events)


@pytest.mark.django_db
@pytest.mark.integration
class TestActivationAdmission:
    """Integration tests for ActivationAdmission."""

    def test_first_activation(self, admission, make_license_key, published_events):
        license_key = make_license_key(max_activations=1)

        result = admit(admission, license_key.key, hardware_id="HW-A")

        row = stored(license_key)
        assert result.valid is True
        assert result.new_activation is True
        assert result.current_activations == 1
        assert result.assigned_to == "Jane Doe"
        assert row.current_activations == 1
        assert row.bound_hardware_id == "HW-A"
        assert row.bound_ip == "10.0.0.1"

        attempt = ActivationAttemptModel.objects.get(license_key_id=license_key.id)
        assert attempt.success is True
        assert attempt.machine_name == "WORKSTATION-1"

        activated = [e for e in published_events if isinstance(e, LicenseActivated)]
        assert len(activated) == 1
        assert activated[0].new_activation is True

    def test_same_machine_revalidation_at_capacity(self, admission, make_license_key):
        """The bound machine is admitted without consuming a slot."""
        license_key = make_license_key(max_activations=1)
        admit(admission, license_key.key, hardware_id="HW-A")

        result = admit(admission, license_key.key, hardware_id="HW-A", ip_address="10.0.0.2")

        row = stored(license_key)
        assert result.new_activation is False
        assert row.current_activations == 1
        assert row.bound_ip == "10.0.0.2"
        assert security_event_types() == []

    def test_second_machine_over_capacity(self, admission, make_license_key):
        license_key = make_license_key(max_activations=1)
        admit(admission, license_key.key, hardware_id="HW-A")

        with pytest.raises(MaxActivationsReachedError):
            admit(admission, license_key.key, hardware_id="HW-B")

        row = stored(license_key)
        assert row.current_activations == 1
        assert row.bound_hardware_id == "HW-A"
        assert security_event_types(license_key) == ["hwid_mismatch", "multi_activation_overflow"]
        failed = ActivationAttemptModel.objects.get(license_key_id=license_key.id, success=False)
        assert failed.failure_reason == "MAX_ACTIVATIONS"

    def test_second_machine_with_free_slot(self, admission, make_license_key):
        """A mismatch is advisory; the binding moves to the newest machine."""
        license_key = make_license_key(max_activations=2)
        admit(admission, license_key.key, hardware_id="HW-A")

        result = admit(admission, license_key.key, hardware_id="HW-B")

        row = stored(license_key)
        assert result.new_activation is True
        assert row.current_activations == 2
        assert row.bound_hardware_id == "HW-B"
        assert security_event_types(license_key) == ["hwid_mismatch"]

    def test_missing_hardware_id_consumes_a_slot(self, admission, make_license_key):
        license_key = make_license_key(max_activations=2)
        admit(admission, license_key.key, hardware_id="HW-A")

        result = admit(admission, license_key.key)

        row = stored(license_key)
        assert result.new_activation is True
        assert row.current_activations == 2
        assert row.bound_hardware_id == "HW-A"

        with pytest.raises(MaxActivationsReachedError):
            admit(admission, license_key.key)

    def test_counter_never_exceeds_max(self, admission, make_license_key):
        license_key = make_license_key(max_activations=3)

        for n in range(6):
            try:
                admit(admission, license_key.key, hardware_id=f"HW-{n}")
            except MaxActivationsReachedError:
                pass
            assert 0 <= stored(license_key).current_activations <= 3

        assert stored(license_key).current_activations == 3

    def test_unknown_key(self, admission, published_events):
        with pytest.raises(LicenseNotFoundError):
            admit(admission, "ZZZZZ-ZZZZZ-ZZZZZ-ZZZZZ")

        attempt = ActivationAttemptModel.objects.get()
        assert attempt.license_key_id is None
        assert attempt.failure_reason == "NOT_FOUND"
        event = SecurityEventModel.objects.get()
        assert event.event_type == "invalid_key"
        assert event.attempted_key == "ZZZZZ-ZZZZZ-ZZZZZ-ZZZZZ"

    def test_revoked_key(self, admission, make_license_key):
        license_key = make_license_key(status=LicenseStatus.REVOKED)

        with pytest.raises(LicenseRevokedError):
            admit(admission, license_key.key, hardware_id="HW-A")

        assert stored(license_key).status == "revoked"
        assert security_event_types(license_key) == ["revoked_key_attempt"]
        assert ActivationAttemptModel.objects.get().failure_reason == "REVOKED"

    def test_revoked_wins_over_expired(self, admission, make_license_key, clock):
        license_key = make_license_key(
            status=LicenseStatus.REVOKED, expires_at=clock.now() - timedelta(days=1)
        )

        with pytest.raises(LicenseRevokedError):
            admit(admission, license_key.key)

        assert stored(license_key).status == "revoked"

    def test_pending_key(self, admission, make_license_key):
        license_key = make_license_key(status=LicenseStatus.PENDING)

        with pytest.raises(LicenseNotActivatedError):
            admit(admission, license_key.key, hardware_id="HW-A")

        assert security_event_types() == []
        assert ActivationAttemptModel.objects.get().failure_reason == "NOT_ACTIVATED"

    def test_lazy_expiry(self, admission, make_license_key, clock, published_events):
        license_key = make_license_key(expires_at=clock.now() - timedelta(hours=1))

        with pytest.raises(LicenseExpiredError):
            admit(admission, license_key.key, hardware_id="HW-A")
        with pytest.raises(LicenseExpiredError):
            admit(admission, license_key.key, hardware_id="HW-A")

        assert stored(license_key).status == "expired"
        assert security_event_types(license_key) == ["expired_key_attempt"]
        assert ActivationAttemptModel.objects.filter(failure_reason="EXPIRED").count() == 2
        expired = [e for e in published_events if isinstance(e, LicenseKeyExpired)]
        assert len(expired) == 1
        assert expired[0].source == "lazy"

    def test_rate_limited_after_five_invalid_keys(self, admission, make_license_key):
        license_key = make_license_key()
        for n in range(5):
            with pytest.raises(LicenseNotFoundError):
                admit(admission, f"BOGUS-{n}", ip_address="203.0.113.9")

        with pytest.raises(RateLimitedError):
            admit(admission, license_key.key, hardware_id="HW-A", ip_address="203.0.113.9")

        assert ActivationAttemptModel.objects.count() == 5
        assert stored(license_key).current_activations == 0
        assert security_event_types().count("brute_force") == 1

    def test_rate_limit_is_per_ip(self, admission, make_license_key):
        license_key = make_license_key()
        for n in range(5):
            with pytest.raises(LicenseNotFoundError):
                admit(admission, f"BOGUS-{n}", ip_address="203.0.113.9")

        result = admit(admission, license_key.key, hardware_id="HW-A", ip_address="10.0.0.1")

        assert result.valid is True

    def test_rate_limit_window_slides(self, admission, make_license_key, clock):
        license_key = make_license_key()
        for n in range(5):
            with pytest.raises(LicenseNotFoundError):
                admit(admission, f"BOGUS-{n}", ip_address="203.0.113.9")

        clock.advance(seconds=301)

        result = admit(admission, license_key.key, hardware_id="HW-A", ip_address="203.0.113.9")
        assert result.valid is True

    def test_lost_race_is_reevaluated(self, admission, make_license_key, license_key_repository):
        """If another request takes the last slot, the loser is rejected on fresh state."""
        license_key = make_license_key(max_activations=1)
        real_claim = license_key_repository.claim_activation

        async def racing_claim(license_key_id, hardware_id, ip_address, now):
            await real_claim(license_key_id, "HW-OTHER", "10.9.9.9", now)
            return await real_claim(license_key_id, hardware_id, ip_address, now)

        with patch.object(license_key_repository, "claim_activation", new=racing_claim):
            with pytest.raises(MaxActivationsReachedError):
                admit(admission, license_key.key, hardware_id="HW-A")

        row = stored(license_key)
        assert row.current_activations == 1
        assert row.bound_hardware_id == "HW-OTHER"
