"""
Unit tests for LicenseKey entity.
"""
import re
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.exceptions import InvalidLicenseStatusError, InvalidLicenseUpdateError
from core.domain.value_objects import Email, LicenseStatus
from licenses.domain.license_key import KEY_ALPHABET, LicenseKey, generate_license_key

KEY_PATTERN = re.compile(r"^[A-Z0-9]{5}-[A-Z0-9]{5}-[A-Z0-9]{5}-[A-Z0-9]{5}$")


class TestGenerateLicenseKey:
    """Tests for key generation."""

    def test_format(self):
        """Keys are four dash-separated groups of five characters."""
        key = generate_license_key()
        assert KEY_PATTERN.match(key)

    def test_alphabet_excludes_ambiguous_characters(self):
        key = generate_license_key().replace("-", "")
        assert set(key) <= set(KEY_ALPHABET)
        assert not set("01OIL") & set(KEY_ALPHABET)

    def test_keys_differ(self):
        assert len({generate_license_key() for _ in range(50)}) == 50


class TestLicenseKey:
    """Tests for LicenseKey entity."""

    def test_create_defaults_to_pending(self):
        """Test creating a license key."""
        license_key = LicenseKey.create(key="AAAAA-BBBBB-CCCCC-DDDDD")

        assert license_key.id is not None
        assert license_key.status == LicenseStatus.PENDING
        assert license_key.max_activations == 1
        assert license_key.current_activations == 0
        assert license_key.bound_hardware_id is None
        assert license_key.created_at == license_key.updated_at

    def test_create_active_with_assignment(self):
        license_key = LicenseKey.create(
            key="AAAAA-BBBBB-CCCCC-DDDDD",
            assigned_to="Jane Doe",
            assigned_email="jane@example.com",
            max_activations=3,
            initial_status=LicenseStatus.ACTIVE,
        )

        assert license_key.status == LicenseStatus.ACTIVE
        assert license_key.assigned_email == Email("jane@example.com")
        assert license_key.max_activations == 3

    @pytest.mark.parametrize("status", [LicenseStatus.EXPIRED, LicenseStatus.REVOKED])
    def test_create_rejects_terminal_status(self, status):
        with pytest.raises(InvalidLicenseStatusError):
            LicenseKey.create(key="AAAAA-BBBBB-CCCCC-DDDDD", initial_status=status)

    def test_invalid_key(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            LicenseKey.create(key="  ")

    def test_invalid_max_activations(self):
        with pytest.raises(ValueError, match="at least 1"):
            LicenseKey.create(key="AAAAA-BBBBB-CCCCC-DDDDD", max_activations=0)

    def test_counter_cannot_exceed_max(self, sample_license_key):
        with pytest.raises(ValueError, match="between 0 and max"):
            replace(sample_license_key, current_activations=3)

    def test_is_at_capacity(self, sample_license_key):
        assert not sample_license_key.is_at_capacity
        assert replace(sample_license_key, current_activations=2).is_at_capacity

    def test_is_expiry_due_only_for_active_keys(self):
        now = datetime.now(timezone.utc)
        license_key = LicenseKey.create(
            key="AAAAA-BBBBB-CCCCC-DDDDD",
            expires_at=now - timedelta(hours=1),
        )

        assert license_key.is_expiry_due(now) is False
        assert replace(license_key, status=LicenseStatus.ACTIVE).is_expiry_due(now) is True
        assert replace(license_key, status=LicenseStatus.EXPIRED).is_expiry_due(now) is False

    def test_no_expiry_never_due(self):
        license_key = LicenseKey.create(
            key="AAAAA-BBBBB-CCCCC-DDDDD", initial_status=LicenseStatus.ACTIVE
        )
        assert license_key.is_expiry_due(datetime.now(timezone.utc)) is False

    def test_is_bound_to(self, sample_license_key):
        bound = replace(sample_license_key, bound_hardware_id="HW-A")

        assert bound.is_bound_to("HW-A")
        assert not bound.is_bound_to("HW-B")
        assert not bound.is_bound_to(None)
        assert not sample_license_key.is_bound_to(None)

    def test_activate(self, sample_license_key):
        now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        activated = sample_license_key.activate(now)

        assert activated.status == LicenseStatus.ACTIVE
        assert activated.updated_at == now
        assert sample_license_key.status == LicenseStatus.PENDING

    def test_activate_non_pending(self, sample_license_key):
        revoked = replace(sample_license_key, status=LicenseStatus.REVOKED)
        with pytest.raises(InvalidLicenseStatusError):
            revoked.activate(datetime.now(timezone.utc))

    def test_update_details(self, sample_license_key):
        updated = sample_license_key.update_details(
            assigned_to="John Roe", notes="moved to new team", max_activations=5
        )

        assert updated.assigned_to == "John Roe"
        assert updated.notes == "moved to new team"
        assert updated.max_activations == 5
        assert updated.status == sample_license_key.status

    def test_update_details_stamps_edit_time(self, sample_license_key):
        now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

        updated = sample_license_key.update_details(notes="renewed", now=now)

        assert updated.updated_at == now

    def test_update_details_without_changes(self, sample_license_key):
        assert sample_license_key.update_details() is sample_license_key

    def test_update_details_below_current_activations(self, sample_license_key):
        in_use = replace(sample_license_key, current_activations=2)
        with pytest.raises(InvalidLicenseUpdateError):
            in_use.update_details(max_activations=1)

    def test_update_details_invalid_email(self, sample_license_key):
        with pytest.raises(ValueError, match="Invalid email"):
            sample_license_key.update_details(assigned_email="nope")
