"""
Unit tests for core value objects.
"""
import pytest

from core.domain.value_objects import (
    AppStatus,
    Email,
    FailureReason,
    HardwareId,
    LicenseStatus,
    SecurityEventType,
    Severity,
)


class TestEmail:
    """Tests for Email value object."""

    def test_valid_email(self):
        """Test valid email creation."""
        email = Email("test@example.com")
        assert str(email) == "test@example.com"
        assert email.value == "test@example.com"

    def test_invalid_email_no_at(self):
        """Test invalid email without @."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("invalid-email")

    def test_invalid_email_empty(self):
        """Test invalid empty email."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("")

    def test_equality_and_hash(self):
        """Emails compare and hash by value."""
        assert Email("a@example.com") == Email("a@example.com")
        assert len({Email("a@example.com"), Email("a@example.com")}) == 1


class TestHardwareId:
    """Tests for HardwareId value object."""

    def test_valid_hardware_id(self):
        assert str(HardwareId("HW-1234")) == "HW-1234"

    def test_empty_hardware_id(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            HardwareId("   ")

    def test_hardware_id_too_long(self):
        with pytest.raises(ValueError, match="too long"):
            HardwareId("x" * 129)


class TestEnums:
    """Tests for the domain enumerations."""

    def test_license_status_values(self):
        assert [s.value for s in LicenseStatus] == ["pending", "active", "expired", "revoked"]
        assert str(LicenseStatus.ACTIVE) == "active"

    def test_failure_reason_is_classified(self):
        """Failure reasons are the codes returned to clients."""
        assert FailureReason("MAX_ACTIVATIONS") is FailureReason.MAX_ACTIVATIONS
        assert str(FailureReason.NOT_FOUND) == "NOT_FOUND"

    def test_security_event_types(self):
        assert {t.value for t in SecurityEventType} == {
            "brute_force",
            "invalid_key",
            "expired_key_attempt",
            "revoked_key_attempt",
            "hwid_mismatch",
            "multi_activation_overflow",
        }

    def test_severity_and_app_status(self):
        assert str(Severity.CRITICAL) == "critical"
        assert AppStatus("error") is AppStatus.ERROR
