"""
Integration tests for the maintenance management commands and Celery tasks.
"""

from datetime import timedelta
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from core.domain.value_objects import LicenseStatus
from core.tasks import (
    deliver_notification_task,
    purge_expired_licenses_task,
    sweep_expired_licenses_task,
    warn_expiring_licenses_task,
)
from licenses.infrastructure.models import LicenseKey as LicenseKeyModel


def run(*args):
    out = StringIO()
    call_command(*args, stdout=out)
    return out.getvalue()


@pytest.mark.django_db
@pytest.mark.integration
class TestManagementCommands:
    """Integration tests for management commands."""

    def test_sweep_expired_licenses(self, make_license_key):
        due = make_license_key(expires_at=timezone.now() - timedelta(hours=1))

        output = run("sweep_expired_licenses")

        assert "Successfully marked 1 license(s) as expired" in output
        assert LicenseKeyModel.objects.get(id=due.id).status == "expired"

    def test_sweep_dry_run(self, make_license_key):
        due = make_license_key(expires_at=timezone.now() - timedelta(hours=1))

        output = run("sweep_expired_licenses", "--dry-run")

        assert "DRY RUN" in output
        assert "Found 1 expired license(s)" in output
        assert str(due.id) in output
        assert LicenseKeyModel.objects.get(id=due.id).status == "active"

    def test_purge_expired_licenses(self, make_license_key):
        old = make_license_key(
            status=LicenseStatus.EXPIRED, expires_at=timezone.now() - timedelta(days=45)
        )
        recent = make_license_key(
            status=LicenseStatus.EXPIRED, expires_at=timezone.now() - timedelta(days=10)
        )

        output = run("purge_expired_licenses", "--days", "30")

        assert "Deleted 1 expired license(s) older than 30 days" in output
        assert not LicenseKeyModel.objects.filter(id=old.id).exists()
        assert LicenseKeyModel.objects.filter(id=recent.id).exists()

    def test_purge_dry_run(self, make_license_key):
        old = make_license_key(
            status=LicenseStatus.EXPIRED, expires_at=timezone.now() - timedelta(days=45)
        )

        output = run("purge_expired_licenses", "--dry-run")

        assert "Found 1 license(s) eligible for deletion" in output
        assert LicenseKeyModel.objects.filter(id=old.id).exists()

    def test_purge_negative_days(self):
        with pytest.raises(CommandError):
            run("purge_expired_licenses", "--days", "-1")

    def test_warn_expiring_licenses(self, make_license_key):
        make_license_key(expires_at=timezone.now() + timedelta(days=3))

        output = run("warn_expiring_licenses", "--days", "7")

        assert "Published 1 expiry warning(s) for the next 7 days" in output


@pytest.mark.django_db
@pytest.mark.integration
class TestMaintenanceTasks:
    """Integration tests for the scheduled Celery tasks."""

    def test_sweep_task(self, make_license_key):
        make_license_key(expires_at=timezone.now() - timedelta(hours=1))
        assert sweep_expired_licenses_task.delay().get() == 1

    def test_purge_task_uses_retention_setting(self, make_license_key, settings):
        settings.LICENSE_RETENTION_DAYS = 5
        make_license_key(status=LicenseStatus.EXPIRED, expires_at=timezone.now() - timedelta(days=10))

        assert purge_expired_licenses_task.delay().get() == 1

    def test_warn_task(self, make_license_key):
        make_license_key(expires_at=timezone.now() + timedelta(days=1))
        assert warn_expiring_licenses_task.delay(days=2).get() == 1


class TestDeliverNotificationTask:
    """Tests for the notification delivery task."""

    def test_delivered(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = "https://hooks.example.com/licenses"
        with patch("core.infrastructure.webhooks.requests.post") as post:
            post.return_value = MagicMock(status_code=200)
            result = deliver_notification_task.apply(args=("security_event.raised", {"a": 1}))

        assert result.get() is True
        post.assert_called_once()

    def test_not_configured(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = ""
        result = deliver_notification_task.apply(args=("security_event.raised", {}))
        assert result.get() is False
