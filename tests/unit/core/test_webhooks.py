"""
Unit tests for webhook delivery and notification handlers.
"""
import json
import uuid
from unittest.mock import MagicMock, patch

import pytest
import requests

from core.infrastructure.event_handlers import NotificationEventHandler
from core.infrastructure.webhooks import WebhookDeliveryService
from licenses.domain.events import LicenseKeyExpiringSoon, LicenseKeyRevoked
from security.domain.events import SecurityEventRaised

WEBHOOK_URL = "https://hooks.example.com/licenses"


def _raised(severity: str) -> SecurityEventRaised:
    return SecurityEventRaised(
        security_event_id=uuid.uuid4(),
        event_type="hwid_mismatch",
        severity=severity,
        ip_address="10.0.0.1",
    )


class TestWebhookSignature:
    """Tests for HMAC signing."""

    def test_signature_roundtrip(self):
        payload = json.dumps({"a": 1})
        signature = WebhookDeliveryService.generate_signature(payload, "secret")

        assert len(signature) == 64
        assert WebhookDeliveryService.verify_signature(payload, signature, "secret")
        assert not WebhookDeliveryService.verify_signature(payload, signature, "other")
        assert not WebhookDeliveryService.verify_signature(payload + " ", signature, "secret")


class TestWebhookDelivery:
    """Tests for WebhookDeliveryService.deliver."""

    def test_not_configured(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = ""
        with patch("core.infrastructure.webhooks.requests.post") as post:
            assert WebhookDeliveryService.deliver("security_event.raised", {}) is False
        post.assert_not_called()

    def test_signed_delivery(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = WEBHOOK_URL
        settings.NOTIFICATION_WEBHOOK_SECRET = "s3cret"

        with patch("core.infrastructure.webhooks.requests.post") as post:
            post.return_value = MagicMock(status_code=200)
            delivered = WebhookDeliveryService.deliver(
                "security_event.raised", {"severity": "high"}
            )

        assert delivered is True
        args, kwargs = post.call_args
        assert args[0] == WEBHOOK_URL
        body = kwargs["data"]
        assert json.loads(body)["data"] == {"severity": "high"}
        assert kwargs["headers"]["X-Webhook-Event"] == "security_event.raised"
        assert WebhookDeliveryService.verify_signature(
            body, kwargs["headers"]["X-Webhook-Signature"], "s3cret"
        )

    def test_unsigned_without_secret(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = WEBHOOK_URL
        settings.NOTIFICATION_WEBHOOK_SECRET = ""

        with patch("core.infrastructure.webhooks.requests.post") as post:
            post.return_value = MagicMock(status_code=200)
            WebhookDeliveryService.deliver("license_key.expiring_soon", {})

        assert "X-Webhook-Signature" not in post.call_args.kwargs["headers"]

    def test_http_error(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = WEBHOOK_URL
        with patch("core.infrastructure.webhooks.requests.post") as post:
            response = MagicMock()
            response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
            post.return_value = response
            assert WebhookDeliveryService.deliver("security_event.raised", {}) is False

    def test_connection_error(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = WEBHOOK_URL
        with patch(
            "core.infrastructure.webhooks.requests.post",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            assert WebhookDeliveryService.deliver("security_event.raised", {}) is False


class TestNotificationEventHandler:
    """Tests for NotificationEventHandler."""

    @pytest.mark.parametrize(
        "severity,expected",
        [
            ("low", None),
            ("medium", None),
            ("high", "security_event.raised"),
            ("critical", "security_event.raised"),
        ],
    )
    def test_security_event_severity_filter(self, severity, expected):
        assert NotificationEventHandler.notification_type(_raised(severity)) == expected

    def test_expiry_warning_is_notified(self):
        event = LicenseKeyExpiringSoon(
            license_key_id=uuid.uuid4(), key="AAAAA-BBBBB-CCCCC-DDDDD", expires_at=None
        )
        assert NotificationEventHandler.notification_type(event) == "license_key.expiring_soon"

    def test_other_events_are_not_notified(self):
        event = LicenseKeyRevoked(license_key_id=uuid.uuid4(), previous_status="active")
        assert NotificationEventHandler.notification_type(event) is None

    @pytest.mark.asyncio
    async def test_queues_task_when_configured(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = WEBHOOK_URL
        event = _raised("critical")

        with patch("core.tasks.deliver_notification_task.delay") as delay:
            await NotificationEventHandler().handle(event)

        delay.assert_called_once_with("security_event.raised", event.to_dict())

    @pytest.mark.asyncio
    async def test_skips_when_not_configured(self, settings):
        settings.NOTIFICATION_WEBHOOK_URL = ""

        with patch("core.tasks.deliver_notification_task.delay") as delay:
            await NotificationEventHandler().handle(_raised("critical"))

        delay.assert_not_called()
