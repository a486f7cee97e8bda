"""
Webhook delivery service.

Delivers notifications to the configured webhook URL with an HMAC
signature so the receiver can authenticate them.
"""
import hashlib
import hmac
import json
import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10


class WebhookDeliveryService:
    """Service for delivering notification webhooks."""

    @staticmethod
    def generate_signature(payload: str, secret: str) -> str:
        """
        Generate HMAC signature for webhook payload.

        Args:
            payload: JSON string payload
            secret: Webhook secret

        Returns:
            HMAC SHA-256 signature (hex)
        """
        return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()

    @staticmethod
    def verify_signature(payload: str, signature: str, secret: str) -> bool:
        """
        Verify webhook signature.

        Args:
            payload: JSON string payload
            signature: Expected signature
            secret: Webhook secret

        Returns:
            True if signature is valid
        """
        expected_signature = WebhookDeliveryService.generate_signature(payload, secret)
        return hmac.compare_digest(expected_signature, signature)

    @staticmethod
    def is_configured() -> bool:
        return bool(getattr(settings, "NOTIFICATION_WEBHOOK_URL", ""))

    @staticmethod
    def build_body(event_type: str, payload: Dict[str, Any]) -> str:
        return json.dumps(
            {
                "event_type": event_type,
                "timestamp": timezone.now().isoformat(),
                "data": payload,
            },
            sort_keys=True,
        )

    @staticmethod
    def deliver(
        event_type: str,
        payload: Dict[str, Any],
        url: Optional[str] = None,
        secret: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
    ) -> bool:
        """
        Deliver one webhook.

        Args:
            event_type: Notification type (e.g., 'security_event.raised')
            payload: Notification payload
            url: Target URL (defaults to NOTIFICATION_WEBHOOK_URL)
            secret: Signing secret (defaults to NOTIFICATION_WEBHOOK_SECRET)
            timeout: Request timeout in seconds

        Returns:
            True if delivery succeeded, False otherwise
        """
        url = url or getattr(settings, "NOTIFICATION_WEBHOOK_URL", "")
        if not url:
            logger.debug("No notification webhook configured, skipping %s", event_type)
            return False
        secret = secret if secret is not None else getattr(settings, "NOTIFICATION_WEBHOOK_SECRET", "")

        payload_json = WebhookDeliveryService.build_body(event_type, payload)
        headers = {
            "Content-Type": "application/json",
            "X-Webhook-Event": event_type,
            "User-Agent": "License-Activation-Service-Webhook/1.0",
        }
        if secret:
            headers["X-Webhook-Signature"] = WebhookDeliveryService.generate_signature(
                payload_json, secret
            )

        try:
            response = requests.post(url, data=payload_json, headers=headers, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("Webhook delivery failed: %s - %s", event_type, e)
            return False

        logger.info("Webhook delivered successfully: %s", event_type)
        return True
