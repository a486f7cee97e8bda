"""
ActivationAttempt model.
"""
import uuid

from django.db import models
from django.utils import timezone


class ActivationAttempt(models.Model):
    """
    Append-only audit record of one validation call.

    ``license_key`` is NULL when the submitted key did not resolve.
    """

    FAILURE_REASON_CHOICES = [
        ("NOT_FOUND", "Not found"),
        ("REVOKED", "Revoked"),
        ("EXPIRED", "Expired"),
        ("NOT_ACTIVATED", "Not activated"),
        ("MAX_ACTIVATIONS", "Max activations"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_key = models.ForeignKey(
        "licenses.LicenseKey",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="activation_attempts",
    )
    ip_address = models.CharField(max_length=45)
    hardware_id = models.CharField(max_length=128, null=True, blank=True)
    machine_name = models.CharField(max_length=255, null=True, blank=True)
    os_version = models.CharField(max_length=100, null=True, blank=True)
    app_version = models.CharField(max_length=50, null=True, blank=True)
    success = models.BooleanField()
    failure_reason = models.CharField(
        max_length=32, choices=FAILURE_REASON_CHOICES, null=True, blank=True
    )
    failure_detail = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "activation_attempts"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["ip_address", "success", "failure_reason", "created_at"]),
            models.Index(fields=["license_key", "created_at"]),
        ]

    def __str__(self):
        outcome = "ok" if self.success else self.failure_reason
        return f"{self.ip_address} - {outcome}"
