"""
SecurityEvent model.
"""
import uuid

from django.db import models
from django.utils import timezone


class SecurityEvent(models.Model):
    """
    A classified abuse signal.

    Survives the purge of its license key; the reference is cleared.
    """

    TYPE_CHOICES = [
        ("brute_force", "Brute force"),
        ("invalid_key", "Invalid key"),
        ("expired_key_attempt", "Expired key attempt"),
        ("revoked_key_attempt", "Revoked key attempt"),
        ("hwid_mismatch", "Hardware ID mismatch"),
        ("multi_activation_overflow", "Multi-activation overflow"),
    ]

    SEVERITY_CHOICES = [
        ("low", "Low"),
        ("medium", "Medium"),
        ("high", "High"),
        ("critical", "Critical"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_type = models.CharField(max_length=40, choices=TYPE_CHOICES)
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES)
    license_key = models.ForeignKey(
        "licenses.LicenseKey",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="security_events",
    )
    ip_address = models.CharField(max_length=45)
    attempted_key = models.CharField(max_length=64, null=True, blank=True)
    details = models.TextField(null=True, blank=True)
    resolved = models.BooleanField(default=False)
    resolved_by = models.CharField(max_length=255, null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "security_events"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["resolved", "severity"]),
            models.Index(fields=["event_type", "license_key", "resolved"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self):
        return f"{self.event_type} ({self.severity}) from {self.ip_address}"
