"""
LicenseKey and StatusReport models.
"""
import uuid

from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class LicenseKey(models.Model):
    """
    An activation credential handed to a customer.

    All state changes after creation go through conditional updates in
    DjangoLicenseKeyRepository.
    """

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("active", "Active"),
        ("expired", "Expired"),
        ("revoked", "Revoked"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.CharField(max_length=64, unique=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    assigned_to = models.CharField(max_length=255, null=True, blank=True)
    assigned_email = models.EmailField(max_length=320, null=True, blank=True)
    max_activations = models.PositiveIntegerField(default=1)
    current_activations = models.PositiveIntegerField(default=0)
    bound_hardware_id = models.CharField(max_length=128, null=True, blank=True)
    bound_ip = models.CharField(max_length=45, null=True, blank=True)
    last_activated_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_by = models.CharField(max_length=255, null=True, blank=True)
    reissued_from_id = models.UUIDField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "license_keys"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"]),
            models.Index(fields=["assigned_email"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(max_activations__gte=1),
                name="license_keys_max_activations_positive",
            ),
            models.CheckConstraint(
                condition=Q(current_activations__lte=F("max_activations")),
                name="license_keys_current_within_max",
            ),
        ]

    def __str__(self):
        return self.key


class StatusReport(models.Model):
    """
    Heartbeat sent by a running client. Pass-through audit record.
    """

    STATUS_CHOICES = [
        ("running", "Running"),
        ("idle", "Idle"),
        ("error", "Error"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_key = models.ForeignKey(
        LicenseKey, on_delete=models.CASCADE, related_name="status_reports"
    )
    ip_address = models.CharField(max_length=45)
    hardware_id = models.CharField(max_length=128, null=True, blank=True)
    app_version = models.CharField(max_length=50)
    os_version = models.CharField(max_length=100, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)
    error_message = models.TextField(null=True, blank=True)
    uptime_seconds = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "status_reports"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["license_key", "created_at"]),
        ]

    def __str__(self):
        return f"{self.license_key_id} - {self.status}"
