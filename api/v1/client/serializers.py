"""
Serializers for Client API endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import AppStatus


class ValidateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for license validation request."""

    license_key = serializers.CharField(required=True, max_length=64, trim_whitespace=True)
    hardware_id = serializers.CharField(required=False, allow_null=True, max_length=128)
    machine_name = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=255
    )
    os_version = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=100
    )
    app_version = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=50
    )


class ValidationResponseSerializer(serializers.Serializer):
    """Serializer for an admitted validation."""

    valid = serializers.BooleanField()
    license_key_id = serializers.UUIDField()
    expires_at = serializers.DateTimeField(allow_null=True)
    assigned_to = serializers.CharField(allow_null=True)
    new_activation = serializers.BooleanField()
    current_activations = serializers.IntegerField()
    max_activations = serializers.IntegerField()
    message = serializers.CharField()


class StatusReportRequestSerializer(serializers.Serializer):
    """Serializer for client status report request."""

    license_key = serializers.CharField(required=True, max_length=64, trim_whitespace=True)
    status = serializers.ChoiceField(choices=[s.value for s in AppStatus])
    app_version = serializers.CharField(required=True, max_length=50)
    hardware_id = serializers.CharField(required=False, allow_null=True, max_length=128)
    os_version = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=100
    )
    error_message = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=2000
    )
    uptime_seconds = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class StatusReportResponseSerializer(serializers.Serializer):
    """Serializer for an acknowledged status report."""

    id = serializers.UUIDField()
    license_key_id = serializers.UUIDField()
    status = serializers.CharField()
    received_at = serializers.DateTimeField()
