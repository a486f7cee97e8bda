"""
Serializers for Admin API endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import LicenseStatus

MAX_PAGE_SIZE = 500


class PaginationQuerySerializer(serializers.Serializer):
    """Serializer for limit/offset query parameters."""

    limit = serializers.IntegerField(required=False, default=50, min_value=1, max_value=MAX_PAGE_SIZE)
    offset = serializers.IntegerField(required=False, default=0, min_value=0)


class LicenseListQuerySerializer(PaginationQuerySerializer):
    """Serializer for license list query parameters."""

    status = serializers.ChoiceField(choices=[s.value for s in LicenseStatus], required=False)


class ExpiringQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(required=False, min_value=1)


class SecurityEventListQuerySerializer(PaginationQuerySerializer):
    unresolved = serializers.BooleanField(required=False, default=False)


class IssueLicenseRequestSerializer(serializers.Serializer):
    """Serializer for issue license request."""

    assigned_to = serializers.CharField(required=False, allow_null=True, max_length=255)
    assigned_email = serializers.EmailField(required=False, allow_null=True, max_length=320)
    max_activations = serializers.IntegerField(required=False, default=1, min_value=1)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    initial_status = serializers.ChoiceField(
        choices=[LicenseStatus.PENDING.value, LicenseStatus.ACTIVE.value],
        required=False,
        default=LicenseStatus.PENDING.value,
    )
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class UpdateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for license detail edits. Status is not editable here."""

    assigned_to = serializers.CharField(required=False, max_length=255)
    assigned_email = serializers.EmailField(required=False, max_length=320)
    notes = serializers.CharField(required=False, allow_blank=True)
    max_activations = serializers.IntegerField(required=False, min_value=1)
    expires_at = serializers.DateTimeField(required=False)


class RevokeLicenseRequestSerializer(serializers.Serializer):
    """Serializer for revoke license request."""

    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class ReissueLicenseRequestSerializer(serializers.Serializer):
    """Serializer for reissue license request."""

    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    max_activations = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class LicenseKeySerializer(serializers.Serializer):
    """Serializer for LicenseKeyDTO."""

    id = serializers.UUIDField()
    key = serializers.CharField()
    status = serializers.CharField()
    max_activations = serializers.IntegerField()
    current_activations = serializers.IntegerField()
    bound_hardware_id = serializers.CharField(allow_null=True)
    bound_ip = serializers.CharField(allow_null=True)
    last_activated_at = serializers.DateTimeField(allow_null=True)
    expires_at = serializers.DateTimeField(allow_null=True)
    assigned_to = serializers.CharField(allow_null=True)
    assigned_email = serializers.EmailField(allow_null=True)
    notes = serializers.CharField(allow_null=True)
    created_by = serializers.CharField(allow_null=True)
    reissued_from_id = serializers.UUIDField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class LicenseKeyListSerializer(serializers.Serializer):
    """Serializer for LicenseKeyListDTO."""

    count = serializers.IntegerField()
    results = LicenseKeySerializer(many=True)


class LicenseStatsSerializer(serializers.Serializer):
    """Serializer for LicenseStatsDTO."""

    total = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    expiring_soon = serializers.IntegerField()


class ActivationAttemptSerializer(serializers.Serializer):
    """Serializer for ActivationAttemptDTO."""

    id = serializers.UUIDField()
    license_key_id = serializers.UUIDField(allow_null=True)
    ip_address = serializers.CharField()
    success = serializers.BooleanField()
    hardware_id = serializers.CharField(allow_null=True)
    machine_name = serializers.CharField(allow_null=True)
    os_version = serializers.CharField(allow_null=True)
    app_version = serializers.CharField(allow_null=True)
    failure_reason = serializers.CharField(allow_null=True)
    failure_detail = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()


class ActivationAttemptListSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    results = ActivationAttemptSerializer(many=True)


class SecurityEventSerializer(serializers.Serializer):
    """Serializer for SecurityEventDTO."""

    id = serializers.UUIDField()
    event_type = serializers.CharField()
    severity = serializers.CharField()
    ip_address = serializers.CharField()
    license_key_id = serializers.UUIDField(allow_null=True)
    attempted_key = serializers.CharField(allow_null=True)
    details = serializers.CharField(allow_null=True)
    resolved = serializers.BooleanField()
    resolved_by = serializers.CharField(allow_null=True)
    resolved_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()


class SecurityEventListSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    results = SecurityEventSerializer(many=True)


class ResolveSecurityEventRequestSerializer(serializers.Serializer):
    """Serializer for resolve security event request."""

    resolved_by = serializers.CharField(required=False, max_length=255)


class SecurityStatsSerializer(serializers.Serializer):
    """Serializer for SecurityStatsDTO."""

    total = serializers.IntegerField()
    unresolved = serializers.IntegerField()
    critical_unresolved = serializers.IntegerField()
    last_24_hours = serializers.IntegerField()


class SweepRequestSerializer(serializers.Serializer):
    dry_run = serializers.BooleanField(required=False, default=False)


class PurgeRequestSerializer(serializers.Serializer):
    retention_days = serializers.IntegerField(required=False, min_value=0)
    dry_run = serializers.BooleanField(required=False, default=False)


class MaintenanceResultSerializer(serializers.Serializer):
    """Serializer for MaintenanceResultDTO."""

    operation = serializers.CharField()
    count = serializers.IntegerField()
    dry_run = serializers.BooleanField()
    license_key_ids = serializers.ListField(child=serializers.UUIDField(), allow_null=True)
