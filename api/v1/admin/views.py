"""
Admin API views.

These endpoints are used by operators to:
- Issue, inspect, edit, activate, revoke and reissue license keys
- Review activation history and security events
- Trigger the expiration sweep and purge on demand

Every request is authenticated by the X-Admin-Key header.
"""

import uuid

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.application.handlers.get_activation_history_handler import (
    GetActivationHistoryHandler,
)
from activations.application.queries.get_activation_history import GetActivationHistoryQuery
from activations.infrastructure.repositories.django_activation_attempt_repository import (
    DjangoActivationAttemptRepository,
)
from api.exceptions import error_body
from api.v1.admin.serializers import (
    ActivationAttemptListSerializer,
    ExpiringQuerySerializer,
    IssueLicenseRequestSerializer,
    LicenseKeyListSerializer,
    LicenseKeySerializer,
    LicenseListQuerySerializer,
    LicenseStatsSerializer,
    MaintenanceResultSerializer,
    PaginationQuerySerializer,
    PurgeRequestSerializer,
    ReissueLicenseRequestSerializer,
    ResolveSecurityEventRequestSerializer,
    RevokeLicenseRequestSerializer,
    SecurityEventListQuerySerializer,
    SecurityEventListSerializer,
    SecurityEventSerializer,
    SecurityStatsSerializer,
    SweepRequestSerializer,
    UpdateLicenseRequestSerializer,
)
from core.domain.value_objects import LicenseStatus
from core.instrumentation import Status, StatusCode, get_tracer
from core.middleware.auth import AdminKeyAuthentication
from licenses.application.commands.activate_license_key import ActivateLicenseKeyCommand
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.commands.maintenance import (
    PurgeExpiredLicensesCommand,
    SweepExpirationsCommand,
)
from licenses.application.commands.reissue_license_key import ReissueLicenseKeyCommand
from licenses.application.commands.revoke_license_key import RevokeLicenseKeyCommand
from licenses.application.commands.update_license_key import UpdateLicenseKeyCommand
from licenses.application.handlers.issue_license_handler import IssueLicenseHandler
from licenses.application.handlers.license_lifecycle_handlers import (
    ActivateLicenseKeyHandler,
    ReissueLicenseKeyHandler,
    RevokeLicenseKeyHandler,
    UpdateLicenseKeyHandler,
)
from licenses.application.handlers.license_query_handlers import (
    GetLicenseKeyHandler,
    GetLicenseStatsHandler,
    ListExpiringLicensesHandler,
    ListLicenseKeysHandler,
)
from licenses.application.handlers.maintenance_handlers import (
    PurgeExpiredLicensesHandler,
    SweepExpirationsHandler,
)
from licenses.application.queries.get_license_key import GetLicenseKeyQuery
from licenses.application.queries.list_expiring_licenses import ListExpiringLicensesQuery
from licenses.application.queries.list_license_keys import ListLicenseKeysQuery
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)
from security.application.commands.resolve_security_event import ResolveSecurityEventCommand
from security.application.handlers.security_event_handlers import (
    GetSecurityStatsHandler,
    ListSecurityEventsHandler,
    ResolveSecurityEventHandler,
)
from security.application.queries.list_security_events import ListSecurityEventsQuery
from security.infrastructure.repositories.django_security_event_repository import (
    DjangoSecurityEventRepository,
)

# Initialize repositories (in production, use DI container)
_license_key_repo = DjangoLicenseKeyRepository()
_attempt_repo = DjangoActivationAttemptRepository()
_security_event_repo = DjangoSecurityEventRepository()

tracer = get_tracer(__name__)

ADMIN_KEY_PARAMETER = OpenApiParameter(
    name="X-Admin-Key",
    type=str,
    location=OpenApiParameter.HEADER,
    required=True,
    description="Shared admin API key",
)


def _invalid(serializer, span) -> Response:
    span.set_attribute("error", "validation_failed")
    span.set_status(Status(StatusCode.ERROR, "Validation failed"))
    return Response(
        error_body("VALIDATION_ERROR", serializer.errors),
        status=status.HTTP_400_BAD_REQUEST,
    )


class AdminAPIView(APIView):
    """Base view for admin endpoints."""

    authentication_classes = [AdminKeyAuthentication]

    @staticmethod
    def admin_identity(request: Request) -> str:
        return request.auth or "admin"


class LicenseListCreateView(AdminAPIView):
    """View for listing and issuing license keys."""

    @extend_schema(
        operation_id="list_license_keys",
        summary="List License Keys",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER, LicenseListQuerySerializer],
        responses={200: LicenseKeyListSerializer},
    )
    def get(self, request: Request) -> Response:
        """List license keys, newest first."""
        return async_to_sync(self._handle_list)(request)

    async def _handle_list(self, request: Request) -> Response:
        with tracer.start_as_current_span("list_license_keys") as span:
            serializer = LicenseListQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            data = serializer.validated_data
            license_status = LicenseStatus(data["status"]) if data.get("status") else None
            result = await ListLicenseKeysHandler(_license_key_repo).handle(
                ListLicenseKeysQuery(status=license_status, limit=data["limit"], offset=data["offset"])
            )
            span.set_attribute("results.count", len(result.results))
            return Response(LicenseKeyListSerializer(result).data)

    @extend_schema(
        operation_id="issue_license_key",
        summary="Issue License Key",
        description="Generate and store a new license key, pending unless issued as active.",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=IssueLicenseRequestSerializer,
        responses={
            201: LicenseKeySerializer,
            400: {"description": "Bad Request"},
            401: {"description": "Missing or invalid admin key"},
            409: {"description": "Could not generate a unique key"},
        },
    )
    def post(self, request: Request) -> Response:
        """Issue a license key."""
        return async_to_sync(self._handle_issue)(request)

    async def _handle_issue(self, request: Request) -> Response:
        """Async handler for issue license."""
        with tracer.start_as_current_span("issue_license_key") as span:
            span.set_attribute("operation", "issue_license_key")

            serializer = IssueLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            data = serializer.validated_data
            command = IssueLicenseCommand(
                assigned_to=data.get("assigned_to"),
                assigned_email=data.get("assigned_email"),
                max_activations=data["max_activations"],
                expires_at=data.get("expires_at"),
                initial_status=LicenseStatus(data["initial_status"]),
                notes=data.get("notes") or None,
                created_by=self.admin_identity(request),
            )
            span.set_attribute("max_activations", command.max_activations)

            result = await IssueLicenseHandler(_license_key_repo).handle(command)

            span.set_attribute("license_key.id", str(result.id))
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseKeySerializer(result).data, status=status.HTTP_201_CREATED)


class LicenseDetailView(AdminAPIView):
    """View for a single license key."""

    @extend_schema(
        operation_id="get_license_key",
        summary="Get License Key",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER],
        responses={200: LicenseKeySerializer, 404: {"description": "License key not found"}},
    )
    def get(self, request: Request, license_key_id: uuid.UUID) -> Response:
        """Get a license key."""
        return async_to_sync(self._handle_get)(request, license_key_id)

    async def _handle_get(self, request: Request, license_key_id: uuid.UUID) -> Response:
        with tracer.start_as_current_span("get_license_key") as span:
            span.set_attribute("license_key.id", str(license_key_id))
            result = await GetLicenseKeyHandler(_license_key_repo).handle(
                GetLicenseKeyQuery(license_key_id=license_key_id)
            )
            return Response(LicenseKeySerializer(result).data)

    @extend_schema(
        operation_id="update_license_key",
        summary="Update License Key",
        description="Edit assignment, notes, activation limit or expiry. Status cannot be edited.",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=UpdateLicenseRequestSerializer,
        responses={
            200: LicenseKeySerializer,
            400: {"description": "Bad Request"},
            404: {"description": "License key not found"},
        },
    )
    def patch(self, request: Request, license_key_id: uuid.UUID) -> Response:
        """Update a license key."""
        return async_to_sync(self._handle_update)(request, license_key_id)

    async def _handle_update(self, request: Request, license_key_id: uuid.UUID) -> Response:
        with tracer.start_as_current_span("update_license_key") as span:
            span.set_attribute("license_key.id", str(license_key_id))

            serializer = UpdateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            result = await UpdateLicenseKeyHandler(_license_key_repo).handle(
                UpdateLicenseKeyCommand(license_key_id=license_key_id, **serializer.validated_data)
            )
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseKeySerializer(result).data)


class LicenseStatsView(AdminAPIView):
    """View for license key counts."""

    @extend_schema(
        operation_id="license_stats",
        summary="License Statistics",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER],
        responses={200: LicenseStatsSerializer},
    )
    def get(self, request: Request) -> Response:
        return async_to_sync(self._handle_stats)(request)

    async def _handle_stats(self, request: Request) -> Response:
        with tracer.start_as_current_span("license_stats"):
            result = await GetLicenseStatsHandler(_license_key_repo).handle()
            return Response(LicenseStatsSerializer(result).data)


class ExpiringLicensesView(AdminAPIView):
    """View for active keys expiring soon."""

    @extend_schema(
        operation_id="list_expiring_license_keys",
        summary="List Expiring License Keys",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER, ExpiringQuerySerializer],
        responses={200: LicenseKeySerializer(many=True)},
    )
    def get(self, request: Request) -> Response:
        return async_to_sync(self._handle_expiring)(request)

    async def _handle_expiring(self, request: Request) -> Response:
        with tracer.start_as_current_span("list_expiring_license_keys") as span:
            serializer = ExpiringQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            days = serializer.validated_data.get("days") or getattr(
                settings, "LICENSE_EXPIRY_WARNING_DAYS", 7
            )
            result = await ListExpiringLicensesHandler(_license_key_repo).handle(
                ListExpiringLicensesQuery(days=days)
            )
            return Response(LicenseKeySerializer(result, many=True).data)


class ActivateLicenseKeyView(AdminAPIView):
    """View for activating a pending license key."""

    @extend_schema(
        operation_id="activate_license_key",
        summary="Activate License Key",
        description="Move a pending key to active.",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=None,
        responses={
            200: LicenseKeySerializer,
            404: {"description": "License key not found"},
            409: {"description": "License key is not pending"},
        },
    )
    def post(self, request: Request, license_key_id: uuid.UUID) -> Response:
        """Activate a license key."""
        return async_to_sync(self._handle_activate)(request, license_key_id)

    async def _handle_activate(self, request: Request, license_key_id: uuid.UUID) -> Response:
        with tracer.start_as_current_span("activate_license_key") as span:
            span.set_attribute("license_key.id", str(license_key_id))
            result = await ActivateLicenseKeyHandler(_license_key_repo).handle(
                ActivateLicenseKeyCommand(license_key_id=license_key_id)
            )
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseKeySerializer(result).data)


class RevokeLicenseKeyView(AdminAPIView):
    """View for revoking a license key."""

    @extend_schema(
        operation_id="revoke_license_key",
        summary="Revoke License Key",
        description="Revoke a key from any status. Revoking twice has no further effect.",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=RevokeLicenseRequestSerializer,
        responses={
            200: LicenseKeySerializer,
            404: {"description": "License key not found"},
        },
    )
    def post(self, request: Request, license_key_id: uuid.UUID) -> Response:
        """Revoke a license key."""
        return async_to_sync(self._handle_revoke)(request, license_key_id)

    async def _handle_revoke(self, request: Request, license_key_id: uuid.UUID) -> Response:
        with tracer.start_as_current_span("revoke_license_key") as span:
            span.set_attribute("license_key.id", str(license_key_id))

            serializer = RevokeLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            result = await RevokeLicenseKeyHandler(_license_key_repo).handle(
                RevokeLicenseKeyCommand(
                    license_key_id=license_key_id,
                    reason=serializer.validated_data.get("reason") or None,
                )
            )
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseKeySerializer(result).data)


class ReissueLicenseKeyView(AdminAPIView):
    """View for reissuing a license key."""

    @extend_schema(
        operation_id="reissue_license_key",
        summary="Reissue License Key",
        description=(
            "Issue a new active key carrying over the assignment of an existing one. "
            "The existing key is left unchanged."
        ),
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=ReissueLicenseRequestSerializer,
        responses={
            201: LicenseKeySerializer,
            404: {"description": "License key not found"},
        },
    )
    def post(self, request: Request, license_key_id: uuid.UUID) -> Response:
        """Reissue a license key."""
        return async_to_sync(self._handle_reissue)(request, license_key_id)

    async def _handle_reissue(self, request: Request, license_key_id: uuid.UUID) -> Response:
        with tracer.start_as_current_span("reissue_license_key") as span:
            span.set_attribute("license_key.id", str(license_key_id))

            serializer = ReissueLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            data = serializer.validated_data
            result = await ReissueLicenseKeyHandler(_license_key_repo).handle(
                ReissueLicenseKeyCommand(
                    license_key_id=license_key_id,
                    expires_at=data.get("expires_at"),
                    max_activations=data.get("max_activations"),
                    created_by=self.admin_identity(request),
                )
            )
            span.set_attribute("reissued.id", str(result.id))
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseKeySerializer(result).data, status=status.HTTP_201_CREATED)


class LicenseAttemptsView(AdminAPIView):
    """View for the activation history of a license key."""

    @extend_schema(
        operation_id="list_activation_attempts",
        summary="List Activation Attempts",
        tags=["Admin Licenses"],
        parameters=[ADMIN_KEY_PARAMETER, PaginationQuerySerializer],
        responses={
            200: ActivationAttemptListSerializer,
            404: {"description": "License key not found"},
        },
    )
    def get(self, request: Request, license_key_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_attempts)(request, license_key_id)

    async def _handle_attempts(self, request: Request, license_key_id: uuid.UUID) -> Response:
        with tracer.start_as_current_span("list_activation_attempts") as span:
            span.set_attribute("license_key.id", str(license_key_id))

            serializer = PaginationQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            handler = GetActivationHistoryHandler(
                license_key_repository=_license_key_repo,
                attempt_repository=_attempt_repo,
            )
            result = await handler.handle(
                GetActivationHistoryQuery(license_key_id=license_key_id, **serializer.validated_data)
            )
            return Response(ActivationAttemptListSerializer(result).data)


class SecurityEventListView(AdminAPIView):
    """View for listing security events."""

    @extend_schema(
        operation_id="list_security_events",
        summary="List Security Events",
        tags=["Admin Security"],
        parameters=[ADMIN_KEY_PARAMETER, SecurityEventListQuerySerializer],
        responses={200: SecurityEventListSerializer},
    )
    def get(self, request: Request) -> Response:
        return async_to_sync(self._handle_list)(request)

    async def _handle_list(self, request: Request) -> Response:
        with tracer.start_as_current_span("list_security_events") as span:
            serializer = SecurityEventListQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            data = serializer.validated_data
            result = await ListSecurityEventsHandler(_security_event_repo).handle(
                ListSecurityEventsQuery(
                    unresolved_only=data["unresolved"], limit=data["limit"], offset=data["offset"]
                )
            )
            return Response(SecurityEventListSerializer(result).data)


class ResolveSecurityEventView(AdminAPIView):
    """View for resolving a security event."""

    @extend_schema(
        operation_id="resolve_security_event",
        summary="Resolve Security Event",
        tags=["Admin Security"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=ResolveSecurityEventRequestSerializer,
        responses={
            200: SecurityEventSerializer,
            404: {"description": "Security event not found"},
            409: {"description": "Security event already resolved"},
        },
    )
    def post(self, request: Request, event_id: uuid.UUID) -> Response:
        """Resolve a security event."""
        return async_to_sync(self._handle_resolve)(request, event_id)

    async def _handle_resolve(self, request: Request, event_id: uuid.UUID) -> Response:
        with tracer.start_as_current_span("resolve_security_event") as span:
            span.set_attribute("security_event.id", str(event_id))

            serializer = ResolveSecurityEventRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            handler = ResolveSecurityEventHandler(
                security_event_repository=_security_event_repo,
                attempt_repository=_attempt_repo,
            )
            result = await handler.handle(
                ResolveSecurityEventCommand(
                    security_event_id=event_id,
                    resolved_by=serializer.validated_data.get("resolved_by")
                    or self.admin_identity(request),
                )
            )
            span.set_status(Status(StatusCode.OK))
            return Response(SecurityEventSerializer(result).data)


class SecurityStatsView(AdminAPIView):
    """View for security event counters."""

    @extend_schema(
        operation_id="security_stats",
        summary="Security Statistics",
        tags=["Admin Security"],
        parameters=[ADMIN_KEY_PARAMETER],
        responses={200: SecurityStatsSerializer},
    )
    def get(self, request: Request) -> Response:
        return async_to_sync(self._handle_stats)(request)

    async def _handle_stats(self, request: Request) -> Response:
        with tracer.start_as_current_span("security_stats"):
            result = await GetSecurityStatsHandler(_security_event_repo).handle()
            return Response(SecurityStatsSerializer(result).data)


class SweepExpirationsView(AdminAPIView):
    """View for running the expiration sweep on demand."""

    @extend_schema(
        operation_id="sweep_expirations",
        summary="Sweep Expirations",
        description="Mark every active key past its expiry as expired.",
        tags=["Admin Maintenance"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=SweepRequestSerializer,
        responses={200: MaintenanceResultSerializer},
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_sweep)(request)

    async def _handle_sweep(self, request: Request) -> Response:
        with tracer.start_as_current_span("sweep_expirations") as span:
            serializer = SweepRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            result = await SweepExpirationsHandler(_license_key_repo).handle(
                SweepExpirationsCommand(dry_run=serializer.validated_data["dry_run"])
            )
            span.set_attribute("count", result.count)
            return Response(MaintenanceResultSerializer(result).data)


class PurgeExpiredLicensesView(AdminAPIView):
    """View for purging old expired license keys on demand."""

    @extend_schema(
        operation_id="purge_expired_licenses",
        summary="Purge Expired Licenses",
        description=(
            "Delete expired keys whose expiry is older than the retention window, "
            "with their activation attempts and status reports. Irreversible."
        ),
        tags=["Admin Maintenance"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=PurgeRequestSerializer,
        responses={200: MaintenanceResultSerializer},
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_purge)(request)

    async def _handle_purge(self, request: Request) -> Response:
        with tracer.start_as_current_span("purge_expired_licenses") as span:
            serializer = PurgeRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(serializer, span)

            data = serializer.validated_data
            retention_days = data.get("retention_days")
            if retention_days is None:
                retention_days = getattr(settings, "LICENSE_RETENTION_DAYS", 30)

            result = await PurgeExpiredLicensesHandler(_license_key_repo).handle(
                PurgeExpiredLicensesCommand(retention_days=retention_days, dry_run=data["dry_run"])
            )
            span.set_attribute("count", result.count)
            return Response(MaintenanceResultSerializer(result).data)
