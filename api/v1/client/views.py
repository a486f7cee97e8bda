"""
Client API views.

These endpoints are called by the licensed application on end-user
machines to:
- Validate (and on first use, activate) a license key
- Report application status
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.application.commands.validate_license import ValidateLicenseCommand
from activations.application.handlers.validate_license_handler import ValidateLicenseHandler
from activations.infrastructure.repositories.django_activation_attempt_repository import (
    DjangoActivationAttemptRepository,
)
from api.exceptions import error_body
from api.v1.client.serializers import (
    StatusReportRequestSerializer,
    StatusReportResponseSerializer,
    ValidateLicenseRequestSerializer,
    ValidationResponseSerializer,
)
from core.domain.value_objects import AppStatus
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.report_status import ReportStatusCommand
from licenses.application.handlers.report_status_handler import ReportStatusHandler
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)
from licenses.infrastructure.repositories.django_status_report_repository import (
    DjangoStatusReportRepository,
)
from security.infrastructure.repositories.django_security_event_repository import (
    DjangoSecurityEventRepository,
)

# Initialize repositories (in production, use DI container)
_license_key_repo = DjangoLicenseKeyRepository()
_attempt_repo = DjangoActivationAttemptRepository()
_security_event_repo = DjangoSecurityEventRepository()
_status_report_repo = DjangoStatusReportRepository()

tracer = get_tracer(__name__)


def get_client_ip(request: Request):
    """
    Resolve the client IP address.

    REMOTE_ADDR is used unless ``TRUSTED_PROXY_COUNT`` proxies sit in front
    of the service. Each of them appends the address it saw to
    X-Forwarded-For, so the client is the entry that many places from the
    right. Entries to the left of it are client-supplied and ignored.

    Returns:
        IP address string, or None if unavailable
    """
    remote_addr = request.META.get("REMOTE_ADDR") or None
    trusted_proxies = getattr(settings, "TRUSTED_PROXY_COUNT", 0)
    if trusted_proxies <= 0:
        return remote_addr

    forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR", "")
    hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
    if len(hops) < trusted_proxies:
        return remote_addr
    return hops[-trusted_proxies]


def _blank_to_none(value):
    return value or None


class ValidateLicenseView(APIView):
    """View for client license validation."""

    @extend_schema(
        operation_id="validate_license",
        summary="Validate License",
        description=(
            "Validate a license key from a client machine. The first validation "
            "from a machine consumes an activation; re-validating from the bound "
            "machine does not."
        ),
        tags=["Client API"],
        request=ValidateLicenseRequestSerializer,
        responses={
            200: ValidationResponseSerializer,
            400: {"description": "Bad Request"},
            403: {"description": "License revoked, expired, not activated, or at capacity"},
            404: {"description": "License key not found"},
            429: {"description": "Too many invalid keys from this IP"},
            503: {"description": "License store unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        """Validate a license key."""
        return async_to_sync(self._handle_validate_license)(request)

    async def _handle_validate_license(self, request: Request) -> Response:
        """Async handler for validate license."""
        with tracer.start_as_current_span("validate_license") as span:
            span.set_attribute("operation", "validate_license")

            serializer = ValidateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response(
                    error_body("VALIDATION_ERROR", serializer.errors),
                    status=status.HTTP_400_BAD_REQUEST,
                )

            data = serializer.validated_data
            ip_address = get_client_ip(request)
            span.set_attribute("client.ip", ip_address or "unknown")

            handler = ValidateLicenseHandler(
                license_key_repository=_license_key_repo,
                attempt_repository=_attempt_repo,
                security_event_repository=_security_event_repo,
            )
            command = ValidateLicenseCommand(
                license_key=data["license_key"],
                ip_address=ip_address,
                hardware_id=data.get("hardware_id"),
                machine_name=_blank_to_none(data.get("machine_name")),
                os_version=_blank_to_none(data.get("os_version")),
                app_version=_blank_to_none(data.get("app_version")),
            )

            result = await handler.handle(command)

            span.set_attribute("license_key.id", str(result.license_key_id))
            span.set_attribute("new_activation", result.new_activation)
            span.set_status(Status(StatusCode.OK))
            return Response(ValidationResponseSerializer(result).data, status=status.HTTP_200_OK)


class ReportStatusView(APIView):
    """View for client status reports."""

    @extend_schema(
        operation_id="report_status",
        summary="Report Status",
        description="Record a heartbeat from a client application.",
        tags=["Client API"],
        request=StatusReportRequestSerializer,
        responses={
            201: StatusReportResponseSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "License key not found"},
        },
    )
    def post(self, request: Request) -> Response:
        """Record a status report."""
        return async_to_sync(self._handle_report_status)(request)

    async def _handle_report_status(self, request: Request) -> Response:
        """Async handler for report status."""
        with tracer.start_as_current_span("report_status") as span:
            span.set_attribute("operation", "report_status")

            serializer = StatusReportRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response(
                    error_body("VALIDATION_ERROR", serializer.errors),
                    status=status.HTTP_400_BAD_REQUEST,
                )

            data = serializer.validated_data
            handler = ReportStatusHandler(
                license_key_repository=_license_key_repo,
                status_report_repository=_status_report_repo,
            )
            command = ReportStatusCommand(
                license_key=data["license_key"],
                status=AppStatus(data["status"]),
                app_version=data["app_version"],
                ip_address=get_client_ip(request),
                hardware_id=data.get("hardware_id"),
                os_version=_blank_to_none(data.get("os_version")),
                error_message=_blank_to_none(data.get("error_message")),
                uptime_seconds=data.get("uptime_seconds"),
            )

            result = await handler.handle(command)

            span.set_attribute("license_key.id", str(result.license_key_id))
            span.set_status(Status(StatusCode.OK))
            return Response(
                StatusReportResponseSerializer(result).data, status=status.HTTP_201_CREATED
            )
