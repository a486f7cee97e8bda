"""
API exception handlers.

This module provides custom exception handling for REST API responses.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    DomainException,
    DuplicateLicenseKeyError,
    InvalidAPIKeyError,
    InvalidLicenseStatusError,
    LicenseExpiredError,
    LicenseNotActivatedError,
    LicenseNotFoundError,
    LicenseRevokedError,
    MaxActivationsReachedError,
    RateLimitedError,
    SecurityEventAlreadyResolvedError,
    SecurityEventNotFoundError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

DOMAIN_STATUS_CODES = (
    ((LicenseNotFoundError, SecurityEventNotFoundError), status.HTTP_404_NOT_FOUND),
    (
        (
            LicenseRevokedError,
            LicenseExpiredError,
            LicenseNotActivatedError,
            MaxActivationsReachedError,
        ),
        status.HTTP_403_FORBIDDEN,
    ),
    ((RateLimitedError,), status.HTTP_429_TOO_MANY_REQUESTS),
    (
        (DuplicateLicenseKeyError, InvalidLicenseStatusError, SecurityEventAlreadyResolvedError),
        status.HTTP_409_CONFLICT,
    ),
    ((StoreUnavailableError,), status.HTTP_503_SERVICE_UNAVAILABLE),
    ((InvalidAPIKeyError,), status.HTTP_401_UNAUTHORIZED),
)


class APIError(APIException):
    """Base API exception with error code."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "An error occurred"
    default_code = "api_error"

    def __init__(self, detail=None, code=None, status_code=None):
        """
        Initialize API error.

        Args:
            detail: Error message
            code: Error code
            status_code: HTTP status code
        """
        if status_code:
            self.status_code = status_code
        if code:
            self.default_code = code
        super().__init__(detail)


def error_body(code: str, message: Any) -> Dict[str, Any]:
    """Build the standard error envelope."""
    return {"error": {"code": code, "message": message}}


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, trace_id)
        if trace_id:
            response["X-Trace-ID"] = trace_id
        return response

    if isinstance(exc, APIException):
        response = exception_handler(exc, context)
        if response:
            code = (
                exc.default_code.upper().replace("-", "_")
                if hasattr(exc, "default_code")
                else "API_ERROR"
            )
            if isinstance(response.data, dict) and "detail" in response.data:
                message = response.data["detail"]
            else:
                # Serializer validation errors keep their per-field structure
                message = response.data
            response.data = error_body(code, message)
            if trace_id:
                response["X-Trace-ID"] = trace_id
            return response

    if isinstance(exc, Http404):
        response = Response(
            error_body("NOT_FOUND", "Resource not found"),
            status=status.HTTP_404_NOT_FOUND,
        )
        if trace_id:
            response["X-Trace-ID"] = trace_id
        return response

    return _handle_unexpected_exception(exc, context, trace_id)


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def status_code_for(exc: DomainException) -> int:
    """Map a domain exception to its HTTP status code."""
    for exception_types, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exception_types):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def _handle_domain_exception(exc: DomainException, trace_id: Optional[str]) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    else:
        logger.warning("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    return Response(error_body(exc.code, exc.message), status=status_code)


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    response = Response(
        error_body("INTERNAL_ERROR", "An internal error occurred"),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response
