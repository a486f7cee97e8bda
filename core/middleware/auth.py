"""
Admin API key authentication middleware.

Every request under /api/v1/admin/ must carry the shared admin key in
the X-Admin-Key header. Client endpoints are unauthenticated.
"""

import hmac
import logging
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from core.domain.exceptions import InvalidAPIKeyError

logger = logging.getLogger(__name__)

ADMIN_PATH_PREFIX = "/api/v1/admin/"
ADMIN_KEY_HEADER = "X-Admin-Key"
ADMIN_IDENTITY_HEADER = "X-Admin-User"


class AdminAPIKeyMiddleware(MiddlewareMixin):
    """
    Middleware for admin API key authentication.

    Returns 401 with an INVALID_API_KEY error body if the key is
    missing, wrong, or no key is configured.
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and validate authentication.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if authentication fails, None otherwise
        """
        if not request.path.startswith(ADMIN_PATH_PREFIX):
            return None

        expected = getattr(settings, "ADMIN_API_KEY", "")
        if not expected:
            logger.error("ADMIN_API_KEY is not configured; rejecting admin request")
            return self._unauthorized("Admin API is not configured")

        provided = request.headers.get(ADMIN_KEY_HEADER, "")
        if not provided:
            return self._unauthorized(f"Missing admin key. Provide {ADMIN_KEY_HEADER} header.")

        if not hmac.compare_digest(provided.encode(), expected.encode()):
            logger.warning(
                "Invalid admin key attempted",
                extra={"remote_addr": request.META.get("REMOTE_ADDR")},
            )
            return self._unauthorized("Invalid admin key")

        request.admin_identity = request.headers.get(ADMIN_IDENTITY_HEADER) or "admin"  # type: ignore
        return None

    @staticmethod
    def _unauthorized(message: str) -> JsonResponse:
        error = InvalidAPIKeyError(message)
        return JsonResponse({"error": {"code": error.code, "message": error.message}}, status=401)


class AdminKeyAuthentication(BaseAuthentication):
    """
    DRF authentication for admin views.

    The key itself is checked by AdminAPIKeyMiddleware; this exposes the
    resulting identity as ``request.auth`` and documents the scheme.
    """

    def authenticate(self, request):
        identity = getattr(request._request, "admin_identity", None)  # pylint: disable=protected-access
        if identity is None:
            raise AuthenticationFailed("Invalid admin key")
        return (None, identity)

    def authenticate_header(self, request):
        return ADMIN_KEY_HEADER
