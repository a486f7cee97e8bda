"""
Custom schema extensions for drf-spectacular to document admin key authentication.
"""

from drf_spectacular.extensions import OpenApiAuthenticationExtension


class AdminKeyAuthenticationExtension(OpenApiAuthenticationExtension):
    """Extension to add admin key authentication to OpenAPI schema."""

    target_class = "core.middleware.auth.AdminKeyAuthentication"
    name = "AdminKeyAuth"

    def get_security_definition(self, auto_schema):
        """Return security scheme definition."""
        return {
            "type": "apiKey",
            "in": "header",
            "name": "X-Admin-Key",
            "description": "Shared admin key configured through ADMIN_API_KEY.",
        }
