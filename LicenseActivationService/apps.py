"""
App configuration for License Activation Service.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class LicenseActivationServiceConfig(AppConfig):
    """App configuration for LicenseActivationService."""

    name = "LicenseActivationService"
    verbose_name = "License Activation Service"

    def ready(self):
        """Register event handlers and set up tracing once apps are loaded."""
        from core.infrastructure.event_handlers import register_event_handlers
        from core.instrumentation import setup_opentelemetry
        import core.schema_extensions  # noqa: F401  pylint: disable=unused-import

        register_event_handlers()
        if setup_opentelemetry():
            logger.info("Observability setup complete")
