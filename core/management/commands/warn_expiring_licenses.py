"""
Django management command to publish expiry warnings.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand

from licenses.application.commands.maintenance import WarnExpiringLicensesCommand
from licenses.application.handlers.maintenance_handlers import WarnExpiringLicensesHandler
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)


class Command(BaseCommand):
    help = "Publish a warning for every active license key expiring soon"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Warning window in days (default: LICENSE_EXPIRY_WARNING_DAYS)",
        )

    def handle(self, *args, **options):
        days = options["days"]
        if days is None:
            days = getattr(settings, "LICENSE_EXPIRY_WARNING_DAYS", 7)
        handler = WarnExpiringLicensesHandler(DjangoLicenseKeyRepository())
        result = async_to_sync(handler.handle)(WarnExpiringLicensesCommand(days=days))
        self.stdout.write(
            self.style.SUCCESS(f"Published {result.count} expiry warning(s) for the next {days} days")
        )
