"""
Django management command to delete expired licenses past the retention window.

Deletion cascades to activation attempts and status reports. It cannot be undone.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from licenses.application.commands.maintenance import PurgeExpiredLicensesCommand
from licenses.application.handlers.maintenance_handlers import PurgeExpiredLicensesHandler
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)


class Command(BaseCommand):
    """Command to purge old expired licenses."""

    help = "Delete expired license keys whose expiry is older than the retention window"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Retention window in days (default: LICENSE_RETENTION_DAYS)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - list eligible keys without deleting them",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        days = options["days"]
        if days is None:
            days = getattr(settings, "LICENSE_RETENTION_DAYS", 30)
        if days < 0:
            raise CommandError("--days cannot be negative")

        dry_run = options["dry_run"]
        handler = PurgeExpiredLicensesHandler(DjangoLicenseKeyRepository())
        result = async_to_sync(handler.handle)(
            PurgeExpiredLicensesCommand(retention_days=days, dry_run=dry_run)
        )

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            self.stdout.write(f"Found {result.count} license(s) eligible for deletion")
            return

        self.stdout.write(
            self.style.SUCCESS(f"Deleted {result.count} expired license(s) older than {days} days")
        )
