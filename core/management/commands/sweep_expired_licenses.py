"""
Django management command to mark active licenses past their expiry as expired.

Normally run hourly by Celery beat; this command runs the same sweep on demand.
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from licenses.application.commands.maintenance import SweepExpirationsCommand
from licenses.application.handlers.maintenance_handlers import SweepExpirationsHandler
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)


class Command(BaseCommand):
    """Command to check and mark expired licenses."""

    help = "Mark active license keys past their expiry as expired"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - list due keys without updating them",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        handler = SweepExpirationsHandler(DjangoLicenseKeyRepository())
        result = async_to_sync(handler.handle)(SweepExpirationsCommand(dry_run=dry_run))

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            self.stdout.write(f"Found {result.count} expired license(s)")
            for license_key_id in (result.license_key_ids or [])[:10]:
                self.stdout.write(f"  - License key {license_key_id}")
            return

        self.stdout.write(
            self.style.SUCCESS(f"Successfully marked {result.count} license(s) as expired")
        )
