"""
Maintenance commands run by the scheduler or triggered by an admin.
"""
from dataclasses import dataclass

from licenses.domain.services import DEFAULT_RETENTION_DAYS, DEFAULT_WARNING_DAYS


@dataclass
class SweepExpirationsCommand:
    """Command to expire every active key past its expiry."""

    dry_run: bool = False


@dataclass
class PurgeExpiredLicensesCommand:
    """Command to delete expired keys older than the retention window."""

    retention_days: int = DEFAULT_RETENTION_DAYS
    dry_run: bool = False


@dataclass
class WarnExpiringLicensesCommand:
    """Command to publish expiry warnings."""

    days: int = DEFAULT_WARNING_DAYS
