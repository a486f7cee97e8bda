"""
ListExpiringLicensesQuery.
"""
from dataclasses import dataclass

from licenses.domain.services import DEFAULT_WARNING_DAYS


@dataclass
class ListExpiringLicensesQuery:
    """Query active keys expiring within a number of days."""

    days: int = DEFAULT_WARNING_DAYS
