"""
ListSecurityEventsQuery.
"""
from dataclasses import dataclass


@dataclass
class ListSecurityEventsQuery:
    """Query to page through security events, newest first."""

    unresolved_only: bool = False
    limit: int = 50
    offset: int = 0
