"""
Clock port.

Domain services receive a clock instead of reading the wall time
directly, so time-dependent rules can be driven from tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from django.utils import timezone


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware datetime."""
        pass


class SystemClock(Clock):
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return timezone.now()
