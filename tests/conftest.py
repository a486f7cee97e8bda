"""
Pytest configuration and shared fixtures.
"""

from dataclasses import replace
from datetime import timedelta
from typing import List

import pytest
from asgiref.sync import async_to_sync
from django.utils import timezone

from activations.infrastructure.repositories.django_activation_attempt_repository import (
    DjangoActivationAttemptRepository,
)
from core.domain.clock import Clock
from core.domain.events import DomainEvent, EventHandler
from core.domain.value_objects import LicenseStatus
from core.infrastructure.event_handlers import ALL_EVENTS
from core.infrastructure.events import InMemoryEventBus
from licenses.domain.license_key import LicenseKey, generate_license_key
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)
from licenses.infrastructure.repositories.django_status_report_repository import (
    DjangoStatusReportRepository,
)
from security.infrastructure.repositories.django_security_event_repository import (
    DjangoSecurityEventRepository,
)

ADMIN_KEY = "test-admin-key"


class FrozenClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, now=None):
        self._now = now or timezone.now()

    def now(self):
        return self._now

    def advance(self, **kwargs):
        self._now = self._now + timedelta(**kwargs)


class RecordingEventHandler(EventHandler):
    """Collects every event it receives."""

    def __init__(self):
        self.events: List[DomainEvent] = []

    async def handle(self, event: DomainEvent) -> None:
        self.events.append(event)


@pytest.fixture
def clock():
    """Fixture for a frozen clock set to the current time."""
    return FrozenClock()


@pytest.fixture
def event_bus():
    """Fixture for an isolated in-memory event bus."""
    return InMemoryEventBus()


@pytest.fixture
def published_events(event_bus):
    """Events published on the ``event_bus`` fixture, in order."""
    recorder = RecordingEventHandler()
    for event_type in ALL_EVENTS:
        event_bus.subscribe(event_type, recorder)
    return recorder.events


@pytest.fixture
def license_key_repository():
    """Fixture for LicenseKeyRepository."""
    return DjangoLicenseKeyRepository()


@pytest.fixture
def attempt_repository():
    """Fixture for ActivationAttemptRepository."""
    return DjangoActivationAttemptRepository()


@pytest.fixture
def security_event_repository():
    """Fixture for SecurityEventRepository."""
    return DjangoSecurityEventRepository()


@pytest.fixture
def status_report_repository():
    """Fixture for StatusReportRepository."""
    return DjangoStatusReportRepository()


@pytest.fixture
def sample_license_key():
    """Fixture for an unsaved pending LicenseKey entity."""
    return LicenseKey.create(
        key=generate_license_key(),
        assigned_to="Jane Doe",
        assigned_email="jane@example.com",
        max_activations=2,
    )


@pytest.fixture
def make_license_key(db, license_key_repository):
    """
    Factory for license keys saved in the database.

    Any status can be requested; counters and binding are written as given.
    """

    def _make(
        status=LicenseStatus.ACTIVE,
        max_activations=1,
        current_activations=0,
        expires_at=None,
        bound_hardware_id=None,
        assigned_to="Jane Doe",
        assigned_email="jane@example.com",
        key=None,
    ):
        license_key = LicenseKey.create(
            key=key or generate_license_key(),
            assigned_to=assigned_to,
            assigned_email=assigned_email,
            max_activations=max_activations,
            expires_at=expires_at,
        )
        license_key = replace(
            license_key,
            status=status,
            current_activations=current_activations,
            bound_hardware_id=bound_hardware_id,
        )
        return async_to_sync(license_key_repository.add)(license_key)

    return _make


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def admin_client():
    """Fixture for DRF API client carrying the admin key."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.credentials(HTTP_X_ADMIN_KEY=ADMIN_KEY, HTTP_X_ADMIN_USER="ops@example.com")
    return client
