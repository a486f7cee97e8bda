"""
Integration tests for the admin API.
"""

import uuid
from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from core.domain.value_objects import LicenseStatus
from licenses.infrastructure.models import LicenseKey as LicenseKeyModel
from security.infrastructure.models import SecurityEvent as SecurityEventModel


def detail_url(name, license_key):
    return reverse(f"admin-api:{name}", kwargs={"license_key_id": license_key.id})


def raise_invalid_key_event(api_client):
    api_client.post(
        reverse("client:validate-license"),
        {"license_key": "NOPE0-NOPE0-NOPE0-NOPE0"},
        format="json",
    )
    return SecurityEventModel.objects.get(event_type="invalid_key")


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminAuthentication:
    """Integration tests for the admin API key check."""

    def test_missing_key(self, api_client):
        response = api_client.get(reverse("admin-api:licenses"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "INVALID_API_KEY"

    def test_wrong_key(self, api_client):
        api_client.credentials(HTTP_X_ADMIN_KEY="not-the-key")

        response = api_client.get(reverse("admin-api:licenses"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "INVALID_API_KEY"

    def test_valid_key(self, api_client, settings):
        api_client.credentials(HTTP_X_ADMIN_KEY=settings.ADMIN_API_KEY)

        response = api_client.get(reverse("admin-api:licenses"))

        assert response.status_code == status.HTTP_200_OK

    def test_client_api_needs_no_key(self, api_client):
        response = api_client.post(
            reverse("client:validate-license"), {"license_key": "NOPE"}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminLicenses:
    """Integration tests for license administration endpoints."""

    def test_issue(self, admin_client):
        response = admin_client.post(
            reverse("admin-api:licenses"),
            {
                "assigned_to": "Jane Doe",
                "assigned_email": "jane@example.com",
                "max_activations": 3,
                "notes": "annual plan",
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "pending"
        assert data["max_activations"] == 3
        assert data["current_activations"] == 0
        assert data["created_by"] == "ops@example.com"
        assert LicenseKeyModel.objects.filter(key=data["key"]).exists()

    def test_issue_active(self, admin_client):
        expires_at = timezone.now() + timedelta(days=365)

        response = admin_client.post(
            reverse("admin-api:licenses"),
            {"initial_status": "active", "expires_at": expires_at.isoformat()},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["status"] == "active"

    @pytest.mark.parametrize(
        "payload",
        [
            {"max_activations": 0},
            {"initial_status": "revoked"},
            {"assigned_email": "not-an-email"},
        ],
    )
    def test_issue_invalid(self, admin_client, payload):
        response = admin_client.post(reverse("admin-api:licenses"), payload, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert LicenseKeyModel.objects.count() == 0

    def test_list_with_status_filter(self, admin_client, make_license_key):
        make_license_key(status=LicenseStatus.PENDING)
        active = make_license_key(status=LicenseStatus.ACTIVE)

        response = admin_client.get(reverse("admin-api:licenses"), {"status": "active"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["id"] == str(active.id)

    def test_list_invalid_status(self, admin_client):
        response = admin_client.get(reverse("admin-api:licenses"), {"status": "bogus"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_get(self, admin_client, make_license_key):
        license_key = make_license_key()

        response = admin_client.get(detail_url("license-detail", license_key))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["key"] == license_key.key

    def test_get_unknown(self, admin_client):
        response = admin_client.get(
            reverse("admin-api:license-detail", kwargs={"license_key_id": uuid.uuid4()})
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_patch(self, admin_client, make_license_key):
        license_key = make_license_key(max_activations=1)

        response = admin_client.patch(
            detail_url("license-detail", license_key),
            {"max_activations": 4, "notes": "upgraded"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["max_activations"] == 4
        assert response.json()["notes"] == "upgraded"

    def test_patch_ignores_status(self, admin_client, make_license_key):
        license_key = make_license_key(status=LicenseStatus.PENDING)

        response = admin_client.patch(
            detail_url("license-detail", license_key), {"status": "active"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert LicenseKeyModel.objects.get(id=license_key.id).status == "pending"

    def test_patch_below_current_activations(self, admin_client, make_license_key):
        license_key = make_license_key(max_activations=3, current_activations=3)

        response = admin_client.patch(
            detail_url("license-detail", license_key), {"max_activations": 2}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INVALID_LICENSE_UPDATE"

    def test_activate(self, admin_client, make_license_key):
        license_key = make_license_key(status=LicenseStatus.PENDING)

        response = admin_client.post(detail_url("activate-license", license_key))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "active"

    def test_activate_revoked(self, admin_client, make_license_key):
        license_key = make_license_key(status=LicenseStatus.REVOKED)

        response = admin_client.post(detail_url("activate-license", license_key))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]["code"] == "INVALID_LICENSE_STATUS"

    def test_revoke_twice(self, admin_client, make_license_key):
        license_key = make_license_key()
        url = detail_url("revoke-license", license_key)

        first = admin_client.post(url, {"reason": "refund"}, format="json")
        second = admin_client.post(url, {}, format="json")

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_200_OK
        assert second.json()["status"] == "revoked"

    def test_reissue(self, admin_client, make_license_key):
        original = make_license_key(status=LicenseStatus.REVOKED, max_activations=2)

        response = admin_client.post(
            detail_url("reissue-license", original), {"max_activations": 5}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "active"
        assert data["max_activations"] == 5
        assert data["reissued_from_id"] == str(original.id)
        assert LicenseKeyModel.objects.get(id=original.id).status == "revoked"

    def test_reissue_past_expiry_rejected(self, admin_client, make_license_key):
        original = make_license_key(
            status=LicenseStatus.EXPIRED, expires_at=timezone.now() - timedelta(days=1)
        )

        response = admin_client.post(detail_url("reissue-license", original), {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INVALID_LICENSE_UPDATE"
        assert LicenseKeyModel.objects.count() == 1

    def test_attempts(self, admin_client, api_client, make_license_key):
        license_key = make_license_key(max_activations=1)
        for hardware_id in ("HW-A", "HW-B"):
            api_client.post(
                reverse("client:validate-license"),
                {"license_key": license_key.key, "hardware_id": hardware_id},
                format="json",
            )

        response = admin_client.get(detail_url("license-attempts", license_key))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 2
        assert sorted(a["success"] for a in data["results"]) == [False, True]

    def test_stats(self, admin_client, make_license_key):
        make_license_key(status=LicenseStatus.PENDING)
        make_license_key(expires_at=timezone.now() + timedelta(days=2))

        response = admin_client.get(reverse("admin-api:license-stats"))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        assert data["by_status"]["pending"] == 1
        assert data["expiring_soon"] == 1

    def test_expiring(self, admin_client, make_license_key):
        soon = make_license_key(expires_at=timezone.now() + timedelta(days=2))
        make_license_key(expires_at=timezone.now() + timedelta(days=40))

        response = admin_client.get(reverse("admin-api:expiring-licenses"), {"days": 10})

        assert response.status_code == status.HTTP_200_OK
        assert [item["id"] for item in response.json()] == [str(soon.id)]


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminSecurityEvents:
    """Integration tests for security event endpoints."""

    def test_list_and_resolve(self, admin_client, api_client):
        event = raise_invalid_key_event(api_client)

        listed = admin_client.get(reverse("admin-api:security-events"), {"unresolved": "true"})
        assert listed.status_code == status.HTTP_200_OK
        assert [e["id"] for e in listed.json()["results"]] == [str(event.id)]

        resolved = admin_client.post(
            reverse("admin-api:resolve-security-event", kwargs={"event_id": event.id}),
            {},
            format="json",
        )
        assert resolved.status_code == status.HTTP_200_OK
        assert resolved.json()["resolved"] is True
        assert resolved.json()["resolved_by"] == "ops@example.com"

        listed = admin_client.get(reverse("admin-api:security-events"), {"unresolved": "true"})
        assert listed.json()["count"] == 0

    def test_resolve_twice(self, admin_client, api_client):
        event = raise_invalid_key_event(api_client)
        url = reverse("admin-api:resolve-security-event", kwargs={"event_id": event.id})
        admin_client.post(url, {}, format="json")

        response = admin_client.post(url, {}, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]["code"] == "SECURITY_EVENT_ALREADY_RESOLVED"

    def test_resolve_unknown(self, admin_client):
        response = admin_client.post(
            reverse("admin-api:resolve-security-event", kwargs={"event_id": uuid.uuid4()}),
            {},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "SECURITY_EVENT_NOT_FOUND"

    def test_stats(self, admin_client, api_client):
        raise_invalid_key_event(api_client)

        response = admin_client.get(reverse("admin-api:security-stats"))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["total"] == 1
        assert response.json()["unresolved"] == 1


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminMaintenance:
    """Integration tests for on-demand maintenance endpoints."""

    def test_sweep(self, admin_client, make_license_key):
        due = make_license_key(expires_at=timezone.now() - timedelta(hours=1))

        response = admin_client.post(reverse("admin-api:sweep-expirations"), {}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["count"] == 1
        assert response.json()["dry_run"] is False
        assert LicenseKeyModel.objects.get(id=due.id).status == "expired"

    def test_sweep_dry_run(self, admin_client, make_license_key):
        due = make_license_key(expires_at=timezone.now() - timedelta(hours=1))

        response = admin_client.post(
            reverse("admin-api:sweep-expirations"), {"dry_run": True}, format="json"
        )

        assert response.json()["license_key_ids"] == [str(due.id)]
        assert LicenseKeyModel.objects.get(id=due.id).status == "active"

    def test_purge(self, admin_client, make_license_key):
        old = make_license_key(
            status=LicenseStatus.EXPIRED, expires_at=timezone.now() - timedelta(days=60)
        )

        response = admin_client.post(
            reverse("admin-api:purge-expired"), {"retention_days": 30}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["count"] == 1
        assert not LicenseKeyModel.objects.filter(id=old.id).exists()

    def test_purge_negative_retention(self, admin_client):
        response = admin_client.post(
            reverse("admin-api:purge-expired"), {"retention_days": -1}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
