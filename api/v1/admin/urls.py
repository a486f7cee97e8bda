"""
URL configuration for admin API endpoints.
"""

from django.urls import path

from api.v1.admin import views

app_name = "admin-api"

urlpatterns = [
    path("licenses", views.LicenseListCreateView.as_view(), name="licenses"),
    path("licenses/stats", views.LicenseStatsView.as_view(), name="license-stats"),
    path("licenses/expiring", views.ExpiringLicensesView.as_view(), name="expiring-licenses"),
    path(
        "licenses/<uuid:license_key_id>",
        views.LicenseDetailView.as_view(),
        name="license-detail",
    ),
    path(
        "licenses/<uuid:license_key_id>/activate",
        views.ActivateLicenseKeyView.as_view(),
        name="activate-license",
    ),
    path(
        "licenses/<uuid:license_key_id>/revoke",
        views.RevokeLicenseKeyView.as_view(),
        name="revoke-license",
    ),
    path(
        "licenses/<uuid:license_key_id>/reissue",
        views.ReissueLicenseKeyView.as_view(),
        name="reissue-license",
    ),
    path(
        "licenses/<uuid:license_key_id>/attempts",
        views.LicenseAttemptsView.as_view(),
        name="license-attempts",
    ),
    path("security/events", views.SecurityEventListView.as_view(), name="security-events"),
    path(
        "security/events/<uuid:event_id>/resolve",
        views.ResolveSecurityEventView.as_view(),
        name="resolve-security-event",
    ),
    path("security/stats", views.SecurityStatsView.as_view(), name="security-stats"),
    path("maintenance/sweep", views.SweepExpirationsView.as_view(), name="sweep-expirations"),
    path("maintenance/purge", views.PurgeExpiredLicensesView.as_view(), name="purge-expired"),
]
