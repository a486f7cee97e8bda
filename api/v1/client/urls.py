"""
URL configuration for client API endpoints.
"""

from django.urls import path

from api.v1.client import views

app_name = "client"

urlpatterns = [
    path(
        "licenses/validate",
        views.ValidateLicenseView.as_view(),
        name="validate-license",
    ),
    path(
        "status",
        views.ReportStatusView.as_view(),
        name="report-status",
    ),
]
