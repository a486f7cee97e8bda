"""
Model registration for the licenses app.
"""
from licenses.infrastructure.models import LicenseKey, StatusReport  # noqa: F401
