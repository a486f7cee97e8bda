"""
Model registration for the security app.
"""
from security.infrastructure.models import SecurityEvent  # noqa: F401
