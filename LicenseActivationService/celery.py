"""
Celery configuration for background tasks.

Used for notification delivery and the scheduled license maintenance runs.
"""
import os

from celery import Celery

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "LicenseActivationService.settings.dev")

app = Celery("LicenseActivationService")

# Load configuration from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Tasks live in core.tasks
app.autodiscover_tasks(["core"])
