"""
Celery configuration for background tasks.

Used for the scheduled license jobs: monthly usage reset and the daily
expiry sweep.
"""
import os

from celery import Celery
from celery.schedules import crontab

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "MediCoreService.settings.base")

app = Celery("MediCoreService")

# Load configuration from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "reset-monthly-usage": {
        "task": "licenses.tasks.reset_monthly_usage_task",
        "schedule": crontab(minute=5, hour=0, day_of_month=1),
    },
    "expire-overdue-licenses": {
        "task": "licenses.tasks.expire_licenses_task",
        "schedule": crontab(minute=15, hour=0),
    },
}
