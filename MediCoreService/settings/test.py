"""
Test settings for MediCoreService.

In-memory SQLite and LocMem cache by default; CI points ``DATABASE_URL``
at PostgreSQL to exercise the conditional usage updates under real row
locking.
"""

import os
import urllib.parse

from .base import *  # noqa: F403, F401

DEBUG = False

DATABASE_URL = os.environ.get("DATABASE_URL", "")
if DATABASE_URL.startswith("postgresql"):
    _url = urllib.parse.urlparse(DATABASE_URL)
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _url.path.lstrip("/"),
            "USER": _url.username or "postgres",
            "PASSWORD": _url.password or "",
            "HOST": _url.hostname or "localhost",
            "PORT": _url.port or 5432,
        }
    }
else:
    DATABASES = {"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}}

CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LICENSE_ACTIVATION_SECRET = "test-activation-secret"
LICENSE_DEFAULT_LIMITS = {}
CELERY_TASK_ALWAYS_EAGER = True

LOGGING_CONFIG = None
