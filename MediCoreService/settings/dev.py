"""
Development settings for MediCoreService.

``DB_ENGINE=sqlite`` runs without PostgreSQL; the LocMem cache replaces
Redis so grants and license status caching work without services.
"""
import os

from .base import *  # noqa: F403, F401

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0"]

if os.environ.get("DB_ENGINE") == "sqlite":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",  # noqa: F405
        }
    }

if not os.environ.get("REDIS_URL"):
    CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

# Short TTL so role edits show up quickly while developing.
AUTHORIZATION_CACHE_TTL = 30

LICENSE_ACTIVATION_SECRET = os.environ.get(
    "LICENSE_ACTIVATION_SECRET", "medicore-dev-activation-secret"
)
