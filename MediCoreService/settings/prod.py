"""
Production settings for MediCoreService.
"""

import os

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403, F401

DEBUG = False

ALLOWED_HOSTS = [host for host in os.environ.get("ALLOWED_HOSTS", "").split(",") if host]

if not os.environ.get("SECRET_KEY"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production")

# Activation codes issued under one secret stop verifying if it changes,
# so it must not silently fall back to SECRET_KEY here.
if not LICENSE_ACTIVATION_SECRET:  # noqa: F405
    raise ImproperlyConfigured("LICENSE_ACTIVATION_SECRET must be set in production")

SECURE_SSL_REDIRECT = True
SECURE_HSTS_SECONDS = 60 * 60 * 24 * 30
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

LOGGING["handlers"]["file"] = {  # noqa: F405
    "class": "logging.handlers.RotatingFileHandler",
    "filename": os.environ.get("LOG_FILE", "/var/log/medicore/app.log"),
    "maxBytes": 10 * 1024 * 1024,
    "backupCount": 10,
    "formatter": "json",
}
LOGGING["root"]["handlers"].append("file")  # noqa: F405
for _name in ("licenses", "access"):
    LOGGING["loggers"][_name]["handlers"].append("file")  # noqa: F405
