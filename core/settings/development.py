"""
Development settings for the customs simulator project.

These settings are used during local development.
"""

import dj_database_url

from core.logging import configure_from_settings

from .base import *

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# Database - prefer DATABASE_URL, fallback to individual params
_db = APP_SETTINGS.database
if _db.url:
    DATABASES = {"default": dj_database_url.parse(_db.url)}
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _db.name,
            "USER": _db.user,
            "PASSWORD": _db.password.get_secret_value(),
            "HOST": _db.host,
            "PORT": str(_db.port),
        }
    }
DATABASES["default"].setdefault("OPTIONS", {})["options"] = (
    f"-c search_path={_db.schema_name},public"
)

# DRF - add browsable API in development
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = [
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
]

# Logging
configure_from_settings(APP_SETTINGS.logging)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "DEBUG",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}
