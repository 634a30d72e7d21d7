"""
Production settings for the customs simulator project.

SECRET_KEY and DATABASE_URL must come from the environment.
"""

import os

import dj_database_url

from core.logging import configure_logging

from .base import *

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ["SECRET_KEY"]

DEBUG = False

# Database - DATABASE_URL first, then the DB_ settings section
_db = APP_SETTINGS.database
DATABASES = {
    "default": dj_database_url.config(
        default=_db.connection_url,
        conn_max_age=600,
        conn_health_checks=True,
        ssl_require=True,
    )
}
DATABASES["default"].setdefault("OPTIONS", {})["options"] = (
    f"-c search_path={_db.schema_name},public"
)

# Logging: JSON format for log aggregation
configure_logging(json_format=True, log_level=APP_SETTINGS.logging.level)
