"""Study cases app configuration."""

from django.apps import AppConfig


class CasesConfig(AppConfig):
    """Configuration for the study cases application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.cases"
    verbose_name = "Study cases"
