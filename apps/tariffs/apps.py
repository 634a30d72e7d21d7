"""Tariffs app configuration."""

from django.apps import AppConfig


class TariffsConfig(AppConfig):
    """Configuration for the tariff rule store application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.tariffs"
    verbose_name = "Tariff rules"
