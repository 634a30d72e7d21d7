"""User models for the accounts application."""

from django.contrib.auth.models import AbstractUser
from django.db import models

from services.customs.types import ImporterProfile


class User(AbstractUser):
    """
    Custom user model extending Django's AbstractUser.

    Carries the importer classification used as the perception default
    when an operation does not state one.
    """

    ruc = models.CharField(
        max_length=11,
        blank=True,
        default="",
        help_text="Taxpayer number (RUC) of the importer",
    )
    importer_profile = models.CharField(
        max_length=20,
        choices=[(p.value, p.label) for p in ImporterProfile],
        default=ImporterProfile.NORMAL.value,
        help_text="Importer classification for IGV perception",
    )

    class Meta:
        """Meta options for User model."""

        db_table = "users"
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self) -> str:
        """Return string representation of user."""
        return self.username
