"""Admin configuration for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):  # type: ignore[type-arg]
    """Admin configuration for custom User model."""

    list_display = ("username", "email", "ruc", "importer_profile", "is_active")
    list_filter = ("importer_profile", "is_active")
    search_fields = ("username", "email", "ruc")
    ordering = ("-date_joined",)


UserAdmin.fieldsets = (
    *tuple(BaseUserAdmin.fieldsets or ()),
    (
        "Importer",
        {
            "fields": ("ruc", "importer_profile"),
        },
    ),
)
