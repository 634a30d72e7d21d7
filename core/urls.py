"""
URL configuration for the customs simulator project.

Only the Django admin is routed here; administrators use it to maintain
the rule store (tariff lines, ISC rules, year-scoped admin fees).
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path("admin/", admin.site.urls),
]
