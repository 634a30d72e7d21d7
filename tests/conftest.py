"""
Pytest configuration and fixtures for the test suite.

This module contains shared fixtures used across all tests.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

import pytest
from django.utils import timezone

from services.customs.types import AdminFees, RuleProfile, VatRates

if TYPE_CHECKING:
    from collections.abc import Callable

    from apps.accounts.models import User
    from apps.cases.models import StudyCase
    from apps.tariffs.models import AdminFee, Tariff

ADMIN_FEES = AdminFees(
    year=2025,
    uit=Decimal("5350"),
    sda_rate=Decimal("0.0235"),
    threshold_uit=Decimal("3"),
)


@pytest.fixture()
def make_profile() -> Callable[..., RuleProfile]:
    """Build an in-memory rule profile; keyword arguments override defaults."""

    def factory(**overrides: Any) -> RuleProfile:
        values: dict[str, Any] = {
            "tariff_id": 1,
            "hs10": "4819100000",
            "description": "Cajas de papel o cartón corrugado",
            "mfn_rate": Decimal("0.06"),
            "admin_fees": ADMIN_FEES,
            "vat_rates": VatRates(),
        }
        values.update(overrides)
        return RuleProfile(**values)

    return factory


@pytest.fixture()
def user(db: None) -> User:
    """Create a regular user."""
    from apps.accounts.models import User

    return User.objects.create_user(username="importer", email="importer@example.com", password="x")


@pytest.fixture()
def other_user(db: None) -> User:
    """Create a second user that owns nothing of the first."""
    from apps.accounts.models import User

    return User.objects.create_user(username="intruder", email="intruder@example.com", password="x")


@pytest.fixture()
def admin_fee(db: None) -> AdminFee:
    """Admin fees for the current year."""
    from apps.tariffs.models import AdminFee

    return AdminFee.objects.create(
        year=timezone.localdate().year,
        uit_value=Decimal("5350"),
        sda_rate_import=Decimal("0.0235"),
        threshold_cif_in_uit=Decimal("3"),
    )


@pytest.fixture()
def tariff(db: None) -> Tariff:
    """Corrugated boxes, 6 % MFN."""
    from apps.tariffs.models import Tariff

    return Tariff.objects.create(
        hs10="4819.10.00.00",
        description="Cajas de papel o cartón corrugado",
        mfn_rate=Decimal("0.06"),
    )


@pytest.fixture()
def study_case(user: User) -> StudyCase:
    """Study case owned by ``user``."""
    from apps.cases.models import StudyCase

    return StudyCase.objects.create(user=user, name="Importación de cajas")
