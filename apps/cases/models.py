"""
Models for study cases and the operations they group.

A study case belongs to one user and holds imports (with their computed
taxes), exports or domestic sales, and expenses.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from services.customs.types import ImporterProfile

MONEY = {"max_digits": 16, "decimal_places": 2}
RATE = {"max_digits": 9, "decimal_places": 6}
NON_NEGATIVE = [MinValueValidator(Decimal("0"))]


class Currency(models.TextChoices):
    """Currencies supported by the records."""

    USD = "USD", "Dólares"
    PEN = "PEN", "Soles"


class StudyCase(models.Model):
    """Simulated trade scenario owned by a user."""

    class Status(models.TextChoices):
        """Study case status."""

        ACTIVE = "activo", "Activo"
        CLOSED = "cerrado", "Cerrado"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="study_cases",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Meta options for StudyCase model."""

        db_table = "casos_de_estudio"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        """Return string representation."""
        return self.name


class ImportOperation(models.Model):
    """
    Import registered from a simulation.

    Keeps the inputs and overrides the user supplied next to the computed
    amounts, all in ``currency`` (the operating currency of the simulation).
    """

    study_case = models.ForeignKey(StudyCase, on_delete=models.CASCADE, related_name="imports")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="imports",
    )
    hs10 = models.CharField(max_length=10)
    description = models.CharField(max_length=255, blank=True, default="")
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)

    # Inputs
    fob = models.DecimalField(**MONEY, null=True, blank=True, validators=NON_NEGATIVE)
    freight = models.DecimalField(**MONEY, null=True, blank=True, validators=NON_NEGATIVE)
    insurance = models.DecimalField(**MONEY, null=True, blank=True, validators=NON_NEGATIVE)
    origin_country = models.CharField(max_length=2, blank=True, default="")
    fx_rate = models.DecimalField(**RATE, null=True, blank=True)
    use_fta = models.BooleanField(default=False)
    quantity = models.DecimalField(max_digits=16, decimal_places=4, null=True, blank=True)
    quantity_unit = models.CharField(max_length=10, blank=True, default="")
    alcohol_strength = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    importer_profile = models.CharField(
        max_length=20,
        choices=[(p.value, p.label) for p in ImporterProfile],
        default=ImporterProfile.NORMAL.value,
    )
    is_used = models.BooleanField(default=False)

    # Overrides (null = policy default)
    vat_enabled = models.BooleanField(null=True, blank=True)
    excise_enabled = models.BooleanField(null=True, blank=True)
    perception_enabled = models.BooleanField(null=True, blank=True)
    duty_rate_override = models.DecimalField(**RATE, null=True, blank=True)
    excise_rate_override = models.DecimalField(**RATE, null=True, blank=True)
    perception_rate_override = models.DecimalField(**RATE, null=True, blank=True)
    antidumping_usd = models.DecimalField(**MONEY, null=True, blank=True)
    countervailing_usd = models.DecimalField(**MONEY, null=True, blank=True)
    sda_usd = models.DecimalField(**MONEY, null=True, blank=True)

    # Computed
    cif = models.DecimalField(**MONEY)
    duty_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    excise_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    igv_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    ipm_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    trade_remedies_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    sda_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    perception_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    customs_debt = models.DecimalField(**MONEY, default=Decimal("0"))
    payable_at_border = models.DecimalField(**MONEY, default=Decimal("0"))
    notes = models.JSONField(default=list, blank=True)
    accounting_entry = models.JSONField(null=True, blank=True)

    operation_date = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Meta options for ImportOperation model."""

        db_table = "importaciones"
        ordering = ["-operation_date", "-id"]

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.hs10} {self.cif} {self.currency}"


class ImportTaxLine(models.Model):
    """One tax concept computed for an import."""

    import_operation = models.ForeignKey(
        ImportOperation,
        on_delete=models.CASCADE,
        related_name="tax_lines",
    )
    concept = models.CharField(max_length=40)
    taxable_base = models.DecimalField(max_digits=18, decimal_places=4)
    rate = models.DecimalField(**RATE, null=True, blank=True)
    amount = models.DecimalField(**MONEY)

    class Meta:
        """Meta options for ImportTaxLine model."""

        db_table = "importacion_tributos"
        ordering = ["id"]

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.concept}: {self.amount}"


class ExportOperation(models.Model):
    """Export or domestic sale of a study case."""

    study_case = models.ForeignKey(StudyCase, on_delete=models.CASCADE, related_name="exports")
    is_domestic_sale = models.BooleanField(default=False)
    incoterm = models.CharField(max_length=3, blank=True, default="")
    description = models.CharField(max_length=255)
    sale_value = models.DecimalField(**MONEY, validators=NON_NEGATIVE)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)
    operation_date = models.DateField(default=timezone.localdate)
    origin_country = models.CharField(max_length=2, blank=True, default="")
    destination_country = models.CharField(max_length=2, blank=True, default="")

    class Meta:
        """Meta options for ExportOperation model."""

        db_table = "exportaciones"
        ordering = ["-operation_date", "-id"]

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.description} {self.sale_value} {self.currency}"


class ExpenseClassification(models.Model):
    """Free-text expense classification (operativo, administrativo, ...)."""

    name = models.CharField(max_length=50, unique=True)

    class Meta:
        """Meta options for ExpenseClassification model."""

        db_table = "clasificacion_gastos"

    def __str__(self) -> str:
        """Return string representation."""
        return self.name


class Expense(models.Model):
    """Expense of a study case."""

    study_case = models.ForeignKey(StudyCase, on_delete=models.CASCADE, related_name="expenses")
    classification = models.ForeignKey(
        ExpenseClassification,
        on_delete=models.PROTECT,
        related_name="expenses",
    )
    description = models.CharField(max_length=255)
    account_code = models.CharField(max_length=10, blank=True, default="")
    amount = models.DecimalField(**MONEY, validators=NON_NEGATIVE)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)
    expense_date = models.DateField(default=timezone.localdate)

    class Meta:
        """Meta options for Expense model."""

        db_table = "gastos"
        ordering = ["-expense_date", "-id"]

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.description} {self.amount} {self.currency}"
