"""
Models for the tariff rule store.

Rows are keyed by tariff line, origin country and a validity window. A row
is current on a date when ``valid_from <= date`` and ``valid_to`` is null
or on/after that date; among current rows the latest ``valid_from`` wins.
"""

from __future__ import annotations

import datetime
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from services.customs.rounding import normalize_hs10
from services.customs.types import ChargeMode, IscSystem, RemedyType

RATE_VALIDATORS = [MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))]


class ValidityQuerySet(models.QuerySet):
    """QuerySet for rows with a validity window."""

    def current(self, as_of: datetime.date) -> ValidityQuerySet:
        """Rows in force on ``as_of``, most recently effective first."""
        return self.filter(
            Q(valid_to__isnull=True) | Q(valid_to__gte=as_of),
            valid_from__lte=as_of,
        ).order_by("-valid_from", "-id")


class ValidityWindow(models.Model):
    """Abstract base for time-bound rule rows."""

    valid_from = models.DateField(default=timezone.localdate)
    valid_to = models.DateField(
        null=True,
        blank=True,
        help_text="Last day in force; empty means open-ended",
    )

    objects = ValidityQuerySet.as_manager()

    class Meta:
        """Meta options for ValidityWindow."""

        abstract = True


class Tariff(models.Model):
    """National tariff line (subpartida nacional, HS10)."""

    hs10 = models.CharField(
        max_length=10,
        unique=True,
        help_text="10-digit code, digits only",
    )
    description = models.TextField()
    mfn_rate = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        default=Decimal("0"),
        validators=RATE_VALIDATORS,
        help_text="Ad-valorem MFN rate as a fraction (0.06 for 6%)",
    )

    class Meta:
        """Meta options for Tariff model."""

        db_table = "tariffs"
        ordering = ["hs10"]

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.hs10} - {self.description[:60]}"

    def save(self, *args: object, **kwargs: object) -> None:
        """Store the code digits-only so lookups can match it exactly."""
        self.hs10 = normalize_hs10(self.hs10)
        super().save(*args, **kwargs)


class FtaRate(ValidityWindow):
    """Preferential rate under a trade agreement for one origin country."""

    tariff = models.ForeignKey(Tariff, on_delete=models.CASCADE, related_name="fta_rates")
    country = models.CharField(max_length=2, help_text="ISO 3166-1 alpha-2 origin")
    agreement = models.CharField(max_length=100, blank=True, default="")
    rate = models.DecimalField(max_digits=7, decimal_places=4, validators=RATE_VALIDATORS)

    class Meta:
        """Meta options for FtaRate model."""

        db_table = "fta_rates"
        indexes = [
            models.Index(fields=["tariff", "country", "valid_from"], name="fta_rates_lookup_idx")
        ]

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.tariff_id} {self.country} {self.rate}"


class IscRuleRow(ValidityWindow):
    """
    Excise (ISC) rule for a tariff line.

    ``params`` holds the strength bands of mixed rules::

        {"bands": [{"max_strength": 6, "specific_amount": "2.50",
                    "ad_valorem_rate": "0.25"}, ...]}
    """

    tariff = models.ForeignKey(Tariff, on_delete=models.CASCADE, related_name="isc_rules")
    system = models.CharField(
        max_length=20,
        choices=[(s.value, s.value) for s in IscSystem],
        default=IscSystem.NONE.value,
    )
    ad_valorem_rate = models.DecimalField(
        max_digits=7, decimal_places=4, null=True, blank=True, validators=RATE_VALIDATORS
    )
    specific_amount = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Amount per unit in soles",
    )
    unit = models.CharField(max_length=10, blank=True, default="")
    params = models.JSONField(default=dict, blank=True)

    class Meta:
        """Meta options for IscRuleRow model."""

        db_table = "isc_rules"
        verbose_name = "ISC rule"

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.tariff_id} ISC {self.system}"


class VatExemption(ValidityWindow):
    """IGV/IPM exemption of a tariff line."""

    tariff = models.ForeignKey(
        Tariff, on_delete=models.CASCADE, related_name="vat_exemptions"
    )
    legal_basis = models.CharField(max_length=200, blank=True, default="")

    class Meta:
        """Meta options for VatExemption model."""

        db_table = "vat_exempt"

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.tariff_id} exonerada"


class TradeRemedy(ValidityWindow):
    """Antidumping or countervailing duty for a tariff line and origin."""

    tariff = models.ForeignKey(
        Tariff, on_delete=models.CASCADE, related_name="trade_remedies"
    )
    country = models.CharField(max_length=2)
    type = models.CharField(max_length=3, choices=[(t.value, t.value) for t in RemedyType])
    mode = models.CharField(
        max_length=20, choices=[(m.value, m.value) for m in ChargeMode]
    )
    rate_or_amount = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        help_text="Rate for ad_valorem, soles per unit for specific",
    )
    unit = models.CharField(max_length=10, blank=True, default="")

    class Meta:
        """Meta options for TradeRemedy model."""

        db_table = "trade_remedies"
        verbose_name_plural = "Trade remedies"

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.tariff_id} {self.country} {self.type}/{self.mode}"


class PermitRequirement(models.Model):
    """Permit an authority requires before clearing a tariff line."""

    tariff = models.ForeignKey(Tariff, on_delete=models.CASCADE, related_name="permits")
    authority = models.CharField(max_length=100)
    note = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        """Meta options for PermitRequirement model."""

        db_table = "permits_map"
        ordering = ["id"]

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.tariff_id} {self.authority}"


class AdminFee(models.Model):
    """UIT value and SDA constants for a calendar year."""

    year = models.PositiveSmallIntegerField(unique=True)
    uit_value = models.DecimalField(max_digits=12, decimal_places=2)
    sda_rate_import = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        validators=RATE_VALIDATORS,
        help_text="SDA as a fraction of one UIT (0.0235)",
    )
    threshold_cif_in_uit = models.DecimalField(
        max_digits=7,
        decimal_places=2,
        help_text="CIF threshold, in UITs, above which SDA applies",
    )

    class Meta:
        """Meta options for AdminFee model."""

        db_table = "admin_fees"
        ordering = ["-year"]

    def __str__(self) -> str:
        """Return string representation."""
        return f"UIT {self.year}: {self.uit_value}"


class ConsumptionTaxRate(models.Model):
    """Rate of one VAT-family tax (IGV or IPM)."""

    class Code(models.TextChoices):
        """VAT-family tax codes."""

        IGV = "IGV", "Impuesto General a las Ventas"
        IPM = "IPM", "Impuesto de Promoción Municipal"

    code = models.CharField(max_length=3, choices=Code.choices, unique=True)
    rate = models.DecimalField(max_digits=5, decimal_places=4, validators=RATE_VALIDATORS)

    class Meta:
        """Meta options for ConsumptionTaxRate model."""

        db_table = "impuesto"

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.code} {self.rate}"
