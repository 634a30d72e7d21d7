"""Admin configuration for the tariff rule store."""

from django.contrib import admin

from .models import (
    AdminFee,
    ConsumptionTaxRate,
    FtaRate,
    IscRuleRow,
    PermitRequirement,
    Tariff,
    TradeRemedy,
    VatExemption,
)


class FtaRateInline(admin.TabularInline):
    """Preferential rates edited inside the tariff line."""

    model = FtaRate
    extra = 0


class IscRuleInline(admin.TabularInline):
    """ISC rules edited inside the tariff line."""

    model = IscRuleRow
    extra = 0


class PermitInline(admin.TabularInline):
    """Permits edited inside the tariff line."""

    model = PermitRequirement
    extra = 0


@admin.register(Tariff)
class TariffAdmin(admin.ModelAdmin):
    """Admin configuration for Tariff model."""

    list_display = ("hs10", "description", "mfn_rate")
    search_fields = ("hs10", "description")
    inlines = (FtaRateInline, IscRuleInline, PermitInline)


@admin.register(TradeRemedy)
class TradeRemedyAdmin(admin.ModelAdmin):
    """Admin configuration for TradeRemedy model."""

    list_display = ("tariff", "country", "type", "mode", "rate_or_amount", "valid_from", "valid_to")
    list_filter = ("type", "mode", "country")
    search_fields = ("tariff__hs10",)


@admin.register(VatExemption)
class VatExemptionAdmin(admin.ModelAdmin):
    """Admin configuration for VatExemption model."""

    list_display = ("tariff", "legal_basis", "valid_from", "valid_to")
    search_fields = ("tariff__hs10",)


@admin.register(AdminFee)
class AdminFeeAdmin(admin.ModelAdmin):
    """Admin configuration for AdminFee model."""

    list_display = ("year", "uit_value", "sda_rate_import", "threshold_cif_in_uit")
    ordering = ("-year",)


@admin.register(ConsumptionTaxRate)
class ConsumptionTaxRateAdmin(admin.ModelAdmin):
    """Admin configuration for ConsumptionTaxRate model."""

    list_display = ("code", "rate")
