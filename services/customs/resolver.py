"""Rule profile resolver backed by the tariff rule store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from asgiref.sync import sync_to_async
from django.utils import timezone

from apps.tariffs.models import (
    AdminFee,
    ConsumptionTaxRate,
    FtaRate,
    IscRuleRow,
    PermitRequirement,
    Tariff,
    TradeRemedy,
    VatExemption,
)
from core.config import TaxSettings, get_settings
from core.errors import MissingConfigError, NotFoundError
from core.logging import get_logger
from services.customs.rounding import normalize_hs10, to_decimal
from services.customs.types import (
    AdminFees,
    ChargeMode,
    IscBand,
    IscRule,
    IscSystem,
    Permit,
    RemedyType,
    RuleProfile,
    TradeRemedyRule,
    VatRates,
)

if TYPE_CHECKING:
    import datetime
    from decimal import Decimal

logger = get_logger(__name__)


class RuleProfileResolver:
    """
    Loads the rule profile of a tariff line.

    Without an origin country the profile is scoped by tariff code only
    (USD-only variant: no FTA rate, no trade remedies). With one, the
    preferential rate and trade remedies for that origin are added
    (multi-country variant). Every call reads the rule store afresh.
    """

    def __init__(self, tax_settings: TaxSettings | None = None) -> None:
        """
        Initialize the resolver.

        Args:
            tax_settings: Source of the IGV/IPM fallback rates.
        """
        self._tax_settings = tax_settings or get_settings().tax

    def resolve(
        self,
        hs10: str,
        origin_country: str | None = None,
        as_of: datetime.date | None = None,
    ) -> RuleProfile:
        """
        Resolve the rule profile for a tariff line.

        Args:
            hs10: Tariff code, with or without separators.
            origin_country: ISO alpha-2 origin; enables FTA and AD/CVD lookups.
            as_of: Processing date (defaults to today).

        Returns:
            The RuleProfile in force on ``as_of``.

        Raises:
            NotFoundError: If the tariff line does not exist.
            MissingConfigError: If admin fees for the year are not configured.
        """
        as_of = as_of or timezone.localdate()
        code = normalize_hs10(hs10)
        country = origin_country.strip().upper() if origin_country else None

        tariff = Tariff.objects.filter(hs10=code).first() if code else None
        if tariff is None:
            raise NotFoundError(f"Subpartida no encontrada: {code or hs10!r}")

        logger.debug("Resolving rule profile", hs10=code, origin=country, as_of=str(as_of))

        fta_rate: Decimal | None = None
        remedies: tuple[TradeRemedyRule, ...] = ()
        if country:
            fta_rate = self._fta_rate(tariff, country, as_of)
            remedies = self._trade_remedies(tariff, country, as_of)

        return RuleProfile(
            tariff_id=tariff.pk,
            hs10=tariff.hs10,
            description=tariff.description,
            mfn_rate=tariff.mfn_rate,
            fta_rate=fta_rate,
            isc_rule=self._isc_rule(tariff, as_of),
            vat_exempt=VatExemption.objects.current(as_of).filter(tariff=tariff).exists(),
            trade_remedies=remedies,
            permits=tuple(
                Permit(authority=p.authority, note=p.note or None)
                for p in PermitRequirement.objects.filter(tariff=tariff)
            ),
            admin_fees=self._admin_fees(as_of.year),
            vat_rates=self._vat_rates(),
            origin_country=country,
        )

    async def aresolve(
        self,
        hs10: str,
        origin_country: str | None = None,
        as_of: datetime.date | None = None,
    ) -> RuleProfile:
        """Async variant of :meth:`resolve` for async request handlers."""
        return await sync_to_async(self.resolve)(hs10, origin_country, as_of)

    def _fta_rate(self, tariff: Tariff, country: str, as_of: datetime.date) -> Decimal | None:
        row = FtaRate.objects.current(as_of).filter(tariff=tariff, country=country).first()
        if row is None:
            logger.info("No preferential rate in force", hs10=tariff.hs10, origin=country)
            return None
        return row.rate

    def _isc_rule(self, tariff: Tariff, as_of: datetime.date) -> IscRule | None:
        row = IscRuleRow.objects.current(as_of).filter(tariff=tariff).first()
        if row is None:
            return None
        return IscRule(
            system=IscSystem(row.system),
            ad_valorem_rate=row.ad_valorem_rate,
            specific_amount=row.specific_amount,
            unit=row.unit or None,
            bands=parse_bands(row.params),
        )

    def _trade_remedies(
        self,
        tariff: Tariff,
        country: str,
        as_of: datetime.date,
    ) -> tuple[TradeRemedyRule, ...]:
        rows = TradeRemedy.objects.current(as_of).filter(tariff=tariff, country=country)
        return tuple(
            TradeRemedyRule(
                type=RemedyType(row.type),
                mode=ChargeMode(row.mode),
                rate_or_amount=row.rate_or_amount,
                unit=row.unit or None,
            )
            for row in rows
        )

    def _admin_fees(self, year: int) -> AdminFees:
        row = AdminFee.objects.filter(year=year).first()
        if row is None:
            logger.error("Admin fees not configured", year=year)
            raise MissingConfigError(f"Falta configurar admin_fees para el año {year}")
        return AdminFees(
            year=row.year,
            uit=row.uit_value,
            sda_rate=row.sda_rate_import,
            threshold_uit=row.threshold_cif_in_uit,
        )

    def _vat_rates(self) -> VatRates:
        rates = dict(ConsumptionTaxRate.objects.values_list("code", "rate"))
        return VatRates(
            igv=rates.get(ConsumptionTaxRate.Code.IGV, self._tax_settings.igv_rate),
            ipm=rates.get(ConsumptionTaxRate.Code.IPM, self._tax_settings.ipm_rate),
        )


def parse_bands(params: dict[str, Any] | None) -> tuple[IscBand, ...]:
    """
    Build ISC strength bands from a rule's JSON params.

    Entries without a numeric ``max_strength`` are skipped; the rest are
    ordered by ascending ``max_strength``.
    """
    if not params or not isinstance(params.get("bands"), list):
        return ()

    bands: list[IscBand] = []
    for raw in params["bands"]:
        if not isinstance(raw, dict):
            continue
        try:
            max_strength = to_decimal(raw["max_strength"])
        except (KeyError, ValueError):
            continue
        bands.append(
            IscBand(
                max_strength=max_strength,
                specific_amount=_optional_decimal(raw.get("specific_amount")),
                ad_valorem_rate=_optional_decimal(raw.get("ad_valorem_rate")),
            )
        )
    return tuple(sorted(bands, key=lambda band: band.max_strength))


def _optional_decimal(value: object) -> Decimal | None:
    if value is None:
        return None
    try:
        return to_decimal(value)
    except ValueError:
        return None
