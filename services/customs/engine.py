"""
Customs tax simulation engine.

``simulate`` runs the Peruvian import tax cascade:

    CIF -> ad-valorem duty -> ISC -> IGV + IPM -> AD/CVD -> perception -> SDA

Every monetary intermediate is rounded to cents (half-up) before it feeds
the next stage; persisted records depend on those exact cent values.
The engine is pure: no I/O, no shared state.
"""

from __future__ import annotations

from decimal import Decimal

from core.errors import InvalidInputError
from services.customs.policy import (
    RULE_DISABLED,
    excise_enabled_by_default,
    perception_policy,
    pick_band,
    preferential_rate,
    prefer_override,
)
from services.customs.rounding import round2
from services.customs.types import (
    ZERO,
    AdminFees,
    AmountSource,
    ChargeMode,
    DutyLine,
    DutyOverride,
    ExciseComponent,
    ExciseLine,
    ExciseOverride,
    IscSystem,
    OperationInput,
    Overrides,
    PerceptionLine,
    PerceptionOverride,
    RemedyItem,
    RemedyType,
    RuleProfile,
    SdaLine,
    SdaOverride,
    SimulationResult,
    TradeRemedyLine,
    TradeRemedyOverride,
    Variant,
    VatLine,
    VatOverride,
)

DEFAULT_UNIT = "UN"
ONE = Decimal("1")

NOTE_DUTY_OVERRIDE = "Arancel ad-valorem tomado de overrides."
NOTE_PREFERENCE = "Se aplicó preferencia arancelaria (TLC)."
NOTE_ISC_OVERRIDE = "ISC ad-valorem tomado de overrides."
NOTE_ISC_PUBLIC = "ISC al precio de venta al público: no se calcula en la simulación."
NOTE_VAT_EXEMPT = "Subpartida exonerada de IGV/IPM vigente."
NOTE_VAT_DISABLED = "IGV/IPM deshabilitado por el usuario."


def simulate(
    operation: OperationInput,
    profile: RuleProfile,
    overrides: Overrides | None = None,
) -> SimulationResult:
    """
    Run the tax cascade for one operation.

    Args:
        operation: Customs value, quantities and importer data.
        profile: Rule profile resolved for the operation's tariff line.
        overrides: User-supplied values; missing fields use policy defaults.

    Returns:
        The full SimulationResult.

    Raises:
        InvalidInputError: If there is no customs value basis, or the
            multi-country variant has no positive exchange rate.
    """
    overrides = overrides or Overrides()
    variant = operation.variant
    fx_rate = _validated_exchange_rate(operation, variant)
    notes: list[str] = []

    cif = _customs_value(operation, fx_rate)
    duty = _duty(cif, operation, profile, overrides.duty, notes)
    excise = _excise(cif, duty.amount, operation, profile, overrides.excise, variant, notes)
    vat = _vat(cif, duty.amount, excise.total, profile, overrides.vat, notes)
    remedies = _trade_remedies(cif, operation, profile, overrides.remedies, fx_rate)
    perception = _perception(vat, remedies.total, operation, overrides.perception)
    sda = _sda(cif, profile.admin_fees, overrides.sda, fx_rate)

    customs_debt = round2(duty.amount + excise.total + vat.total + remedies.total + sda.amount)
    payable = round2(customs_debt + perception.amount)

    notes.extend(f"Permiso: {permit}" for permit in profile.permits)

    return SimulationResult(
        variant=variant,
        currency=variant.currency,
        cif=cif,
        duty=duty,
        excise=excise,
        trade_remedies=remedies,
        vat=vat,
        perception=perception,
        sda=sda,
        customs_debt=customs_debt,
        payable_at_border=payable,
        notes=tuple(notes),
    )


def _validated_exchange_rate(operation: OperationInput, variant: Variant) -> Decimal:
    if not operation.has_customs_basis:
        raise InvalidInputError(
            "CIF o (FOB/Flete/Seguro) son obligatorios.",
            details=f"hs10={operation.hs10}",
        )
    if variant is Variant.USD_ONLY:
        return ONE
    if operation.fx_rate is None or operation.fx_rate <= 0:
        raise InvalidInputError(
            "El tipo de cambio es obligatorio para operaciones con país de origen.",
            details=f"origin={operation.origin_country}",
        )
    return operation.fx_rate


def _customs_value(operation: OperationInput, fx_rate: Decimal) -> Decimal:
    if operation.cif is not None:
        cif = operation.cif
    else:
        # has_customs_basis guarantees the three components
        cif = operation.fob + operation.freight + operation.insurance  # type: ignore[operator]
    return round2(cif * fx_rate)


def _duty(
    cif: Decimal,
    operation: OperationInput,
    profile: RuleProfile,
    override: DutyOverride,
    notes: list[str],
) -> DutyLine:
    rate, preferred = preferential_rate(profile.mfn_rate, profile.fta_rate, operation.use_fta)
    if override.rate is not None:
        rate, preferred = override.rate, False
        notes.append(NOTE_DUTY_OVERRIDE)
    elif preferred:
        notes.append(NOTE_PREFERENCE)
    return DutyLine(rate=rate, base=cif, amount=round2(cif * rate), preference_applied=preferred)


def _excise(
    cif: Decimal,
    duty: Decimal,
    operation: OperationInput,
    profile: RuleProfile,
    override: ExciseOverride,
    variant: Variant,
    notes: list[str],
) -> ExciseLine:
    # an explicit rate turns ISC on unless the toggle says otherwise
    default = override.rate is not None or excise_enabled_by_default(variant, profile)
    enabled = prefer_override(override.enabled, default)
    if not enabled:
        return ExciseLine(mode=IscSystem.NONE)

    base = cif + duty
    if override.rate is not None:
        notes.append(NOTE_ISC_OVERRIDE)
        component = _ad_valorem_component(base, override.rate)
        return ExciseLine(IscSystem.AD_VALOREM, component.amount, (component,))

    rule = profile.isc_rule
    if rule is None or rule.system is IscSystem.NONE:
        return ExciseLine(mode=IscSystem.NONE)

    if rule.system is IscSystem.AD_VALOREM:
        component = _ad_valorem_component(base, rule.ad_valorem_rate or ZERO)
        return ExciseLine(IscSystem.AD_VALOREM, component.amount, (component,))

    if rule.system is IscSystem.SPECIFIC:
        component = _specific_component(
            operation.quantity, rule.unit, rule.specific_amount or ZERO
        )
        return ExciseLine(IscSystem.SPECIFIC, component.amount, (component,))

    if rule.system is IscSystem.MIXED:
        band = pick_band(rule.bands, operation.alcohol_strength)
        per_unit = rule.specific_amount or ZERO
        rate = rule.ad_valorem_rate or ZERO
        if band is not None:
            per_unit = prefer_override(band.specific_amount, per_unit)
            rate = prefer_override(band.ad_valorem_rate, rate)
        specific = _specific_component(operation.quantity, rule.unit, per_unit)
        ad_valorem = _ad_valorem_component(base, rate)
        return ExciseLine(
            IscSystem.MIXED,
            specific.amount + ad_valorem.amount,
            (specific, ad_valorem),
        )

    notes.append(NOTE_ISC_PUBLIC)
    return ExciseLine(mode=IscSystem.PUBLIC)


def _ad_valorem_component(base: Decimal, rate: Decimal) -> ExciseComponent:
    base = round2(base)
    return ExciseComponent(
        mode=ChargeMode.AD_VALOREM,
        amount=round2(base * rate),
        base=base,
        rate=rate,
    )


def _specific_component(
    quantity: Decimal | None,
    unit: str | None,
    per_unit: Decimal,
) -> ExciseComponent:
    qty = quantity or ZERO
    return ExciseComponent(
        mode=ChargeMode.SPECIFIC,
        amount=round2(qty * per_unit),
        quantity=qty,
        unit=unit or DEFAULT_UNIT,
        per_unit=per_unit,
    )


def _vat(
    cif: Decimal,
    duty: Decimal,
    excise: Decimal,
    profile: RuleProfile,
    override: VatOverride,
    notes: list[str],
) -> VatLine:
    rates = profile.vat_rates
    base = round2(cif + duty + excise)
    enabled = prefer_override(override.enabled, True)

    if profile.vat_exempt or not enabled:
        notes.append(NOTE_VAT_EXEMPT if profile.vat_exempt else NOTE_VAT_DISABLED)
        return VatLine(
            base=base,
            igv=ZERO,
            ipm=ZERO,
            total=ZERO,
            igv_rate=rates.igv,
            ipm_rate=rates.ipm,
            exempt=profile.vat_exempt,
            enabled=enabled,
        )

    igv = round2(base * rates.igv)
    ipm = round2(base * rates.ipm)
    return VatLine(
        base=base,
        igv=igv,
        ipm=ipm,
        total=round2(igv + ipm),
        igv_rate=rates.igv,
        ipm_rate=rates.ipm,
    )


def _trade_remedies(
    cif: Decimal,
    operation: OperationInput,
    profile: RuleProfile,
    override: TradeRemedyOverride,
    fx_rate: Decimal,
) -> TradeRemedyLine:
    items: list[RemedyItem] = []

    for rule in profile.trade_remedies:
        base = cif if rule.mode is ChargeMode.AD_VALOREM else operation.quantity or ZERO
        items.append(
            RemedyItem(
                type=rule.type,
                mode=rule.mode,
                base=base,
                rate=rule.rate_or_amount,
                amount=round2(base * rule.rate_or_amount),
                source=AmountSource.RULES,
            )
        )

    for remedy_type, amount_usd in (
        (RemedyType.ANTIDUMPING, override.antidumping_usd),
        (RemedyType.COUNTERVAILING, override.countervailing_usd),
    ):
        if amount_usd is not None and amount_usd > 0:
            items.append(
                RemedyItem(
                    type=remedy_type,
                    mode=ChargeMode.SPECIFIC,
                    base=amount_usd,
                    rate=fx_rate,
                    amount=round2(amount_usd * fx_rate),
                    source=AmountSource.OVERRIDE,
                )
            )

    total = round2(sum((item.amount for item in items), ZERO))
    return TradeRemedyLine(items=tuple(items), total=total)


def _perception(
    vat: VatLine,
    remedies_total: Decimal,
    operation: OperationInput,
    override: PerceptionOverride,
) -> PerceptionLine:
    base = round2(vat.base + vat.igv + vat.ipm + remedies_total)
    if not prefer_override(override.enabled, True):
        return PerceptionLine(rate=ZERO, base=base, amount=ZERO, rule=RULE_DISABLED)

    policy = perception_policy(operation.importer_profile, operation.is_used, override.rate)
    return PerceptionLine(
        rate=policy.rate,
        base=base,
        amount=round2(base * policy.rate),
        rule=policy.rule,
    )


def _sda(
    cif: Decimal,
    fees: AdminFees,
    override: SdaOverride,
    fx_rate: Decimal,
) -> SdaLine:
    if override.amount_usd is not None:
        if override.amount_usd <= 0:
            return SdaLine(applies=False, source=AmountSource.OVERRIDE)
        return SdaLine(
            applies=True,
            amount=round2(override.amount_usd * fx_rate),
            base=override.amount_usd,
            rate=fx_rate,
            source=AmountSource.OVERRIDE,
        )

    if cif <= fees.threshold:
        return SdaLine(applies=False)
    return SdaLine(
        applies=True,
        amount=round2(fees.uit * fees.sda_rate),
        base=fees.uit,
        rate=fees.sda_rate,
    )
