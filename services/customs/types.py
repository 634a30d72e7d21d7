"""Types for the customs tax simulation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")


class ImporterProfile(str, Enum):
    """Importer classification driving the default perception rate."""

    NORMAL = "normal"
    FIRST_IMPORT = "first_import"
    NO_HABIDO = "no_habido"
    PUBLIC = "public"
    AMAZON = "amazon"

    @property
    def label(self) -> str:
        """Display label."""
        return _PROFILE_LABELS[self]


_PROFILE_LABELS = {
    ImporterProfile.NORMAL: "Normal",
    ImporterProfile.FIRST_IMPORT: "Primera importación",
    ImporterProfile.NO_HABIDO: "No habido",
    ImporterProfile.PUBLIC: "Sector público",
    ImporterProfile.AMAZON: "Amazonía",
}


class IscSystem(str, Enum):
    """Excise (ISC) regime of a tariff line."""

    NONE = "none"
    AD_VALOREM = "ad_valorem"
    SPECIFIC = "specific"
    PUBLIC = "public"
    MIXED = "mixed"


class RemedyType(str, Enum):
    """Trade remedy type."""

    ANTIDUMPING = "AD"
    COUNTERVAILING = "CVD"


class ChargeMode(str, Enum):
    """Whether a charge is a percentage of a base or an amount per unit."""

    AD_VALOREM = "ad_valorem"
    SPECIFIC = "specific"


class AmountSource(str, Enum):
    """Where an itemized amount came from."""

    RULES = "rules"
    OVERRIDE = "override"


class Variant(str, Enum):
    """
    Calculation variant.

    ``USD_ONLY`` works in the operation currency with no conversion and no
    origin-scoped rules. ``MULTI_COUNTRY`` converts the customs value to
    soles with the operation's exchange rate and applies FTA rates and
    trade remedies for the origin country.
    """

    USD_ONLY = "usd"
    MULTI_COUNTRY = "multi_country"

    @property
    def currency(self) -> str:
        """Operating currency of the variant."""
        return "USD" if self is Variant.USD_ONLY else "PEN"


# ---------------------------------------------------------------------------
# Rule profile
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class IscBand:
    """
    Alcohol-strength band of a mixed ISC rule.

    Attributes:
        max_strength: Upper bound (inclusive) of the band, in degrees.
        specific_amount: Amount per unit for the band.
        ad_valorem_rate: Ad-valorem rate paired with the band.
    """

    max_strength: Decimal
    specific_amount: Decimal | None = None
    ad_valorem_rate: Decimal | None = None


@dataclass(frozen=True, slots=True)
class IscRule:
    """
    Excise rule in force for a tariff line.

    Attributes:
        system: ISC regime.
        ad_valorem_rate: Rate applied to (CIF + duty).
        specific_amount: Flat amount per unit.
        unit: Unit the specific amount refers to.
        bands: Strength bands ordered by ascending ``max_strength``.
    """

    system: IscSystem
    ad_valorem_rate: Decimal | None = None
    specific_amount: Decimal | None = None
    unit: str | None = None
    bands: tuple[IscBand, ...] = ()


@dataclass(frozen=True, slots=True)
class TradeRemedyRule:
    """Antidumping or countervailing duty scheduled for a tariff/origin."""

    type: RemedyType
    mode: ChargeMode
    rate_or_amount: Decimal
    unit: str | None = None


@dataclass(frozen=True, slots=True)
class Permit:
    """Permit an authority requires for the tariff line."""

    authority: str
    note: str | None = None

    def __str__(self) -> str:
        """Return the permit as a reminder line."""
        if self.note:
            return f"{self.authority} - {self.note}"
        return self.authority


@dataclass(frozen=True, slots=True)
class AdminFees:
    """
    Year-scoped administrative constants.

    Attributes:
        year: Calendar year the constants apply to.
        uit: Tax reference unit (UIT) value.
        sda_rate: SDA rate as a fraction of one UIT.
        threshold_uit: CIF threshold, in UITs, above which SDA applies.
    """

    year: int
    uit: Decimal
    sda_rate: Decimal
    threshold_uit: Decimal

    @property
    def threshold(self) -> Decimal:
        """CIF threshold in money."""
        return self.uit * self.threshold_uit


@dataclass(frozen=True, slots=True)
class VatRates:
    """Rates of the two VAT-family taxes (IGV and IPM)."""

    igv: Decimal = Decimal("0.16")
    ipm: Decimal = Decimal("0.02")

    @property
    def total(self) -> Decimal:
        """Combined rate, informational only."""
        return self.igv + self.ipm


@dataclass(frozen=True, slots=True)
class RuleProfile:
    """
    Resolved tax configuration for one tariff line.

    Attributes:
        tariff_id: Rule store id of the tariff line.
        hs10: Normalized 10-digit code.
        description: Tariff line description.
        mfn_rate: Base (MFN) ad-valorem rate.
        fta_rate: Preferential rate for the origin country, if any.
        isc_rule: Excise rule in force, if any.
        vat_exempt: Whether the line is exempt from IGV/IPM.
        trade_remedies: AD/CVD schedule for the origin country.
        permits: Permits required for the line.
        admin_fees: UIT/SDA constants for the as-of year.
        vat_rates: IGV/IPM rates.
        origin_country: Origin the profile was resolved for.
    """

    tariff_id: int
    hs10: str
    description: str
    mfn_rate: Decimal
    admin_fees: AdminFees
    fta_rate: Decimal | None = None
    isc_rule: IscRule | None = None
    vat_exempt: bool = False
    trade_remedies: tuple[TradeRemedyRule, ...] = ()
    permits: tuple[Permit, ...] = ()
    vat_rates: VatRates = field(default_factory=VatRates)
    origin_country: str | None = None


# ---------------------------------------------------------------------------
# Operation input and overrides
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OperationInput:
    """
    One simulated or real import.

    Either ``cif`` or all of ``fob``, ``freight`` and ``insurance`` must be
    given. Supplying an origin country or an exchange rate selects the
    multi-country variant, which then requires the exchange rate.
    """

    hs10: str
    cif: Decimal | None = None
    fob: Decimal | None = None
    freight: Decimal | None = None
    insurance: Decimal | None = None
    origin_country: str | None = None
    fx_rate: Decimal | None = None
    use_fta: bool = False
    quantity: Decimal | None = None
    quantity_unit: str | None = None
    alcohol_strength: Decimal | None = None
    importer_profile: ImporterProfile | None = None
    is_used: bool = False

    @property
    def variant(self) -> Variant:
        """Calculation variant selected by the supplied parameters."""
        if self.origin_country or self.fx_rate is not None:
            return Variant.MULTI_COUNTRY
        return Variant.USD_ONLY

    @property
    def has_customs_basis(self) -> bool:
        """Whether a direct CIF or all three value components are present."""
        if self.cif is not None:
            return True
        return None not in (self.fob, self.freight, self.insurance)


@dataclass(frozen=True, slots=True)
class DutyOverride:
    """Explicit ad-valorem duty rate."""

    rate: Decimal | None = None


@dataclass(frozen=True, slots=True)
class ExciseOverride:
    """ISC toggle and explicit ad-valorem ISC rate."""

    enabled: bool | None = None
    rate: Decimal | None = None


@dataclass(frozen=True, slots=True)
class VatOverride:
    """IGV/IPM toggle."""

    enabled: bool | None = None


@dataclass(frozen=True, slots=True)
class TradeRemedyOverride:
    """Explicit antidumping/countervailing amounts, in USD."""

    antidumping_usd: Decimal | None = None
    countervailing_usd: Decimal | None = None


@dataclass(frozen=True, slots=True)
class PerceptionOverride:
    """Perception toggle and explicit rate."""

    enabled: bool | None = None
    rate: Decimal | None = None


@dataclass(frozen=True, slots=True)
class SdaOverride:
    """Explicit SDA amount, in USD."""

    amount_usd: Decimal | None = None


@dataclass(frozen=True, slots=True)
class Overrides:
    """
    User-supplied values, one section per cascade stage.

    A field left as None means "use the policy default".
    """

    duty: DutyOverride = field(default_factory=DutyOverride)
    excise: ExciseOverride = field(default_factory=ExciseOverride)
    vat: VatOverride = field(default_factory=VatOverride)
    remedies: TradeRemedyOverride = field(default_factory=TradeRemedyOverride)
    perception: PerceptionOverride = field(default_factory=PerceptionOverride)
    sda: SdaOverride = field(default_factory=SdaOverride)


# ---------------------------------------------------------------------------
# Simulation result
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DutyLine:
    """Ad-valorem duty."""

    rate: Decimal
    base: Decimal
    amount: Decimal
    preference_applied: bool = False


@dataclass(frozen=True, slots=True)
class ExciseComponent:
    """
    One component of the ISC.

    Ad-valorem components carry ``base`` and ``rate``; specific components
    carry ``quantity``, ``unit`` and ``per_unit``.
    """

    mode: ChargeMode
    amount: Decimal
    base: Decimal | None = None
    rate: Decimal | None = None
    quantity: Decimal | None = None
    unit: str | None = None
    per_unit: Decimal | None = None


@dataclass(frozen=True, slots=True)
class ExciseLine:
    """ISC result."""

    mode: IscSystem
    total: Decimal = ZERO
    components: tuple[ExciseComponent, ...] = ()


@dataclass(frozen=True, slots=True)
class RemedyItem:
    """
    Itemized trade remedy; ``amount == round2(base * rate)``.

    For override items ``base`` is the USD amount and ``rate`` the exchange
    rate used to convert it.
    """

    type: RemedyType
    mode: ChargeMode
    base: Decimal
    rate: Decimal
    amount: Decimal
    source: AmountSource


@dataclass(frozen=True, slots=True)
class TradeRemedyLine:
    """AD/CVD result."""

    items: tuple[RemedyItem, ...] = ()
    total: Decimal = ZERO

    @property
    def applied(self) -> bool:
        """Whether any remedy was charged."""
        return bool(self.items)


@dataclass(frozen=True, slots=True)
class VatLine:
    """IGV + IPM result."""

    base: Decimal
    igv: Decimal
    ipm: Decimal
    total: Decimal
    igv_rate: Decimal
    ipm_rate: Decimal
    exempt: bool = False
    enabled: bool = True


@dataclass(frozen=True, slots=True)
class PerceptionLine:
    """IGV perception result."""

    rate: Decimal
    base: Decimal
    amount: Decimal
    rule: str


@dataclass(frozen=True, slots=True)
class SdaLine:
    """Special customs fee (SDA); ``amount == round2(base * rate)`` when it applies."""

    applies: bool
    amount: Decimal = ZERO
    base: Decimal = ZERO
    rate: Decimal = ZERO
    source: AmountSource = AmountSource.RULES


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """
    Full outcome of the tax cascade.

    ``customs_debt`` is duty + ISC + IGV/IPM + AD/CVD + SDA and
    ``payable_at_border`` adds the perception to it.
    """

    variant: Variant
    currency: str
    cif: Decimal
    duty: DutyLine
    excise: ExciseLine
    trade_remedies: TradeRemedyLine
    vat: VatLine
    perception: PerceptionLine
    sda: SdaLine
    customs_debt: Decimal
    payable_at_border: Decimal
    notes: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Derived projections
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TaxLineEntry:
    """One persisted tax line: concept, taxable base, applied rate, amount."""

    concept: str
    taxable_base: Decimal
    rate: Decimal | None
    amount: Decimal


@dataclass(frozen=True, slots=True)
class AccountingLine:
    """Debit or credit line of the accounting projection."""

    account: str
    name: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class AccountingEntry:
    """Double-entry preview of an import."""

    currency: str
    lines: tuple[AccountingLine, ...]
    debit_total: Decimal
    credit_total: Decimal

    @property
    def is_balanced(self) -> bool:
        """Whether debits equal credits."""
        return self.debit_total == self.credit_total


@dataclass(frozen=True, slots=True)
class SimulationPreview:
    """Simulation plus its derived tax lines and optional accounting entry."""

    profile: RuleProfile
    result: SimulationResult
    tax_lines: tuple[TaxLineEntry, ...]
    accounting: AccountingEntry | None = None
