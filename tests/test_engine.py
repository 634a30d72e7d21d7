"""Tests for the customs tax cascade."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from core.errors import ErrorCode, InvalidInputError
from services.customs.engine import (
    NOTE_ISC_PUBLIC,
    NOTE_PREFERENCE,
    NOTE_VAT_DISABLED,
    NOTE_VAT_EXEMPT,
    simulate,
)
from services.customs.policy import RULE_DISABLED, RULE_GENERAL, RULE_HIGH, RULE_OVERRIDE
from services.customs.types import (
    AmountSource,
    ChargeMode,
    DutyOverride,
    ExciseOverride,
    ImporterProfile,
    IscBand,
    IscRule,
    IscSystem,
    OperationInput,
    Overrides,
    PerceptionOverride,
    Permit,
    RemedyType,
    SdaOverride,
    TradeRemedyOverride,
    TradeRemedyRule,
    Variant,
    VatOverride,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from services.customs.types import RuleProfile, SimulationResult


def usd_operation(**kwargs: object) -> OperationInput:
    """FOB 1000 + freight 150 + insurance 50, USD-only."""
    values: dict[str, object] = {
        "hs10": "4819100000",
        "fob": Decimal("1000.00"),
        "freight": Decimal("150.00"),
        "insurance": Decimal("50.00"),
    }
    values.update(kwargs)
    return OperationInput(**values)  # type: ignore[arg-type]


def assert_totals(result: SimulationResult) -> None:
    """Check the two total invariants."""
    assert result.customs_debt == (
        result.duty.amount
        + result.excise.total
        + result.vat.total
        + result.trade_remedies.total
        + result.sda.amount
    )
    assert result.payable_at_border == result.customs_debt + result.perception.amount


class TestUsdOnlyScenario:
    """Reference USD-only simulation."""

    def test_reference_amounts(self, make_profile: Callable[..., RuleProfile]) -> None:
        """CIF 1200 at 6 % with VAT and no perception owes 300.96."""
        overrides = Overrides(perception=PerceptionOverride(enabled=False))

        result = simulate(usd_operation(), make_profile(), overrides)

        assert result.variant is Variant.USD_ONLY
        assert result.currency == "USD"
        assert result.cif == Decimal("1200.00")
        assert result.duty.amount == Decimal("72.00")
        assert result.excise.total == Decimal("0")
        assert result.vat.base == Decimal("1272.00")
        assert result.vat.igv == Decimal("203.52")
        assert result.vat.ipm == Decimal("25.44")
        assert result.vat.total == Decimal("228.96")
        assert result.perception.amount == Decimal("0")
        assert result.perception.rule == RULE_DISABLED
        assert result.sda.applies is False
        assert result.customs_debt == Decimal("300.96")
        assert result.payable_at_border == Decimal("300.96")
        assert_totals(result)

    def test_default_perception_is_general_regime(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """Perception defaults to 3.5 % over VAT base plus VAT."""
        result = simulate(usd_operation(), make_profile())

        assert result.perception.rate == Decimal("0.035")
        assert result.perception.rule == RULE_GENERAL
        assert result.perception.base == Decimal("1500.96")
        assert result.perception.amount == Decimal("52.53")
        assert result.payable_at_border == Decimal("353.49")

    def test_direct_cif_skips_components(self, make_profile: Callable[..., RuleProfile]) -> None:
        """A direct CIF is used as-is."""
        operation = OperationInput(hs10="4819100000", cif=Decimal("1200"))

        result = simulate(operation, make_profile())

        assert result.cif == Decimal("1200.00")
        assert result.duty.amount == Decimal("72.00")

    def test_excise_off_by_default_even_with_rule(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """USD-only simulations charge ISC only when enabled."""
        profile = make_profile(
            isc_rule=IscRule(system=IscSystem.AD_VALOREM, ad_valorem_rate=Decimal("0.30"))
        )

        result = simulate(usd_operation(), profile)

        assert result.excise.mode is IscSystem.NONE
        assert result.excise.total == Decimal("0")


class TestValidation:
    """Input validation before any arithmetic."""

    def test_missing_basis_raises(self, make_profile: Callable[..., RuleProfile]) -> None:
        """No CIF and an incomplete FOB/freight/insurance triple is rejected."""
        operation = OperationInput(hs10="4819100000", fob=Decimal("1000"), freight=Decimal("10"))

        with pytest.raises(InvalidInputError) as exc_info:
            simulate(operation, make_profile())

        assert exc_info.value.code is ErrorCode.INVALID_INPUT

    def test_origin_without_exchange_rate_raises(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """The multi-country variant needs an exchange rate."""
        with pytest.raises(InvalidInputError, match="tipo de cambio"):
            simulate(usd_operation(origin_country="CN"), make_profile())

    def test_zero_exchange_rate_raises(self, make_profile: Callable[..., RuleProfile]) -> None:
        """A non-positive exchange rate is rejected."""
        with pytest.raises(InvalidInputError):
            simulate(usd_operation(fx_rate=Decimal("0")), make_profile())


class TestDuty:
    """Ad-valorem duty and preferences."""

    def test_preference_applies_lower_rate(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """A lower FTA rate replaces MFN when requested."""
        profile = make_profile(fta_rate=Decimal("0.02"), origin_country="CL")
        operation = usd_operation(origin_country="CL", fx_rate=Decimal("1"), use_fta=True)

        result = simulate(operation, profile)

        assert result.duty.rate == Decimal("0.02")
        assert result.duty.amount == Decimal("24.00")
        assert result.duty.preference_applied is True
        assert NOTE_PREFERENCE in result.notes

    def test_preference_not_requested(self, make_profile: Callable[..., RuleProfile]) -> None:
        """Without the flag the MFN rate applies."""
        profile = make_profile(fta_rate=Decimal("0.02"))
        operation = usd_operation(origin_country="CL", fx_rate=Decimal("1"))

        result = simulate(operation, profile)

        assert result.duty.rate == Decimal("0.06")
        assert result.duty.preference_applied is False

    def test_higher_preferential_rate_is_ignored(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """A preferential rate above MFN never applies."""
        profile = make_profile(fta_rate=Decimal("0.09"))
        operation = usd_operation(origin_country="CL", fx_rate=Decimal("1"), use_fta=True)

        result = simulate(operation, profile)

        assert result.duty.rate == Decimal("0.06")

    def test_override_beats_preference(self, make_profile: Callable[..., RuleProfile]) -> None:
        """An explicit duty rate wins over MFN and FTA."""
        profile = make_profile(fta_rate=Decimal("0.02"))
        operation = usd_operation(origin_country="CL", fx_rate=Decimal("1"), use_fta=True)
        overrides = Overrides(duty=DutyOverride(rate=Decimal("0.11")))

        result = simulate(operation, profile, overrides)

        assert result.duty.rate == Decimal("0.11")
        assert result.duty.amount == Decimal("132.00")
        assert result.duty.preference_applied is False

    def test_rounds_half_up(self, make_profile: Callable[..., RuleProfile]) -> None:
        """5.025 rounds to 5.03, not to the even 5.02."""
        operation = OperationInput(hs10="4819100000", cif=Decimal("100.50"))

        result = simulate(operation, make_profile(mfn_rate=Decimal("0.05")))

        assert result.duty.amount == Decimal("5.03")


class TestExcise:
    """ISC regimes."""

    BANDS = (
        IscBand(Decimal("6"), Decimal("2.50"), Decimal("0.10")),
        IscBand(Decimal("20"), Decimal("3.40"), Decimal("0.20")),
    )

    def mixed_profile(self, make_profile: Callable[..., RuleProfile]) -> RuleProfile:
        return make_profile(
            isc_rule=IscRule(
                system=IscSystem.MIXED,
                ad_valorem_rate=Decimal("0.30"),
                specific_amount=Decimal("1.00"),
                unit="L",
                bands=self.BANDS,
            )
        )

    def test_mixed_band_specific_amount(self, make_profile: Callable[..., RuleProfile]) -> None:
        """100 units in the first band pay 2.50 each plus 10 % ad valorem."""
        operation = OperationInput(
            hs10="2203000000",
            cif=Decimal("1000"),
            quantity=Decimal("100"),
            alcohol_strength=Decimal("5.5"),
        )
        overrides = Overrides(excise=ExciseOverride(enabled=True))

        result = simulate(operation, self.mixed_profile(make_profile), overrides)

        specific, ad_valorem = result.excise.components
        assert result.excise.mode is IscSystem.MIXED
        assert specific.mode is ChargeMode.SPECIFIC
        assert specific.per_unit == Decimal("2.50")
        assert specific.amount == Decimal("250.00")
        assert ad_valorem.base == Decimal("1060.00")
        assert ad_valorem.rate == Decimal("0.10")
        assert ad_valorem.amount == Decimal("106.00")
        assert result.excise.total == Decimal("356.00")
        assert result.vat.base == Decimal("1416.00")
        assert_totals(result)

    def test_mixed_strength_above_bands_uses_flat_amount(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """No matching band falls back to the rule's own amount and rate."""
        operation = OperationInput(
            hs10="2208300000",
            cif=Decimal("1000"),
            quantity=Decimal("100"),
            alcohol_strength=Decimal("40"),
        )
        overrides = Overrides(excise=ExciseOverride(enabled=True))

        result = simulate(operation, self.mixed_profile(make_profile), overrides)

        specific, ad_valorem = result.excise.components
        assert specific.amount == Decimal("100.00")
        assert ad_valorem.amount == Decimal("318.00")
        assert result.excise.total == Decimal("418.00")

    def test_mixed_without_strength_uses_flat_amount(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """No strength means no band."""
        operation = OperationInput(hs10="2208300000", cif=Decimal("1000"), quantity=Decimal("10"))
        overrides = Overrides(excise=ExciseOverride(enabled=True))

        result = simulate(operation, self.mixed_profile(make_profile), overrides)

        assert result.excise.components[0].per_unit == Decimal("1.00")

    def test_specific_regime(self, make_profile: Callable[..., RuleProfile]) -> None:
        """Specific ISC is quantity times the per-unit amount."""
        profile = make_profile(
            isc_rule=IscRule(system=IscSystem.SPECIFIC, specific_amount=Decimal("0.47"), unit="L")
        )
        operation = usd_operation(quantity=Decimal("333"))
        overrides = Overrides(excise=ExciseOverride(enabled=True))

        result = simulate(operation, profile, overrides)

        assert result.excise.total == Decimal("156.51")
        assert result.excise.components[0].unit == "L"

    def test_override_rate_forces_ad_valorem(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """An explicit ISC rate applies on CIF plus duty."""
        overrides = Overrides(excise=ExciseOverride(enabled=True, rate=Decimal("0.50")))

        result = simulate(usd_operation(), make_profile(), overrides)

        assert result.excise.mode is IscSystem.AD_VALOREM
        assert result.excise.total == Decimal("636.00")

    def test_rate_without_toggle_enables_excise(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """A USD-only simulation charges an explicit ISC rate with no toggle."""
        operation = OperationInput(hs10="4819100000", cif=Decimal("1200"))
        overrides = Overrides(excise=ExciseOverride(rate=Decimal("0.50")))

        result = simulate(operation, make_profile(), overrides)

        assert result.excise.mode is IscSystem.AD_VALOREM
        assert result.excise.total == Decimal("636.00")
        assert result.customs_debt == Decimal("72.00") + Decimal("636.00") + result.vat.total

    def test_toggle_off_ignores_rate(self, make_profile: Callable[..., RuleProfile]) -> None:
        """Disabling ISC zeroes it whatever rate or rule is present."""
        profile = make_profile(
            isc_rule=IscRule(system=IscSystem.AD_VALOREM, ad_valorem_rate=Decimal("0.30"))
        )
        overrides = Overrides(excise=ExciseOverride(enabled=False, rate=Decimal("0.50")))
        operation = usd_operation(origin_country="PE", fx_rate=Decimal("3.75"))

        result = simulate(operation, profile, overrides)

        assert result.excise.total == Decimal("0")
        assert result.excise.components == ()

    def test_multi_country_enables_excise_with_rule(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """With an origin, an ISC rule is charged without a toggle."""
        profile = make_profile(
            isc_rule=IscRule(system=IscSystem.AD_VALOREM, ad_valorem_rate=Decimal("0.10"))
        )
        operation = usd_operation(origin_country="US", fx_rate=Decimal("1"))

        result = simulate(operation, profile)

        assert result.excise.total == Decimal("127.20")

    def test_public_price_regime_is_not_computed(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """Retail-price ISC yields zero and a note."""
        profile = make_profile(isc_rule=IscRule(system=IscSystem.PUBLIC))
        operation = usd_operation(origin_country="US", fx_rate=Decimal("1"))

        result = simulate(operation, profile)

        assert result.excise.mode is IscSystem.PUBLIC
        assert result.excise.total == Decimal("0")
        assert NOTE_ISC_PUBLIC in result.notes


class TestVat:
    """IGV/IPM stage."""

    def test_exempt_line_keeps_excise(self, make_profile: Callable[..., RuleProfile]) -> None:
        """Exemption zeroes IGV/IPM only; ISC is still charged."""
        profile = make_profile(vat_exempt=True)
        overrides = Overrides(excise=ExciseOverride(enabled=True, rate=Decimal("0.10")))

        result = simulate(usd_operation(), profile, overrides)

        assert result.excise.total == Decimal("127.20")
        assert result.vat.total == Decimal("0")
        assert result.vat.exempt is True
        assert NOTE_VAT_EXEMPT in result.notes

    def test_toggle_off(self, make_profile: Callable[..., RuleProfile]) -> None:
        """Disabled VAT is zero and noted."""
        overrides = Overrides(vat=VatOverride(enabled=False))

        result = simulate(usd_operation(), make_profile(), overrides)

        assert result.vat.total == Decimal("0")
        assert result.vat.enabled is False
        assert NOTE_VAT_DISABLED in result.notes
        assert result.customs_debt == Decimal("72.00")


class TestMultiCountryScenario:
    """Soles simulation with preference, remedies and perception."""

    def test_full_cascade(self, make_profile: Callable[..., RuleProfile]) -> None:
        """Remedies from rules and overrides feed the perception base."""
        profile = make_profile(
            fta_rate=Decimal("0"),
            origin_country="CN",
            trade_remedies=(
                TradeRemedyRule(RemedyType.ANTIDUMPING, ChargeMode.AD_VALOREM, Decimal("0.10")),
                TradeRemedyRule(RemedyType.COUNTERVAILING, ChargeMode.SPECIFIC, Decimal("2.00")),
            ),
            permits=(Permit("DIGESA", "Registro sanitario"),),
        )
        operation = usd_operation(
            origin_country="CN",
            fx_rate=Decimal("3.80"),
            use_fta=True,
            quantity=Decimal("50"),
        )
        overrides = Overrides(remedies=TradeRemedyOverride(antidumping_usd=Decimal("10")))

        result = simulate(operation, profile, overrides)

        assert result.variant is Variant.MULTI_COUNTRY
        assert result.currency == "PEN"
        assert result.cif == Decimal("4560.00")
        assert result.duty.amount == Decimal("0.00")
        amounts = [(item.type, item.source, item.amount) for item in result.trade_remedies.items]
        assert amounts == [
            (RemedyType.ANTIDUMPING, AmountSource.RULES, Decimal("456.00")),
            (RemedyType.COUNTERVAILING, AmountSource.RULES, Decimal("100.00")),
            (RemedyType.ANTIDUMPING, AmountSource.OVERRIDE, Decimal("38.00")),
        ]
        assert result.trade_remedies.total == Decimal("594.00")
        assert result.vat.total == Decimal("820.80")
        assert result.perception.base == Decimal("5974.80")
        assert result.perception.amount == Decimal("209.12")
        assert result.customs_debt == Decimal("1414.80")
        assert result.payable_at_border == Decimal("1623.92")
        assert "Permiso: DIGESA - Registro sanitario" in result.notes
        assert_totals(result)


class TestPerception:
    """Perception policy."""

    @pytest.mark.parametrize(
        ("profile", "is_used", "rate"),
        [
            (ImporterProfile.PUBLIC, False, Decimal("0")),
            (ImporterProfile.AMAZON, True, Decimal("0")),
            (ImporterProfile.FIRST_IMPORT, False, Decimal("0.10")),
            (ImporterProfile.NO_HABIDO, True, Decimal("0.10")),
            (ImporterProfile.NORMAL, True, Decimal("0.05")),
            (None, False, Decimal("0.035")),
        ],
    )
    def test_default_rate_by_importer(
        self,
        make_profile: Callable[..., RuleProfile],
        profile: ImporterProfile | None,
        is_used: bool,
        rate: Decimal,
    ) -> None:
        """Importer classification takes precedence over used goods."""
        result = simulate(usd_operation(importer_profile=profile, is_used=is_used), make_profile())

        assert result.perception.rate == rate

    def test_override_rate(self, make_profile: Callable[..., RuleProfile]) -> None:
        """An explicit rate replaces the default and relabels the rule."""
        operation = usd_operation(importer_profile=ImporterProfile.FIRST_IMPORT)
        overrides = Overrides(perception=PerceptionOverride(rate=Decimal("0.02")))

        result = simulate(operation, make_profile(), overrides)

        assert result.perception.rate == Decimal("0.02")
        assert result.perception.rule == RULE_OVERRIDE
        assert result.perception.amount == Decimal("30.02")

    def test_first_import_rule_label(self, make_profile: Callable[..., RuleProfile]) -> None:
        """First imports are labelled with their rule."""
        operation = usd_operation(importer_profile=ImporterProfile.FIRST_IMPORT)

        result = simulate(operation, make_profile())

        assert result.perception.rule == RULE_HIGH
        assert result.perception.amount == Decimal("150.10")


class TestSda:
    """Special customs fee."""

    def test_applies_above_threshold(self, make_profile: Callable[..., RuleProfile]) -> None:
        """CIF above 3 UIT pays 2.35 % of one UIT, rounded half up."""
        operation = OperationInput(
            hs10="4819100000",
            cif=Decimal("5000"),
            origin_country="US",
            fx_rate=Decimal("3.80"),
        )

        result = simulate(operation, make_profile())

        assert result.cif == Decimal("19000.00")
        assert result.sda.applies is True
        assert result.sda.amount == Decimal("125.73")
        assert result.sda.source is AmountSource.RULES
        assert_totals(result)

    def test_not_applied_at_threshold(self, make_profile: Callable[..., RuleProfile]) -> None:
        """A CIF equal to the threshold does not trigger the fee."""
        operation = OperationInput(hs10="4819100000", cif=Decimal("16050"))

        result = simulate(operation, make_profile())

        assert result.sda.applies is False
        assert result.sda.amount == Decimal("0")

    def test_override_converted(self, make_profile: Callable[..., RuleProfile]) -> None:
        """A positive SDA override is converted with the exchange rate."""
        operation = usd_operation(origin_country="US", fx_rate=Decimal("3.80"))
        overrides = Overrides(sda=SdaOverride(amount_usd=Decimal("53")))

        result = simulate(operation, make_profile(), overrides)

        assert result.sda.applies is True
        assert result.sda.amount == Decimal("201.40")
        assert result.sda.source is AmountSource.OVERRIDE

    def test_zero_override_disables(self, make_profile: Callable[..., RuleProfile]) -> None:
        """A zero override means no fee even above the threshold."""
        operation = OperationInput(hs10="4819100000", cif=Decimal("20000"))
        overrides = Overrides(sda=SdaOverride(amount_usd=Decimal("0")))

        result = simulate(operation, make_profile(), overrides)

        assert result.sda.applies is False


class TestProperties:
    """Cross-cutting properties of the cascade."""

    def test_idempotent(self, make_profile: Callable[..., RuleProfile]) -> None:
        """Same inputs give equal results."""
        profile = make_profile()
        operation = usd_operation(importer_profile=ImporterProfile.NORMAL)

        assert simulate(operation, profile) == simulate(operation, profile)

    def test_monotonic_in_customs_value(
        self, make_profile: Callable[..., RuleProfile]
    ) -> None:
        """Raising CIF never lowers duty, ISC, VAT or perception."""
        profile = make_profile()
        overrides = Overrides(excise=ExciseOverride(enabled=True, rate=Decimal("0.17")))
        previous = None
        for cif in ("0.01", "99.99", "1200", "1200.01", "48000"):
            result = simulate(OperationInput(hs10="4819100000", cif=Decimal(cif)), profile, overrides)
            if previous is not None:
                assert result.duty.amount >= previous.duty.amount
                assert result.excise.total >= previous.excise.total
                assert result.vat.total >= previous.vat.total
                assert result.perception.amount >= previous.perception.amount
            assert_totals(result)
            previous = result
