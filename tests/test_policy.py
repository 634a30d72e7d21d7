"""Tests for default policies and override precedence."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from services.customs.policy import (
    RULE_EXCLUDED,
    RULE_OVERRIDE_ZERO,
    RULE_USED_GOODS,
    default_perception,
    excise_enabled_by_default,
    perception_policy,
    pick_band,
    prefer_override,
    preferential_rate,
)
from services.customs.types import ImporterProfile, IscBand, IscRule, IscSystem, Variant

if TYPE_CHECKING:
    from collections.abc import Callable

    from services.customs.types import RuleProfile

BANDS = (
    IscBand(Decimal("6"), Decimal("2.50")),
    IscBand(Decimal("20"), Decimal("3.40")),
)


class TestPreferOverride:
    """Tests for prefer_override."""

    def test_none_uses_default(self) -> None:
        """Missing override falls back to the default."""
        assert prefer_override(None, True) is True

    def test_falsy_override_wins(self) -> None:
        """False and zero are real overrides."""
        assert prefer_override(False, True) is False
        assert prefer_override(Decimal("0"), Decimal("0.035")) == Decimal("0")


class TestPerceptionPolicy:
    """Tests for perception defaults."""

    def test_public_sector_excluded_even_for_used_goods(self) -> None:
        """Importer classification is checked before used goods."""
        policy = default_perception(ImporterProfile.PUBLIC, is_used=True)

        assert policy.rate == Decimal("0")
        assert policy.rule == RULE_EXCLUDED

    def test_used_goods(self) -> None:
        """Used goods pay 5 %."""
        policy = default_perception(ImporterProfile.NORMAL, is_used=True)

        assert policy.rate == Decimal("0.05")
        assert policy.rule == RULE_USED_GOODS

    def test_zero_override_label(self) -> None:
        """A zero override is labelled separately."""
        policy = perception_policy(ImporterProfile.FIRST_IMPORT, False, Decimal("0"))

        assert policy.rate == Decimal("0")
        assert policy.rule == RULE_OVERRIDE_ZERO


class TestExciseDefault:
    """Tests for excise_enabled_by_default."""

    def test_usd_only_is_off(self, make_profile: Callable[..., RuleProfile]) -> None:
        """USD-only needs the explicit toggle."""
        profile = make_profile(isc_rule=IscRule(system=IscSystem.SPECIFIC))

        assert excise_enabled_by_default(Variant.USD_ONLY, profile) is False

    def test_multi_country_follows_rule(self, make_profile: Callable[..., RuleProfile]) -> None:
        """Multi-country charges ISC when a rule exists."""
        assert excise_enabled_by_default(Variant.MULTI_COUNTRY, make_profile()) is False
        profile = make_profile(isc_rule=IscRule(system=IscSystem.SPECIFIC))
        assert excise_enabled_by_default(Variant.MULTI_COUNTRY, profile) is True


class TestPreferentialRate:
    """Tests for preferential_rate."""

    def test_equal_rate_is_not_a_preference(self) -> None:
        """Only a strictly lower FTA rate counts."""
        assert preferential_rate(Decimal("0.06"), Decimal("0.06"), True) == (Decimal("0.06"), False)

    def test_missing_fta_rate(self) -> None:
        """No FTA row leaves MFN."""
        assert preferential_rate(Decimal("0.06"), None, True) == (Decimal("0.06"), False)


class TestPickBand:
    """Tests for pick_band."""

    def test_upper_bound_is_inclusive(self) -> None:
        """Strength equal to max_strength matches that band."""
        assert pick_band(BANDS, Decimal("6")) is BANDS[0]

    def test_next_band(self) -> None:
        """Strength above the first band picks the second."""
        assert pick_band(BANDS, Decimal("6.1")) is BANDS[1]

    def test_no_match(self) -> None:
        """Above every band or without strength there is no band."""
        assert pick_band(BANDS, Decimal("40")) is None
        assert pick_band(BANDS, None) is None
