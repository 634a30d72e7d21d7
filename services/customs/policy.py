"""
Default policies and the override precedence rule.

Every stage of the cascade resolves its inputs the same way: an explicit
override wins, then the policy default, then zero/disabled.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from services.customs.types import ImporterProfile, IscBand, Variant

if TYPE_CHECKING:
    from collections.abc import Sequence

    from services.customs.types import RuleProfile

PERCEPTION_EXCLUDED = Decimal("0")
PERCEPTION_HIGH = Decimal("0.10")
PERCEPTION_USED_GOODS = Decimal("0.05")
PERCEPTION_GENERAL = Decimal("0.035")

RULE_EXCLUDED = "Excluido por régimen especial"
RULE_HIGH = "Primera importación/No habido"
RULE_USED_GOODS = "Bien usado"
RULE_GENERAL = "Régimen general"
RULE_OVERRIDE = "Percepción override"
RULE_OVERRIDE_ZERO = "Percepción override: 0%"
RULE_DISABLED = "Percepción deshabilitada"


@dataclass(frozen=True, slots=True)
class PerceptionPolicy:
    """Perception rate and the label of the rule that produced it."""

    rate: Decimal
    rule: str


def prefer_override[T](override: T | None, default: T) -> T:
    """Return ``override`` unless it is None."""
    return default if override is None else override


def default_perception(
    profile: ImporterProfile | None,
    is_used: bool,
) -> PerceptionPolicy:
    """
    Default perception by importer classification.

    Public-sector and Amazon-region importers are excluded, first imports
    and "no habido" taxpayers pay 10 %, used goods 5 %, everyone else 3.5 %.
    """
    if profile in (ImporterProfile.PUBLIC, ImporterProfile.AMAZON):
        return PerceptionPolicy(PERCEPTION_EXCLUDED, RULE_EXCLUDED)
    if profile in (ImporterProfile.FIRST_IMPORT, ImporterProfile.NO_HABIDO):
        return PerceptionPolicy(PERCEPTION_HIGH, RULE_HIGH)
    if is_used:
        return PerceptionPolicy(PERCEPTION_USED_GOODS, RULE_USED_GOODS)
    return PerceptionPolicy(PERCEPTION_GENERAL, RULE_GENERAL)


def perception_policy(
    profile: ImporterProfile | None,
    is_used: bool,
    override_rate: Decimal | None,
) -> PerceptionPolicy:
    """Apply an explicit perception rate on top of the default policy."""
    if override_rate is None:
        return default_perception(profile, is_used)
    if override_rate == 0:
        return PerceptionPolicy(override_rate, RULE_OVERRIDE_ZERO)
    return PerceptionPolicy(override_rate, RULE_OVERRIDE)


def excise_enabled_by_default(variant: Variant, profile: RuleProfile) -> bool:
    """
    Whether ISC is charged absent an explicit toggle.

    The USD-only variant charges ISC only when asked to; the multi-country
    variant charges it whenever the tariff line has an ISC rule.
    """
    if variant is Variant.USD_ONLY:
        return False
    return profile.isc_rule is not None


def preferential_rate(
    mfn_rate: Decimal,
    fta_rate: Decimal | None,
    use_fta: bool,
) -> tuple[Decimal, bool]:
    """
    Duty rate before overrides, and whether a preference lowered it.

    The FTA rate only applies when requested and when it beats the MFN rate.
    """
    if use_fta and fta_rate is not None and fta_rate < mfn_rate:
        return fta_rate, True
    return mfn_rate, False


def pick_band(bands: Sequence[IscBand], strength: Decimal | None) -> IscBand | None:
    """First band whose ``max_strength`` covers ``strength``, or None."""
    if strength is None:
        return None
    return next((band for band in bands if strength <= band.max_strength), None)
