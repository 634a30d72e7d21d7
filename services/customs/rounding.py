"""Decimal helpers shared by the engine, the parsers and the aggregator."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

_NON_DIGITS = re.compile(r"\D")


def to_decimal(value: object) -> Decimal:
    """
    Convert ``value`` to Decimal through its string form.

    Raises:
        ValueError: If the value is not numeric.
    """
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc


def round2(value: Decimal | int | str) -> Decimal:
    """Quantize to cents, rounding half away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """``part / whole * 100`` rounded to cents, 0 when ``whole`` is 0."""
    if not whole:
        return Decimal("0.00")
    return round2(part / whole * HUNDRED)


def parse_percent(value: object) -> Decimal | None:
    """
    Parse a user-entered percentage into a fraction.

    Accepts ``50``, ``0.5``, ``"50%"`` or ``"3,5"``; values above 1 are read
    as percentages. Blank, negative or non-numeric input yields None.

    Examples:
        >>> parse_percent("3.5%")
        Decimal('0.035')
        >>> parse_percent(0.06)
        Decimal('0.06')
    """
    if value is None:
        return None
    text = str(value).strip().replace("%", "").replace(",", ".").strip()
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite() or number < 0:
        return None
    return number / HUNDRED if number > 1 else number


def normalize_hs10(code: str) -> str:
    """Strip every non-digit from a tariff code (``"4819.10.00.00"`` -> ``"4819100000"``)."""
    return _NON_DIGITS.sub("", code or "")
