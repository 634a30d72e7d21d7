"""
Projections derived from a simulation result.

``build_tax_lines`` itemizes the non-zero taxes of a result the way they
are stored next to an import; ``build_accounting_entry`` previews the
double entry that records the import, every tax on the debit side and the
total payable to the supplier/customs on account 421.
"""

from __future__ import annotations

from decimal import Decimal

from services.customs.rounding import round2
from services.customs.types import (
    ZERO,
    AccountingEntry,
    AccountingLine,
    ChargeMode,
    RemedyType,
    SimulationResult,
    TaxLineEntry,
)

GOODS_ACCOUNT = ("601", "Mercaderías")
DUTY_ACCOUNT = ("4015", "Derechos aduaneros")
EXCISE_ACCOUNT = ("4012", "Impuesto Selectivo al Consumo")
VAT_ACCOUNT = ("40111", "IGV - Cuenta propia")
RELATED_COSTS_ACCOUNT = ("609", "Costos vinculados con las compras")
PERCEPTION_ACCOUNT = ("40113", "IGV - Régimen de percepciones")
PAYABLE_ACCOUNT = ("421", "Facturas, boletas y otros comprobantes por pagar")

_REMEDY_CONCEPTS = {
    RemedyType.ANTIDUMPING: "antidumping",
    RemedyType.COUNTERVAILING: "compensatorio",
}


def build_tax_lines(result: SimulationResult) -> tuple[TaxLineEntry, ...]:
    """
    Itemize every tax with a positive amount.

    Concepts: ``ad_valorem``, ``isc`` (one per component), ``igv``, ``ipm``,
    ``antidumping``/``compensatorio`` (one per remedy item), ``sda`` and
    ``percepcion``.
    """
    lines: list[TaxLineEntry] = []

    def add(concept: str, base: Decimal, rate: Decimal | None, amount: Decimal) -> None:
        if amount > 0:
            lines.append(TaxLineEntry(concept, base, rate, amount))

    add("ad_valorem", result.duty.base, result.duty.rate, result.duty.amount)

    for component in result.excise.components:
        if component.mode is ChargeMode.AD_VALOREM:
            add("isc", component.base or ZERO, component.rate, component.amount)
        else:
            add("isc", component.quantity or ZERO, component.per_unit, component.amount)

    add("igv", result.vat.base, result.vat.igv_rate, result.vat.igv)
    add("ipm", result.vat.base, result.vat.ipm_rate, result.vat.ipm)

    for item in result.trade_remedies.items:
        add(_REMEDY_CONCEPTS[item.type], item.base, item.rate, item.amount)

    if result.sda.applies:
        add("sda", result.sda.base, result.sda.rate, result.sda.amount)

    add("percepcion", result.perception.base, result.perception.rate, result.perception.amount)
    return tuple(lines)


def build_accounting_entry(result: SimulationResult) -> AccountingEntry:
    """
    Build the accounting preview of an import, in the result's currency.

    Debits: goods (CIF), duty, ISC, IGV + IPM, related costs (AD/CVD + SDA)
    and perception. The single credit on 421 equals the debit total, so the
    entry is always balanced.
    """
    debits = (
        (GOODS_ACCOUNT, result.cif),
        (DUTY_ACCOUNT, result.duty.amount),
        (EXCISE_ACCOUNT, result.excise.total),
        (VAT_ACCOUNT, result.vat.total),
        (RELATED_COSTS_ACCOUNT, round2(result.trade_remedies.total + result.sda.amount)),
        (PERCEPTION_ACCOUNT, result.perception.amount),
    )
    lines = [
        AccountingLine(account=code, name=name, debit=round2(amount))
        for (code, name), amount in debits
    ]
    debit_total = round2(sum((line.debit for line in lines), ZERO))

    code, name = PAYABLE_ACCOUNT
    lines.append(AccountingLine(account=code, name=name, credit=debit_total))

    return AccountingEntry(
        currency=result.currency,
        lines=tuple(lines),
        debit_total=debit_total,
        credit_total=debit_total,
    )


def accounting_entry_to_json(entry: AccountingEntry) -> dict[str, object]:
    """Serialize an accounting entry for JSON storage (amounts as strings)."""
    return {
        "currency": entry.currency,
        "lines": [
            {
                "account": line.account,
                "name": line.name,
                "debit": str(line.debit),
                "credit": str(line.credit),
            }
            for line in entry.lines
        ],
        "debit_total": str(entry.debit_total),
        "credit_total": str(entry.credit_total),
    }
