"""Types for the profitability aggregator."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0.00")


class ExpenseCategory(str, Enum):
    """Fixed expense buckets of the income statement."""

    OPERATING = "operativo"
    ADMINISTRATIVE = "administrativo"
    SELLING = "ventas"
    FINANCIAL = "financiero"

    @classmethod
    def from_label(cls, label: str | None) -> ExpenseCategory | None:
        """
        Match a classification name case-insensitively.

        Returns None for names outside the four buckets.
        """
        if not label:
            return None
        try:
            return cls(label.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class TaxLineRecord:
    """Stored tax line of an import."""

    concept: str
    taxable_base: Decimal
    rate: Decimal | None
    amount: Decimal


@dataclass(frozen=True, slots=True)
class ImportRecord:
    """Stored import as read by the aggregator."""

    id: int
    hs10: str
    description: str
    currency: str
    cif: Decimal
    customs_debt: Decimal
    operation_date: datetime.date
    fob: Decimal | None = None
    freight: Decimal | None = None
    insurance: Decimal | None = None
    tax_lines: tuple[TaxLineRecord, ...] = ()

    @property
    def acquisition_cost(self) -> Decimal:
        """CIF plus customs debt, in the record's currency."""
        return self.cif + self.customs_debt


@dataclass(frozen=True, slots=True)
class SaleRecord:
    """Stored export or domestic sale."""

    id: int
    is_domestic_sale: bool
    description: str
    sale_value: Decimal
    currency: str
    operation_date: datetime.date
    incoterm: str = ""
    origin_country: str = ""
    destination_country: str = ""


@dataclass(frozen=True, slots=True)
class ExpenseRecord:
    """Stored expense with its classification name."""

    id: int
    classification: str
    description: str
    amount: Decimal
    currency: str
    expense_date: datetime.date
    account_code: str = ""


@dataclass(frozen=True, slots=True)
class ExpenseBreakdown:
    """Expenses grouped by category; unmatched classifications are absent."""

    operating: tuple[ExpenseRecord, ...] = ()
    administrative: tuple[ExpenseRecord, ...] = ()
    selling: tuple[ExpenseRecord, ...] = ()
    financial: tuple[ExpenseRecord, ...] = ()

    def all(self) -> tuple[ExpenseRecord, ...]:
        """Every categorized expense."""
        return self.operating + self.administrative + self.selling + self.financial


@dataclass(frozen=True, slots=True)
class GrossProfit:
    """Sales minus acquisition cost of the imports."""

    total_sales: Decimal
    acquisition_cost: Decimal
    gross_profit: Decimal
    margin_pct: Decimal


@dataclass(frozen=True, slots=True)
class OperatingProfit:
    """Gross profit minus operating expenses."""

    gross_profit: Decimal
    operating_expenses: Decimal
    operating_profit: Decimal
    margin_pct: Decimal


@dataclass(frozen=True, slots=True)
class NetProfit:
    """Operating profit minus administrative, selling and financial expenses."""

    operating_profit: Decimal
    administrative_expenses: Decimal
    selling_expenses: Decimal
    financial_expenses: Decimal
    other_expenses: Decimal
    net_profit: Decimal
    margin_pct: Decimal


@dataclass(frozen=True, slots=True)
class CurrencySummary:
    """Raw totals per currency and the rate used to normalize them."""

    total_usd: Decimal
    total_pen: Decimal
    suggested_rate: Decimal


@dataclass(frozen=True, slots=True)
class ProfitabilityDetail:
    """Rows behind an analysis; empty unless detail was requested."""

    imports: tuple[ImportRecord, ...] = ()
    sales: tuple[SaleRecord, ...] = ()
    expenses: ExpenseBreakdown = field(default_factory=ExpenseBreakdown)


@dataclass(frozen=True, slots=True)
class RentabilityAnalysis:
    """Profitability of one study case, in the reporting currency."""

    study_case_id: int
    case_name: str
    currency: str
    gross: GrossProfit
    operating: OperatingProfit
    net: NetProfit
    currency_summary: CurrencySummary
    detail: ProfitabilityDetail = field(default_factory=ProfitabilityDetail)


@dataclass(frozen=True, slots=True)
class ComparativeRow:
    """One case of the comparison; ``error`` is set when its analysis failed."""

    study_case_id: int
    case_name: str
    created_at: datetime.datetime
    net_margin_pct: Decimal = ZERO
    net_profit: Decimal = ZERO
    total_sales: Decimal = ZERO
    error: str | None = None


@dataclass(frozen=True, slots=True)
class ComparativeStats:
    """Best, worst and average net margin across the compared cases."""

    best_margin_pct: Decimal = ZERO
    worst_margin_pct: Decimal = ZERO
    average_margin_pct: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class ComparativeReport:
    """Net-margin comparison of a user's most recent study cases."""

    total_cases: int
    rows: tuple[ComparativeRow, ...] = ()
    stats: ComparativeStats = field(default_factory=ComparativeStats)
