"""
Profitability aggregator.

Rolls the stored imports, sales and expenses of a study case into gross,
operating and net profit. Every amount is normalized to the reporting
currency (USD by default) with the fixed reporting exchange rate from
settings, never with the spot rate of a simulated import.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from functools import partial
from typing import TYPE_CHECKING

from apps.cases.models import Currency, Expense, ExportOperation, ImportOperation, StudyCase
from core.config import TaxSettings, get_settings
from core.errors import NotFoundOrUnauthorizedError
from core.logging import bound_context, get_logger
from core.result import Failure, capture
from services.customs.rounding import percentage, round2
from services.profitability.types import (
    ZERO,
    ComparativeReport,
    ComparativeRow,
    ComparativeStats,
    CurrencySummary,
    ExpenseBreakdown,
    ExpenseCategory,
    ExpenseRecord,
    GrossProfit,
    ImportRecord,
    NetProfit,
    OperatingProfit,
    ProfitabilityDetail,
    RentabilityAnalysis,
    SaleRecord,
    TaxLineRecord,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger(__name__)

CASE_NOT_FOUND = "Caso de estudio no encontrado o no autorizado"
ANALYSIS_ERROR = "Error al calcular análisis"


class ProfitabilityService:
    """Computes per-case profitability and cross-case comparisons."""

    def __init__(self, tax_settings: TaxSettings | None = None) -> None:
        """
        Initialize the service.

        Args:
            tax_settings: Source of the reporting currency, reporting
                exchange rate and default comparison limit.
        """
        settings = tax_settings or get_settings().tax
        self._reporting_currency = settings.reporting_currency
        self._reporting_rate = settings.reporting_exchange_rate
        self._default_limit = settings.comparison_limit

    def compute_profitability(
        self,
        study_case_id: int,
        user_id: int,
        include_detail: bool = True,
    ) -> RentabilityAnalysis:
        """
        Compute the income statement of one study case.

        Args:
            study_case_id: Study case to analyse.
            user_id: Requesting user; must own the case.
            include_detail: Whether to return the underlying rows.

        Raises:
            NotFoundOrUnauthorizedError: The case is missing or owned by
                another user. Both look the same to the caller.
        """
        with bound_context(study_case_id=study_case_id):
            return self._compute(study_case_id, user_id, include_detail)

    def _compute(
        self, study_case_id: int, user_id: int, include_detail: bool
    ) -> RentabilityAnalysis:
        case = StudyCase.objects.filter(pk=study_case_id, user_id=user_id).first()
        if case is None:
            raise NotFoundOrUnauthorizedError(CASE_NOT_FOUND, details=f"id={study_case_id}")

        imports = self._load_imports(case)
        sales = self._load_sales(case)
        expenses = self._load_expenses(case)

        gross = self._gross_profit(sales, imports)
        operating = self._operating_profit(gross, expenses.operating)
        net = self._net_profit(gross.total_sales, operating, expenses)

        logger.debug(
            "Computed profitability",
            imports=len(imports),
            sales=len(sales),
            net_margin=str(net.margin_pct),
        )

        return RentabilityAnalysis(
            study_case_id=case.pk,
            case_name=case.name,
            currency=self._reporting_currency,
            gross=gross,
            operating=operating,
            net=net,
            currency_summary=self._currency_summary(imports, sales, expenses),
            detail=ProfitabilityDetail(imports, sales, expenses)
            if include_detail
            else ProfitabilityDetail(),
        )

    def compare_study_cases(self, user_id: int, limit: int | None = None) -> ComparativeReport:
        """
        Compare the net margin of the user's most recent study cases.

        A case whose analysis fails is reported as a zero row carrying an
        error marker; the rest of the batch is unaffected.
        """
        if limit is None:
            limit = self._default_limit
        cases = list(
            StudyCase.objects.filter(user_id=user_id).order_by("-created_at", "-id")[:limit]
        )

        rows: list[ComparativeRow] = []
        for case in cases:
            outcome = capture(
                partial(self.compute_profitability, case.pk, user_id, include_detail=False)
            )
            if isinstance(outcome, Failure):
                logger.warning(
                    "Profitability analysis failed",
                    study_case_id=case.pk,
                    error=str(outcome.error),
                )
                rows.append(
                    ComparativeRow(
                        study_case_id=case.pk,
                        case_name=case.name,
                        created_at=case.created_at,
                        error=ANALYSIS_ERROR,
                    )
                )
                continue

            analysis = outcome.value
            rows.append(
                ComparativeRow(
                    study_case_id=case.pk,
                    case_name=case.name,
                    created_at=case.created_at,
                    net_margin_pct=analysis.net.margin_pct,
                    net_profit=analysis.net.net_profit,
                    total_sales=analysis.gross.total_sales,
                )
            )

        return ComparativeReport(
            total_cases=len(cases),
            rows=tuple(rows),
            stats=self._stats(row.net_margin_pct for row in rows),
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_imports(self, case: StudyCase) -> tuple[ImportRecord, ...]:
        queryset = ImportOperation.objects.filter(study_case=case).prefetch_related("tax_lines")
        return tuple(
            ImportRecord(
                id=row.pk,
                hs10=row.hs10,
                description=row.description,
                currency=row.currency,
                cif=row.cif,
                customs_debt=row.customs_debt,
                operation_date=row.operation_date,
                fob=row.fob,
                freight=row.freight,
                insurance=row.insurance,
                tax_lines=tuple(
                    TaxLineRecord(line.concept, line.taxable_base, line.rate, line.amount)
                    for line in row.tax_lines.all()
                ),
            )
            for row in queryset
        )

    def _load_sales(self, case: StudyCase) -> tuple[SaleRecord, ...]:
        return tuple(
            SaleRecord(
                id=row.pk,
                is_domestic_sale=row.is_domestic_sale,
                description=row.description,
                sale_value=row.sale_value,
                currency=row.currency,
                operation_date=row.operation_date,
                incoterm=row.incoterm,
                origin_country=row.origin_country,
                destination_country=row.destination_country,
            )
            for row in ExportOperation.objects.filter(study_case=case)
        )

    def _load_expenses(self, case: StudyCase) -> ExpenseBreakdown:
        buckets: dict[ExpenseCategory, list[ExpenseRecord]] = defaultdict(list)
        queryset = Expense.objects.filter(study_case=case).select_related("classification")
        for row in queryset:
            category = ExpenseCategory.from_label(row.classification.name)
            if category is None:
                logger.debug(
                    "Expense classification outside the income statement",
                    expense_id=row.pk,
                    classification=row.classification.name,
                )
                continue
            buckets[category].append(
                ExpenseRecord(
                    id=row.pk,
                    classification=row.classification.name,
                    description=row.description,
                    amount=row.amount,
                    currency=row.currency,
                    expense_date=row.expense_date,
                    account_code=row.account_code,
                )
            )
        return ExpenseBreakdown(
            operating=tuple(buckets[ExpenseCategory.OPERATING]),
            administrative=tuple(buckets[ExpenseCategory.ADMINISTRATIVE]),
            selling=tuple(buckets[ExpenseCategory.SELLING]),
            financial=tuple(buckets[ExpenseCategory.FINANCIAL]),
        )

    # ------------------------------------------------------------------
    # Figures
    # ------------------------------------------------------------------

    def _to_reporting(self, amount: Decimal, currency: str) -> Decimal:
        if currency == self._reporting_currency:
            return amount
        # reporting_exchange_rate is PEN per USD
        if currency == Currency.PEN:
            return amount / self._reporting_rate
        return amount * self._reporting_rate

    def _sum(self, pairs: Iterable[tuple[Decimal, str]]) -> Decimal:
        return round2(sum((self._to_reporting(amount, cur) for amount, cur in pairs), ZERO))

    def _gross_profit(
        self,
        sales: tuple[SaleRecord, ...],
        imports: tuple[ImportRecord, ...],
    ) -> GrossProfit:
        total_sales = self._sum((sale.sale_value, sale.currency) for sale in sales)
        cost = self._sum((imp.acquisition_cost, imp.currency) for imp in imports)
        profit = round2(total_sales - cost)
        return GrossProfit(
            total_sales=total_sales,
            acquisition_cost=cost,
            gross_profit=profit,
            margin_pct=percentage(profit, total_sales),
        )

    def _operating_profit(
        self,
        gross: GrossProfit,
        operating: tuple[ExpenseRecord, ...],
    ) -> OperatingProfit:
        expenses = self._sum((e.amount, e.currency) for e in operating)
        profit = round2(gross.gross_profit - expenses)
        return OperatingProfit(
            gross_profit=gross.gross_profit,
            operating_expenses=expenses,
            operating_profit=profit,
            margin_pct=percentage(profit, gross.total_sales),
        )

    def _net_profit(
        self,
        total_sales: Decimal,
        operating: OperatingProfit,
        expenses: ExpenseBreakdown,
    ) -> NetProfit:
        administrative = self._sum((e.amount, e.currency) for e in expenses.administrative)
        selling = self._sum((e.amount, e.currency) for e in expenses.selling)
        financial = self._sum((e.amount, e.currency) for e in expenses.financial)
        other = round2(administrative + selling + financial)
        profit = round2(operating.operating_profit - other)
        return NetProfit(
            operating_profit=operating.operating_profit,
            administrative_expenses=administrative,
            selling_expenses=selling,
            financial_expenses=financial,
            other_expenses=other,
            net_profit=profit,
            margin_pct=percentage(profit, total_sales),
        )

    def _currency_summary(
        self,
        imports: tuple[ImportRecord, ...],
        sales: tuple[SaleRecord, ...],
        expenses: ExpenseBreakdown,
    ) -> CurrencySummary:
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for sale in sales:
            totals[sale.currency] += sale.sale_value
        for imp in imports:
            totals[imp.currency] += imp.acquisition_cost
        for expense in expenses.all():
            totals[expense.currency] += expense.amount
        return CurrencySummary(
            total_usd=round2(totals[Currency.USD]),
            total_pen=round2(totals[Currency.PEN]),
            suggested_rate=self._reporting_rate,
        )

    @staticmethod
    def _stats(margins: Iterable[Decimal]) -> ComparativeStats:
        values = list(margins)
        if not values:
            return ComparativeStats()
        return ComparativeStats(
            best_margin_pct=max(values),
            worst_margin_pct=min(values),
            average_margin_pct=round2(sum(values, ZERO) / len(values)),
        )
