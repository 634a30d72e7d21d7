"""Profitability aggregation package."""

from services.profitability.types import ComparativeReport, ExpenseCategory, RentabilityAnalysis

__all__ = ["ComparativeReport", "ExpenseCategory", "RentabilityAnalysis"]
