"""
Tax aggregation package.

This package contains the typed tax return records, the year-keyed return
store, and the aggregation functions that derive total tax, net income and
effective rates.
"""

from .aggregator import (
    MultiYearSummary,
    UndefinedEffectiveRateError,
    YearSummary,
    effective_rate,
    net_income,
    summarize,
    summarize_years,
    total_tax,
)
from .models import TaxReturn
from .storage import ReturnStore

__all__ = [
    "MultiYearSummary",
    "ReturnStore",
    "TaxReturn",
    "UndefinedEffectiveRateError",
    "YearSummary",
    "effective_rate",
    "net_income",
    "summarize",
    "summarize_years",
    "total_tax",
]
