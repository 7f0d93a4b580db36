"""
Tax Aggregation
===============

Derives summary metrics from extracted tax returns: total tax, net income and
effective rate per year, and the multi-year totals shown on the summary
dashboard. All arithmetic is done in `Decimal`.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

import structlog

from .models import TaxReturn

log = structlog.get_logger(__name__)

DAYS_PER_YEAR = 365
WORK_HOURS_PER_YEAR = 2080  # 40 hours x 52 weeks


class UndefinedEffectiveRateError(ZeroDivisionError):
    """The effective rate cannot be derived because total income is zero."""


def total_tax(tax_return: TaxReturn) -> Decimal:
    """Federal tax plus federal additional taxes plus all state taxes."""
    federal = tax_return.federal
    federal_additional = sum((t.amount for t in federal.additional_taxes), Decimal(0))
    state_taxes = sum((s.tax for s in tax_return.states), Decimal(0))
    return federal.tax + federal_additional + state_taxes


def net_income(tax_return: TaxReturn) -> Decimal:
    return tax_return.income.total - total_tax(tax_return)


def effective_rate(tax_return: TaxReturn) -> Decimal:
    """
    Effective rate as a fraction (0.22 for 22%).

    The combined effective rate reported on the return wins when present;
    otherwise total tax is divided by total income.
    """
    combined = tax_return.rates.combined if tax_return.rates else None
    if combined is not None and combined.effective is not None:
        return combined.effective / 100

    income = tax_return.income.total
    if income == 0:
        raise UndefinedEffectiveRateError(
            f"Effective rate for {tax_return.year} is undefined: total income is zero"
        )
    return total_tax(tax_return) / income


@dataclass(frozen=True)
class YearSummary:
    year: int
    income: Decimal
    total_tax: Decimal
    net_income: Decimal
    effective_rate: Decimal | None
    daily_take: Decimal
    hourly_take: Decimal

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "income": str(self.income),
            "totalTax": str(self.total_tax),
            "netIncome": str(self.net_income),
            "effectiveRate": (
                None if self.effective_rate is None else str(self.effective_rate)
            ),
            "dailyTake": str(self.daily_take),
            "hourlyTake": str(self.hourly_take),
        }


@dataclass(frozen=True)
class MultiYearSummary:
    years: tuple[int, ...]
    total_income: Decimal
    total_tax: Decimal
    net_income: Decimal
    average_effective_rate: Decimal | None

    def to_dict(self) -> dict:
        return {
            "years": list(self.years),
            "totalIncome": str(self.total_income),
            "totalTax": str(self.total_tax),
            "netIncome": str(self.net_income),
            "averageEffectiveRate": (
                None
                if self.average_effective_rate is None
                else str(self.average_effective_rate)
            ),
        }


def summarize(tax_return: TaxReturn) -> YearSummary:
    """Per-year metrics; the effective rate is None when it is undefined."""
    tax = total_tax(tax_return)
    net = tax_return.income.total - tax
    try:
        rate = effective_rate(tax_return)
    except UndefinedEffectiveRateError:
        log.warning("Effective rate undefined; income is zero", year=tax_return.year)
        rate = None
    return YearSummary(
        year=tax_return.year,
        income=tax_return.income.total,
        total_tax=tax,
        net_income=net,
        effective_rate=rate,
        daily_take=(net / DAYS_PER_YEAR).quantize(
            Decimal(1), rounding=ROUND_HALF_UP
        ),
        hourly_take=(net / WORK_HOURS_PER_YEAR).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        ),
    )


def summarize_years(returns: Iterable[TaxReturn]) -> MultiYearSummary | None:
    """
    Reduce per-year metrics across all loaded years.

    Years are treated as an unordered set; the average effective rate is the
    mean over years whose rate is defined. Returns None for no returns.
    """
    summaries = sorted((summarize(r) for r in returns), key=lambda s: s.year)
    if not summaries:
        return None

    rates = [s.effective_rate for s in summaries if s.effective_rate is not None]
    average_rate = sum(rates, Decimal(0)) / len(rates) if rates else None
    return MultiYearSummary(
        years=tuple(s.year for s in summaries),
        total_income=sum((s.income for s in summaries), Decimal(0)),
        total_tax=sum((s.total_tax for s in summaries), Decimal(0)),
        net_income=sum((s.net_income for s in summaries), Decimal(0)),
        average_effective_rate=average_rate,
    )
