from decimal import Decimal

import pytest

from taxes.aggregator import (
    UndefinedEffectiveRateError,
    effective_rate,
    net_income,
    summarize,
    summarize_years,
    total_tax,
)
from taxes.models import TaxReturn


def make_return(
    year=2024,
    income=10000,
    federal_tax=1000,
    additional_taxes=(200,),
    state_taxes=(300,),
    rates=None,
):
    record = {
        "year": year,
        "name": "Jane Doe",
        "income": {"total": income, "items": [{"label": "W-2 wages", "amount": income}]},
        "federal": {
            "agi": income,
            "taxableIncome": income,
            "tax": federal_tax,
            "additionalTaxes": [
                {"label": f"Additional tax {i}", "amount": amount}
                for i, amount in enumerate(additional_taxes)
            ],
        },
        "states": [
            {"name": f"State {i}", "agi": income, "taxableIncome": income, "tax": tax}
            for i, tax in enumerate(state_taxes)
        ],
    }
    if rates is not None:
        record["rates"] = rates
    return TaxReturn.from_dict(record)


def test_total_tax_net_income_and_fallback_rate():
    tax_return = make_return()

    assert total_tax(tax_return) == Decimal("1500")
    assert net_income(tax_return) == Decimal("8500")
    assert effective_rate(tax_return) == Decimal("0.15")


def test_combined_effective_rate_wins_over_ratio():
    tax_return = make_return(rates={"combined": {"marginal": 32, "effective": 22}})

    assert effective_rate(tax_return) == Decimal("0.22")


def test_missing_combined_effective_rate_falls_back_to_ratio():
    tax_return = make_return(rates={"federal": {"marginal": 22, "effective": 12}})

    assert effective_rate(tax_return) == Decimal("0.15")


def test_zero_reported_rate_is_used_as_is():
    tax_return = make_return(rates={"combined": {"effective": 0}})

    assert effective_rate(tax_return) == Decimal(0)


def test_aggregation_is_exact_for_cents():
    tax_return = make_return(
        income="100000.10", federal_tax="0.10", additional_taxes=("0.20",), state_taxes=()
    )

    assert total_tax(tax_return) == Decimal("0.30")
    assert net_income(tax_return) == Decimal("99999.80")


def test_zero_income_fallback_is_undefined():
    tax_return = make_return(income=0)

    with pytest.raises(UndefinedEffectiveRateError):
        effective_rate(tax_return)
    with pytest.raises(ZeroDivisionError):
        effective_rate(tax_return)


def test_zero_income_with_reported_rate_is_defined():
    tax_return = make_return(income=0, rates={"combined": {"effective": 5}})

    assert effective_rate(tax_return) == Decimal("0.05")


def test_summarize_year():
    summary = summarize(make_return(income=73000, federal_tax=0, additional_taxes=(), state_taxes=()))

    assert summary.year == 2024
    assert summary.total_tax == Decimal(0)
    assert summary.net_income == Decimal(73000)
    assert summary.daily_take == Decimal(200)
    assert summary.hourly_take == Decimal("35.10")
    assert summary.effective_rate == Decimal(0)


def test_summarize_year_with_zero_income_has_no_rate():
    summary = summarize(make_return(income=0, federal_tax=0, additional_taxes=(), state_taxes=()))

    assert summary.effective_rate is None
    assert summary.to_dict()["effectiveRate"] is None


def test_summarize_years_sums_and_averages():
    returns = [
        make_return(year=2023),  # tax 1500, net 8500, rate 0.15
        make_return(year=2022, income=20000, federal_tax=2000, additional_taxes=(), state_taxes=(1000,)),
    ]

    summary = summarize_years(returns)

    assert summary.years == (2022, 2023)
    assert summary.total_income == Decimal(30000)
    assert summary.total_tax == Decimal(4500)
    assert summary.net_income == Decimal(25500)
    assert summary.average_effective_rate == Decimal("0.15")


def test_summarize_years_is_order_independent():
    returns = [
        make_return(year=2021, rates={"combined": {"effective": 20}}),
        make_return(year=2022),
        make_return(year=2023, income=50000),
    ]

    assert summarize_years(returns) == summarize_years(list(reversed(returns)))


def test_summarize_years_skips_undefined_rates():
    returns = [
        make_return(year=2022),
        make_return(year=2023, income=0, federal_tax=0, additional_taxes=(), state_taxes=()),
    ]

    summary = summarize_years(returns)

    assert summary.average_effective_rate == Decimal("0.15")
    assert summary.net_income == Decimal(8500)


def test_summarize_years_empty():
    assert summarize_years([]) is None
