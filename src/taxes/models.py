"""
Tax Return Records
==================

Typed, read-only representation of an extracted tax return. Records are
built from the JSON form written by the extraction step. Money values are
held as `Decimal` so sums across line items and years stay exact.

Older stored records may be missing list fields (deductions, payments, ...);
`TaxReturn.from_dict` fills those with empty lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation


def to_decimal(value, field_name: str = "amount") -> Decimal:
    """Convert a JSON number (or numeric string) to Decimal without float noise."""
    if value is None:
        return Decimal(0)
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number, got {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{field_name} must be a number, got {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"{field_name} must be a finite number, got {value!r}")
    return amount


def _optional_decimal(value, field_name: str) -> Decimal | None:
    return None if value is None else to_decimal(value, field_name)


@dataclass(frozen=True)
class LineItem:
    label: str
    amount: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> LineItem:
        return cls(
            label=str(data.get("label", "")).strip(),
            amount=to_decimal(data.get("amount"), "amount"),
        )


def _items(values) -> tuple[LineItem, ...]:
    return tuple(LineItem.from_dict(item) for item in (values or []))


@dataclass(frozen=True)
class Income:
    total: Decimal
    items: tuple[LineItem, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> Income:
        return cls(
            total=to_decimal(data.get("total"), "income.total"),
            items=_items(data.get("items")),
        )


@dataclass(frozen=True)
class FederalReturn:
    agi: Decimal
    taxable_income: Decimal
    tax: Decimal
    deductions: tuple[LineItem, ...] = ()
    additional_taxes: tuple[LineItem, ...] = ()
    credits: tuple[LineItem, ...] = ()
    payments: tuple[LineItem, ...] = ()
    refund_or_owed: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict) -> FederalReturn:
        return cls(
            agi=to_decimal(data.get("agi"), "federal.agi"),
            taxable_income=to_decimal(data.get("taxableIncome"), "federal.taxableIncome"),
            tax=to_decimal(data.get("tax"), "federal.tax"),
            deductions=_items(data.get("deductions")),
            additional_taxes=_items(data.get("additionalTaxes")),
            credits=_items(data.get("credits")),
            payments=_items(data.get("payments")),
            refund_or_owed=_optional_decimal(
                data.get("refundOrOwed"), "federal.refundOrOwed"
            ),
        )


@dataclass(frozen=True)
class StateReturn:
    name: str
    agi: Decimal
    taxable_income: Decimal
    tax: Decimal
    deductions: tuple[LineItem, ...] = ()
    adjustments: tuple[LineItem, ...] = ()
    payments: tuple[LineItem, ...] = ()
    refund_or_owed: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict) -> StateReturn:
        name = str(data.get("name", "")).strip()
        return cls(
            name=name,
            agi=to_decimal(data.get("agi"), f"{name}.agi"),
            taxable_income=to_decimal(data.get("taxableIncome"), f"{name}.taxableIncome"),
            tax=to_decimal(data.get("tax"), f"{name}.tax"),
            deductions=_items(data.get("deductions")),
            adjustments=_items(data.get("adjustments")),
            payments=_items(data.get("payments")),
            refund_or_owed=_optional_decimal(
                data.get("refundOrOwed"), f"{name}.refundOrOwed"
            ),
        )


@dataclass(frozen=True)
class RatePair:
    """Marginal and effective rates as percentages (22 means 22%)."""

    marginal: Decimal | None = None
    effective: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> RatePair | None:
        if not data:
            return None
        return cls(
            marginal=_optional_decimal(data.get("marginal"), "rates.marginal"),
            effective=_optional_decimal(data.get("effective"), "rates.effective"),
        )


@dataclass(frozen=True)
class Rates:
    federal: RatePair | None = None
    state: RatePair | None = None
    combined: RatePair | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> Rates | None:
        if not data:
            return None
        return cls(
            federal=RatePair.from_dict(data.get("federal")),
            state=RatePair.from_dict(data.get("state")),
            combined=RatePair.from_dict(data.get("combined")),
        )


@dataclass(frozen=True)
class Dependent:
    name: str
    relationship: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Dependent:
        return cls(
            name=str(data.get("name", "")).strip(),
            relationship=str(data.get("relationship", "")).strip(),
        )


@dataclass(frozen=True)
class TaxReturn:
    year: int
    name: str
    income: Income
    federal: FederalReturn
    states: tuple[StateReturn, ...] = ()
    rates: Rates | None = None
    dependents: tuple[Dependent, ...] = field(default=())

    @classmethod
    def from_dict(cls, data: dict) -> TaxReturn:
        """Build a record from its stored JSON form (camelCase keys)."""
        try:
            year = int(data["year"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Tax return has no valid year: {data.get('year')!r}") from e
        return cls(
            year=year,
            name=str(data.get("name", "")).strip(),
            income=Income.from_dict(data.get("income") or {}),
            federal=FederalReturn.from_dict(data.get("federal") or {}),
            states=tuple(StateReturn.from_dict(s) for s in (data.get("states") or [])),
            rates=Rates.from_dict(data.get("rates")),
            dependents=tuple(
                Dependent.from_dict(d) for d in (data.get("dependents") or [])
            ),
        )
