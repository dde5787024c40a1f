"""
Short-Term Rental Investment Analysis

Maps purchase, financing and operating-expense assumptions to monthly cash
flow and return metrics. Everything here is closed-form arithmetic: no state,
no I/O, O(1) per call, so callers can recompute on every slider movement.
"""

import math
from dataclasses import dataclass, asdict, replace, fields
from typing import Dict, Iterable

from propvest.calculations.amortization import (
    calculate_loan_amount,
    calculate_payment,
)

# Fixed business assumptions of the dashboard
CLOSING_COST_ESTIMATE = 3500.0
DAYS_PER_MONTH = 30


class AnalysisError(ValueError):
    """Base error for inputs the model refuses to evaluate."""


class InvalidInputError(AnalysisError):
    """An assumption or expense is outside its valid domain."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class DegenerateResultError(AnalysisError):
    """The inputs produce a metric with a zero denominator."""


@dataclass(frozen=True)
class FinancingAssumptions:
    """Purchase, loan and rental-income assumptions."""

    purchase_price: float = 450000.0
    down_payment_percent: float = 20.0
    interest_rate: float = 6.5  # Annual percent
    loan_term_years: int = 30
    nightly_rate: float = 250.0
    occupancy_rate: float = 65.0  # Percent of nights booked per month

    def with_changes(self, **changes) -> "FinancingAssumptions":
        """Return a copy with the given fields replaced."""
        _check_field_names(self, changes)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class OperatingExpenses:
    """Recurring ownership costs, excluding debt service."""

    property_tax_yearly: float = 8000.0
    insurance_yearly: float = 2000.0
    hoa_monthly: float = 50.0
    utilities_monthly: float = 300.0
    maintenance_monthly: float = 150.0
    management_fee_percent: float = 0.0  # Percent of monthly income
    other_monthly: float = 0.0

    def with_changes(self, **changes) -> "OperatingExpenses":
        """Return a copy with the given fields replaced."""
        _check_field_names(self, changes)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class AnalysisResult:
    """Derived metrics. Monthly values in currency, rates in percent."""

    monthly_income: float
    monthly_mortgage: float
    total_monthly_expenses: float
    cash_flow: float
    cap_rate: float
    cash_on_cash_roi: float
    initial_investment: float

    @property
    def is_cash_flow_positive(self) -> bool:
        return self.cash_flow > 0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _check_field_names(bundle, changes: Dict) -> None:
    known = {f.name for f in fields(bundle)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise InvalidInputError(unknown[0], f"unknown field for {type(bundle).__name__}")


def _require_finite(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(name, f"must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(name, "must be finite")


def _require_percent(name: str, value: float) -> None:
    if not 0 <= value <= 100:
        raise InvalidInputError(name, f"must be between 0 and 100, got {value}")


def _require_non_negative(names: Iterable[str], bundle) -> None:
    for name in names:
        if getattr(bundle, name) < 0:
            raise InvalidInputError(name, f"must not be negative, got {getattr(bundle, name)}")


def validate_inputs(
    assumptions: FinancingAssumptions, expenses: OperatingExpenses
) -> None:
    """
    Reject assumptions and expenses the model cannot evaluate.

    Raises:
        InvalidInputError: naming the first offending field
    """
    for bundle in (assumptions, expenses):
        for f in fields(bundle):
            _require_finite(f.name, getattr(bundle, f.name))

    if assumptions.purchase_price <= 0:
        raise InvalidInputError("purchase_price", "must be greater than zero")
    if assumptions.loan_term_years <= 0 or assumptions.loan_term_years != int(
        assumptions.loan_term_years
    ):
        raise InvalidInputError("loan_term_years", "must be a positive whole number")

    _require_percent("down_payment_percent", assumptions.down_payment_percent)
    _require_percent("occupancy_rate", assumptions.occupancy_rate)
    _require_percent("management_fee_percent", expenses.management_fee_percent)

    _require_non_negative(("interest_rate", "nightly_rate"), assumptions)
    _require_non_negative(
        (
            "property_tax_yearly",
            "insurance_yearly",
            "hoa_monthly",
            "utilities_monthly",
            "maintenance_monthly",
            "other_monthly",
        ),
        expenses,
    )


def calculate_monthly_income(nightly_rate: float, occupancy_rate: float) -> float:
    """Gross rental income for a flat 30-day month."""
    return (nightly_rate * DAYS_PER_MONTH) * (occupancy_rate / 100)


def down_payment_amount(assumptions: FinancingAssumptions) -> float:
    """Cash paid toward the purchase price at closing."""
    return assumptions.purchase_price * (assumptions.down_payment_percent / 100)


def _clean(name: str, value: float) -> float:
    if not math.isfinite(value):
        raise InvalidInputError(name, "result is not finite for these inputs")
    # Normalizes -0.0 to 0.0
    return value + 0.0


def compute_analysis(
    assumptions: FinancingAssumptions, expenses: OperatingExpenses
) -> AnalysisResult:
    """
    Compute cash flow and return metrics for a short-term rental.

    Args:
        assumptions: Purchase, financing and income assumptions
        expenses: Operating expenses

    Returns:
        A new AnalysisResult

    Raises:
        InvalidInputError: If any input is outside its valid domain
        DegenerateResultError: If the initial investment is zero
    """
    validate_inputs(assumptions, expenses)

    loan_amount = calculate_loan_amount(
        assumptions.purchase_price, assumptions.down_payment_percent
    )
    num_payments = int(assumptions.loan_term_years) * 12
    try:
        monthly_mortgage = calculate_payment(
            loan_amount, assumptions.interest_rate, num_payments
        )
    except (ValueError, OverflowError) as e:
        raise InvalidInputError("interest_rate", str(e)) from e

    monthly_income = calculate_monthly_income(
        assumptions.nightly_rate, assumptions.occupancy_rate
    )

    monthly_tax = expenses.property_tax_yearly / 12
    monthly_insurance = expenses.insurance_yearly / 12
    monthly_mgmt = monthly_income * (expenses.management_fee_percent / 100)

    total_monthly_expenses = (
        monthly_mortgage
        + monthly_tax
        + monthly_insurance
        + expenses.hoa_monthly
        + expenses.utilities_monthly
        + expenses.maintenance_monthly
        + monthly_mgmt
        + expenses.other_monthly
    )

    cash_flow = monthly_income - total_monthly_expenses

    initial_investment = down_payment_amount(assumptions) + CLOSING_COST_ESTIMATE
    if initial_investment == 0:
        raise DegenerateResultError("Initial investment is zero; cash-on-cash ROI is undefined")
    cash_on_cash_roi = (cash_flow * 12 / initial_investment) * 100

    # NOI excludes debt service
    operating_expenses = total_monthly_expenses - monthly_mortgage
    annual_noi = (monthly_income - operating_expenses) * 12
    cap_rate = (annual_noi / assumptions.purchase_price) * 100

    return AnalysisResult(
        monthly_income=_clean("monthly_income", monthly_income),
        monthly_mortgage=_clean("monthly_mortgage", monthly_mortgage),
        total_monthly_expenses=_clean("total_monthly_expenses", total_monthly_expenses),
        cash_flow=_clean("cash_flow", cash_flow),
        cap_rate=_clean("cap_rate", cap_rate),
        cash_on_cash_roi=_clean("cash_on_cash_roi", cash_on_cash_roi),
        initial_investment=_clean("initial_investment", initial_investment),
    )
