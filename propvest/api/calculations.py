"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results.
Used by the dashboard sliders for real-time updates.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional

from propvest.calculations import amortization, analysis
from propvest.calculations.analysis import (
    AnalysisError,
    AnalysisResult,
    FinancingAssumptions,
    OperatingExpenses,
)

router = APIRouter()


class FinancingInput(BaseModel):
    """Purchase, loan and income assumptions."""

    purchase_price: float = 450000.0
    down_payment_percent: float = 20.0
    interest_rate: float = 6.5
    loan_term_years: int = 30
    nightly_rate: float = 250.0
    occupancy_rate: float = 65.0

    def to_assumptions(self) -> FinancingAssumptions:
        return FinancingAssumptions(**self.model_dump())


class ExpensesInput(BaseModel):
    """Operating expense assumptions."""

    property_tax_yearly: float = 8000.0
    insurance_yearly: float = 2000.0
    hoa_monthly: float = 50.0
    utilities_monthly: float = 300.0
    maintenance_monthly: float = 150.0
    management_fee_percent: float = 0.0
    other_monthly: float = 0.0

    def to_expenses(self) -> OperatingExpenses:
        return OperatingExpenses(**self.model_dump())


class AnalysisInput(BaseModel):
    """Input for a one-off analysis."""

    assumptions: FinancingInput = FinancingInput()
    expenses: ExpensesInput = ExpensesInput()


class AnalysisMetrics(BaseModel):
    """Calculated cash flow and return metrics."""

    monthly_income: float
    monthly_mortgage: float
    total_monthly_expenses: float
    cash_flow: float
    cap_rate: float
    cash_on_cash_roi: float
    initial_investment: float

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisMetrics":
        return cls(**result.to_dict())


class AnalysisResponse(AnalysisMetrics):
    """Metrics plus the loan figures shown next to the sliders."""

    loan_amount: float
    down_payment_amount: float


def run_analysis(
    assumptions: FinancingAssumptions, expenses: OperatingExpenses
) -> AnalysisResult:
    """Run the model, converting invalid input into a 422 response."""
    try:
        return analysis.compute_analysis(assumptions, expenses)
    except AnalysisError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/analysis", response_model=AnalysisResponse)
async def calculate_analysis(inputs: Optional[AnalysisInput] = None):
    """Calculate cash flow, cap rate and cash-on-cash return."""
    inputs = inputs or AnalysisInput()
    assumptions = inputs.assumptions.to_assumptions()
    expenses = inputs.expenses.to_expenses()

    result = run_analysis(assumptions, expenses)

    return AnalysisResponse(
        **result.to_dict(),
        loan_amount=amortization.calculate_loan_amount(
            assumptions.purchase_price, assumptions.down_payment_percent
        ),
        down_payment_amount=analysis.down_payment_amount(assumptions),
    )
