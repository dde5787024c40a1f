"""
Financial Calculation Engine

Closed-form short-term rental analysis: mortgage payment, income, expenses,
cash flow, cap rate and cash-on-cash return.
"""

from propvest.calculations import amortization, analysis
from propvest.calculations.analysis import (
    AnalysisError,
    AnalysisResult,
    DegenerateResultError,
    FinancingAssumptions,
    InvalidInputError,
    OperatingExpenses,
    compute_analysis,
)

__all__ = [
    "amortization",
    "analysis",
    "AnalysisError",
    "AnalysisResult",
    "DegenerateResultError",
    "FinancingAssumptions",
    "InvalidInputError",
    "OperatingExpenses",
    "compute_analysis",
]
