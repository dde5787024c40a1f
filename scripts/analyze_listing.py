"""
Print the investment analysis for the demo listing.

Any financing or expense field can be overridden, e.g.:
    python scripts/analyze_listing.py interest_rate=0 occupancy_rate=80
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from propvest.api.properties import DEMO_LISTING
from propvest.calculations.analysis import (
    AnalysisError,
    FinancingAssumptions,
    OperatingExpenses,
)
from propvest.session import AnalysisSession


def parse_overrides(args):
    """Split name=value arguments into financing and expense changes."""
    assumption_fields = set(FinancingAssumptions().to_dict())
    expense_fields = set(OperatingExpenses().to_dict())
    assumptions, expenses = {}, {}

    for arg in args:
        name, _, value = arg.partition("=")
        if name in assumption_fields:
            assumptions[name] = int(value) if name == "loan_term_years" else float(value)
        elif name in expense_fields:
            expenses[name] = float(value)
        else:
            raise SystemExit(f"Unknown field: {name}")

    return assumptions, expenses


def main():
    assumption_changes, expense_changes = parse_overrides(sys.argv[1:])
    session = AnalysisSession(FinancingAssumptions(purchase_price=DEMO_LISTING.price))

    try:
        if assumption_changes:
            session.update_assumptions(**assumption_changes)
        if expense_changes:
            session.update_expenses(**expense_changes)
    except AnalysisError as e:
        print(f"Error: {e}")
        sys.exit(1)

    result = session.analysis
    print(f"{DEMO_LISTING.address}, {DEMO_LISTING.city}, {DEMO_LISTING.state}")
    print(f"  Monthly income:    ${result.monthly_income:,.2f}")
    print(f"  Monthly mortgage:  ${result.monthly_mortgage:,.2f}")
    print(f"  Monthly expenses:  ${result.total_monthly_expenses:,.2f}")
    print(f"  Cash flow:         ${result.cash_flow:,.2f}/mo")
    print(f"  Cap rate:          {result.cap_rate:.2f}%")
    print(f"  Cash on cash:      {result.cash_on_cash_roi:.2f}%")
    print(f"  Total investment:  ${result.initial_investment:,.0f}")


if __name__ == "__main__":
    main()
