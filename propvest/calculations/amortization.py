"""
Mortgage Payment Calculations

Level monthly payment for a fully amortizing loan, matching Excel's PMT()
function. Rates are annual percentages (6.5 means 6.5%), as entered on the
dashboard sliders.
"""

import math


def calculate_loan_amount(purchase_price: float, down_payment_percent: float) -> float:
    """Financed portion of the purchase price."""
    return purchase_price * (1 - down_payment_percent / 100)


def monthly_rate_from_annual(annual_rate_percent: float) -> float:
    """Convert an annual percentage rate to a monthly decimal rate."""
    return annual_rate_percent / 100 / 12


def calculate_payment(
    principal: float, annual_rate_percent: float, num_payments: int
) -> float:
    """
    Calculate monthly loan payment.

    Matches Excel's PMT() function (sign flipped to positive).

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate as percent (e.g., 6.5 for 6.5%)
        num_payments: Total number of monthly payments

    Returns:
        Monthly payment amount

    Raises:
        ValueError: If num_payments is not positive or the payment is not finite
    """
    if num_payments <= 0:
        raise ValueError("Number of payments must be positive")
    if principal == 0:
        return 0.0

    monthly_rate = monthly_rate_from_annual(annual_rate_percent)

    # 0/0 in the closed form; straight-line repayment instead
    if monthly_rate == 0:
        return principal / num_payments

    growth = (1 + monthly_rate) ** num_payments
    # Rate below float resolution: (1+r)^n rounds to 1, limit is straight-line
    if growth == 1.0:
        return principal / num_payments

    payment = principal * monthly_rate * growth / (growth - 1)

    if not math.isfinite(payment):
        raise ValueError(
            f"Mortgage payment is not finite for rate {annual_rate_percent}% "
            f"over {num_payments} payments"
        )

    return payment

