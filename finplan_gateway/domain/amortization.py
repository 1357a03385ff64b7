"""Frequency conversion and amortization primitives"""

from finplan_gateway.domain.models import Frequency

PERIODS_PER_YEAR = {
    Frequency.WEEKLY: 52,
    Frequency.FORTNIGHTLY: 26,
    Frequency.MONTHLY: 12,
    Frequency.QUARTERLY: 4,
    Frequency.ANNUAL: 1,
}


def periods_per_year(frequency: Frequency | str | None) -> int:
    """Number of repayment periods per year; unknown frequencies fall back to monthly"""
    if frequency is None:
        return 12
    try:
        return PERIODS_PER_YEAR[Frequency(frequency.upper())]
    except ValueError:
        return 12


def to_annual(amount: float, frequency: Frequency | str) -> float:
    return amount * periods_per_year(frequency)


def to_monthly(amount: float, frequency: Frequency | str) -> float:
    return to_annual(amount, frequency) / 12


def to_fortnightly(amount: float, frequency: Frequency | str) -> float:
    return to_annual(amount, frequency) / 26


def to_weekly(amount: float, frequency: Frequency | str) -> float:
    return to_annual(amount, frequency) / 52


def convert_amount(amount: float, from_frequency: Frequency | str, to_frequency: Frequency | str) -> float:
    """Convert an amount between any two frequencies via its annual total"""
    return to_annual(amount, from_frequency) / periods_per_year(to_frequency)


def calculate_effective_principal(principal: float, offset_balance: float = 0.0) -> float:
    """Principal that accrues interest after offset; never negative"""
    return max(0.0, principal - (offset_balance or 0.0))


def calculate_interest_for_period(principal: float, annual_rate: float, periods: int) -> float:
    """Simple interest for one period at annual_rate / periods"""
    if periods <= 0 or principal <= 0:
        return 0.0
    return principal * annual_rate / periods


def calculate_pi_repayment(principal: float, annual_rate: float, term_months: int) -> float:
    """
    Monthly principal-and-interest repayment.

    Standard annuity formula; with a zero rate or zero term the principal
    is spread evenly over max(1, term_months).
    """
    if principal <= 0:
        return 0.0
    if annual_rate <= 0 or term_months <= 0:
        return principal / max(1, term_months)

    monthly_rate = annual_rate / 12
    growth = (1 + monthly_rate) ** term_months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_lvr(loan_balance: float, property_value: float) -> float:
    """Loan-to-value ratio as a percentage"""
    if property_value <= 0:
        return 0.0
    return loan_balance / property_value * 100


def calculate_equity(property_value: float, loan_balance: float) -> float:
    return max(0.0, property_value - loan_balance)


def calculate_rental_yield(annual_rent: float, property_value: float) -> float:
    """Gross rental yield as a percentage"""
    if property_value <= 0:
        return 0.0
    return annual_rent / property_value * 100
