"""Time-horizon analyzer - retirement readiness against a 25x expenses target"""

from typing import List

from finplan_gateway.domain.analyzers.base import EXPECTED_INVESTMENT_RETURN, make_finding
from finplan_gateway.domain.models import AnalyzerCategory, FinancialSnapshot, ImpactScore, Severity, StrategyFinding
from finplan_gateway.domain.portfolio import calculate_cashflow, liquid_cash

DEFAULT_RETIREMENT_AGE = 65
TARGET_EXPENSE_MULTIPLE = 25


def project_savings(current: float, monthly_contribution: float, years: int, rate: float) -> float:
    """Future value of a lump sum plus level annual contributions"""
    growth = (1 + rate) ** years
    annual = monthly_contribution * 12
    return current * growth + (annual * (growth - 1) / rate if rate > 0 else annual * years)


def required_monthly_savings(shortfall: float, years: int, annual_rate: float) -> float:
    """Level monthly saving that accumulates to `shortfall` (annuity formula)"""
    months = years * 12
    if months <= 0:
        return shortfall
    monthly_rate = annual_rate / 12
    if monthly_rate <= 0:
        return shortfall / months
    return shortfall * monthly_rate / ((1 + monthly_rate) ** months - 1)


class TimeHorizonAnalyzer:
    name = "time_horizon"
    category = AnalyzerCategory.TIME_HORIZON

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        if snapshot.current_age is None:
            return []
        retirement_age = snapshot.preferences.retirement_age or DEFAULT_RETIREMENT_AGE
        years = retirement_age - snapshot.current_age
        if years <= 0:
            return []

        cashflow = calculate_cashflow(snapshot)
        annual_expenses = cashflow.monthly_expenses * 12
        if annual_expenses <= 0:
            return []

        required = annual_expenses * TARGET_EXPENSE_MULTIPLE
        current = sum(i.value for i in snapshot.investments) + liquid_cash(snapshot)
        contribution = max(0.0, cashflow.monthly_surplus)
        projected = project_savings(current, contribution, years, EXPECTED_INVESTMENT_RETURN)
        probability = min(100.0, projected / required * 100)

        evidence = {
            "required_capital": required,
            "projected_capital": projected,
            "probability": probability,
            "years_to_retirement": years,
        }

        if projected < required:
            shortfall = required - projected
            monthly_needed = required_monthly_savings(shortfall, years, EXPECTED_INVESTMENT_RETURN)
            if probability < 50:
                severity = Severity.CRITICAL
            elif probability < 75:
                severity = Severity.HIGH
            else:
                severity = Severity.MEDIUM
            return [
                make_finding(
                    "TIME_HORIZON_RETIREMENT_SHORTFALL",
                    self.category,
                    severity,
                    "Close your retirement gap",
                    f"Projected ${projected:,.0f} against a ${required:,.0f} target at age {retirement_age}",
                    f"Saving an extra ${monthly_needed:,.0f} a month closes the ${shortfall:,.0f} gap.",
                    ImpactScore(financial=70, risk=60, liquidity=-10, tax=10, confidence=70),
                    benefit=shortfall,
                    action_steps=[
                        f"Increase retirement savings by ${monthly_needed:,.0f} per month",
                        "Use concessional super contributions where available",
                    ],
                    evidence={**evidence, "shortfall": shortfall, "monthly_needed": monthly_needed},
                )
            ]

        return [
            make_finding(
                "TIME_HORIZON_ON_TRACK",
                self.category,
                Severity.LOW,
                "Retirement savings on track",
                f"Projected ${projected:,.0f} meets the ${required:,.0f} target at age {retirement_age}",
                "Maintain current contributions and review annually.",
                ImpactScore(financial=20, risk=10, confidence=70),
                benefit=projected - required,
                evidence=evidence,
            )
        ]
