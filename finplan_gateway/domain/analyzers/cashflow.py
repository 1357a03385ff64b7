"""Cashflow analyzer - emergency fund, spending, surplus and income stability"""

from typing import List

from finplan_gateway.domain.analyzers.base import EXPECTED_INVESTMENT_RETURN, SAFEGUARDS, make_finding
from finplan_gateway.domain.models import AnalyzerCategory, FinancialSnapshot, ImpactScore, Severity, StrategyFinding
from finplan_gateway.domain.portfolio import calculate_cashflow, liquid_cash

CASH_RATE = 0.02
DEFAULT_INCOME_STABILITY = 75.0


class CashflowAnalyzer:
    name = "cashflow"
    category = AnalyzerCategory.CASHFLOW

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        cashflow = calculate_cashflow(snapshot)
        if cashflow.monthly_income <= 0 and cashflow.monthly_expenses <= 0:
            return []

        findings = []
        cash = liquid_cash(snapshot)
        essential = cashflow.monthly_essential_outgoings

        # Emergency fund
        if essential > 0:
            months = cash / essential
            if months < SAFEGUARDS.min_emergency_fund_months:
                target = essential * SAFEGUARDS.min_emergency_fund_months
                if months < 1:
                    severity, risk = Severity.CRITICAL, 90
                elif months < 2:
                    severity, risk = Severity.HIGH, 75
                else:
                    severity, risk = Severity.MEDIUM, 60
                findings.append(
                    make_finding(
                        "CASHFLOW_EMERGENCY_LOW",
                        self.category,
                        severity,
                        "Build your emergency fund",
                        f"Cash covers {months:.1f} months of essential outgoings",
                        f"Target at least {SAFEGUARDS.min_emergency_fund_months:.0f} months "
                        f"(${target:,.0f}); current shortfall is ${target - cash:,.0f}.",
                        ImpactScore(financial=20, risk=risk, liquidity=80, confidence=95),
                        action_steps=[
                            "Open a high-interest savings or offset account for emergencies",
                            "Direct surplus income to the fund until the target is met",
                        ],
                        evidence={"months_covered": months, "target": target, "shortfall": target - cash},
                    )
                )
            elif months > SAFEGUARDS.max_emergency_fund_months:
                excess = cash - essential * SAFEGUARDS.max_emergency_fund_months
                if excess > 10_000:
                    findings.append(
                        make_finding(
                            "CASHFLOW_EMERGENCY_EXCESS",
                            self.category,
                            Severity.LOW,
                            "Put idle cash to work",
                            f"Cash covers {months:.1f} months; ${excess:,.0f} sits above a 6-month buffer",
                            "Excess cash could reduce debt or be invested for a higher long-run return.",
                            ImpactScore(financial=50, risk=-10, liquidity=-20, confidence=80),
                            benefit=excess * (EXPECTED_INVESTMENT_RETURN - CASH_RATE),
                            action_steps=["Move excess cash to an offset account or diversified investments"],
                            evidence={"months_covered": months, "excess": excess},
                        )
                    )

        # Spending ratio
        if cashflow.monthly_income > 0:
            ratio = cashflow.expense_ratio
            if ratio > SAFEGUARDS.max_expense_to_income:
                severity, finding_type, title = Severity.HIGH, "CASHFLOW_SPENDING_HIGH", "Reduce high spending"
            elif ratio > SAFEGUARDS.moderate_expense_to_income:
                severity, finding_type, title = Severity.MEDIUM, "CASHFLOW_SPENDING_MODERATE", "Trim moderate spending"
            else:
                severity = None
            if severity is not None:
                overspend = (ratio - SAFEGUARDS.moderate_expense_to_income) * cashflow.monthly_income * 12
                findings.append(
                    make_finding(
                        finding_type,
                        self.category,
                        severity,
                        title,
                        f"Outgoings consume {ratio:.0%} of income",
                        "Bringing outgoings to 70% of income frees cash for savings and debt reduction.",
                        ImpactScore(financial=60, risk=50, liquidity=40, confidence=85),
                        benefit=overspend,
                        action_steps=[
                            "Review discretionary categories for cuts",
                            "Renegotiate recurring bills and subscriptions",
                        ],
                        evidence={"expense_ratio": ratio},
                    )
                )

        # Surplus or deficit
        surplus = cashflow.monthly_surplus
        if surplus > 500:
            steps = []
            if essential > 0 and cash / essential < SAFEGUARDS.min_emergency_fund_months:
                steps.append("Top up the emergency fund first")
            steps.append("Make extra repayments on the highest-rate debt")
            steps.append("Invest the remainder in a diversified portfolio")
            findings.append(
                make_finding(
                    "CASHFLOW_SURPLUS_ALLOCATION",
                    self.category,
                    Severity.MEDIUM if surplus > 2_000 else Severity.LOW,
                    "Allocate your monthly surplus",
                    f"${surplus:,.0f} per month is unallocated",
                    "A deliberate allocation of surplus compounds into lower debt and higher wealth.",
                    ImpactScore(financial=55, risk=20, liquidity=30, confidence=85),
                    benefit=surplus * 12 * 0.05,
                    action_steps=steps,
                    evidence={"monthly_surplus": surplus},
                )
            )
        elif surplus < -500:
            findings.append(
                make_finding(
                    "CASHFLOW_DEFICIT",
                    self.category,
                    Severity.CRITICAL,
                    "Close your monthly deficit",
                    f"Outgoings exceed income by ${-surplus:,.0f} per month",
                    "A persistent deficit erodes savings and increases reliance on credit.",
                    ImpactScore(financial=70, risk=95, liquidity=80, confidence=90),
                    benefit=-surplus * 12,
                    action_steps=["Cut non-essential spending", "Review loan structures to lower repayments"],
                    evidence={"monthly_surplus": surplus},
                )
            )

        # Income stability
        stability = snapshot.income_stability if snapshot.income_stability is not None else DEFAULT_INCOME_STABILITY
        if stability < 60:
            findings.append(
                make_finding(
                    "CASHFLOW_INCOME_UNSTABLE",
                    self.category,
                    Severity.MEDIUM,
                    "Buffer against irregular income",
                    f"Income stability score is {stability:.0f}/100",
                    "Irregular income calls for a larger cash buffer and conservative commitments.",
                    ImpactScore(financial=20, risk=70, liquidity=60, confidence=70),
                    action_steps=["Hold 6 months of outgoings while income is irregular"],
                    evidence={"income_stability": stability},
                )
            )

        return findings
