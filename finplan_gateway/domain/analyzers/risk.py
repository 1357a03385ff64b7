"""Risk analyzer - leverage, geographic concentration and rate-rise resilience"""

from typing import List

from finplan_gateway.domain.analyzers.base import SAFEGUARDS, make_finding
from finplan_gateway.domain.models import AnalyzerCategory, FinancialSnapshot, ImpactScore, Severity, StrategyFinding
from finplan_gateway.domain.portfolio import calculate_net_worth, calculate_risk


class RiskAnalyzer:
    name = "risk"
    category = AnalyzerCategory.RISK

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        findings = []
        net_worth = calculate_net_worth(snapshot)

        if net_worth.total_assets > 0:
            leverage = net_worth.total_liabilities / net_worth.total_assets
            if leverage > SAFEGUARDS.max_leverage_ratio:
                findings.append(
                    make_finding(
                        "RISK_HIGH_LEVERAGE",
                        self.category,
                        Severity.HIGH,
                        "Reduce overall leverage",
                        f"Debts are {leverage:.0%} of total assets",
                        "High leverage leaves little room to absorb falling asset prices.",
                        ImpactScore(financial=30, risk=90, liquidity=30, confidence=90),
                        action_steps=["Pause new borrowing", "Direct surplus to debt reduction"],
                        evidence={"leverage_ratio": leverage},
                    )
                )

        states = {p.state for p in snapshot.properties}
        if len(snapshot.properties) >= 2 and len(states) == 1 and None not in states:
            state = next(iter(states))
            findings.append(
                make_finding(
                    "RISK_GEOGRAPHIC_CONCENTRATION",
                    self.category,
                    Severity.MEDIUM,
                    "Spread property exposure across markets",
                    f"All {len(snapshot.properties)} properties are in {state}",
                    "A single-market portfolio is exposed to one local economy and regulatory regime.",
                    ImpactScore(financial=15, risk=55, confidence=80),
                    evidence={"state": state, "properties": len(snapshot.properties)},
                )
            )

        if snapshot.loans:
            risk = calculate_risk(snapshot)
            first = risk.stress_tests[0]
            if not first.survives:
                findings.append(
                    make_finding(
                        "RISK_RATE_STRESS",
                        self.category,
                        Severity.HIGH,
                        "Prepare for interest rate rises",
                        f"A {first.rate_rise:.0%} rate rise leaves a ${-first.monthly_surplus_after:,.0f} monthly shortfall",
                        "Build buffers or fix part of the debt to withstand higher rates.",
                        ImpactScore(financial=25, risk=85, liquidity=40, confidence=80),
                        action_steps=["Build a cash buffer in offset", "Consider fixing a portion of the debt"],
                        evidence={"rate_rise": first.rate_rise, "surplus_after": first.monthly_surplus_after},
                    )
                )

        return findings
