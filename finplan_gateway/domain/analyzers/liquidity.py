"""Liquidity analyzer - liquid asset ratio and cash reserve"""

from typing import List

from finplan_gateway.domain.analyzers.base import SAFEGUARDS, make_finding
from finplan_gateway.domain.models import AnalyzerCategory, FinancialSnapshot, ImpactScore, Severity, StrategyFinding
from finplan_gateway.domain.portfolio import calculate_net_worth, liquid_cash


class LiquidityAnalyzer:
    name = "liquidity"
    category = AnalyzerCategory.LIQUIDITY

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        findings = []
        net_worth = calculate_net_worth(snapshot)
        cash = liquid_cash(snapshot)
        liquid_investments = sum(i.value for i in snapshot.investments if i.is_liquid)

        if net_worth.total_assets > 0:
            ratio = (cash + liquid_investments) / net_worth.total_assets
            if ratio < SAFEGUARDS.min_liquidity_ratio:
                findings.append(
                    make_finding(
                        "LIQUIDITY_LOW",
                        self.category,
                        Severity.HIGH if ratio < 0.05 else Severity.MEDIUM,
                        "Increase liquid assets",
                        f"Only {ratio:.0%} of assets can be accessed quickly",
                        "Most wealth is tied up in illiquid assets that are slow and costly to sell.",
                        ImpactScore(financial=10, risk=60, liquidity=85, confidence=85),
                        evidence={"liquidity_ratio": ratio},
                    )
                )

        # Missing accounts mean unknown cash, not zero cash
        if snapshot.accounts and cash < SAFEGUARDS.min_cash_reserve:
            findings.append(
                make_finding(
                    "LIQUIDITY_CASH_LOW",
                    self.category,
                    Severity.HIGH if cash < 5_000 else Severity.MEDIUM,
                    "Rebuild your cash reserve",
                    f"Cash on hand is ${cash:,.0f}",
                    f"Keep at least ${SAFEGUARDS.min_cash_reserve:,.0f} available for short-notice costs.",
                    ImpactScore(financial=10, risk=65, liquidity=90, confidence=90),
                    evidence={"cash": cash},
                )
            )

        return findings
