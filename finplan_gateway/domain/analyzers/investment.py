"""Investment analyzer - concentration, diversification and allocation drift"""

from typing import Dict, List

from finplan_gateway.domain.analyzers.base import SAFEGUARDS, make_finding
from finplan_gateway.domain.models import (
    AnalyzerCategory,
    EntityRef,
    FinancialSnapshot,
    ImpactScore,
    Severity,
    StrategyFinding,
)

TARGET_ALLOCATIONS = {
    "CONSERVATIVE": {"stocks": 0.40, "bonds": 0.50, "cash": 0.10},
    "MODERATE": {"stocks": 0.60, "bonds": 0.30, "cash": 0.10},
    "AGGRESSIVE": {"stocks": 0.80, "bonds": 0.15, "cash": 0.05},
}

ASSET_CLASS_GROUPS = {
    "stocks": "stocks",
    "shares": "stocks",
    "etf": "stocks",
    "bonds": "bonds",
    "fixed_income": "bonds",
    "cash": "cash",
}

REBALANCE_DRIFT = 0.10


class InvestmentAnalyzer:
    name = "investment"
    category = AnalyzerCategory.INVESTMENT

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        holdings = [h for h in snapshot.investments if h.value > 0]
        total = sum(h.value for h in holdings)
        if not holdings or total <= 0:
            return []

        findings = []

        # Single-holding concentration
        for holding in sorted(holdings, key=lambda h: h.id):
            share = holding.value / total
            if share > SAFEGUARDS.max_single_investment:
                findings.append(
                    make_finding(
                        "INVESTMENT_CONCENTRATION",
                        self.category,
                        Severity.HIGH if share > 0.40 else Severity.MEDIUM,
                        f"Reduce concentration in {holding.name}",
                        f"{holding.name} is {share:.0%} of your portfolio",
                        f"A single holding above {SAFEGUARDS.max_single_investment:.0%} exposes the "
                        "portfolio to company-specific risk.",
                        ImpactScore(financial=20, risk=70, liquidity=10, confidence=90),
                        entities=[EntityRef("INVESTMENT", holding.id)],
                        action_steps=["Trim the position gradually", "Redirect new contributions elsewhere"],
                        evidence={"share": share, "investmentId": holding.id},
                    )
                )

        # Sector concentration
        by_sector: Dict[str, float] = {}
        for holding in holdings:
            if holding.sector:
                by_sector[holding.sector] = by_sector.get(holding.sector, 0.0) + holding.value
        if by_sector:
            sector, value = max(sorted(by_sector.items()), key=lambda item: item[1])
            share = value / total
            if share > SAFEGUARDS.max_sector_exposure:
                findings.append(
                    make_finding(
                        "INVESTMENT_SECTOR_CONCENTRATION",
                        self.category,
                        Severity.MEDIUM,
                        f"Diversify away from {sector}",
                        f"{sector} makes up {share:.0%} of your portfolio",
                        "Sector concentration amplifies drawdowns when that sector falls.",
                        ImpactScore(financial=15, risk=60, confidence=80),
                        evidence={"sector": sector, "share": share},
                    )
                )

        # Holding count
        if len(holdings) < SAFEGUARDS.min_diversification:
            findings.append(
                make_finding(
                    "INVESTMENT_DIVERSIFICATION_LOW",
                    self.category,
                    Severity.MEDIUM if len(holdings) <= 2 else Severity.LOW,
                    "Broaden your portfolio",
                    f"Only {len(holdings)} holding(s)",
                    f"Hold at least {SAFEGUARDS.min_diversification} positions or a diversified index fund.",
                    ImpactScore(financial=15, risk=55, confidence=85),
                    action_steps=["Consider a broad-market ETF for new contributions"],
                    evidence={"holdings": len(holdings)},
                )
            )

        # Allocation drift against risk appetite
        appetite = (snapshot.preferences.risk_appetite or "MODERATE").upper()
        target = TARGET_ALLOCATIONS.get(appetite, TARGET_ALLOCATIONS["MODERATE"])
        grouped = {"stocks": 0.0, "bonds": 0.0, "cash": 0.0}
        for holding in holdings:
            group = ASSET_CLASS_GROUPS.get(holding.asset_class.lower())
            if group:
                grouped[group] += holding.value
        grouped_total = sum(grouped.values())
        if grouped_total > 0:
            drift = {k: grouped[k] / grouped_total - target[k] for k in target}
            max_drift = max(abs(d) for d in drift.values())
            if max_drift > REBALANCE_DRIFT:
                findings.append(
                    make_finding(
                        "INVESTMENT_REBALANCE",
                        self.category,
                        Severity.MEDIUM if max_drift > 0.15 else Severity.LOW,
                        "Rebalance to your target allocation",
                        f"Allocation has drifted {max_drift:.0%} from the {appetite.lower()} target",
                        "Rebalancing keeps portfolio risk consistent with your stated appetite.",
                        ImpactScore(financial=20, risk=50, liquidity=5, confidence=75),
                        action_steps=["Use new contributions to top up underweight classes first"],
                        evidence={"target": target, "drift": drift},
                    )
                )

        return findings
