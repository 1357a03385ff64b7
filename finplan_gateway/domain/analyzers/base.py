"""Analyzer contract, safety thresholds and finding construction"""

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

from finplan_gateway.domain.models import (
    AnalyzerCategory,
    EntityRef,
    FinancialSnapshot,
    ImpactScore,
    LoanCategory,
    Severity,
    StrategyFinding,
)
from finplan_gateway.domain.scoring import calculate_sbs, components_from_impact


class Analyzer(Protocol):
    """Pure function of a snapshot producing scored findings"""

    name: str
    category: AnalyzerCategory

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        ...


@dataclass(frozen=True)
class Safeguards:
    """Thresholds a recommendation must respect before it is raised"""

    max_debt_to_income: float = 0.43
    moderate_debt_to_income: float = 0.35
    min_emergency_fund_months: float = 3.0
    max_emergency_fund_months: float = 6.0
    max_leverage_ratio: float = 0.80
    max_single_investment: float = 0.20
    max_sector_exposure: float = 0.40
    min_liquidity_ratio: float = 0.10
    min_cash_reserve: float = 10_000
    min_refinance_rate_gap: float = 0.005
    max_refinance_breakeven_months: int = 24
    min_refinance_savings: float = 5_000
    max_expense_to_income: float = 0.80
    moderate_expense_to_income: float = 0.70
    min_diversification: int = 5
    min_data_quality: float = 60.0


SAFEGUARDS = Safeguards()

MARKET_REFERENCE_RATES = {
    LoanCategory.HOME: 0.045,
    LoanCategory.INVESTMENT: 0.05,
}

# Long-run return assumed when comparing debt paydown with investing
EXPECTED_INVESTMENT_RETURN = 0.07


def make_finding(
    finding_type: str,
    category: AnalyzerCategory,
    severity: Severity,
    title: str,
    summary: str,
    detail: str,
    impact: ImpactScore,
    benefit: float = 0.0,
    entities: List[EntityRef] | None = None,
    action_steps: List[str] | None = None,
    evidence: Dict[str, Any] | None = None,
) -> StrategyFinding:
    """Build a finding with its SBS and normalised confidence"""
    score = calculate_sbs(components_from_impact(impact, benefit))
    confidence = max(0.0, min(1.0, impact.confidence / 100))

    return StrategyFinding(
        finding_type=finding_type,
        category=category,
        severity=severity,
        title=title,
        summary=summary,
        detail=detail,
        impact=impact,
        score=score,
        confidence=confidence,
        benefit=benefit,
        affected_entities=entities or [],
        action_steps=action_steps or [],
        evidence=evidence or {},
    )
