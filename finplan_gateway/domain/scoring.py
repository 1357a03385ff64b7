"""Strategy benefit scoring - SBS, deduplication and ranking of analyzer findings"""

from dataclasses import dataclass
from typing import Dict, List

from finplan_gateway.domain.models import ImpactScore, StrategyFinding

SBS_WEIGHTS = {
    "financial_benefit": 0.40,
    "risk_reduction": 0.25,
    "cost_avoidance": 0.15,
    "liquidity_impact": 0.10,
    "tax_efficiency": 0.05,
    "data_confidence": 0.05,
}

# Benefit (in dollars) that earns a full cost-avoidance score
COST_AVOIDANCE_FULL_SCALE = 10_000


@dataclass
class ScoreComponents:
    """SBS inputs, each on a 0-100 scale"""

    financial_benefit: float
    risk_reduction: float
    cost_avoidance: float
    liquidity_impact: float
    tax_efficiency: float
    data_confidence: float


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def components_from_impact(impact: ImpactScore, benefit: float) -> ScoreComponents:
    """Map an analyzer's impact dimensions and dollar benefit onto SBS components"""
    return ScoreComponents(
        financial_benefit=impact.financial,
        risk_reduction=impact.risk,
        cost_avoidance=benefit / COST_AVOIDANCE_FULL_SCALE * 100,
        liquidity_impact=impact.liquidity,
        tax_efficiency=impact.tax,
        data_confidence=impact.confidence,
    )


def calculate_sbs(components: ScoreComponents) -> float:
    """
    Calculate Strategy Benefit Score from 0 to 100.

    Scoring weights:
    - 40%: Financial benefit
    - 25%: Risk reduction
    - 15%: Cost avoidance
    - 10%: Liquidity impact
    - 5%: Tax efficiency
    - 5%: Data confidence

    Negative components contribute nothing.
    """
    score = sum(_clamp(getattr(components, name)) * weight for name, weight in SBS_WEIGHTS.items())
    return round(_clamp(score), 2)


def get_sbs_rating(score: float) -> str:
    """Map SBS to a rating band"""
    if score >= 80:
        return "CRITICAL"
    if score >= 60:
        return "HIGH"
    if score >= 40:
        return "MEDIUM"
    return "LOW"


def get_priority(score: float) -> str:
    return get_sbs_rating(score)


def get_confidence_level(confidence: float) -> str:
    """Confidence band for a 0-1 confidence value"""
    if confidence >= 0.8:
        return "HIGH"
    if confidence >= 0.6:
        return "MEDIUM"
    return "LOW"


def dedup_key(finding: StrategyFinding) -> str:
    """
    Identity of a finding for deduplication and idempotent persistence.

    Category plus primary affected entity; findings without an entity fall
    back to category plus finding type.
    """
    if finding.affected_entities:
        primary = finding.affected_entities[0]
        return f"{finding.category.value}:{primary.entity_type}:{primary.entity_id}"
    return f"{finding.category.value}:{finding.finding_type}"


def deduplicate(findings: List[StrategyFinding]) -> List[StrategyFinding]:
    """Keep the highest-scoring finding per key; earlier findings win ties"""
    best: Dict[str, StrategyFinding] = {}
    for finding in findings:
        key = dedup_key(finding)
        current = best.get(key)
        if current is None or finding.score > current.score:
            best[key] = finding

    # Preserve first-seen order so ranking ties stay stable
    kept = {id(f) for f in best.values()}
    return [f for f in findings if id(f) in kept]


def rank_findings(findings: List[StrategyFinding]) -> List[StrategyFinding]:
    """Sort by score desc, then confidence desc; stable for equal pairs"""
    return sorted(findings, key=lambda f: (-f.score, -f.confidence))
