"""Unit tests for recommendation alternatives"""

import pytest
from datetime import datetime, timedelta
from finplan_gateway.domain.models import (
    AnalyzerCategory,
    ImpactScore,
    RecommendationStatus,
    Severity,
    StrategyFinding,
    StrategyRecommendation,
)
from finplan_gateway.domain.alternatives import ALTERNATIVE_BUILDERS, generate_alternatives


def _finding(finding_type: str, benefit: float = 10_000) -> StrategyFinding:
    return StrategyFinding(
        finding_type=finding_type,
        category=AnalyzerCategory.DEBT,
        severity=Severity.MEDIUM,
        title="Do the thing",
        summary="",
        detail="",
        impact=ImpactScore(),
        score=50,
        confidence=0.8,
        benefit=benefit,
    )


@pytest.mark.parametrize("finding_type", sorted(ALTERNATIVE_BUILDERS))
def test_known_types_give_conservative_and_aggressive(finding_type: str):
    """Test every tailored builder returns one conservative and one aggressive option"""
    alternatives = generate_alternatives(_finding(finding_type))

    assert [a.profile for a in alternatives] == ["CONSERVATIVE", "AGGRESSIVE"]
    assert all(a.pros and a.cons for a in alternatives)


def test_refinance_alternatives():
    """Test refinance alternatives scale the finding's benefit"""
    alternatives = generate_alternatives(_finding("DEBT_REFINANCE"))

    assert alternatives[0].title == "Negotiate with your current lender"
    assert alternatives[0].financial_impact == pytest.approx(6_000)
    assert alternatives[1].financial_impact == pytest.approx(12_000)


def test_generic_alternatives_for_unmapped_types():
    """Test unmapped finding types get gradual and accelerated variants"""
    alternatives = generate_alternatives(_finding("TAX_FRANKING_CREDITS", benefit=1_000))

    assert alternatives[0].title == "Gradual: Do the thing"
    assert alternatives[0].financial_impact == pytest.approx(700)
    assert alternatives[1].title == "Accelerated: Do the thing"
    assert alternatives[1].financial_impact == pytest.approx(1_300)


def test_alternatives_accept_recommendations():
    """Test a persisted recommendation resolves to its finding"""
    now = datetime(2026, 6, 30)
    recommendation = StrategyRecommendation(
        id="r1",
        user_id="u",
        dedup_key="DEBT:LOAN:l1",
        finding=_finding("DEBT_REFINANCE"),
        status=RecommendationStatus.PENDING,
        created_at=now,
        expires_at=now + timedelta(days=30),
    )

    assert generate_alternatives(recommendation) == generate_alternatives(recommendation.finding)
