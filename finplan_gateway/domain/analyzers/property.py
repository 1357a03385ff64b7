"""Property analyzer - rental yield, capital growth and per-property leverage"""

from typing import List

from finplan_gateway.domain.models import (
    AnalyzerCategory,
    EntityRef,
    FinancialSnapshot,
    ImpactScore,
    PropertyType,
    Severity,
    StrategyFinding,
)
from finplan_gateway.domain.analyzers.base import make_finding
from finplan_gateway.domain.portfolio import analyze_properties

MIN_RENTAL_YIELD = 3.0  # percent
MIN_GROWTH_RATE = 0.02
MIN_YEARS_FOR_GROWTH = 5
MAX_PROPERTY_LVR = 80.0


class PropertyAnalyzer:
    name = "property"
    category = AnalyzerCategory.PROPERTY

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        findings = []
        types = {p.id: p.property_type for p in snapshot.properties}

        for analysis in sorted(analyze_properties(snapshot), key=lambda a: a.property_id):
            entity = [EntityRef("PROPERTY", analysis.property_id)]

            if types[analysis.property_id] == PropertyType.INVESTMENT and analysis.rental_yield < MIN_RENTAL_YIELD:
                gap = analysis.current_value * MIN_RENTAL_YIELD / 100 - analysis.annual_rent
                findings.append(
                    make_finding(
                        "PROPERTY_LOW_YIELD",
                        self.category,
                        Severity.MEDIUM,
                        f"Improve the yield on {analysis.name}",
                        f"Gross yield is {analysis.rental_yield:.1f}%",
                        f"Yields under {MIN_RENTAL_YIELD:.0f}% rarely cover holding costs; "
                        f"rent would need to rise ${gap:,.0f} a year to reach it.",
                        ImpactScore(financial=45, risk=30, liquidity=20, confidence=75),
                        benefit=gap,
                        entities=entity,
                        action_steps=["Benchmark rent against comparable listings", "Review property management fees"],
                        evidence={"rental_yield": analysis.rental_yield, "propertyId": analysis.property_id},
                    )
                )

            if (
                analysis.years_held is not None
                and analysis.years_held >= MIN_YEARS_FOR_GROWTH
                and analysis.capital_growth_rate is not None
                and analysis.capital_growth_rate < MIN_GROWTH_RATE
            ):
                findings.append(
                    make_finding(
                        "PROPERTY_LOW_GROWTH",
                        self.category,
                        Severity.LOW,
                        f"Review the growth outlook for {analysis.name}",
                        f"Capital growth of {analysis.capital_growth_rate:.1%} a year over {analysis.years_held:.0f} years",
                        "Sustained low growth may justify redeploying the equity elsewhere.",
                        ImpactScore(financial=35, risk=20, confidence=65),
                        entities=entity,
                        evidence={"growth_rate": analysis.capital_growth_rate, "years_held": analysis.years_held},
                    )
                )

            if analysis.lvr > MAX_PROPERTY_LVR:
                findings.append(
                    make_finding(
                        "PROPERTY_HIGH_LVR",
                        self.category,
                        Severity.HIGH,
                        f"Reduce leverage on {analysis.name}",
                        f"LVR is {analysis.lvr:.0f}%",
                        f"Above {MAX_PROPERTY_LVR:.0f}% a price fall could leave the loan exceeding the property value.",
                        ImpactScore(financial=30, risk=80, liquidity=20, confidence=85),
                        entities=entity,
                        action_steps=["Prioritise extra repayments on the linked loan"],
                        evidence={"lvr": analysis.lvr, "propertyId": analysis.property_id},
                    )
                )

        return findings
