"""Alternative approaches for a recommendation, computed on demand"""

from typing import Callable, Dict, List

from finplan_gateway.domain.models import Alternative, StrategyFinding, StrategyRecommendation


def _refinance(finding: StrategyFinding) -> List[Alternative]:
    return [
        Alternative(
            profile="CONSERVATIVE",
            title="Negotiate with your current lender",
            description="Ask for a rate match before switching; no switching costs.",
            financial_impact=finding.benefit * 0.6,
            risk_level="LOW",
            pros=["No discharge or establishment fees", "Keeps existing features"],
            cons=["Discount is usually smaller than a full switch"],
        ),
        Alternative(
            profile="AGGRESSIVE",
            title="Refinance and split the loan",
            description="Switch lenders and fix part of the balance to lock in savings.",
            financial_impact=finding.benefit * 1.2,
            risk_level="MEDIUM",
            pros=["Captures the full rate gap", "Partial certainty on repayments"],
            cons=["Break costs apply to the fixed portion", "More paperwork"],
        ),
    ]


def _consolidate(finding: StrategyFinding) -> List[Alternative]:
    return [
        Alternative(
            profile="CONSERVATIVE",
            title="Consolidate only the two highest-rate debts",
            description="Combine the most expensive facilities and keep the rest unchanged.",
            financial_impact=finding.benefit * 0.6,
            risk_level="LOW",
            pros=["Lower costs", "Less disruption"],
            cons=["Smaller interest saving"],
        ),
        Alternative(
            profile="AGGRESSIVE",
            title="Consolidate into the home loan",
            description="Roll all high-rate debt into the mortgage at the home loan rate.",
            financial_impact=finding.benefit * 1.5,
            risk_level="HIGH",
            pros=["Lowest available rate"],
            cons=["Short-term debt stretched over a long term", "Debt secured against the home"],
        ),
    ]


def _emergency(finding: StrategyFinding) -> List[Alternative]:
    return [
        Alternative(
            profile="CONSERVATIVE",
            title="Build six months of buffer",
            description="Target six months of essential outgoings before investing.",
            financial_impact=0.0,
            risk_level="LOW",
            pros=["Maximum resilience"],
            cons=["Cash earns less than investments"],
        ),
        Alternative(
            profile="AGGRESSIVE",
            title="Hold the buffer in an offset account",
            description="Keep three months in offset so the buffer also reduces interest.",
            financial_impact=finding.benefit,
            risk_level="MEDIUM",
            pros=["Buffer earns the loan rate"],
            cons=["Temptation to spend offset funds"],
        ),
    ]


def _rebalance(finding: StrategyFinding) -> List[Alternative]:
    return [
        Alternative(
            profile="CONSERVATIVE",
            title="Rebalance with new contributions",
            description="Direct future contributions to underweight asset classes instead of selling.",
            financial_impact=0.0,
            risk_level="LOW",
            pros=["No capital gains tax triggered"],
            cons=["Slower to reach target"],
        ),
        Alternative(
            profile="AGGRESSIVE",
            title="Rebalance immediately",
            description="Sell overweight holdings and buy underweight classes now.",
            financial_impact=0.0,
            risk_level="MEDIUM",
            pros=["Restores target risk immediately"],
            cons=["May realise capital gains", "Brokerage costs"],
        ),
    ]


def _low_yield(finding: StrategyFinding) -> List[Alternative]:
    return [
        Alternative(
            profile="CONSERVATIVE",
            title="Raise rent at the next renewal",
            description="Move rent toward market at the next lease renewal.",
            financial_impact=finding.benefit * 0.5,
            risk_level="LOW",
            pros=["Keeps the tenant"],
            cons=["Gradual improvement"],
        ),
        Alternative(
            profile="AGGRESSIVE",
            title="Sell and redeploy the equity",
            description="Sell the property and reinvest in higher-yielding assets.",
            financial_impact=finding.benefit * 2,
            risk_level="HIGH",
            pros=["Frees equity for better returns"],
            cons=["Selling costs and capital gains tax", "Loses future growth"],
        ),
    ]


def _leverage(finding: StrategyFinding) -> List[Alternative]:
    return [
        Alternative(
            profile="CONSERVATIVE",
            title="Direct all surplus to debt",
            description="Pause investing until leverage falls below 80%.",
            financial_impact=0.0,
            risk_level="LOW",
            pros=["Steady deleveraging"],
            cons=["Slower wealth accumulation"],
        ),
        Alternative(
            profile="AGGRESSIVE",
            title="Sell an asset to repay debt",
            description="Sell the weakest-performing asset and repay the highest-rate loan.",
            financial_impact=0.0,
            risk_level="MEDIUM",
            pros=["Immediate leverage reduction"],
            cons=["Transaction costs and possible capital gains tax"],
        ),
    ]


def _retirement(finding: StrategyFinding) -> List[Alternative]:
    return [
        Alternative(
            profile="CONSERVATIVE",
            title="Retire two years later",
            description="Extend the working horizon to close the gap with current savings.",
            financial_impact=finding.benefit * 0.5,
            risk_level="LOW",
            pros=["No change to current lifestyle"],
            cons=["Later retirement"],
        ),
        Alternative(
            profile="AGGRESSIVE",
            title="Salary sacrifice to the concessional cap",
            description="Maximise pre-tax contributions to accelerate savings.",
            financial_impact=finding.benefit,
            risk_level="MEDIUM",
            pros=["Tax-effective", "Closes the gap fastest"],
            cons=["Lower take-home pay", "Funds locked until preservation age"],
        ),
    ]


def _generic(finding: StrategyFinding) -> List[Alternative]:
    return [
        Alternative(
            profile="CONSERVATIVE",
            title=f"Gradual: {finding.title}",
            description="Implement over a longer period to reduce disruption.",
            financial_impact=finding.benefit * 0.7,
            risk_level="LOW",
            pros=["Lower execution risk"],
            cons=["Benefit realised more slowly"],
        ),
        Alternative(
            profile="AGGRESSIVE",
            title=f"Accelerated: {finding.title}",
            description="Implement immediately and in full.",
            financial_impact=finding.benefit * 1.3,
            risk_level="MEDIUM",
            pros=["Benefit realised sooner"],
            cons=["Higher short-term cashflow demands"],
        ),
    ]


ALTERNATIVE_BUILDERS: Dict[str, Callable[[StrategyFinding], List[Alternative]]] = {
    "DEBT_REFINANCE": _refinance,
    "DEBT_CONSOLIDATE": _consolidate,
    "CASHFLOW_EMERGENCY_LOW": _emergency,
    "INVESTMENT_REBALANCE": _rebalance,
    "PROPERTY_LOW_YIELD": _low_yield,
    "RISK_HIGH_LEVERAGE": _leverage,
    "TIME_HORIZON_RETIREMENT_SHORTFALL": _retirement,
}


def generate_alternatives(recommendation: StrategyRecommendation | StrategyFinding) -> List[Alternative]:
    """Conservative and aggressive variants of a recommendation; never persisted"""
    finding = recommendation.finding if isinstance(recommendation, StrategyRecommendation) else recommendation
    builder = ALTERNATIVE_BUILDERS.get(finding.finding_type, _generic)
    return builder(finding)
