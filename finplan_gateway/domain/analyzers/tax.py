"""Tax analyzer - loss harvesting, CGT discount timing and franking credits"""

from typing import List

from finplan_gateway.domain.analyzers.base import make_finding
from finplan_gateway.domain.models import (
    AnalyzerCategory,
    EntityRef,
    FinancialSnapshot,
    ImpactScore,
    Severity,
    StrategyFinding,
)
from finplan_gateway.domain.portfolio import analyze_investments
from finplan_gateway.utils.date_utils import months_between

MARGINAL_TAX_RATE = 0.30
CGT_DISCOUNT = 0.50
MIN_HARVESTABLE_LOSS = 1_000
MIN_CGT_GAIN = 10_000
MIN_FRANKING_CREDITS = 500


class TaxAnalyzer:
    name = "tax"
    category = AnalyzerCategory.TAX

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        findings = []

        losers = [h for h in snapshot.investments if h.unrealised_gain < 0]
        total_loss = -sum(h.unrealised_gain for h in losers)
        if total_loss > MIN_HARVESTABLE_LOSS:
            largest = min(losers, key=lambda h: (h.unrealised_gain, h.id))
            findings.append(
                make_finding(
                    "TAX_LOSS_HARVEST",
                    self.category,
                    Severity.MEDIUM,
                    "Harvest capital losses",
                    f"${total_loss:,.0f} of unrealised losses could offset capital gains",
                    "Realised losses reduce taxable capital gains this year or carry forward.",
                    ImpactScore(financial=40, risk=5, tax=85, confidence=75),
                    benefit=total_loss * MARGINAL_TAX_RATE,
                    entities=[EntityRef("INVESTMENT", largest.id)],
                    action_steps=["Confirm gains to offset with your accountant", "Avoid wash-sale arrangements"],
                    evidence={"total_loss": total_loss, "holdings": [h.id for h in losers]},
                )
            )

        for holding in sorted(snapshot.investments, key=lambda h: h.id):
            if holding.purchase_date is None or holding.unrealised_gain <= MIN_CGT_GAIN:
                continue
            held = months_between(holding.purchase_date, snapshot.as_of)
            if held in (10, 11):
                saving = holding.unrealised_gain * CGT_DISCOUNT * MARGINAL_TAX_RATE
                findings.append(
                    make_finding(
                        "TAX_CGT_DISCOUNT",
                        self.category,
                        Severity.HIGH,
                        f"Hold {holding.name} past 12 months",
                        f"Held {held} months with a ${holding.unrealised_gain:,.0f} gain",
                        "Selling after 12 months halves the taxable capital gain.",
                        ImpactScore(financial=50, risk=0, tax=95, confidence=90),
                        benefit=saving,
                        entities=[EntityRef("INVESTMENT", holding.id)],
                        action_steps=[f"Defer any sale of {holding.name} until {12 - held} more month(s) have passed"],
                        evidence={"months_held": held, "gain": holding.unrealised_gain, "investmentId": holding.id},
                    )
                )

        credits = analyze_investments(snapshot).franking_credits
        if credits > MIN_FRANKING_CREDITS:
            findings.append(
                make_finding(
                    "TAX_FRANKING_CREDITS",
                    self.category,
                    Severity.LOW,
                    "Claim your franking credits",
                    f"Holdings generate about ${credits:,.0f} of franking credits a year",
                    "Franking credits offset tax payable and are refundable when they exceed it.",
                    ImpactScore(financial=20, tax=70, confidence=80),
                    benefit=credits,
                    action_steps=["Include dividend statements in your tax return"],
                    evidence={"franking_credits": credits},
                )
            )

        return findings
