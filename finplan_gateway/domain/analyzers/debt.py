"""Debt analyzer - serviceability, refinancing, consolidation, early repayment and offset use"""

from typing import List

from finplan_gateway.domain.amortization import calculate_pi_repayment
from finplan_gateway.domain.analyzers.base import (
    EXPECTED_INVESTMENT_RETURN,
    MARKET_REFERENCE_RATES,
    SAFEGUARDS,
    make_finding,
)
from finplan_gateway.domain.models import (
    AnalyzerCategory,
    EntityRef,
    FinancialSnapshot,
    ImpactScore,
    LoanInput,
    RateType,
    Severity,
    StrategyFinding,
)
from finplan_gateway.domain.portfolio import calculate_cashflow, liquid_cash

REFINANCE_COST_RATE = 0.01
CONSOLIDATION_COST_RATE = 0.015
CONSOLIDATION_MIN_RATE = 0.06
CONSOLIDATION_HORIZON_YEARS = 5


def _monthly_payment(loan: LoanInput, rate: float) -> float:
    if loan.interest_only:
        return loan.principal * rate / 12
    return calculate_pi_repayment(loan.principal, rate, loan.term_months_remaining)


class DebtAnalyzer:
    name = "debt"
    category = AnalyzerCategory.DEBT

    def analyze(self, snapshot: FinancialSnapshot) -> List[StrategyFinding]:
        loans = [loan for loan in snapshot.loans if loan.principal > 0]
        if not loans:
            return []

        findings = []
        cashflow = calculate_cashflow(snapshot)

        # Debt-to-income (repayments share of income)
        if cashflow.monthly_income > 0:
            dti = cashflow.monthly_loan_repayments / cashflow.monthly_income
            if dti > SAFEGUARDS.max_debt_to_income:
                findings.append(
                    make_finding(
                        "DEBT_HIGH_DTI",
                        self.category,
                        Severity.HIGH,
                        "Debt repayments are stretching your income",
                        f"Repayments take {dti:.0%} of income",
                        f"Lenders treat repayments above {SAFEGUARDS.max_debt_to_income:.0%} of income as high risk.",
                        ImpactScore(financial=40, risk=85, liquidity=50, confidence=90),
                        action_steps=["Avoid new borrowing", "Direct surplus to the highest-rate loan"],
                        evidence={"debt_to_income": dti},
                    )
                )
            elif dti > SAFEGUARDS.moderate_debt_to_income:
                findings.append(
                    make_finding(
                        "DEBT_MODERATE_DTI",
                        self.category,
                        Severity.MEDIUM,
                        "Keep debt repayments in check",
                        f"Repayments take {dti:.0%} of income",
                        "Repayments are approaching lender serviceability limits.",
                        ImpactScore(financial=30, risk=60, liquidity=30, confidence=85),
                        evidence={"debt_to_income": dti},
                    )
                )

        for loan in sorted(loans, key=lambda loan: loan.id):
            refinance = self._refinance(snapshot, loan)
            if refinance is not None:
                findings.append(refinance)

        consolidation = self._consolidation(loans)
        if consolidation is not None:
            findings.append(consolidation)

        early = self._early_repayment(loans, cashflow.monthly_surplus)
        if early is not None:
            findings.append(early)

        offset = self._offset(loans, liquid_cash(snapshot))
        if offset is not None:
            findings.append(offset)

        return findings

    def _refinance(self, snapshot: FinancialSnapshot, loan: LoanInput) -> StrategyFinding | None:
        # Fixed loans inside their term carry break costs
        if loan.rate_type == RateType.FIXED and loan.fixed_expiry is not None and loan.fixed_expiry > snapshot.as_of:
            return None

        market_rate = MARKET_REFERENCE_RATES.get(loan.category, 0.06)
        gap = loan.annual_rate - market_rate
        if gap < SAFEGUARDS.min_refinance_rate_gap:
            return None

        monthly_savings = _monthly_payment(loan, loan.annual_rate) - _monthly_payment(loan, market_rate)
        if monthly_savings <= 0:
            return None
        costs = loan.principal * REFINANCE_COST_RATE
        breakeven = costs / monthly_savings
        total_savings = monthly_savings * loan.term_months_remaining - costs
        if breakeven > SAFEGUARDS.max_refinance_breakeven_months or total_savings < SAFEGUARDS.min_refinance_savings:
            return None

        return make_finding(
            "DEBT_REFINANCE",
            self.category,
            Severity.HIGH if total_savings > 20_000 else Severity.MEDIUM,
            f"Refinance {loan.name}",
            f"{loan.annual_rate:.2%} is {gap:.2%} above the market rate of {market_rate:.2%}",
            f"Switching saves about ${monthly_savings:,.0f} per month; costs of ${costs:,.0f} "
            f"are recovered in {breakeven:.0f} months.",
            ImpactScore(
                financial=min(100, total_savings / 500),
                risk=10,
                liquidity=min(100, monthly_savings / 10),
                confidence=85,
            ),
            benefit=total_savings,
            entities=[EntityRef("LOAN", loan.id)],
            action_steps=[
                "Ask your current lender for a rate review",
                "Compare at least three competing offers",
                "Confirm discharge and establishment fees before switching",
            ],
            evidence={
                "current_rate": loan.annual_rate,
                "market_rate": market_rate,
                "monthly_savings": monthly_savings,
                "costs": costs,
                "breakeven_months": breakeven,
                "loanId": loan.id,
            },
        )

    def _consolidation(self, loans: List[LoanInput]) -> StrategyFinding | None:
        candidates = sorted(
            (loan for loan in loans if loan.annual_rate > CONSOLIDATION_MIN_RATE), key=lambda loan: loan.id
        )
        if len(candidates) < 2:
            return None

        total = sum(loan.principal for loan in candidates)
        weighted_rate = sum(loan.principal * loan.annual_rate for loan in candidates) / total
        new_rate = max(0.04, weighted_rate - 0.005)
        if weighted_rate - new_rate < 0.003:
            return None

        annual_savings = total * (weighted_rate - new_rate)
        costs = total * CONSOLIDATION_COST_RATE
        net_savings = annual_savings * CONSOLIDATION_HORIZON_YEARS - costs
        if net_savings <= 0:
            return None

        return make_finding(
            "DEBT_CONSOLIDATE",
            self.category,
            Severity.MEDIUM,
            f"Consolidate {len(candidates)} high-rate loans",
            f"Combining ${total:,.0f} at {weighted_rate:.2%} into one loan near {new_rate:.2%}",
            "One lower-rate facility simplifies repayments and reduces interest.",
            ImpactScore(financial=min(100, net_savings / 300), risk=20, liquidity=30, confidence=70),
            benefit=net_savings,
            entities=[EntityRef("LOAN", loan.id) for loan in candidates],
            action_steps=["Get consolidation quotes", "Close consolidated facilities once refinanced"],
            evidence={"weighted_rate": weighted_rate, "new_rate": new_rate, "costs": costs},
        )

    def _early_repayment(self, loans: List[LoanInput], monthly_surplus: float) -> StrategyFinding | None:
        if monthly_surplus <= 0:
            return None
        threshold = EXPECTED_INVESTMENT_RETURN + 0.02
        candidates = [loan for loan in loans if loan.annual_rate > threshold]
        if not candidates:
            return None

        target = sorted(candidates, key=lambda loan: (-loan.annual_rate, loan.id))[0]
        extra = min(monthly_surplus * 12, target.principal)
        yearly_savings = extra * target.annual_rate
        if yearly_savings <= 1_000:
            return None

        return make_finding(
            "DEBT_EARLY_REPAY",
            self.category,
            Severity.MEDIUM,
            f"Pay down {target.name} early",
            f"At {target.annual_rate:.2%}, repaying beats the expected {EXPECTED_INVESTMENT_RETURN:.0%} investment return",
            f"Directing ${extra:,.0f} a year saves about ${yearly_savings:,.0f} in interest annually.",
            ImpactScore(financial=min(100, yearly_savings / 100), risk=40, liquidity=-10, confidence=85),
            benefit=yearly_savings,
            entities=[EntityRef("LOAN", target.id)],
            action_steps=["Set up an automatic extra repayment"],
            evidence={"rate": target.annual_rate, "extra_per_year": extra, "loanId": target.id},
        )

    def _offset(self, loans: List[LoanInput], cash: float) -> StrategyFinding | None:
        best = None
        for loan in sorted(loans, key=lambda loan: (-loan.annual_rate, loan.id)):
            movable = min(cash, loan.principal * 0.5)
            if movable > loan.offset_balance + 5_000:
                best = (loan, movable)
                break
        if best is None:
            return None

        loan, movable = best
        annual_savings = (movable - loan.offset_balance) * loan.annual_rate
        return make_finding(
            "DEBT_OFFSET_OPTIMIZE",
            self.category,
            Severity.LOW,
            f"Use an offset account against {loan.name}",
            f"${movable - loan.offset_balance:,.0f} more cash could offset {loan.annual_rate:.2%} interest",
            "Cash in an offset account stays accessible while reducing interest charged.",
            ImpactScore(financial=min(100, annual_savings / 50), risk=10, liquidity=0, confidence=80),
            benefit=annual_savings,
            entities=[EntityRef("LOAN", loan.id)],
            action_steps=["Move savings into the offset account linked to this loan"],
            evidence={"movable_cash": movable, "current_offset": loan.offset_balance, "loanId": loan.id},
        )
