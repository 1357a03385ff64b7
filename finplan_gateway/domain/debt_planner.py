"""Debt planner - simulates strategic loan payoff against a minimum-repayment baseline"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List

from finplan_gateway.domain.amortization import (
    calculate_effective_principal,
    calculate_interest_for_period,
    to_monthly,
)
from finplan_gateway.domain.exceptions import NoLoansError, PlannerConfigurationError
from finplan_gateway.domain.models import (
    DebtPlanResult,
    Frequency,
    LoanCategory,
    LoanInput,
    LoanPayoff,
    PayoffStrategy,
    PlannerSettings,
    SurplusAllocation,
)
from finplan_gateway.utils.date_utils import add_months

# 50 years of monthly periods
MAX_PERIODS = 600

# Balances at or below one cent count as repaid
CLOSE_TOLERANCE = 0.01


@dataclass
class _LoanState:
    loan: LoanInput
    balance: float
    monthly_min: float
    interest_paid: float = 0.0
    closed_period: int | None = None

    @property
    def is_open(self) -> bool:
        return self.closed_period is None


@dataclass
class SimulationRun:
    """Period-by-period trace of a simulation; index 0 of each history is the opening state"""

    periods: int
    horizon_reached: bool
    interest_paid: Dict[str, float]
    closed_period: Dict[str, int | None]
    closing_balance: Dict[str, float]
    allocations: List[SurplusAllocation] = field(default_factory=list)
    balance_history: List[Dict[str, float]] = field(default_factory=list)
    interest_history: List[float] = field(default_factory=list)
    repayment_history: List[float] = field(default_factory=list)
    surplus_history: List[float] = field(default_factory=list)

    def balances_at(self, period: int) -> Dict[str, float]:
        """Per-loan balances after `period`; holds the last state once the run stops"""
        return self.balance_history[min(period, len(self.balance_history) - 1)]

    @property
    def total_interest(self) -> float:
        return sum(self.interest_paid.values())


def validate_planner_settings(loans: List[LoanInput], settings: PlannerSettings | None) -> PayoffStrategy:
    """
    Validate planner inputs before simulating.

    Raises:
        NoLoansError: loan list is empty
        PlannerConfigurationError: missing strategy/surplus, negative surplus,
            unknown surplus frequency, duplicate loan ids, or a custom order that is not a permutation
    """
    if not loans:
        raise NoLoansError("No loans found for debt plan")
    if settings is None:
        raise PlannerConfigurationError("Planner settings are required")
    if settings.strategy is None:
        raise PlannerConfigurationError("Payoff strategy is required")
    try:
        strategy = PayoffStrategy(settings.strategy)
    except ValueError as e:
        raise PlannerConfigurationError(f"Unknown payoff strategy: {settings.strategy}") from e

    if settings.surplus_amount is None:
        raise PlannerConfigurationError("Surplus amount is required")
    if settings.surplus_frequency is None:
        raise PlannerConfigurationError("Surplus frequency is required")
    try:
        Frequency(settings.surplus_frequency.upper())
    except (AttributeError, ValueError) as e:
        raise PlannerConfigurationError(f"Unknown surplus frequency: {settings.surplus_frequency}") from e
    if settings.surplus_amount < 0:
        raise PlannerConfigurationError("Surplus amount cannot be negative")

    loan_ids = [loan.id for loan in loans]
    if len(set(loan_ids)) != len(loan_ids):
        raise PlannerConfigurationError("Loan ids must be unique")

    if strategy == PayoffStrategy.CUSTOM:
        order = settings.custom_order or []
        if sorted(order) != sorted(loan_ids):
            raise PlannerConfigurationError("Custom order must list every loan id exactly once")

    return strategy


def rank_loans(
    loans: List[LoanInput],
    strategy: PayoffStrategy,
    balances: Dict[str, float] | None = None,
    custom_order: List[str] | None = None,
) -> List[LoanInput]:
    """
    Order loans for surplus allocation.

    AVALANCHE: highest rate first. SNOWBALL: smallest current balance first.
    TAX_AWARE: non-deductible HOME debt first, then highest rate.
    CUSTOM: caller's order. Ties always break on loan id.
    """
    balances = balances or {}

    if strategy == PayoffStrategy.AVALANCHE:
        key = lambda loan: (-loan.annual_rate, loan.id)
    elif strategy == PayoffStrategy.SNOWBALL:
        key = lambda loan: (balances.get(loan.id, loan.principal), loan.id)
    elif strategy == PayoffStrategy.TAX_AWARE:
        key = lambda loan: (0 if loan.category == LoanCategory.HOME else 1, -loan.annual_rate, loan.id)
    else:
        position = {loan_id: i for i, loan_id in enumerate(custom_order or [])}
        key = lambda loan: (position.get(loan.id, len(position)), loan.id)

    return sorted(loans, key=key)


def _extra_cap(loan: LoanInput, settings: PlannerSettings, period_date: date | None) -> float | None:
    """Per-period cap on surplus for a loan, or None when uncapped"""
    if loan.extra_repayment_cap is None or not settings.respect_fixed_caps:
        return None
    # Cap lapses once the fixed term has ended
    if loan.fixed_expiry is not None and period_date is not None and period_date >= loan.fixed_expiry:
        return None
    return max(0.0, loan.extra_repayment_cap)


def simulate_balances(
    loans: List[LoanInput],
    settings: PlannerSettings | None = None,
    max_periods: int = MAX_PERIODS,
) -> SimulationRun:
    """
    Run the monthly payoff simulation.

    With settings=None only minimum repayments are made (the baseline).
    Otherwise the surplus pool, plus freed minimums when rollover is on,
    is applied each period in strategy order.
    """
    states = [
        _LoanState(
            loan=loan,
            balance=max(0.0, loan.principal),
            monthly_min=to_monthly(loan.min_repayment, loan.repayment_frequency),
        )
        for loan in loans
    ]
    for state in states:
        if state.balance <= CLOSE_TOLERANCE:
            state.balance = 0.0
            state.closed_period = 0

    strategy = PayoffStrategy(settings.strategy) if settings is not None else None
    surplus = to_monthly(settings.surplus_amount, settings.surplus_frequency) if settings is not None else 0.0
    start_date = settings.start_date if settings is not None else None

    run = SimulationRun(periods=0, horizon_reached=False, interest_paid={}, closed_period={}, closing_balance={})
    run.balance_history.append({s.loan.id: s.balance for s in states})
    rollover = 0.0
    period = 0

    while period < max_periods and any(s.is_open for s in states):
        period += 1
        period_date = add_months(start_date, period - 1) if start_date else None
        period_interest = 0.0
        period_paid = 0.0

        # Accrue interest and apply minimum repayments
        for state in states:
            if not state.is_open:
                continue
            loan = state.loan
            effective = calculate_effective_principal(state.balance, loan.offset_balance)
            interest = calculate_interest_for_period(effective, loan.annual_rate, 12)
            state.interest_paid += interest
            period_interest += interest

            due = state.balance + interest
            payment = interest if loan.interest_only else state.monthly_min
            payment = min(max(0.0, payment), due)
            state.balance = due - payment
            period_paid += payment

            if state.balance <= CLOSE_TOLERANCE:
                state.balance = 0.0
                state.closed_period = period
                if settings is not None and settings.rollover_repayments:
                    rollover += state.monthly_min

        # Apply surplus in strategy order
        pool = surplus + rollover if settings is not None else 0.0
        surplus_used = 0.0
        if pool > 0:
            open_loans = [s.loan for s in states if s.is_open]
            by_id = {s.loan.id: s for s in states}
            balances = {s.loan.id: s.balance for s in states}
            for loan in rank_loans(open_loans, strategy, balances, settings.custom_order):
                if pool <= 0:
                    break
                state = by_id[loan.id]
                amount = min(pool, state.balance)
                cap = _extra_cap(loan, settings, period_date)
                if cap is not None:
                    amount = min(amount, cap)
                if amount <= 0:
                    continue

                state.balance -= amount
                pool -= amount
                surplus_used += amount
                run.allocations.append(SurplusAllocation(period=period, loan_id=loan.id, amount=amount))

                if state.balance <= CLOSE_TOLERANCE:
                    state.balance = 0.0
                    state.closed_period = period
                    if settings.rollover_repayments:
                        rollover += state.monthly_min

        run.balance_history.append({s.loan.id: s.balance for s in states})
        run.interest_history.append(period_interest)
        run.repayment_history.append(period_paid + surplus_used)
        run.surplus_history.append(surplus_used)

    run.periods = period
    run.horizon_reached = any(s.is_open for s in states)
    run.interest_paid = {s.loan.id: s.interest_paid for s in states}
    run.closed_period = {s.loan.id: s.closed_period for s in states}
    run.closing_balance = {s.loan.id: s.balance for s in states}
    return run


def run_debt_plan(loans: List[LoanInput], settings: PlannerSettings) -> DebtPlanResult:
    """
    Simulate the chosen payoff strategy and compare it to minimum repayments.

    Both runs stop at MAX_PERIODS; loans still open at that point report no
    payoff period and the result carries horizon_reached=True.
    """
    strategy = validate_planner_settings(loans, settings)

    strategic = simulate_balances(loans, settings)
    baseline = simulate_balances(loans, None)

    payoffs = []
    for loan in loans:
        closed = strategic.closed_period[loan.id]
        baseline_closed = baseline.closed_period[loan.id]
        interest = strategic.interest_paid[loan.id]
        baseline_interest = baseline.interest_paid[loan.id]

        strategic_periods = closed if closed is not None else MAX_PERIODS
        baseline_periods = baseline_closed if baseline_closed is not None else MAX_PERIODS

        payoffs.append(
            LoanPayoff(
                loan_id=loan.id,
                name=loan.name,
                original_principal=loan.principal,
                periods_to_payoff=closed,
                total_interest_paid=interest,
                baseline_interest_paid=baseline_interest,
                interest_saved=max(0.0, baseline_interest - interest),
                periods_saved=max(0, baseline_periods - strategic_periods),
                closing_balance=strategic.closing_balance[loan.id],
                payoff_date=add_months(settings.start_date, closed) if settings.start_date and closed is not None else None,
            )
        )

    months_to_debt_free = None if strategic.horizon_reached else max(
        (p for p in strategic.closed_period.values() if p is not None), default=0
    )
    debt_free_date = None
    if settings.start_date and months_to_debt_free is not None:
        debt_free_date = add_months(settings.start_date, months_to_debt_free)

    return DebtPlanResult(
        strategy=strategy,
        loans=payoffs,
        allocations=strategic.allocations,
        total_interest_paid=strategic.total_interest,
        baseline_interest_paid=baseline.total_interest,
        interest_saved=max(0.0, baseline.total_interest - strategic.total_interest),
        months_to_debt_free=months_to_debt_free,
        horizon_reached=strategic.horizon_reached,
        periods_simulated=strategic.periods,
        debt_free_date=debt_free_date,
    )
