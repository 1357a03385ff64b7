"""Multi-year forecast engine - scenario-driven net worth and retirement projections"""

import math
from dataclasses import dataclass, fields, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping

from finplan_gateway.domain.amortization import calculate_equity, to_annual
from finplan_gateway.domain.debt_planner import simulate_balances, validate_planner_settings
from finplan_gateway.domain.exceptions import ForecastConfigurationError
from finplan_gateway.domain.models import (
    AccountType,
    FinancialSnapshot,
    ForecastAssumptions,
    ForecastProjection,
    ForecastResult,
    ForecastSummary,
    IncomeType,
    PlannerSettings,
    Scenario,
)

VALID_HORIZONS = (5, 10, 20, 30)
DEFAULT_CURRENT_AGE = 35
COMFORTABLE_REPLACEMENT_RATIO = 0.70

SCENARIO_PRESETS: Mapping[Scenario, ForecastAssumptions] = MappingProxyType(
    {
        Scenario.CONSERVATIVE: ForecastAssumptions(
            inflation_rate=0.03,
            portfolio_return_rate=0.056,
            property_growth_rate=0.035,
            wage_growth_rate=0.028,
            cash_rate=0.023,
        ),
        Scenario.DEFAULT: ForecastAssumptions(
            inflation_rate=0.03,
            portfolio_return_rate=0.08,
            property_growth_rate=0.05,
            wage_growth_rate=0.04,
            cash_rate=0.02,
        ),
        Scenario.AGGRESSIVE: ForecastAssumptions(
            inflation_rate=0.03,
            portfolio_return_rate=0.104,
            property_growth_rate=0.065,
            wage_growth_rate=0.052,
            cash_rate=0.017,
        ),
    }
)

RetirementIncomeModel = Callable[[float, ForecastAssumptions], float]


@dataclass
class ScenarioComparison:
    years: int
    results: Dict[Scenario, ForecastResult]
    comparison: List[Dict[str, Any]]


def default_retirement_income(investable_assets: float, assumptions: ForecastAssumptions) -> float:
    """Safe-withdrawal-rate income from investable assets"""
    return max(0.0, investable_assets) * assumptions.withdrawal_rate


def resolve_scenario(scenario: Scenario | str) -> Scenario:
    try:
        return Scenario(scenario.upper() if isinstance(scenario, str) else scenario)
    except ValueError as e:
        raise ForecastConfigurationError(f"Unknown scenario: {scenario}") from e


def resolve_assumptions(
    scenario: Scenario | str,
    custom_assumptions: Mapping[str, Any] | None = None,
) -> ForecastAssumptions:
    """
    Preset for the scenario with field-level overrides applied.

    Returns a new record; presets are never modified.

    Rates are floats; retirement_age must be a whole number of years.

    Raises:
        ForecastConfigurationError: unknown scenario, unknown assumption field
            or a non-numeric value
    """
    base = SCENARIO_PRESETS[resolve_scenario(scenario)]
    if not custom_assumptions:
        return base

    known = {f.name for f in fields(ForecastAssumptions)}
    unknown = set(custom_assumptions) - known
    if unknown:
        raise ForecastConfigurationError(f"Unknown assumption fields: {', '.join(sorted(unknown))}")

    overrides = {}
    for name, value in custom_assumptions.items():
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ForecastConfigurationError(f"Assumption {name} must be numeric, got {value!r}")
        if name == "retirement_age":
            if value != int(value) or value <= 0:
                raise ForecastConfigurationError(f"Retirement age must be a positive whole number, got {value}")
            value = int(value)
        else:
            value = float(value)
        overrides[name] = value
    return replace(base, **overrides)


def generate_forecast(
    snapshot: FinancialSnapshot,
    custom_assumptions: Mapping[str, Any] | None = None,
    scenario: Scenario | str = Scenario.DEFAULT,
    years: int = 30,
    debt_plan: PlannerSettings | None = None,
    retirement_income_model: RetirementIncomeModel | None = None,
) -> ForecastResult:
    """
    Project net worth year by year for `years` years (years + 1 points, year 0 = today).

    Requirements:
    - Properties compound at the property growth rate
    - Loans follow minimum repayments, or the supplied debt plan's strategy
    - Investments compound at the portfolio return, reinvesting income where flagged
    - Salary grows with wages until retirement; other income and expenses with inflation
    - From retirement, income is drawn from investable assets via the income model

    Raises:
        ForecastConfigurationError: unsupported horizon, unknown scenario or assumption
    """
    if years not in VALID_HORIZONS:
        raise ForecastConfigurationError(f"Forecast horizon must be one of {VALID_HORIZONS}, got {years}")

    scenario = resolve_scenario(scenario)
    assumptions = resolve_assumptions(scenario, custom_assumptions)
    preferred_age = snapshot.preferences.retirement_age
    if preferred_age and not (custom_assumptions and "retirement_age" in custom_assumptions):
        assumptions = replace(assumptions, retirement_age=preferred_age)
    income_model = retirement_income_model or default_retirement_income

    current_age = snapshot.current_age or DEFAULT_CURRENT_AGE
    retirement_age = assumptions.retirement_age
    years_to_retirement = max(0, retirement_age - current_age)
    horizon = max(years, years_to_retirement)

    # Debt trajectory
    if debt_plan is not None and snapshot.loans:
        validate_planner_settings(snapshot.loans, debt_plan)
        debt_run = simulate_balances(snapshot.loans, debt_plan, max_periods=horizon * 12)
    else:
        debt_run = simulate_balances(snapshot.loans, None, max_periods=horizon * 12)

    # Opening position
    cash = sum(a.balance for a in snapshot.accounts if a.account_type != AccountType.CREDIT_CARD)
    card_debt = sum(abs(a.balance) for a in snapshot.accounts if a.account_type == AccountType.CREDIT_CARD)
    holdings = [[inv.value, inv.income_yield, inv.reinvest_income] for inv in snapshot.investments]
    salary = sum(to_annual(i.amount, i.frequency) for i in snapshot.incomes if i.income_type == IncomeType.SALARY)
    other_income = sum(to_annual(i.amount, i.frequency) for i in snapshot.incomes if i.income_type != IncomeType.SALARY)
    expenses = sum(to_annual(e.amount, e.frequency) for e in snapshot.expenses)
    current_income = salary + other_income

    projections = [
        _project_year(snapshot, 0, current_age, cash, card_debt, holdings, debt_run.balances_at(0), assumptions,
                      income=current_income, expenses=expenses)
    ]

    for year in range(1, horizon + 1):
        age = current_age + year
        retired = age > retirement_age
        inflation = (1 + assumptions.inflation_rate) ** year

        employment = 0.0 if retired else salary * (1 + assumptions.wage_growth_rate) ** year
        other = other_income * inflation
        year_expenses = expenses * inflation

        # Retirement drawdown comes out of investments first, then cash
        retirement_income = 0.0
        if retired:
            invested = sum(h[0] for h in holdings)
            retirement_income = income_model(invested + max(0.0, cash), assumptions)
            drawn = min(retirement_income, invested)
            if invested > 0:
                scale = (invested - drawn) / invested
                for holding in holdings:
                    holding[0] *= scale
            cash -= retirement_income - drawn

        # Grow investments
        distributions = 0.0
        investment_income = 0.0
        for holding in holdings:
            income = holding[0] * holding[1]
            investment_income += income
            holding[0] *= 1 + assumptions.portfolio_return_rate
            if holding[2]:
                holding[0] += income
            else:
                distributions += income

        repayments = sum(debt_run.repayment_history[(year - 1) * 12:year * 12])
        net_cashflow = employment + other + retirement_income + distributions - year_expenses - repayments
        cash = cash * (1 + assumptions.cash_rate) + net_cashflow

        projections.append(
            _project_year(
                snapshot, year, age, cash, card_debt, holdings, debt_run.balances_at(year * 12), assumptions,
                income=employment + other + retirement_income + investment_income,
                expenses=year_expenses,
            )
        )

    at_retirement = projections[years_to_retirement]
    investable = at_retirement.investment_value + max(0.0, at_retirement.cash_balance)
    retirement_income = income_model(investable, assumptions)
    replacement_ratio = retirement_income / current_income if current_income > 0 else 0.0
    trimmed = projections[: years + 1]

    summary = ForecastSummary(
        current_age=current_age,
        retirement_age=retirement_age,
        years_to_retirement=years_to_retirement,
        net_worth_at_retirement=at_retirement.net_worth,
        investable_at_retirement=investable,
        projected_retirement_income=retirement_income,
        pre_retirement_income=current_income,
        replacement_ratio=replacement_ratio,
        can_retire_comfortably=replacement_ratio >= COMFORTABLE_REPLACEMENT_RATIO,
        final_net_worth=trimmed[-1].net_worth,
    )

    return ForecastResult(
        scenario=scenario,
        years=years,
        assumptions=assumptions,
        projections=trimmed,
        summary=summary,
    )


def _project_year(
    snapshot: FinancialSnapshot,
    year: int,
    age: int,
    cash: float,
    card_debt: float,
    holdings: List[list],
    loan_balances: Dict[str, float],
    assumptions: ForecastAssumptions,
    income: float,
    expenses: float,
) -> ForecastProjection:
    growth = (1 + assumptions.property_growth_rate) ** year
    property_values = {p.id: p.current_value * growth for p in snapshot.properties}

    # Equity counts only loans secured against each property
    secured: Dict[str, float] = {}
    for loan in snapshot.loans:
        if loan.property_id in property_values:
            secured[loan.property_id] = secured.get(loan.property_id, 0.0) + loan_balances.get(loan.id, 0.0)
    total_equity = sum(calculate_equity(value, secured.get(pid, 0.0)) for pid, value in property_values.items())

    property_value = sum(property_values.values())
    investment_value = sum(h[0] for h in holdings)
    total_debt = sum(loan_balances.values()) + card_debt

    return ForecastProjection(
        year=year,
        age=age,
        net_worth=property_value + investment_value + cash - total_debt,
        cash_balance=cash,
        total_equity=total_equity,
        total_debt=total_debt,
        property_value=property_value,
        investment_value=investment_value,
        income=income,
        expenses=expenses,
    )


def compare_scenarios(
    snapshot: FinancialSnapshot,
    custom_assumptions: Mapping[str, Any] | None = None,
    years: int = 30,
    debt_plan: PlannerSettings | None = None,
) -> ScenarioComparison:
    """Run every scenario independently and tabulate the headline figures"""
    results = {
        scenario: generate_forecast(snapshot, custom_assumptions, scenario, years, debt_plan)
        for scenario in Scenario
    }

    comparison = [
        {
            "scenario": scenario.value,
            "final_net_worth": result.summary.final_net_worth,
            "net_worth_at_retirement": result.summary.net_worth_at_retirement,
            "projected_retirement_income": result.summary.projected_retirement_income,
            "replacement_ratio": result.summary.replacement_ratio,
            "can_retire_comfortably": result.summary.can_retire_comfortably,
        }
        for scenario, result in results.items()
    ]

    return ScenarioComparison(years=years, results=results, comparison=comparison)
