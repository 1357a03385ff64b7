"""Portfolio intelligence engine - cross-entity metrics derived from a financial snapshot"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List

from finplan_gateway.domain.amortization import (
    calculate_effective_principal,
    calculate_equity,
    calculate_lvr,
    calculate_rental_yield,
    to_annual,
    to_monthly,
)
from finplan_gateway.domain.models import (
    AccountType,
    FinancialSnapshot,
    IncomeType,
    LoanInput,
    PropertyType,
)
from finplan_gateway.domain.taxability import calculate_franking_credits
from finplan_gateway.utils.date_utils import years_between

# Sentinel for ratios whose denominator is zero
UNBOUNDED_RATIO = 999.0

STRESS_TEST_RATE_RISES = (0.02, 0.03, 0.04)

# Division 43 capital works
DIV43_RATE_2_5_FROM = date(1987, 9, 15)
DIV43_RATE_4_FROM = date(1985, 7, 18)


@dataclass
class NetWorthSummary:
    property_value: float
    investment_value: float
    cash: float
    total_assets: float
    loan_balances: float
    credit_card_debt: float
    total_liabilities: float
    net_worth: float


@dataclass
class CashflowSummary:
    monthly_income: float
    monthly_expenses: float
    monthly_essential_expenses: float
    monthly_loan_repayments: float
    monthly_surplus: float
    savings_rate: float
    expense_ratio: float
    income_by_type: Dict[str, float] = field(default_factory=dict)

    @property
    def monthly_essential_outgoings(self) -> float:
        return self.monthly_essential_expenses + self.monthly_loan_repayments

    @property
    def annual_income(self) -> float:
        return self.monthly_income * 12


@dataclass
class GearingMetrics:
    debt_to_asset: float
    debt_to_income: float
    portfolio_lvr: float
    property_lvrs: Dict[str, float]
    annual_interest: float
    interest_coverage: float
    negative_gearing_shortfall: float


@dataclass
class StressScenario:
    rate_rise: float
    additional_monthly_interest: float
    monthly_surplus_after: float
    survives: bool


@dataclass
class RiskMetrics:
    property_concentration: float
    top_asset_share: float
    diversification_score: float
    months_covered: float
    stress_tests: List[StressScenario]
    risk_score: int
    risk_level: str


@dataclass
class PropertyAnalysis:
    property_id: str
    name: str
    current_value: float
    loan_balance: float
    equity: float
    lvr: float
    annual_rent: float
    rental_yield: float
    annual_expenses: float
    annual_interest: float
    annual_profit: float
    is_negatively_geared: bool
    annual_depreciation: float
    years_held: float | None
    capital_growth_rate: float | None


@dataclass
class InvestmentAnalysis:
    total_value: float
    total_cost_base: float
    unrealised_gain: float
    unrealised_gain_pct: float
    by_asset_class: Dict[str, float]
    annual_income: float
    franking_credits: float
    grossed_up_income: float
    warnings: List[str] = field(default_factory=list)


@dataclass
class PortfolioIntelligence:
    net_worth: NetWorthSummary
    cashflow: CashflowSummary
    gearing: GearingMetrics
    risk: RiskMetrics
    properties: List[PropertyAnalysis]
    investments: InvestmentAnalysis


def liquid_cash(snapshot: FinancialSnapshot) -> float:
    """Balances of non-credit accounts"""
    return sum(a.balance for a in snapshot.accounts if a.account_type != AccountType.CREDIT_CARD)


def _annual_interest(loan: LoanInput) -> float:
    return calculate_effective_principal(loan.principal, loan.offset_balance) * loan.annual_rate


def calculate_net_worth(snapshot: FinancialSnapshot) -> NetWorthSummary:
    property_value = sum(p.current_value for p in snapshot.properties)
    investment_value = sum(i.value for i in snapshot.investments)
    cash = liquid_cash(snapshot)
    loan_balances = sum(loan.principal for loan in snapshot.loans)
    card_debt = sum(abs(a.balance) for a in snapshot.accounts if a.account_type == AccountType.CREDIT_CARD)

    total_assets = property_value + investment_value + cash
    total_liabilities = loan_balances + card_debt

    return NetWorthSummary(
        property_value=property_value,
        investment_value=investment_value,
        cash=cash,
        total_assets=total_assets,
        loan_balances=loan_balances,
        credit_card_debt=card_debt,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
    )


def calculate_cashflow(snapshot: FinancialSnapshot) -> CashflowSummary:
    """Monthly cashflow with minimum loan repayments treated as outgoings"""
    income_by_type: Dict[str, float] = {}
    for income in snapshot.incomes:
        key = income.income_type.value
        income_by_type[key] = income_by_type.get(key, 0.0) + to_monthly(income.amount, income.frequency)

    monthly_income = sum(income_by_type.values())
    monthly_expenses = sum(to_monthly(e.amount, e.frequency) for e in snapshot.expenses)
    monthly_essential = sum(to_monthly(e.amount, e.frequency) for e in snapshot.expenses if e.is_essential)
    # Without essential flags every expense is treated as essential
    if monthly_essential == 0:
        monthly_essential = monthly_expenses
    monthly_repayments = sum(to_monthly(loan.min_repayment, loan.repayment_frequency) for loan in snapshot.loans)

    surplus = monthly_income - monthly_expenses - monthly_repayments
    outgoings = monthly_expenses + monthly_repayments

    return CashflowSummary(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_essential_expenses=monthly_essential,
        monthly_loan_repayments=monthly_repayments,
        monthly_surplus=surplus,
        savings_rate=surplus / monthly_income if monthly_income > 0 else 0.0,
        expense_ratio=outgoings / monthly_income if monthly_income > 0 else 0.0,
        income_by_type=income_by_type,
    )


def calculate_div43_depreciation(construction_cost: float | None, construction_date: date | None) -> float:
    """Annual capital works deduction: 2.5% from 15 Sep 1987, 4% from 18 Jul 1985"""
    if not construction_cost or construction_cost <= 0 or construction_date is None:
        return 0.0
    if construction_date >= DIV43_RATE_2_5_FROM:
        return construction_cost * 0.025
    if construction_date >= DIV43_RATE_4_FROM:
        return construction_cost * 0.04
    return 0.0


def analyze_properties(snapshot: FinancialSnapshot) -> List[PropertyAnalysis]:
    results = []
    for prop in snapshot.properties:
        loans = [loan for loan in snapshot.loans if loan.property_id == prop.id]
        loan_balance = sum(loan.principal for loan in loans)
        annual_interest = sum(_annual_interest(loan) for loan in loans)
        annual_rent = sum(
            to_annual(i.amount, i.frequency)
            for i in snapshot.incomes
            if i.property_id == prop.id and i.income_type == IncomeType.RENT
        )
        annual_expenses = sum(to_annual(e.amount, e.frequency) for e in snapshot.expenses if e.property_id == prop.id)
        profit = annual_rent - annual_expenses - annual_interest
        is_investment = prop.property_type == PropertyType.INVESTMENT

        years_held = None
        growth_rate = None
        if prop.purchase_date is not None:
            years_held = years_between(prop.purchase_date, snapshot.as_of)
            if prop.purchase_price and prop.purchase_price > 0 and years_held > 0:
                growth_rate = (prop.current_value / prop.purchase_price) ** (1 / years_held) - 1

        results.append(
            PropertyAnalysis(
                property_id=prop.id,
                name=prop.name,
                current_value=prop.current_value,
                loan_balance=loan_balance,
                equity=calculate_equity(prop.current_value, loan_balance),
                lvr=calculate_lvr(loan_balance, prop.current_value),
                annual_rent=annual_rent,
                rental_yield=calculate_rental_yield(annual_rent, prop.current_value),
                annual_expenses=annual_expenses,
                annual_interest=annual_interest,
                annual_profit=profit,
                is_negatively_geared=is_investment and profit < 0,
                annual_depreciation=(
                    calculate_div43_depreciation(prop.construction_cost, prop.construction_date) if is_investment else 0.0
                ),
                years_held=years_held,
                capital_growth_rate=growth_rate,
            )
        )
    return results


def calculate_gearing(snapshot: FinancialSnapshot) -> GearingMetrics:
    net_worth = calculate_net_worth(snapshot)
    cashflow = calculate_cashflow(snapshot)

    properties = analyze_properties(snapshot)
    secured = 0.0
    property_lvrs = {}
    for analysis in properties:
        secured += analysis.loan_balance
        property_lvrs[analysis.property_id] = analysis.lvr

    annual_interest = sum(_annual_interest(loan) for loan in snapshot.loans)
    annual_income = cashflow.annual_income
    shortfall = sum(-a.annual_profit for a in properties if a.is_negatively_geared)

    return GearingMetrics(
        debt_to_asset=(
            net_worth.total_liabilities / net_worth.total_assets if net_worth.total_assets > 0 else 0.0
        ),
        debt_to_income=(
            cashflow.monthly_loan_repayments / cashflow.monthly_income if cashflow.monthly_income > 0 else 0.0
        ),
        portfolio_lvr=calculate_lvr(secured, net_worth.property_value),
        property_lvrs=property_lvrs,
        annual_interest=annual_interest,
        interest_coverage=annual_income / annual_interest if annual_interest > 0 else UNBOUNDED_RATIO,
        negative_gearing_shortfall=shortfall,
    )


def calculate_risk(snapshot: FinancialSnapshot) -> RiskMetrics:
    """
    Concentration, liquidity and rate-rise resilience.

    Risk score runs 1 (lowest) to 10 and is driven by leverage, liquidity,
    stress-test survival and concentration.
    """
    net_worth = calculate_net_worth(snapshot)
    cashflow = calculate_cashflow(snapshot)
    gearing = calculate_gearing(snapshot)
    total_assets = net_worth.total_assets

    asset_values = [p.current_value for p in snapshot.properties] + [i.value for i in snapshot.investments]
    property_concentration = net_worth.property_value / total_assets * 100 if total_assets > 0 else 0.0
    top_asset_share = max(asset_values) / total_assets * 100 if asset_values and total_assets > 0 else 0.0
    diversification = min(10.0, float(len(asset_values)))

    monthly_outgoings = cashflow.monthly_expenses + cashflow.monthly_loan_repayments
    months_covered = net_worth.cash / monthly_outgoings if monthly_outgoings > 0 else UNBOUNDED_RATIO

    stress_tests = []
    for rise in STRESS_TEST_RATE_RISES:
        extra = sum(calculate_effective_principal(loan.principal, loan.offset_balance) for loan in snapshot.loans) * rise / 12
        after = cashflow.monthly_surplus - extra
        stress_tests.append(
            StressScenario(rate_rise=rise, additional_monthly_interest=extra, monthly_surplus_after=after, survives=after >= 0)
        )

    score = 1
    if gearing.portfolio_lvr > 80:
        score += 3
    elif gearing.portfolio_lvr > 60:
        score += 2
    if months_covered < 3:
        score += 2
    elif months_covered < 6:
        score += 1
    if snapshot.loans and not stress_tests[0].survives:
        score += 2
    if property_concentration > 70:
        score += 1
    if gearing.debt_to_asset > 0.8:
        score += 1
    score = max(1, min(10, score))

    if score <= 3:
        level = "LOW"
    elif score <= 6:
        level = "MEDIUM"
    else:
        level = "HIGH"

    return RiskMetrics(
        property_concentration=property_concentration,
        top_asset_share=top_asset_share,
        diversification_score=diversification,
        months_covered=months_covered,
        stress_tests=stress_tests,
        risk_score=score,
        risk_level=level,
    )


def analyze_investments(snapshot: FinancialSnapshot) -> InvestmentAnalysis:
    """Holdings summary; an empty portfolio yields zeros with a warning"""
    if not snapshot.investments:
        return InvestmentAnalysis(
            total_value=0.0,
            total_cost_base=0.0,
            unrealised_gain=0.0,
            unrealised_gain_pct=0.0,
            by_asset_class={},
            annual_income=0.0,
            franking_credits=0.0,
            grossed_up_income=0.0,
            warnings=["No investment holdings recorded"],
        )

    by_asset_class: Dict[str, float] = {}
    annual_income = 0.0
    franking = 0.0
    for holding in snapshot.investments:
        by_asset_class[holding.asset_class] = by_asset_class.get(holding.asset_class, 0.0) + holding.value
        income = holding.value * holding.income_yield
        annual_income += income
        franking += calculate_franking_credits(income, holding.franking_percentage)

    total_value = sum(i.value for i in snapshot.investments)
    cost_base = sum(i.cost_base for i in snapshot.investments)
    gain = total_value - cost_base

    return InvestmentAnalysis(
        total_value=total_value,
        total_cost_base=cost_base,
        unrealised_gain=gain,
        unrealised_gain_pct=gain / cost_base * 100 if cost_base > 0 else 0.0,
        by_asset_class=by_asset_class,
        annual_income=annual_income,
        franking_credits=franking,
        grossed_up_income=annual_income + franking,
    )


def generate_portfolio_intelligence(snapshot: FinancialSnapshot) -> PortfolioIntelligence:
    return PortfolioIntelligence(
        net_worth=calculate_net_worth(snapshot),
        cashflow=calculate_cashflow(snapshot),
        gearing=calculate_gearing(snapshot),
        risk=calculate_risk(snapshot),
        properties=analyze_properties(snapshot),
        investments=analyze_investments(snapshot),
    )
