"""Unit tests for portfolio intelligence"""

import pytest
from dataclasses import replace
from datetime import date
from finplan_gateway.domain.models import Account, AccountType, Expense, FinancialSnapshot
from finplan_gateway.domain.portfolio import (
    STRESS_TEST_RATE_RISES,
    UNBOUNDED_RATIO,
    analyze_investments,
    analyze_properties,
    calculate_cashflow,
    calculate_div43_depreciation,
    calculate_gearing,
    calculate_net_worth,
    calculate_risk,
    generate_portfolio_intelligence,
)


def test_net_worth(household_snapshot: FinancialSnapshot):
    """Test assets less liabilities"""
    net_worth = calculate_net_worth(household_snapshot)

    assert net_worth.property_value == 1_300_000
    assert net_worth.investment_value == pytest.approx(50_000)
    assert net_worth.cash == 35_000
    assert net_worth.total_liabilities == 750_000
    assert net_worth.net_worth == pytest.approx(635_000)


def test_net_worth_counts_credit_card_as_debt(household_snapshot: FinancialSnapshot):
    """Test card balances are liabilities, not cash"""
    card = Account(id="acc_card", name="Card", balance=-3_000, account_type=AccountType.CREDIT_CARD)
    snapshot = replace(household_snapshot, accounts=household_snapshot.accounts + [card])

    net_worth = calculate_net_worth(snapshot)

    assert net_worth.cash == 35_000
    assert net_worth.credit_card_debt == 3_000
    assert net_worth.net_worth == pytest.approx(632_000)


def test_cashflow(household_snapshot: FinancialSnapshot):
    """Test monthly cashflow treats minimum repayments as outgoings"""
    cashflow = calculate_cashflow(household_snapshot)

    assert cashflow.monthly_income == 13_000
    assert cashflow.monthly_expenses == 5_000
    assert cashflow.monthly_essential_expenses == 4_500
    assert cashflow.monthly_loan_repayments == pytest.approx(3_820)
    assert cashflow.monthly_surplus == pytest.approx(4_180)
    assert cashflow.income_by_type == {"SALARY": 11_000, "RENT": 2_000}
    assert cashflow.annual_income == 156_000


def test_cashflow_essential_fallback(household_snapshot: FinancialSnapshot):
    """Test expenses without essential flags all count as essential"""
    snapshot = replace(
        household_snapshot,
        expenses=[Expense(id="e1", name="Everything", amount=4_000, is_essential=False)],
    )

    assert calculate_cashflow(snapshot).monthly_essential_expenses == 4_000


@pytest.mark.parametrize(
    "cost,built,expected",
    [
        (300_000, date(2000, 1, 1), 7_500),
        (300_000, date(1986, 1, 1), 12_000),
        (300_000, date(1980, 1, 1), 0.0),
        (None, date(2000, 1, 1), 0.0),
        (300_000, None, 0.0),
    ],
)
def test_div43_depreciation(cost, built, expected):
    """Test capital works rates by construction date"""
    assert calculate_div43_depreciation(cost, built) == pytest.approx(expected)


def test_analyze_properties(household_snapshot: FinancialSnapshot):
    """Test per-property equity, yield and gearing"""
    analyses = {a.property_id: a for a in analyze_properties(household_snapshot)}

    unit = analyses["prop_unit"]
    assert unit.lvr == pytest.approx(70.0)
    assert unit.equity == 150_000
    assert unit.annual_rent == 24_000
    assert unit.rental_yield == pytest.approx(4.8)
    assert unit.annual_interest == pytest.approx(18_200)
    assert unit.is_negatively_geared is False

    home = analyses["prop_home"]
    assert home.years_held == pytest.approx(10.0)
    assert home.capital_growth_rate == pytest.approx((800 / 600) ** 0.1 - 1)


def test_gearing(household_snapshot: FinancialSnapshot):
    """Test leverage ratios"""
    gearing = calculate_gearing(household_snapshot)

    assert gearing.portfolio_lvr == pytest.approx(750 / 1300 * 100)
    assert gearing.debt_to_income == pytest.approx(3_820 / 13_000)
    assert gearing.property_lvrs["prop_home"] == pytest.approx(50.0)
    assert gearing.negative_gearing_shortfall == 0.0


def test_gearing_without_debt(household_snapshot: FinancialSnapshot):
    """Test interest coverage is unbounded with no interest"""
    gearing = calculate_gearing(replace(household_snapshot, loans=[]))

    assert gearing.interest_coverage == UNBOUNDED_RATIO
    assert gearing.debt_to_asset == 0.0


def test_risk_metrics(household_snapshot: FinancialSnapshot):
    """Test stress tests and the risk score"""
    risk = calculate_risk(household_snapshot)

    assert [s.rate_rise for s in risk.stress_tests] == list(STRESS_TEST_RATE_RISES)
    assert risk.stress_tests[0].additional_monthly_interest == pytest.approx(1_250)
    assert all(s.survives for s in risk.stress_tests)
    assert risk.risk_score == 3
    assert risk.risk_level == "LOW"


def test_risk_score_for_stretched_household(household_snapshot: FinancialSnapshot):
    """Test thin cash and failed stress tests raise the risk level"""
    snapshot = replace(
        household_snapshot,
        accounts=[Account(id="a1", name="Everyday", balance=1_000)],
        incomes=household_snapshot.incomes[1:],
    )

    risk = calculate_risk(snapshot)

    assert risk.stress_tests[0].survives is False
    assert risk.risk_level in ("MEDIUM", "HIGH")
    assert 1 <= risk.risk_score <= 10


def test_analyze_investments(household_snapshot: FinancialSnapshot):
    """Test holdings summary with franking"""
    analysis = analyze_investments(household_snapshot)

    assert analysis.unrealised_gain == pytest.approx(10_000)
    assert analysis.unrealised_gain_pct == pytest.approx(25.0)
    assert analysis.annual_income == pytest.approx(2_000)
    assert analysis.franking_credits == pytest.approx(600)
    assert analysis.grossed_up_income == pytest.approx(2_600)
    assert analysis.warnings == []


def test_analyze_investments_empty(household_snapshot: FinancialSnapshot):
    """Test an empty portfolio gives zeros and a warning"""
    analysis = analyze_investments(replace(household_snapshot, investments=[]))

    assert analysis.total_value == 0.0
    assert analysis.by_asset_class == {}
    assert analysis.warnings == ["No investment holdings recorded"]


def test_generate_portfolio_intelligence(household_snapshot: FinancialSnapshot):
    """Test the combined report holds every section"""
    intelligence = generate_portfolio_intelligence(household_snapshot)

    assert intelligence.net_worth.net_worth == pytest.approx(635_000)
    assert len(intelligence.properties) == 2
    assert intelligence.risk.risk_level == "LOW"
