"""Unit tests for snapshot data-quality assessment"""

from dataclasses import replace
from datetime import date
from finplan_gateway.domain.models import FinancialSnapshot, Income, LoanInput
from finplan_gateway.domain.data_quality import SECTION_WEIGHTS, assess_data_quality


def test_section_weights_sum_to_100():
    """Test section weights cover the full score"""
    assert sum(SECTION_WEIGHTS.values()) == 100


def test_complete_snapshot_scores_full(household_snapshot: FinancialSnapshot):
    """Test a fully populated snapshot scores 100"""
    report = assess_data_quality(household_snapshot)

    assert report.overall_score == 100.0
    assert report.limited_mode is False
    assert report.missing_critical == []


def test_empty_snapshot_is_limited():
    """Test an empty snapshot scores zero and lists what is missing"""
    report = assess_data_quality(FinancialSnapshot(user_id="u", as_of=date(2026, 6, 30)))

    assert report.overall_score == 0.0
    assert report.limited_mode is True
    assert report.missing_critical == ["income", "expenses", "accounts"]
    assert "Add your age to enable retirement projections" in report.recommendations


def test_salary_only_snapshot_is_limited():
    """Test income alone is well below the threshold"""
    snapshot = FinancialSnapshot(
        user_id="u",
        as_of=date(2026, 6, 30),
        incomes=[Income(id="i1", name="Salary", amount=5_000)],
    )

    report = assess_data_quality(snapshot)

    assert report.completeness["cashflow"] == 50.0
    assert report.overall_score == 10.0
    assert report.limited_mode is True


def test_loans_on_unknown_properties_half_scored(household_snapshot: FinancialSnapshot):
    """Test loans secured on missing properties only half count"""
    orphan = LoanInput(
        id="loan_orphan", name="Orphan", principal=1_000, annual_rate=0.05, min_repayment=10, property_id="prop_gone"
    )
    snapshot = replace(household_snapshot, loans=household_snapshot.loans + [orphan])

    report = assess_data_quality(snapshot)

    assert report.completeness["loans"] == 50.0
    assert report.overall_score == 92.5
