"""Snapshot data-quality assessment used to gate low-confidence recommendations"""

from finplan_gateway.domain.analyzers.base import SAFEGUARDS
from finplan_gateway.domain.models import DataQualityReport, FinancialSnapshot

SECTION_WEIGHTS = {
    "accounts": 25,
    "cashflow": 20,
    "properties": 15,
    "loans": 15,
    "investments": 10,
    "preferences": 15,
}


def _preferences_completeness(snapshot: FinancialSnapshot) -> float:
    prefs = snapshot.preferences
    weights = {
        "risk_appetite": 30,
        "retirement_age": 20,
        "time_horizon": 20,
        "debt_comfort": 15,
    }
    score = sum(weight for name, weight in weights.items() if getattr(prefs, name))
    # Age is needed for every horizon calculation
    if snapshot.current_age is not None:
        score += 15
    return float(score)


def assess_data_quality(snapshot: FinancialSnapshot) -> DataQualityReport:
    """
    Score snapshot completeness from 0 to 100.

    Each section scores 0-100 and is weighted by SECTION_WEIGHTS. Below the
    minimum data-quality threshold the strategy engine runs in limited mode.
    """
    has_income = bool(snapshot.incomes)
    has_expenses = bool(snapshot.expenses)

    completeness = {
        "accounts": 100.0 if snapshot.accounts else 0.0,
        "cashflow": 50.0 * has_income + 50.0 * has_expenses,
        "properties": 100.0 if snapshot.properties else 0.0,
        "loans": 100.0 if snapshot.loans else 0.0,
        "investments": 100.0 if snapshot.investments else 0.0,
        "preferences": _preferences_completeness(snapshot),
    }

    # Loans secured on unknown properties are only half-described
    property_ids = {p.id for p in snapshot.properties}
    linked = [loan for loan in snapshot.loans if loan.property_id]
    if linked and any(loan.property_id not in property_ids for loan in linked):
        completeness["loans"] = 50.0

    overall = sum(completeness[name] * weight for name, weight in SECTION_WEIGHTS.items()) / 100

    missing_critical = []
    recommendations = []
    if not has_income:
        missing_critical.append("income")
        recommendations.append("Add income sources so cashflow can be analysed")
    if not has_expenses:
        missing_critical.append("expenses")
        recommendations.append("Add regular expenses to measure spending and emergency fund needs")
    if not snapshot.accounts:
        missing_critical.append("accounts")
        recommendations.append("Link bank accounts to measure liquidity")
    if snapshot.current_age is None:
        recommendations.append("Add your age to enable retirement projections")

    return DataQualityReport(
        overall_score=round(overall, 2),
        completeness=completeness,
        missing_critical=missing_critical,
        recommendations=recommendations,
        limited_mode=overall < SAFEGUARDS.min_data_quality,
    )
