"""Unit tests for income taxability rules"""

import pytest
from finplan_gateway.domain.models import IncomeContext, IncomeType, TaxCategory
from finplan_gateway.domain.taxability import (
    TAXABILITY_RULES,
    calculate_franking_credits,
    determine_taxability,
    get_tax_category_label,
    get_tax_treatment_summary,
    is_taxable_category,
    parse_income_type,
)


def test_franking_credits_fully_franked():
    """Test a $700 fully franked dividend carries $300 of credits"""
    assert calculate_franking_credits(700, 100) == pytest.approx(300.0)


def test_franking_credits_partial_and_clamped():
    """Test partial franking scales credits and percentages above 100 are clamped"""
    assert calculate_franking_credits(700, 50) == pytest.approx(150.0)
    assert calculate_franking_credits(700, 150) == pytest.approx(300.0)


@pytest.mark.parametrize("dividend,pct", [(0, 100), (-100, 100), (700, 0), (700, None), (700, -10)])
def test_franking_credits_zero_cases(dividend, pct):
    """Test non-positive dividends or franking give no credits"""
    assert calculate_franking_credits(dividend, pct) == 0.0


def test_franked_dividend_grossed_up():
    """Test a franked dividend's taxable amount includes its credits"""
    result = determine_taxability(IncomeContext(IncomeType.DIVIDEND, 700, franking_percentage=100))

    assert result.is_taxable is True
    assert result.tax_category == TaxCategory.DIVIDENDS_FRANKED
    assert result.franking_credits == pytest.approx(300.0)
    assert result.grossed_up_amount == pytest.approx(1000.0)
    assert result.taxable_amount == pytest.approx(1000.0)


@pytest.mark.parametrize("dividend,pct", [(700, 100), (1234.57, 50), (0.03, 100), (999.99, 73.5), (1234.567, 100)])
def test_grossed_up_dividend_recovers_dividend(dividend, pct):
    """Test grossed-up amount less credits returns the dividend within a cent"""
    result = determine_taxability(IncomeContext(IncomeType.DIVIDEND, dividend, franking_percentage=pct))

    assert result.grossed_up_amount == round(result.grossed_up_amount, 2)
    assert result.grossed_up_amount - result.franking_credits == pytest.approx(dividend, abs=0.01)


def test_unfranked_dividend():
    """Test a dividend with no franking stays at face value"""
    result = determine_taxability(IncomeContext(IncomeType.DIVIDEND, 700))

    assert result.tax_category == TaxCategory.DIVIDENDS_UNFRANKED
    assert result.franking_credits == 0.0
    assert result.taxable_amount == 700


@pytest.mark.parametrize(
    "income_type,category",
    [
        (IncomeType.GIFT, TaxCategory.GIFTS),
        (IncomeType.INHERITANCE, TaxCategory.INHERITANCE),
        (IncomeType.INSURANCE, TaxCategory.INSURANCE_PAYOUT),
    ],
)
def test_exempt_income(income_type, category):
    """Test exempt items report the full amount as exempt"""
    result = determine_taxability(IncomeContext(income_type, 5_000))

    assert result.is_taxable is False
    assert result.tax_category == category
    assert result.taxable_amount == 0.0
    assert result.exempt_amount == 5_000
    assert result.grossed_up_amount == 0.0


@pytest.mark.parametrize(
    "income_type,category",
    [
        (IncomeType.SALARY, TaxCategory.SALARY_WAGES),
        (IncomeType.RENT, TaxCategory.RENTAL),
        (IncomeType.INTEREST, TaxCategory.INTEREST),
        (IncomeType.HOBBY, TaxCategory.HOBBY_INCOME),
        (IncomeType.OTHER, TaxCategory.OTHER_ASSESSABLE),
    ],
)
def test_assessable_income(income_type, category):
    """Test assessable items report the full amount as taxable"""
    result = determine_taxability(IncomeContext(income_type, 1_234.56))

    assert result.is_taxable is True
    assert result.tax_category == category
    assert result.taxable_amount == pytest.approx(1_234.56)
    assert result.exempt_amount == 0.0
    assert result.ato_references


def test_government_payments_depend_on_payment_type():
    """Test listed government payments are exempt and others taxable"""
    exempt = determine_taxability(IncomeContext(IncomeType.GOVERNMENT, 400, payment_type="family_tax_benefit"))
    taxable = determine_taxability(IncomeContext(IncomeType.GOVERNMENT, 400, payment_type="AGE_PENSION"))

    assert exempt.tax_category == TaxCategory.GOVERNMENT_EXEMPT
    assert exempt.is_taxable is False
    assert taxable.tax_category == TaxCategory.GOVERNMENT_TAXABLE
    assert taxable.is_taxable is True


def test_every_income_type_has_a_rule():
    """Test the rule table covers every income type"""
    assert set(TAXABILITY_RULES) == set(IncomeType)


@pytest.mark.parametrize(
    "label,expected",
    [
        ("salary", IncomeType.SALARY),
        ("RENTAL", IncomeType.RENT),
        ("wages", IncomeType.SALARY),
        ("Centrelink", IncomeType.GOVERNMENT),
        ("crypto_airdrop", IncomeType.OTHER),
        ("", IncomeType.OTHER),
        (None, IncomeType.OTHER),
    ],
)
def test_parse_income_type(label, expected):
    """Test labels, aliases and unknown values parse to an income type"""
    assert parse_income_type(label) == expected


def test_unknown_income_type_is_assessable():
    """Test unrecognised income is treated as taxable"""
    result = determine_taxability(IncomeContext("crypto_airdrop", 250))

    assert result.is_taxable is True
    assert result.tax_category == TaxCategory.OTHER_ASSESSABLE


def test_category_helpers():
    """Test exempt category detection, labels and summaries"""
    assert is_taxable_category(TaxCategory.SALARY_WAGES) is True
    assert is_taxable_category(TaxCategory.GIFTS) is False
    assert get_tax_category_label(TaxCategory.DIVIDENDS_FRANKED) == "Franked Dividends"

    franked = determine_taxability(IncomeContext(IncomeType.DIVIDEND, 700, franking_percentage=100))
    gift = determine_taxability(IncomeContext(IncomeType.GIFT, 50))
    assert "franking credits" in get_tax_treatment_summary(franked)
    assert "exempt" in get_tax_treatment_summary(gift)
