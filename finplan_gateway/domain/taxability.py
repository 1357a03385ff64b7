"""Income taxability rules - maps income types to Australian tax treatment"""

from typing import Callable, Dict, List

from finplan_gateway.domain.models import IncomeContext, IncomeType, TaxabilityResult, TaxCategory

CORPORATE_TAX_RATE = 0.30

INCOME_TYPE_ALIASES = {
    "RENTAL": IncomeType.RENT,
    "INVESTMENT": IncomeType.DIVIDEND,
    "DIVIDENDS": IncomeType.DIVIDEND,
    "INSURANCE_PAYOUT": IncomeType.INSURANCE,
    "CENTRELINK": IncomeType.GOVERNMENT,
    "WAGES": IncomeType.SALARY,
}

EXEMPT_GOVERNMENT_PAYMENTS = frozenset(
    {
        "FAMILY_TAX_BENEFIT",
        "CHILD_CARE_SUBSIDY",
        "RENT_ASSISTANCE",
        "CRISIS_PAYMENT",
        "BEREAVEMENT_ALLOWANCE",
    }
)

TAX_CATEGORY_LABELS = {
    TaxCategory.SALARY_WAGES: "Salary & Wages",
    TaxCategory.RENTAL: "Rental Income",
    TaxCategory.DIVIDENDS_FRANKED: "Franked Dividends",
    TaxCategory.DIVIDENDS_UNFRANKED: "Unfranked Dividends",
    TaxCategory.INTEREST: "Interest Income",
    TaxCategory.GIFTS: "Gifts",
    TaxCategory.INHERITANCE: "Inheritance",
    TaxCategory.INSURANCE_PAYOUT: "Insurance Payout",
    TaxCategory.GOVERNMENT_TAXABLE: "Government Payment (Taxable)",
    TaxCategory.GOVERNMENT_EXEMPT: "Government Payment (Exempt)",
    TaxCategory.HOBBY_INCOME: "Hobby Income",
    TaxCategory.OTHER_ASSESSABLE: "Other Assessable Income",
}

EXEMPT_CATEGORIES = frozenset(
    {
        TaxCategory.GIFTS,
        TaxCategory.INHERITANCE,
        TaxCategory.INSURANCE_PAYOUT,
        TaxCategory.GOVERNMENT_EXEMPT,
    }
)


def parse_income_type(value: IncomeType | str | None) -> IncomeType:
    """Parse an income type label; unrecognised labels become OTHER"""
    if isinstance(value, IncomeType):
        return value
    if not value:
        return IncomeType.OTHER
    label = value.strip().upper()
    if label in INCOME_TYPE_ALIASES:
        return INCOME_TYPE_ALIASES[label]
    try:
        return IncomeType(label)
    except ValueError:
        return IncomeType.OTHER


def calculate_franking_credits(dividend: float, franking_percentage: float | None) -> float:
    """
    Franking credit attached to a dividend at the corporate tax rate.

    credit = dividend * (pct / 100) * (0.30 / 0.70), rounded to cents.
    The grossed-up dividend is also rounded to cents, so
    grossed_up - credit equals the dividend within one cent.
    """
    if dividend <= 0 or not franking_percentage or franking_percentage <= 0:
        return 0.0
    pct = min(franking_percentage, 100.0)
    credit = dividend * (pct / 100) * (CORPORATE_TAX_RATE / (1 - CORPORATE_TAX_RATE))
    return round(credit, 2)


def _taxable(category: TaxCategory, amount: float, explanation: str, references: List[str]) -> TaxabilityResult:
    return TaxabilityResult(
        is_taxable=True,
        tax_category=category,
        taxable_amount=amount,
        exempt_amount=0.0,
        franking_credits=0.0,
        grossed_up_amount=amount,
        explanation=explanation,
        ato_references=references,
    )


def _exempt(category: TaxCategory, amount: float, explanation: str, references: List[str]) -> TaxabilityResult:
    return TaxabilityResult(
        is_taxable=False,
        tax_category=category,
        taxable_amount=0.0,
        exempt_amount=amount,
        franking_credits=0.0,
        grossed_up_amount=0.0,
        explanation=explanation,
        ato_references=references,
    )


def _salary(ctx: IncomeContext) -> TaxabilityResult:
    return _taxable(
        TaxCategory.SALARY_WAGES,
        ctx.amount,
        "Salary and wages are assessable income",
        ["ITAA 1997 s6-5"],
    )


def _rent(ctx: IncomeContext) -> TaxabilityResult:
    return _taxable(
        TaxCategory.RENTAL,
        ctx.amount,
        "Rental income is assessable; related expenses may be deductible",
        ["ITAA 1997 s6-5", "ITAA 1997 s8-1"],
    )


def _dividend(ctx: IncomeContext) -> TaxabilityResult:
    credits = calculate_franking_credits(ctx.amount, ctx.franking_percentage)
    if credits <= 0:
        return _taxable(
            TaxCategory.DIVIDENDS_UNFRANKED,
            ctx.amount,
            "Unfranked dividends are assessable with no franking credit offset",
            ["ITAA 1997 s44"],
        )

    # Cents; grossed_up - credits recovers the dividend to within one cent
    grossed_up = round(ctx.amount + credits, 2)
    return TaxabilityResult(
        is_taxable=True,
        tax_category=TaxCategory.DIVIDENDS_FRANKED,
        taxable_amount=grossed_up,
        exempt_amount=0.0,
        franking_credits=credits,
        grossed_up_amount=grossed_up,
        explanation=(
            f"Franked dividend grossed up by ${credits:,.2f} of franking credits; "
            "the credits offset tax payable"
        ),
        ato_references=["ITAA 1997 s207-20", "ITAA 1997 Div 207"],
    )


def _interest(ctx: IncomeContext) -> TaxabilityResult:
    return _taxable(TaxCategory.INTEREST, ctx.amount, "Interest income is assessable", ["ITAA 1997 s6-5"])


def _gift(ctx: IncomeContext) -> TaxabilityResult:
    return _exempt(TaxCategory.GIFTS, ctx.amount, "Genuine gifts are not assessable income", ["TR 2005/13"])


def _inheritance(ctx: IncomeContext) -> TaxabilityResult:
    return _exempt(
        TaxCategory.INHERITANCE,
        ctx.amount,
        "Inheritances are not assessable; CGT may apply on later disposal of inherited assets",
        ["ITAA 1997 Div 128"],
    )


def _insurance(ctx: IncomeContext) -> TaxabilityResult:
    return _exempt(
        TaxCategory.INSURANCE_PAYOUT,
        ctx.amount,
        "Capital insurance payouts are generally not assessable",
        ["ITAA 1997 s118-37"],
    )


def _government(ctx: IncomeContext) -> TaxabilityResult:
    payment_type = (ctx.payment_type or "").strip().upper()
    if payment_type in EXEMPT_GOVERNMENT_PAYMENTS:
        return _exempt(
            TaxCategory.GOVERNMENT_EXEMPT,
            ctx.amount,
            f"{payment_type.replace('_', ' ').title()} is an exempt government payment",
            ["ITAA 1997 Div 52"],
        )
    return _taxable(
        TaxCategory.GOVERNMENT_TAXABLE,
        ctx.amount,
        "Government pensions and allowances are assessable unless specifically exempt",
        ["ITAA 1997 Div 52"],
    )


def _hobby(ctx: IncomeContext) -> TaxabilityResult:
    return _taxable(
        TaxCategory.HOBBY_INCOME,
        ctx.amount,
        "Treated as assessable; genuine hobby receipts may be excluded after review",
        ["TR 97/11"],
    )


def _other(ctx: IncomeContext) -> TaxabilityResult:
    return _taxable(
        TaxCategory.OTHER_ASSESSABLE,
        ctx.amount,
        "Unclassified income is treated as assessable until reviewed",
        ["ITAA 1997 s6-5"],
    )


TAXABILITY_RULES: Dict[IncomeType, Callable[[IncomeContext], TaxabilityResult]] = {
    IncomeType.SALARY: _salary,
    IncomeType.RENT: _rent,
    IncomeType.DIVIDEND: _dividend,
    IncomeType.INTEREST: _interest,
    IncomeType.GIFT: _gift,
    IncomeType.INHERITANCE: _inheritance,
    IncomeType.INSURANCE: _insurance,
    IncomeType.GOVERNMENT: _government,
    IncomeType.HOBBY: _hobby,
    IncomeType.OTHER: _other,
}


def determine_taxability(context: IncomeContext) -> TaxabilityResult:
    """Classify an income item and compute its taxable, exempt and franking amounts"""
    income_type = parse_income_type(context.income_type)
    return TAXABILITY_RULES[income_type](context)


def is_taxable_category(category: TaxCategory) -> bool:
    return category not in EXEMPT_CATEGORIES


def get_tax_category_label(category: TaxCategory) -> str:
    return TAX_CATEGORY_LABELS.get(category, category.value)


def get_tax_treatment_summary(result: TaxabilityResult) -> str:
    """One-line human readable summary of a taxability result"""
    label = get_tax_category_label(result.tax_category)
    if not result.is_taxable:
        return f"{label}: exempt (${result.exempt_amount:,.2f})"
    if result.franking_credits > 0:
        return (
            f"{label}: ${result.taxable_amount:,.2f} assessable "
            f"including ${result.franking_credits:,.2f} franking credits"
        )
    return f"{label}: ${result.taxable_amount:,.2f} assessable"
