"""POST /v1/tax/taxability - income taxability classification"""

from fastapi import APIRouter

from finplan_gateway.api.v1.schemas import TaxabilityRequest, TaxabilityResponse
from finplan_gateway.domain.models import IncomeContext
from finplan_gateway.domain.taxability import (
    determine_taxability,
    get_tax_category_label,
    get_tax_treatment_summary,
)

router = APIRouter()


@router.post("/tax/taxability", response_model=TaxabilityResponse)
def classify_income(request_body: TaxabilityRequest):
    """Classify an income item; unknown income types are treated as assessable"""
    result = determine_taxability(
        IncomeContext(
            income_type=request_body.income_type,
            amount=request_body.amount,
            franking_percentage=request_body.franking_percentage,
            payment_type=request_body.payment_type,
        )
    )

    return TaxabilityResponse(
        is_taxable=result.is_taxable,
        tax_category=result.tax_category,
        category_label=get_tax_category_label(result.tax_category),
        taxable_amount=result.taxable_amount,
        exempt_amount=result.exempt_amount,
        franking_credits=result.franking_credits,
        grossed_up_amount=result.grossed_up_amount,
        explanation=result.explanation,
        summary=get_tax_treatment_summary(result),
        ato_references=result.ato_references,
    )
