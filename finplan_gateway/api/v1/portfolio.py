"""POST /v1/portfolio/intelligence - portfolio metrics endpoint"""

import logging
from dataclasses import asdict
from typing import Any, Dict
from fastapi import APIRouter, HTTPException, Request

from finplan_gateway.api.v1.schemas import PortfolioIntelligenceRequest
from finplan_gateway.api.dependencies import get_request_id
from finplan_gateway.domain.portfolio import generate_portfolio_intelligence

router = APIRouter()


@router.post("/portfolio/intelligence", response_model=Dict[str, Any])
def portfolio_intelligence(request_body: PortfolioIntelligenceRequest, request: Request):
    """Net worth, cashflow, gearing, risk, property and investment metrics for a snapshot"""
    request_id = get_request_id(request)

    try:
        intelligence = generate_portfolio_intelligence(request_body.snapshot.to_domain())
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return asdict(intelligence)
