"""POST /v1/debt-plan - loan payoff simulation endpoint"""

import time
import logging
from dataclasses import asdict
from fastapi import APIRouter, HTTPException, Request

from finplan_gateway.api.v1.schemas import DebtPlanRequest, DebtPlanResponse
from finplan_gateway.api.dependencies import get_request_id
from finplan_gateway.domain.debt_planner import run_debt_plan
from finplan_gateway.domain.exceptions import InsufficientDataError, PlannerConfigurationError
from finplan_gateway.infrastructure.observability.metrics import record_debt_plan
from finplan_gateway.infrastructure.observability.logging import log_debt_plan

router = APIRouter()


@router.post("/debt-plan", response_model=DebtPlanResponse)
def create_debt_plan(request_body: DebtPlanRequest, request: Request):
    """
    Simulate paying down a set of loans with a surplus and payoff strategy.

    The response compares the strategic run against a minimum-repayments baseline.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        loans = [loan.to_domain() for loan in request_body.loans]
        planner_settings = request_body.settings.to_domain() if request_body.settings else None
        result = run_debt_plan(loans, planner_settings)

        duration_ms = (time.time() - start_time) * 1000
        record_debt_plan(result.strategy.value, result.horizon_reached)
        log_debt_plan(
            request_id,
            result.strategy.value,
            len(loans),
            result.months_to_debt_free,
            result.horizon_reached,
            result.interest_saved,
            duration_ms,
        )

        return DebtPlanResponse.model_validate(asdict(result))

    except PlannerConfigurationError as e:
        logging.warning(f"Invalid planner settings: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except InsufficientDataError as e:
        logging.warning(f"Insufficient data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
